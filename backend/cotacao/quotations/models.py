"""
Modèles SQLModel et schémas d'API du module Quotations.
"""
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy import Column, JSON, Text
from sqlmodel import SQLModel, Field

from cotacao.quotations.domain.entities import (
    CommercialConditions,
    DocumentTexts,
    LineItem,
    QuotationStatus,
)

class QuotationDB(SQLModel, table=True):
    """Table des cotações. Lignes, conditions et textes sont stockés en JSON."""
    __tablename__ = "quotations"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, description="Propriétaire de la cotação")
    quotation_number: str = Field(max_length=32, unique=True, index=True)
    status: str = Field(default="draft", max_length=16)

    customer_name: str = Field(max_length=255)
    customer_email: Optional[str] = Field(default=None, max_length=320)
    customer_phone: Optional[str] = Field(default=None, max_length=32)
    customer_company: Optional[str] = Field(default=None, max_length=255)
    customer_cnpj: Optional[str] = Field(default=None, max_length=20)
    customer_address: Optional[str] = Field(default=None, sa_column=Column(Text))

    reference: Optional[str] = Field(default=None, max_length=500)
    validity_days: int = Field(default=30)
    quotation_date: str = Field(max_length=10)
    notes: Optional[str] = Field(default=None, sa_column=Column(Text))

    items: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    conditions: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    texts: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    subtotal: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    total_discount: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    grand_total: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class QuotationCreate(BaseModel):
    """Schéma de création d'une cotação (le numéro est attribué par le serveur)."""
    customer_name: str = PydanticField(..., min_length=1)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_company: Optional[str] = None
    customer_cnpj: Optional[str] = None
    customer_address: Optional[str] = None
    reference: Optional[str] = None
    validity_days: int = PydanticField(default=30, ge=0)
    quotation_date: str
    notes: Optional[str] = None
    items: List[LineItem] = PydanticField(..., min_length=1)
    conditions: CommercialConditions
    texts: DocumentTexts
    subtotal: Decimal
    total_discount: Decimal
    grand_total: Decimal
    status: QuotationStatus = "draft"

class QuotationUpdate(BaseModel):
    """Modification partielle d'une cotação: seuls les champs envoyés sont appliqués.

    Le numéro et le statut ne sont pas modifiables ici.
    """
    customer_name: Optional[str] = PydanticField(default=None, min_length=1)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_company: Optional[str] = None
    customer_cnpj: Optional[str] = None
    customer_address: Optional[str] = None
    reference: Optional[str] = None
    validity_days: Optional[int] = PydanticField(default=None, ge=0)
    quotation_date: Optional[str] = None
    notes: Optional[str] = None
    items: Optional[Annotated[List[LineItem], PydanticField(min_length=1)]] = None
    conditions: Optional[CommercialConditions] = None
    texts: Optional[DocumentTexts] = None
    subtotal: Optional[Decimal] = None
    total_discount: Optional[Decimal] = None
    grand_total: Optional[Decimal] = None

class QuotationStatusUpdate(BaseModel):
    status: QuotationStatus
