from datetime import datetime
from decimal import Decimal, ROUND_HALF_EVEN
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

# Entités du Domaine "Quotations"

QuotationStatus = Literal["draft", "sent", "approved", "rejected", "expired"]
QUOTATION_STATUSES: List[str] = ["draft", "sent", "approved", "rejected", "expired"]

CENT = Decimal("0.01")

def compute_line_subtotal(quantity: Decimal, unit_price: Decimal, discount: Decimal) -> Decimal:
    """quantité × prix unitaire × (1 − remise/100), arrondi au centime (arrondi bancaire)."""
    gross = Decimal(quantity) * Decimal(unit_price)
    net = gross * (Decimal(1) - Decimal(discount) / Decimal(100))
    return net.quantize(CENT, rounding=ROUND_HALF_EVEN)

class LineItem(BaseModel):
    id: str = ""
    description: str
    unit: str = "un"
    quantity: Decimal = Field(..., ge=0)
    unit_price: Decimal = Field(..., ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    subtotal: Decimal = Field(..., ge=0)

    @classmethod
    def build(
        cls,
        description: str,
        quantity: Decimal,
        unit_price: Decimal,
        discount: Decimal = Decimal("0"),
        unit: str = "un",
        id: str = "",
    ) -> "LineItem":
        """Construit une ligne en calculant son sous-total."""
        return cls(
            id=id,
            description=description,
            unit=unit,
            quantity=quantity,
            unit_price=unit_price,
            discount=discount,
            subtotal=compute_line_subtotal(Decimal(quantity), Decimal(unit_price), Decimal(discount)),
        )

class CommercialConditions(BaseModel):
    payment_terms: str = ""
    delivery_time: str = ""
    freight: str = ""
    freight_value: Decimal = Field(default=Decimal("0"), ge=0)
    warranty: str = ""

class DocumentTexts(BaseModel):
    """Textes libres de la proposition; une chaîne vide omet la section."""
    header_text: str = ""
    intro_notes: str = ""
    commercial_notes: str = ""
    technical_notes: str = ""
    closing_notes: str = ""
    footer_text: str = ""

class Quotation(BaseModel):
    """Cotação telle que produite par l'assistant de saisie (lecture seule pour le rendu)."""
    quotation_number: str = ""
    quotation_date: str = Field(..., description="Date d'émission ISO (YYYY-MM-DD)")
    validity_days: int = Field(default=30, ge=0)
    customer_name: str = Field(..., min_length=1)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_company: Optional[str] = None
    customer_cnpj: Optional[str] = None
    customer_address: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    items: List[LineItem] = []
    conditions: CommercialConditions = CommercialConditions()
    texts: DocumentTexts = DocumentTexts()
    subtotal: Decimal = Decimal("0")
    total_discount: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")

class StoredQuotation(Quotation):
    """Cotação persistée, rattachée à son propriétaire."""
    id: int
    user_id: int
    status: QuotationStatus = "draft"
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
