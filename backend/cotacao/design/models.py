"""
Modèles SQLModel du module Design.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

class DesignSettingsDB(SQLModel, table=True):
    """Paramètres de design enregistrés (un enregistrement par utilisateur)."""
    __tablename__ = "design_settings"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True, unique=True, description="Propriétaire des paramètres")
    company: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    proposal_design: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(default_factory=datetime.utcnow)
