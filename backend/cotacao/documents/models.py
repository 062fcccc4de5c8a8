"""
Schémas d'API du module Documents.
"""
from typing import Optional

from pydantic import BaseModel

from cotacao.design.domain.entities import CompanyBranding, DesignConfiguration
from cotacao.quotations.domain.entities import Quotation

class DocumentRenderRequest(BaseModel):
    """Corps des requêtes de rendu: la cotação et, optionnellement, l'identité et le design."""
    quotation: Quotation
    company: Optional[CompanyBranding] = None
    design: Optional[DesignConfiguration] = None
