from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from cotacao.design.domain.entities import DesignConfiguration
from cotacao.documents.domain.blocks import DocumentModel
from cotacao.documents.domain.layout import LayoutResult

class LogoImage(BaseModel):
    """Logo récupéré une seule fois par rendu, partagé par les renderers."""
    model_config = ConfigDict(frozen=True)

    url: str
    content: bytes
    content_type: Optional[str] = None

class RenderedDocument(BaseModel):
    """Résultat d'un rendu: contenu binaire et avertissements non bloquants."""
    content: bytes
    media_type: str
    page_count: int
    warnings: List[str] = []

class AbstractDocumentRenderer(ABC):
    """Interface d'un renderer: peint un modèle déjà mis en page, sans le modifier."""

    media_type: str = "application/octet-stream"

    @abstractmethod
    def render(
        self,
        model: DocumentModel,
        layout: LayoutResult,
        design: DesignConfiguration,
        logo: Optional[LogoImage] = None,
    ) -> bytes:
        """Produit le document final en mémoire.

        Args:
            model: Blocs ordonnés de la proposition.
            layout: Pages et positions calculées par le moteur de mise en page.
            design: Couleurs, polices et options d'affichage.
            logo: Image du logo si elle a pu être récupérée.

        Returns:
            Le contenu binaire du document.
        """
        raise NotImplementedError
