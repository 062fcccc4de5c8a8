import logging
from typing import List, Optional, Tuple

from cotacao.design.domain.entities import (
    DEFAULT_COMPANY,
    DEFAULT_PROPOSAL_DESIGN,
    CompanyBranding,
    DesignConfiguration,
)
from cotacao.documents.config import DocumentSettings
from cotacao.documents.domain.blocks import DocumentModel, HeaderBlock
from cotacao.documents.domain.builder import build_document
from cotacao.documents.domain.exceptions import AssetFetchError, RenderFailure
from cotacao.documents.domain.interpolation import RenderMode
from cotacao.documents.domain.layout import LayoutEngine, LayoutResult
from cotacao.documents.domain.renderer import AbstractDocumentRenderer, LogoImage, RenderedDocument
from cotacao.documents.infrastructure.logo_fetcher import AbstractLogoFetcher
from cotacao.quotations.domain.entities import Quotation

logger = logging.getLogger(__name__)

class DocumentService:
    """Service applicatif: point d'entrée du rendu des propositions.

    Pipeline linéaire: modèle de document -> mise en page -> logo -> peinture.
    Chaque appel construit ses propres objets; aucun état partagé entre rendus.
    """

    def __init__(
        self,
        pdf_renderer: AbstractDocumentRenderer,
        html_renderer: AbstractDocumentRenderer,
        logo_fetcher: AbstractLogoFetcher,
        settings: DocumentSettings,
    ):
        self.pdf_renderer = pdf_renderer
        self.html_renderer = html_renderer
        self.logo_fetcher = logo_fetcher
        self.settings = settings
        logger.info("[DocumentService] Initialisé.")

    def prepare(
        self,
        quotation: Quotation,
        company: CompanyBranding,
        design: DesignConfiguration,
        mode: RenderMode = "document",
    ) -> Tuple[DocumentModel, LayoutResult]:
        """Construit le modèle de document puis sa mise en page."""
        model = build_document(quotation, design, company, mode)
        engine = LayoutEngine(design, design.page_geometry(self.settings.PAGE_MARGIN))
        return model, engine.layout(model)

    async def fetch_logo(self, model: DocumentModel, warnings: List[str]) -> Optional[LogoImage]:
        """Récupère le logo une fois par rendu; un échec est non bloquant."""
        header = next((block for block in model.blocks if isinstance(block, HeaderBlock)), None)
        if header is None or not header.logo_url:
            return None
        try:
            return await self.logo_fetcher.fetch(header.logo_url)
        except AssetFetchError as e:
            logger.warning(f"[DocumentService] Logo ignoré: {e}")
            warnings.append(str(e))
            return None

    async def _render(
        self,
        renderer: AbstractDocumentRenderer,
        quotation: Quotation,
        company: Optional[CompanyBranding],
        design: Optional[DesignConfiguration],
        mode: RenderMode,
    ) -> RenderedDocument:
        company = company or DEFAULT_COMPANY
        design = design or DEFAULT_PROPOSAL_DESIGN
        number = quotation.quotation_number or "brouillon"
        warnings: List[str] = []

        try:
            model, layout = self.prepare(quotation, company, design, mode)
            logo = await self.fetch_logo(model, warnings)
            content = renderer.render(model, layout, design, logo)
        except RenderFailure as e:
            logger.error(f"[DocumentService] Échec rendu cotação {number}: {e}")
            raise
        except Exception as e:
            logger.error(f"[DocumentService] Erreur inattendue rendu cotação {number}: {e}", exc_info=True)
            raise RenderFailure(f"Erreur inattendue: {e}", original_exception=e)

        return RenderedDocument(
            content=content,
            media_type=renderer.media_type,
            page_count=layout.page_count,
            warnings=warnings,
        )

    async def render_pdf(
        self,
        quotation: Quotation,
        company: Optional[CompanyBranding] = None,
        design: Optional[DesignConfiguration] = None,
    ) -> RenderedDocument:
        """Génère le PDF d'une cotação.

        Args:
            quotation: Cotação validée (lecture seule).
            company: Identité de l'entreprise; valeurs par défaut si absente.
            design: Configuration visuelle; valeurs par défaut si absente.

        Returns:
            Le document rendu; ``content`` commence par la signature ``%PDF``.

        Raises:
            RenderFailure: Pour tout échec de construction, de mise en page ou de peinture.
        """
        logger.info(f"[DocumentService] Demande de génération PDF pour cotação {quotation.quotation_number or 'brouillon'}.")
        return await self._render(self.pdf_renderer, quotation, company, design, "document")

    async def render_preview_html(
        self,
        quotation: Quotation,
        company: Optional[CompanyBranding] = None,
        design: Optional[DesignConfiguration] = None,
        mode: RenderMode = "preview",
    ) -> RenderedDocument:
        """Génère le HTML de l'aperçu écran (mode 'preview' ou 'document')."""
        logger.info(f"[DocumentService] Demande d'aperçu HTML ({mode}) pour cotação {quotation.quotation_number or 'brouillon'}.")
        return await self._render(self.html_renderer, quotation, company, design, mode)
