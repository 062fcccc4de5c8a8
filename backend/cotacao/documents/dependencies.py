"""
Dépendances pour le module Documents.
"""
from typing import Annotated

from fastapi import Depends

from cotacao.documents.application.services import DocumentService
from cotacao.documents.config import DocumentSettings, document_settings
from cotacao.documents.domain.renderer import AbstractDocumentRenderer
from cotacao.documents.infrastructure.html_renderer import JinjaHTMLRenderer
from cotacao.documents.infrastructure.logo_fetcher import AbstractLogoFetcher, HttpxLogoFetcher
from cotacao.documents.infrastructure.reportlab_renderer import ReportLabDocumentRenderer

# --- Document Settings Dependency ---

def get_document_settings() -> DocumentSettings:
    """Retourne l'instance globale des paramètres de rendu."""
    return document_settings

DocumentSettingsDep = Annotated[DocumentSettings, Depends(get_document_settings)]

# --- Renderers & Logo ---

def get_pdf_renderer(settings: DocumentSettingsDep) -> AbstractDocumentRenderer:
    return ReportLabDocumentRenderer(settings=settings)

def get_html_renderer() -> AbstractDocumentRenderer:
    return JinjaHTMLRenderer()

def get_logo_fetcher(settings: DocumentSettingsDep) -> AbstractLogoFetcher:
    return HttpxLogoFetcher(settings=settings)

PDFRendererDep = Annotated[AbstractDocumentRenderer, Depends(get_pdf_renderer)]
HTMLRendererDep = Annotated[AbstractDocumentRenderer, Depends(get_html_renderer)]
LogoFetcherDep = Annotated[AbstractLogoFetcher, Depends(get_logo_fetcher)]

# --- Document Service Dependency ---

def get_document_service(
    pdf_renderer: PDFRendererDep,
    html_renderer: HTMLRendererDep,
    logo_fetcher: LogoFetcherDep,
    settings: DocumentSettingsDep,
) -> DocumentService:
    """Injecte les renderers et le récupérateur de logo dans DocumentService."""
    return DocumentService(
        pdf_renderer=pdf_renderer,
        html_renderer=html_renderer,
        logo_fetcher=logo_fetcher,
        settings=settings,
    )

DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]
