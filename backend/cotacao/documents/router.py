"""
Routes FastAPI pour le rendu des propositions (PDF et aperçu HTML).
"""
import logging
import re
from typing import Literal

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import HTMLResponse, Response

from cotacao.auth.dependencies import CurrentUserIdDep
from cotacao.documents.dependencies import DocumentServiceDep
from cotacao.documents.domain.exceptions import RenderFailure
from cotacao.documents.domain.renderer import RenderedDocument
from cotacao.documents.models import DocumentRenderRequest

logger = logging.getLogger(__name__)

PDF_FAILURE_DETAIL = "Falha ao gerar PDF"
PREVIEW_FAILURE_DETAIL = "Falha ao gerar a pré-visualização"

router = APIRouter(
    prefix="/documents",
    tags=["Documents"],
    responses={500: {"description": "Échec du rendu"}},
)

def pdf_filename(quotation_number: str) -> str:
    """'COT-2026-0001' -> 'Cotacao-COT-2026-0001.pdf' (caractères sûrs uniquement)."""
    safe = re.sub(r"[^A-Za-z0-9_-]+", "_", quotation_number).strip("_") or "rascunho"
    return f"Cotacao-{safe}.pdf"

def pdf_response(rendered: RenderedDocument, quotation_number: str) -> Response:
    return Response(
        content=rendered.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{pdf_filename(quotation_number)}"'},
    )

def render_failure_to_http(e: RenderFailure, detail: str) -> HTTPException:
    logger.error(f"Rendu échoué, réponse 500: {e}")
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)

@router.post("/pdf", response_class=Response)
async def render_pdf(
    request: DocumentRenderRequest,
    document_service: DocumentServiceDep,
    user_id: CurrentUserIdDep,
):
    """
    Génère le PDF d'une cotação fournie dans le corps de la requête.

    Returns:
        Response: Le PDF en pièce jointe (``Cotacao-<numéro>.pdf``).

    Raises:
        HTTPException (500): Si le rendu échoue; aucun PDF partiel n'est renvoyé.
    """
    logger.info(f"API render_pdf pour user ID: {user_id}, cotação: {request.quotation.quotation_number}")
    try:
        rendered = await document_service.render_pdf(request.quotation, request.company, request.design)
    except RenderFailure as e:
        raise render_failure_to_http(e, PDF_FAILURE_DETAIL)
    return pdf_response(rendered, request.quotation.quotation_number)

@router.post("/preview", response_class=HTMLResponse)
async def render_preview(
    request: DocumentRenderRequest,
    document_service: DocumentServiceDep,
    user_id: CurrentUserIdDep,
    mode: Literal["preview", "document"] = "preview",
):
    """Retourne le HTML de la proposition (aperçu de l'assistant ou document final)."""
    logger.debug(f"API render_preview ({mode}) pour user ID: {user_id}")
    try:
        rendered = await document_service.render_preview_html(
            request.quotation, request.company, request.design, mode=mode
        )
    except RenderFailure as e:
        raise render_failure_to_http(e, PREVIEW_FAILURE_DETAIL)
    return HTMLResponse(content=rendered.content.decode("utf-8"))
