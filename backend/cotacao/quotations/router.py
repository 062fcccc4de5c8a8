"""
Routes FastAPI pour les cotações (CRUD propriétaire, PDF et aperçu).
"""
import logging
from typing import List, Literal

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import HTMLResponse, Response

from cotacao.auth.dependencies import CurrentUserIdDep
from cotacao.design.dependencies import DesignServiceDep
from cotacao.documents.dependencies import DocumentServiceDep
from cotacao.documents.domain.exceptions import RenderFailure
from cotacao.documents.router import (
    PDF_FAILURE_DETAIL,
    PREVIEW_FAILURE_DETAIL,
    pdf_response,
    render_failure_to_http,
)
from cotacao.quotations.dependencies import QuotationServiceDep
from cotacao.quotations.domain.entities import StoredQuotation
from cotacao.quotations.domain.exceptions import (
    DuplicateQuotationNumberException,
    InvalidQuotationStatusException,
    QuotationNotFoundException,
)
from cotacao.quotations.models import QuotationCreate, QuotationStatusUpdate, QuotationUpdate

logger = logging.getLogger(__name__)

NOT_FOUND_DETAIL = "Cotação não encontrada"
NUMBER_CONFLICT_DETAIL = "Não foi possível atribuir um número à cotação, tente novamente"

router = APIRouter(
    prefix="/quotations",
    tags=["Quotations"],
    responses={404: {"description": NOT_FOUND_DETAIL}},
)

def _not_found(e: QuotationNotFoundException) -> HTTPException:
    logger.debug(f"Cotação {e.quotation_id} non trouvée: {e}")
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_DETAIL)

@router.post("/", response_model=StoredQuotation, status_code=status.HTTP_201_CREATED)
async def create_quotation(
    quotation_data: QuotationCreate,
    quotation_service: QuotationServiceDep,
    user_id: CurrentUserIdDep,
):
    """Enregistre une nouvelle cotação; le numéro COT-<année>-<NNNN> est attribué ici."""
    try:
        return await quotation_service.create_quotation(quotation_data, user_id)
    except DuplicateQuotationNumberException as e:
        logger.error(f"Numérotation cotação en conflit pour user {user_id}: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=NUMBER_CONFLICT_DETAIL)

@router.get("/", response_model=List[StoredQuotation])
async def list_quotations(
    quotation_service: QuotationServiceDep,
    user_id: CurrentUserIdDep,
):
    """Liste les cotações de l'utilisateur, les plus récentes d'abord."""
    return await quotation_service.list_quotations(user_id)

@router.get("/{quotation_id}", response_model=StoredQuotation)
async def read_quotation(
    quotation_id: int,
    quotation_service: QuotationServiceDep,
    user_id: CurrentUserIdDep,
):
    try:
        return await quotation_service.get_quotation(quotation_id, user_id)
    except QuotationNotFoundException as e:
        raise _not_found(e)

@router.patch("/{quotation_id}", response_model=StoredQuotation)
async def update_quotation(
    quotation_id: int,
    update_data: QuotationUpdate,
    quotation_service: QuotationServiceDep,
    user_id: CurrentUserIdDep,
):
    """Modifie une cotação enregistrée; les rendus suivants utilisent le contenu modifié."""
    try:
        return await quotation_service.update_quotation(quotation_id, user_id, update_data)
    except QuotationNotFoundException as e:
        raise _not_found(e)

@router.patch("/{quotation_id}/status", response_model=StoredQuotation)
async def update_quotation_status(
    quotation_id: int,
    status_update: QuotationStatusUpdate,
    quotation_service: QuotationServiceDep,
    user_id: CurrentUserIdDep,
):
    """Met à jour le statut d'une cotação (draft, sent, approved, rejected, expired)."""
    try:
        return await quotation_service.update_status(quotation_id, user_id, status_update.status)
    except QuotationNotFoundException as e:
        raise _not_found(e)
    except InvalidQuotationStatusException as e:
        logger.warning(f"Statut invalide pour cotação {quotation_id}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

@router.delete("/{quotation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_quotation(
    quotation_id: int,
    quotation_service: QuotationServiceDep,
    user_id: CurrentUserIdDep,
):
    try:
        await quotation_service.delete_quotation(quotation_id, user_id)
    except QuotationNotFoundException as e:
        raise _not_found(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/{quotation_id}/pdf", response_class=Response)
async def download_quotation_pdf(
    quotation_id: int,
    quotation_service: QuotationServiceDep,
    design_service: DesignServiceDep,
    document_service: DocumentServiceDep,
    user_id: CurrentUserIdDep,
):
    """Télécharge le PDF d'une cotação enregistrée avec le design de l'utilisateur."""
    try:
        quotation = await quotation_service.get_quotation(quotation_id, user_id)
    except QuotationNotFoundException as e:
        raise _not_found(e)

    design_settings = await design_service.get_settings(user_id)
    try:
        rendered = await document_service.render_pdf(
            quotation, design_settings.company, design_settings.proposal_design
        )
    except RenderFailure as e:
        raise render_failure_to_http(e, PDF_FAILURE_DETAIL)
    logger.info(f"PDF cotação {quotation.quotation_number} généré pour user {user_id} ({rendered.page_count} page(s)).")
    return pdf_response(rendered, quotation.quotation_number)

@router.get("/{quotation_id}/preview", response_class=HTMLResponse)
async def preview_quotation(
    quotation_id: int,
    quotation_service: QuotationServiceDep,
    design_service: DesignServiceDep,
    document_service: DocumentServiceDep,
    user_id: CurrentUserIdDep,
    mode: Literal["preview", "document"] = "document",
):
    """Affiche une cotação enregistrée au format écran."""
    try:
        quotation = await quotation_service.get_quotation(quotation_id, user_id)
    except QuotationNotFoundException as e:
        raise _not_found(e)

    design_settings = await design_service.get_settings(user_id)
    try:
        rendered = await document_service.render_preview_html(
            quotation, design_settings.company, design_settings.proposal_design, mode=mode
        )
    except RenderFailure as e:
        raise render_failure_to_http(e, PREVIEW_FAILURE_DETAIL)
    return HTMLResponse(content=rendered.content.decode("utf-8"))
