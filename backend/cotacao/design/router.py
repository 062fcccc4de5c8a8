"""
Routes FastAPI pour les paramètres de design.
"""
import logging

from fastapi import APIRouter

from cotacao.auth.dependencies import CurrentUserIdDep
from cotacao.design.dependencies import DesignServiceDep
from cotacao.design.domain.entities import DesignOptions, DesignSettings, design_options

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/design",
    tags=["Design"],
)

@router.get("/options", response_model=DesignOptions)
async def read_design_options():
    """Polices, tailles, mises en page et formats proposés à l'utilisateur."""
    return design_options()

@router.get("/", response_model=DesignSettings)
async def read_design_settings(
    design_service: DesignServiceDep,
    user_id: CurrentUserIdDep,
):
    """Retourne les paramètres de design de l'utilisateur (ou les valeurs par défaut)."""
    return await design_service.get_settings(user_id)

@router.put("/", response_model=DesignSettings)
async def save_design_settings(
    settings: DesignSettings,
    design_service: DesignServiceDep,
    user_id: CurrentUserIdDep,
):
    """Enregistre les paramètres de design de l'utilisateur."""
    logger.info(f"API save_design_settings pour user ID: {user_id}")
    return await design_service.save_settings(user_id, settings)
