import logging

from cotacao.design.domain.entities import DEFAULT_DESIGN_SETTINGS, DesignSettings
from cotacao.design.domain.repositories import AbstractDesignSettingsRepository

logger = logging.getLogger(__name__)

class DesignSettingsService:
    """Service applicatif pour les paramètres de design d'un utilisateur."""

    def __init__(self, repository: AbstractDesignSettingsRepository):
        self.repository = repository

    async def get_settings(self, user_id: int) -> DesignSettings:
        """Retourne les paramètres enregistrés ou, à défaut, les valeurs par défaut."""
        settings = await self.repository.get_for_user(user_id)
        if settings is None:
            logger.debug(f"[DesignService] Valeurs par défaut pour user {user_id}.")
            return DEFAULT_DESIGN_SETTINGS
        return settings

    async def save_settings(self, user_id: int, settings: DesignSettings) -> DesignSettings:
        return await self.repository.upsert(user_id, settings)
