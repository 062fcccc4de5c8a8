from abc import ABC, abstractmethod
from typing import Optional

from .entities import DesignSettings

class AbstractDesignSettingsRepository(ABC):
    """Interface abstraite pour le repository des paramètres de design."""

    @abstractmethod
    async def get_for_user(self, user_id: int) -> Optional[DesignSettings]:
        """Retourne les paramètres de l'utilisateur, ou None s'il n'en a pas."""
        raise NotImplementedError

    @abstractmethod
    async def upsert(self, user_id: int, settings: DesignSettings) -> DesignSettings:
        """Crée ou remplace les paramètres de l'utilisateur."""
        raise NotImplementedError
