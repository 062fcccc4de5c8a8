from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .entities import StoredQuotation

class AbstractQuotationRepository(ABC):
    """Interface abstraite pour le repository des cotações."""

    @abstractmethod
    async def get_by_id(self, quotation_id: int, user_id: int) -> Optional[StoredQuotation]:
        """Récupère une cotação par son ID si elle appartient à l'utilisateur."""
        raise NotImplementedError

    @abstractmethod
    async def list_for_user(self, user_id: int) -> List[StoredQuotation]:
        """Liste les cotações d'un utilisateur, les plus récentes d'abord."""
        raise NotImplementedError

    @abstractmethod
    async def add(self, quotation_data: Dict[str, Any]) -> StoredQuotation:
        """Ajoute une nouvelle cotação."""
        raise NotImplementedError

    @abstractmethod
    async def update_status(self, quotation_id: int, user_id: int, status: str) -> Optional[StoredQuotation]:
        """Met à jour le statut d'une cotação."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, quotation_id: int, user_id: int) -> bool:
        """Supprime une cotação. Retourne False si elle n'existe pas."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, quotation_id: int, user_id: int, changes: Dict[str, Any]) -> Optional[StoredQuotation]:
        """Applique des modifications partielles. Retourne None si la cotação n'existe pas."""
        raise NotImplementedError

    @abstractmethod
    async def last_number_with_prefix(self, prefix: str) -> Optional[str]:
        """Plus grand numéro de cotação commençant par le préfixe donné, None s'il n'y en a aucun."""
        raise NotImplementedError
