import logging
from datetime import date
from typing import Any, Dict, List, Optional

from cotacao.quotations.domain.entities import QUOTATION_STATUSES, StoredQuotation
from cotacao.quotations.domain.exceptions import (
    DuplicateQuotationNumberException,
    InvalidQuotationStatusException,
    QuotationNotFoundException,
)
from cotacao.quotations.domain.repositories import AbstractQuotationRepository
from cotacao.quotations.models import QuotationCreate, QuotationUpdate

logger = logging.getLogger(__name__)

MONEY_FIELDS = {"subtotal", "total_discount", "grand_total"}
# Colonnes acceptant NULL; les autres champs envoyés à null sont ignorés
CLEARABLE_FIELDS = {
    "customer_email",
    "customer_phone",
    "customer_company",
    "customer_cnpj",
    "customer_address",
    "reference",
    "notes",
}
NUMBER_ATTEMPTS = 3

class QuotationService:
    """Service applicatif pour la gestion des cotações."""

    def __init__(self, repository: AbstractQuotationRepository):
        self.repository = repository

    async def next_quotation_number(self, today: Optional[date] = None) -> str:
        """Numéro définitif: COT-<année>-<NNNN>, NNNN = plus grand suffixe de l'année + 1.

        Partir du maximum (et non du nombre de cotações) évite de réattribuer
        un numéro encore présent après une suppression.
        """
        year = (today or date.today()).year
        prefix = f"COT-{year}-"
        last = await self.repository.last_number_with_prefix(prefix)
        sequence = 0
        if last:
            suffix = last[len(prefix):]
            sequence = int(suffix) if suffix.isdigit() else 0
        return f"{prefix}{sequence + 1:04d}"

    async def create_quotation(
        self,
        quotation_data: QuotationCreate,
        user_id: int,
        today: Optional[date] = None,
    ) -> StoredQuotation:
        """Enregistre une cotação avec le prochain numéro libre.

        Raises:
            DuplicateQuotationNumberException: Si aucun numéro libre n'a pu être
                obtenu après NUMBER_ATTEMPTS tentatives (créations concurrentes).
        """
        logger.info(f"[QuotationService] Création cotação pour user ID: {user_id}")
        # Colonnes JSON sérialisées; les totaux restent des Decimal pour les colonnes numériques
        payload = quotation_data.model_dump(mode="json", exclude=MONEY_FIELDS)
        payload.update({
            "user_id": user_id,
            "subtotal": quotation_data.subtotal,
            "total_discount": quotation_data.total_discount,
            "grand_total": quotation_data.grand_total,
        })
        for attempt in range(1, NUMBER_ATTEMPTS + 1):
            payload["quotation_number"] = await self.next_quotation_number(today)
            try:
                created = await self.repository.add(payload)
            except DuplicateQuotationNumberException as e:
                logger.warning(
                    f"[QuotationService] Numéro {e.quotation_number} déjà pris "
                    f"(tentative {attempt}/{NUMBER_ATTEMPTS})."
                )
                if attempt == NUMBER_ATTEMPTS:
                    raise
                continue
            logger.info(f"[QuotationService] Cotação {created.quotation_number} créée (ID {created.id}).")
            return created

    async def get_quotation(self, quotation_id: int, user_id: int) -> StoredQuotation:
        """Récupère une cotação de l'utilisateur.

        Raises:
            QuotationNotFoundException: Si elle n'existe pas ou appartient à un autre utilisateur.
        """
        quotation = await self.repository.get_by_id(quotation_id, user_id)
        if quotation is None:
            logger.warning(f"[QuotationService] Cotação ID {quotation_id} non trouvée pour user {user_id}.")
            raise QuotationNotFoundException(quotation_id=quotation_id)
        return quotation

    async def list_quotations(self, user_id: int) -> List[StoredQuotation]:
        logger.debug(f"[QuotationService] Listage cotações pour user ID: {user_id}")
        return await self.repository.list_for_user(user_id)

    async def update_status(self, quotation_id: int, user_id: int, status: str) -> StoredQuotation:
        if status not in QUOTATION_STATUSES:
            raise InvalidQuotationStatusException(status=status, allowed=QUOTATION_STATUSES)
        updated = await self.repository.update_status(quotation_id, user_id, status)
        if updated is None:
            raise QuotationNotFoundException(quotation_id=quotation_id)
        return updated

    async def delete_quotation(self, quotation_id: int, user_id: int) -> None:
        deleted = await self.repository.delete(quotation_id, user_id)
        if not deleted:
            raise QuotationNotFoundException(quotation_id=quotation_id)
        logger.info(f"[QuotationService] Cotação ID {quotation_id} supprimée par user {user_id}.")

    async def update_quotation(
        self,
        quotation_id: int,
        user_id: int,
        update_data: QuotationUpdate,
    ) -> StoredQuotation:
        """Applique une modification partielle (client, lignes, conditions, textes, totaux).

        Raises:
            QuotationNotFoundException: Si elle n'existe pas ou appartient à un autre utilisateur.
        """
        sent = update_data.model_fields_set
        changes: Dict[str, Any] = {
            field: value
            for field, value in update_data.model_dump(mode="json", exclude=MONEY_FIELDS).items()
            if field in sent and (value is not None or field in CLEARABLE_FIELDS)
        }
        for field in MONEY_FIELDS & sent:
            value = getattr(update_data, field)
            if value is not None:
                changes[field] = value

        if not changes:
            logger.debug(f"[QuotationService] Aucune modification pour cotação ID {quotation_id}.")
            return await self.get_quotation(quotation_id, user_id)

        updated = await self.repository.update(quotation_id, user_id, changes)
        if updated is None:
            raise QuotationNotFoundException(quotation_id=quotation_id)
        logger.info(f"[QuotationService] Cotação {updated.quotation_number} modifiée par user {user_id}.")
        return updated
