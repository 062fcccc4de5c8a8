import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cotacao.design.domain.entities import DesignSettings
from cotacao.design.domain.repositories import AbstractDesignSettingsRepository
from cotacao.design.models import DesignSettingsDB

logger = logging.getLogger(__name__)

class SQLAlchemyDesignSettingsRepository(AbstractDesignSettingsRepository):
    """Implémentation SQLAlchemy du repository des paramètres de design."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_row(self, user_id: int) -> Optional[DesignSettingsDB]:
        stmt = select(DesignSettingsDB).where(DesignSettingsDB.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_user(self, user_id: int) -> Optional[DesignSettings]:
        row = await self._get_row(user_id)
        if row is None:
            logger.debug(f"Aucun paramètre de design pour user {user_id}.")
            return None
        return DesignSettings(company=row.company, proposal_design=row.proposal_design)

    async def upsert(self, user_id: int, settings: DesignSettings) -> DesignSettings:
        row = await self._get_row(user_id)
        company = settings.company.model_dump(mode="json")
        proposal_design = settings.proposal_design.model_dump(mode="json")
        if row is None:
            row = DesignSettingsDB(user_id=user_id, company=company, proposal_design=proposal_design)
            self.session.add(row)
        else:
            row.company = company
            row.proposal_design = proposal_design
            row.updated_at = datetime.utcnow()

        try:
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Erreur enregistrement design pour user {user_id}: {e}", exc_info=True)
            raise
        logger.info(f"Paramètres de design enregistrés pour user {user_id}.")
        return settings
