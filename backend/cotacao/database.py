import logging
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from cotacao.core.config import settings

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO_LOG,
    future=True,
)

AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Empêche les objets d'expirer après commit
)

logger.info("Moteur et Session Factory SQLAlchemy Async configurés.")

async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Dépendance FastAPI fournissant une session de base de données asynchrone.

    Les commits sont gérés par les services applicatifs.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Erreur durant la session DB, rollback: {e}", exc_info=True)
            await session.rollback()
            raise
        finally:
            await session.close()
            logger.debug("Session DB fermée.")

async def create_tables():
    """Crée toutes les tables SQLModel (quotations, design_settings)."""
    # Import des modèles pour enregistrer les tables dans les métadonnées
    from cotacao.quotations import models as _quotation_models  # noqa: F401
    from cotacao.design import models as _design_models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
