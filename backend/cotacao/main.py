"""
Module principal de l'application FastAPI du générateur de cotações.

Ce module configure le logging et l'instance FastAPI, ajoute le middleware CORS
et inclut les routeurs (documents, cotações, design).
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cotacao.core.config import settings
from cotacao.database import create_tables
from cotacao.design.router import router as design_router
from cotacao.documents.router import router as documents_router
from cotacao.quotations.router import router as quotations_router

# Configurer le logging
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Création des tables (si absentes)...")
    await create_tables()
    yield

app = FastAPI(
    title="Gerador de Cotações API",
    description="API de rendu des propositions commerciales (PDF et aperçu) et de gestion des cotações.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# ======================================================
# Inclure les routeurs
# ======================================================
app.include_router(documents_router, prefix=settings.API_V1_PREFIX)
app.include_router(quotations_router, prefix=settings.API_V1_PREFIX)
app.include_router(design_router, prefix=settings.API_V1_PREFIX)

@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "ok"}
