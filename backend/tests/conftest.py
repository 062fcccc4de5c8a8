# Standard Library
import io
import os
from decimal import Decimal
from typing import AsyncGenerator, Dict, List

# La base de test doit être configurée avant l'import de l'application
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

# Third-Party Libraries
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

# First-Party Libraries
from cotacao.main import app
from cotacao.database import get_db_session
from cotacao.auth.security import create_access_token
from cotacao.design.domain.entities import CompanyBranding, DesignConfiguration
from cotacao.documents.config import DocumentSettings
from cotacao.documents.application.services import DocumentService
from cotacao.documents.dependencies import get_logo_fetcher
from cotacao.documents.domain.exceptions import AssetFetchError
from cotacao.documents.domain.renderer import LogoImage
from cotacao.documents.infrastructure.html_renderer import JinjaHTMLRenderer
from cotacao.documents.infrastructure.logo_fetcher import AbstractLogoFetcher
from cotacao.documents.infrastructure.reportlab_renderer import ReportLabDocumentRenderer
from cotacao.quotations.domain.entities import (
    CommercialConditions,
    DocumentTexts,
    LineItem,
    Quotation,
)

# URL de base pour la DB en mémoire
TEST_DATABASE_BASE_URL = "sqlite+aiosqlite:///:memory:"

# --- Doubles de test ---

class StaticLogoFetcher(AbstractLogoFetcher):
    """Renvoie toujours la même image; compte les appels."""

    def __init__(self, content: bytes):
        self.content = content
        self.calls: List[str] = []

    async def fetch(self, url: str) -> LogoImage:
        self.calls.append(url)
        return LogoImage(url=url, content=self.content, content_type="image/png")

class FailingLogoFetcher(AbstractLogoFetcher):
    """Simule un logo injoignable."""

    def __init__(self):
        self.calls: List[str] = []

    async def fetch(self, url: str) -> LogoImage:
        self.calls.append(url)
        raise AssetFetchError(url, "hôte injoignable")

# --- Fixtures de Base ---

@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Crée un engine, des tables, et fournit une session DB en mémoire pour chaque test."""
    engine: AsyncEngine = create_async_engine(TEST_DATABASE_BASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with TestingSessionLocal() as session:
        yield session

    await engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def test_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient httpx branché sur la session de test; aucun accès réseau pour le logo."""
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_logo_fetcher] = FailingLogoFetcher
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

# --- Authentification ---

@pytest.fixture
def auth_headers_user() -> Dict[str, str]:
    access_token = create_access_token(data={"sub": "1"})
    return {"Authorization": f"Bearer {access_token}"}

@pytest.fixture
def auth_headers_user_2() -> Dict[str, str]:
    access_token = create_access_token(data={"sub": "2"})
    return {"Authorization": f"Bearer {access_token}"}

# --- Données de cotação ---

@pytest.fixture
def sample_quotation() -> Quotation:
    """Deux articles, frete 350, totaux 5300 / 450 / 5200."""
    return Quotation(
        quotation_number="COT-2026-0001",
        quotation_date="2026-02-27",
        validity_days=30,
        customer_name="Empresa Teste Ltda",
        customer_email="compras@empresateste.com.br",
        customer_phone="(11) 3333-4444",
        customer_company="Empresa Teste",
        customer_cnpj="12.345.678/0001-90",
        customer_address="Rua das Flores, 100 - São Paulo/SP",
        reference="Ampliação da linha 2",
        items=[
            LineItem.build("Motor WEG 220V 5CV", Decimal("3"), Decimal("1500"), Decimal("10"), id="1"),
            LineItem.build("Cabo flexível 10mm²", Decimal("100"), Decimal("12.5"), unit="m", id="2"),
        ],
        conditions=CommercialConditions(
            payment_terms="30/60/90 dias",
            delivery_time="15 dias úteis",
            freight="CIF",
            freight_value=Decimal("350"),
            warranty="12 meses",
        ),
        texts=DocumentTexts(
            header_text="Prezado(a) ${customerName},",
            intro_notes="Segue nossa proposta para ${reference}.",
            commercial_notes="Valores válidos por ${validityDays} dias.",
            technical_notes="Motores com certificação INMETRO.",
            closing_notes="Atenciosamente, ${companyName}.",
            footer_text="",
        ),
        subtotal=Decimal("5300"),
        total_discount=Decimal("450"),
        grand_total=Decimal("5200"),
    )

@pytest.fixture
def bare_quotation(sample_quotation: Quotation) -> Quotation:
    """Même cotação sans aucun texte libre et sans champ client optionnel."""
    return sample_quotation.model_copy(update={
        "texts": DocumentTexts(),
        "customer_email": None,
        "customer_phone": None,
        "customer_company": None,
        "customer_cnpj": None,
        "customer_address": None,
        "reference": None,
    })

@pytest.fixture
def long_quotation(sample_quotation: Quotation) -> Quotation:
    """Soixante articles: le tableau déborde sur plusieurs pages."""
    items = [
        LineItem.build(f"Item de teste {n:02d}", Decimal("1"), Decimal("10"), id=str(n))
        for n in range(1, 61)
    ]
    return sample_quotation.model_copy(update={"items": items})

@pytest.fixture
def company() -> CompanyBranding:
    return CompanyBranding(
        company_name="Acme Automação",
        company_subtitle="Soluções Industriais",
        phone="(11) 4000-1234",
        email="vendas@acme.com.br",
    )

@pytest.fixture
def design() -> DesignConfiguration:
    return DesignConfiguration()

@pytest.fixture
def document_settings() -> DocumentSettings:
    return DocumentSettings(PDF_PAGE_COMPRESSION=False)

@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (8, 8), (255, 75, 75)).save(buffer, format="PNG")
    return buffer.getvalue()

@pytest.fixture
def failing_logo_fetcher() -> FailingLogoFetcher:
    return FailingLogoFetcher()

@pytest.fixture
def static_logo_fetcher(png_bytes: bytes) -> StaticLogoFetcher:
    return StaticLogoFetcher(png_bytes)

@pytest.fixture
def document_service(document_settings: DocumentSettings, static_logo_fetcher: StaticLogoFetcher) -> DocumentService:
    return DocumentService(
        pdf_renderer=ReportLabDocumentRenderer(settings=document_settings),
        html_renderer=JinjaHTMLRenderer(),
        logo_fetcher=static_logo_fetcher,
        settings=document_settings,
    )
