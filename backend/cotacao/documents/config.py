"""Configuration spécifique au module Documents.

Utilise Pydantic BaseSettings pour permettre la surcharge par
des variables d'environnement si nécessaire.
"""

from pydantic_settings import BaseSettings

class DocumentSettings(BaseSettings):
    """Paramètres de rendu des propositions (PDF et écran)."""

    LOGO_FETCH_TIMEOUT: float = 5.0  # secondes
    LOGO_MAX_REDIRECTS: int = 1
    LOGO_MAX_BYTES: int = 2 * 1024 * 1024  # taille maximale du logo téléchargé
    PAGE_MARGIN: float = 40.0  # points, sur les quatre côtés
    PDF_CREATOR: str = "Gerador de Cotações"
    PDF_PAGE_COMPRESSION: bool = False

    class Config:
        env_file = '.env'
        env_file_encoding = 'utf-8'
        extra = 'ignore'

# Instance globale unique des paramètres
document_settings = DocumentSettings()
