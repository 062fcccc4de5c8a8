"""Entités du domaine "Design": identité visuelle de la proposition.

La configuration de design est une valeur immuable: toute modification passe
par ``model_copy(update=...)``.
"""
import re
from typing import Dict, List, Literal, Tuple, get_args

from pydantic import BaseModel, ConfigDict, field_validator

FontSizeTier = Literal["small", "medium", "large"]
HeaderLayout = Literal["left", "center", "right"]
PaperSize = Literal["A4", "Letter"]

_HEX_COLOR_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_RGB_COLOR_RE = re.compile(r"^rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)$", re.IGNORECASE)

def parse_color(value: str) -> Tuple[int, int, int]:
    """Convertit une couleur '#RGB', '#RRGGBB' ou 'rgb(r, g, b)' en triplet RGB 0-255.

    Raises:
        ValueError: Si la chaîne n'est pas une couleur reconnue.
    """
    text = value.strip()
    match = _HEX_COLOR_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    match = _RGB_COLOR_RE.match(text)
    if match:
        channels = tuple(int(group) for group in match.groups())
        if any(channel > 255 for channel in channels):
            raise ValueError(f"Composante RGB hors limites dans '{value}'")
        return channels  # type: ignore[return-value]

    raise ValueError(f"Couleur invalide: '{value}' (attendu #RRGGBB ou rgb(r, g, b))")

class FontSizes(BaseModel):
    """Tailles de police (en points) pour chaque rôle sémantique."""
    model_config = ConfigDict(frozen=True)

    title: float
    section: float
    body: float
    small: float
    mono: float

FONT_SIZE_TABLE: Dict[str, FontSizes] = {
    "small": FontSizes(title=18, section=12, body=8, small=7, mono=8),
    "medium": FontSizes(title=22, section=14, body=9.5, small=8, mono=9.5),
    "large": FontSizes(title=24, section=16, body=11, small=9, mono=11),
}

PAPER_SIZES: Dict[str, Tuple[float, float]] = {
    "A4": (595.28, 841.89),
    "Letter": (612.0, 792.0),
}

DEFAULT_PAGE_MARGIN = 40.0

class PageGeometry(BaseModel):
    """Dimensions d'une page (points) et marge uniforme."""
    model_config = ConfigDict(frozen=True)

    width: float
    height: float
    margin: float = DEFAULT_PAGE_MARGIN

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def content_bottom(self) -> float:
        """Ordonnée (depuis le haut) à ne pas dépasser par le contenu."""
        return self.height - self.margin

FONT_OPTIONS: List[str] = [
    "DM Sans", "Inter", "Roboto", "Open Sans", "Lato",
    "Poppins", "Montserrat", "Source Sans 3", "Nunito", "PT Sans",
]

MONO_FONT_OPTIONS: List[str] = [
    "DM Mono", "JetBrains Mono", "Fira Code", "Source Code Pro", "IBM Plex Mono", "Roboto Mono",
]

_COLOR_FIELDS = (
    "header_bg_color",
    "header_text_color",
    "accent_color",
    "body_bg_color",
    "body_text_color",
    "table_border_color",
    "table_header_bg_color",
    "table_header_text_color",
    "table_striped_bg",
)

class DesignConfiguration(BaseModel):
    """Paramètres visuels de la proposition (couleurs, polices, mise en page)."""
    model_config = ConfigDict(frozen=True)

    header_bg_color: str = "#1A1A2E"
    header_text_color: str = "#FFFFFF"
    accent_color: str = "#FF4B4B"
    body_bg_color: str = "#FFFFFF"
    body_text_color: str = "#1A1A2E"
    table_border_color: str = "#E2E2EA"
    table_header_bg_color: str = "#1A1A2E"
    table_header_text_color: str = "#FFFFFF"
    table_striped_bg: str = "#F8F8FC"
    title_font: str = "DM Sans"
    body_font: str = "DM Sans"
    mono_font: str = "DM Mono"
    font_size: FontSizeTier = "medium"
    show_logo: bool = True
    show_border_lines: bool = True
    header_layout: HeaderLayout = "left"
    paper_size: PaperSize = "A4"

    @field_validator(*_COLOR_FIELDS)
    @classmethod
    def validate_color(cls, value: str) -> str:
        parse_color(value)
        return value.strip()

    @property
    def font_sizes(self) -> FontSizes:
        return FONT_SIZE_TABLE[self.font_size]

    def page_geometry(self, margin: float = DEFAULT_PAGE_MARGIN) -> PageGeometry:
        width, height = PAPER_SIZES[self.paper_size]
        return PageGeometry(width=width, height=height, margin=margin)

class CompanyBranding(BaseModel):
    """Identité de l'entreprise émettrice, affichée en en-tête et pied de page."""
    model_config = ConfigDict(frozen=True)

    company_name: str = "Sua Empresa"
    company_subtitle: str = "Soluções Profissionais"
    logo_url: str = ""
    cnpj: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    address: str = ""

    def contact_line(self) -> str:
        """Ligne de repli du pied de page: 'nom | téléphone | email'."""
        parts = [self.company_name]
        if self.phone:
            parts.append(self.phone)
        if self.email:
            parts.append(self.email)
        return " | ".join(parts)

class DesignSettings(BaseModel):
    """Paramètres de design enregistrés pour un utilisateur."""
    company: CompanyBranding = CompanyBranding()
    proposal_design: DesignConfiguration = DesignConfiguration()

DEFAULT_COMPANY = CompanyBranding()
DEFAULT_PROPOSAL_DESIGN = DesignConfiguration()
DEFAULT_DESIGN_SETTINGS = DesignSettings()

class DesignOptions(BaseModel):
    """Valeurs proposées par l'éditeur de design."""
    fonts: List[str]
    mono_fonts: List[str]
    font_sizes: Dict[str, FontSizes]
    header_layouts: List[str]
    paper_sizes: List[str]

def design_options() -> DesignOptions:
    return DesignOptions(
        fonts=list(FONT_OPTIONS),
        mono_fonts=list(MONO_FONT_OPTIONS),
        font_sizes=dict(FONT_SIZE_TABLE),
        header_layouts=list(get_args(HeaderLayout)),
        paper_sizes=list(get_args(PaperSize)),
    )
