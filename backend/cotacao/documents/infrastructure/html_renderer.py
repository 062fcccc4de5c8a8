"""
Renderer écran: produit le HTML stylé de la proposition (aperçu et impression navigateur).
"""
import base64
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from jinja2 import Environment, FileSystemLoader

from cotacao.design.domain.entities import DesignConfiguration
from cotacao.documents.domain.blocks import DocumentModel
from cotacao.documents.domain.exceptions import RenderFailure
from cotacao.documents.domain.layout import (
    HEADER_HEIGHT,
    LOGO_SIZE,
    TOTALS_VALUE_WIDTH,
    TOTALS_WIDTH,
    LayoutResult,
)
from cotacao.documents.domain.renderer import AbstractDocumentRenderer, LogoImage
from cotacao.documents.domain.typography import classify_family

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
DEFAULT_TEMPLATE = "quotation.html"

_GENERIC_FAMILIES = {"sans": "sans-serif", "serif": "serif", "mono": "monospace"}

def css_font_stack(family: str) -> str:
    """'DM Sans' -> "'DM Sans', sans-serif"."""
    return f"'{family}', {_GENERIC_FAMILIES[classify_family(family)]}"

def logo_data_uri(logo: LogoImage) -> str:
    content_type = (logo.content_type or "image/png").split(";")[0].strip()
    encoded = base64.b64encode(logo.content).decode("ascii")
    return f"data:{content_type};base64,{encoded}"

class JinjaHTMLRenderer(AbstractDocumentRenderer):
    """Implémentation du renderer écran utilisant Jinja2."""

    media_type = "text/html; charset=utf-8"

    def __init__(self, templates_dir: Path = TEMPLATES_DIR, template_name: str = DEFAULT_TEMPLATE):
        self.templates_dir = Path(templates_dir)
        self.template_name = template_name
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        logger.info(f"[HTMLRender] Initialisé (templates: {self.templates_dir}).")

    def build_context(
        self,
        model: DocumentModel,
        layout: LayoutResult,
        design: DesignConfiguration,
        logo: Optional[LogoImage] = None,
    ) -> Dict[str, Any]:
        geometry = layout.geometry
        content_width = geometry.content_width
        columns = [
            {
                "key": column.key,
                "label": column.label,
                "align": column.align,
                "percent": round(column.width / content_width * 100, 4) if content_width else 0,
            }
            for column in layout.columns
        ]
        return {
            "model": model,
            "blocks": model.blocks,
            "metadata": model.metadata,
            "design": design,
            "sizes": design.font_sizes,
            "fonts": {
                "title": css_font_stack(design.title_font),
                "body": css_font_stack(design.body_font),
                "mono": css_font_stack(design.mono_font),
            },
            "page": {
                "size": design.paper_size,
                "width": geometry.width,
                "height": geometry.height,
                "margin": geometry.margin,
                "count": layout.page_count,
            },
            "footer": layout.pages[0].footer if layout.pages else None,
            "columns": columns,
            "logo_src": logo_data_uri(logo) if logo is not None else None,
            "header_height": HEADER_HEIGHT,
            "logo_size": LOGO_SIZE,
            "totals_width": TOTALS_WIDTH,
            "totals_value_width": TOTALS_VALUE_WIDTH,
        }

    def render_html(
        self,
        model: DocumentModel,
        layout: LayoutResult,
        design: DesignConfiguration,
        logo: Optional[LogoImage] = None,
    ) -> str:
        logger.info(f"[HTMLRender] Rendu HTML '{model.metadata.title}'.")
        try:
            template = self.env.get_template(self.template_name)
            return template.render(**self.build_context(model, layout, design, logo))
        except Exception as e:
            logger.error(f"[HTMLRender] Erreur rendu template {self.template_name}: {e}", exc_info=True)
            raise RenderFailure(f"Erreur lors du rendu HTML: {e}", original_exception=e)

    def render(
        self,
        model: DocumentModel,
        layout: LayoutResult,
        design: DesignConfiguration,
        logo: Optional[LogoImage] = None,
    ) -> bytes:
        return self.render_html(model, layout, design, logo).encode("utf-8")
