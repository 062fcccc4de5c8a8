"""Correspondance des familles de polices vers les polices standard PDF et mesure du texte.

Les familles web choisies par l'utilisateur (DM Sans, Inter, DM Mono...) ne
sont pas embarquées: chaque famille est ramenée à Helvetica, Times ou Courier
selon son style. Les largeurs de texte viennent des métriques ReportLab, si
bien que la mise en page et le PDF mesurent le texte de la même façon.
"""
from typing import List, Tuple

from pydantic import BaseModel, ConfigDict
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth

from cotacao.design.domain.entities import DesignConfiguration

_MONO_HINTS = ("mono", "code", "courier", "consolas")
_SERIF_HINTS = ("serif", "times", "georgia", "garamond", "merriweather", "playfair", "lora")

_FAMILIES = {
    "sans": ("Helvetica", "Helvetica-Bold"),
    "serif": ("Times-Roman", "Times-Bold"),
    "mono": ("Courier", "Courier-Bold"),
}

def classify_family(family: str) -> str:
    """'sans', 'serif' ou 'mono' pour un nom de famille CSS."""
    name = family.lower()
    if any(hint in name for hint in _MONO_HINTS):
        return "mono"
    if "sans" in name:
        return "sans"
    if any(hint in name for hint in _SERIF_HINTS):
        return "serif"
    return "sans"

def pdf_font_pair(family: str) -> Tuple[str, str]:
    """(normal, gras) parmi les polices standard PDF."""
    return _FAMILIES[classify_family(family)]

class PdfFontSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    body: str
    body_bold: str
    mono: str
    mono_bold: str

def resolve_fonts(design: DesignConfiguration) -> PdfFontSet:
    title_regular, title_bold = pdf_font_pair(design.title_font)
    body_regular, body_bold = pdf_font_pair(design.body_font)
    mono_regular, mono_bold = pdf_font_pair(design.mono_font)
    return PdfFontSet(
        title=title_bold,
        body=body_regular,
        body_bold=body_bold,
        mono=mono_regular,
        mono_bold=mono_bold,
    )

def text_width(text: str, font_name: str, font_size: float) -> float:
    return stringWidth(text, font_name, font_size)

def _break_word(line: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """Coupe par caractères une ligne sans espace plus large que la colonne."""
    pieces: List[str] = []
    current = ""
    for char in line:
        if current and stringWidth(current + char, font_name, font_size) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces

def wrap_text(text: str, font_name: str, font_size: float, max_width: float) -> List[str]:
    """Découpe un texte en lignes tenant dans ``max_width``.

    Les retours à la ligne explicites sont conservés; un paragraphe vide
    produit une ligne vide. Un mot plus large que la colonne (référence,
    URL) est coupé par caractères.
    """
    lines: List[str] = []
    for paragraph in text.replace("\r\n", "\n").split("\n"):
        wrapped = simpleSplit(paragraph, font_name, font_size, max_width) or [""]
        for line in wrapped:
            if stringWidth(line, font_name, font_size) > max_width:
                lines.extend(_break_word(line, font_name, font_size, max_width))
            else:
                lines.append(line)
    return lines
