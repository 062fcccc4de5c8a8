import io
import logging
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict
from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from cotacao.design.domain.entities import DesignConfiguration, parse_color
from cotacao.documents.config import DocumentSettings
from cotacao.documents.domain.blocks import (
    ConditionsPanelBlock,
    CustomerPanelBlock,
    DocumentModel,
    HeaderBlock,
    InfoBarBlock,
    ItemTableBlock,
    TextBlock,
    TotalsPanelBlock,
)
from cotacao.documents.domain.exceptions import RenderFailure
from cotacao.documents.domain.layout import (
    HEADER_HEIGHT,
    LOGO_SIZE,
    TEXT_INSET,
    TOTALS_VALUE_WIDTH,
    TOTALS_WIDTH,
    LayoutEngine,
    LayoutResult,
    Page,
    Placement,
    TableColumn,
)
from cotacao.documents.domain.renderer import AbstractDocumentRenderer, LogoImage
from cotacao.documents.domain.typography import resolve_fonts

logger = logging.getLogger(__name__)

DISCOUNT_COLOR = "#DC2626"
# Position de la ligne de base sous le haut de la ligne de texte, en fraction de la taille
BASELINE_RATIO = 0.8

Align = Literal["left", "center", "right"]

def to_color(value: str) -> colors.Color:
    red, green, blue = parse_color(value)
    return colors.Color(red / 255.0, green / 255.0, blue / 255.0)

class Point(BaseModel):
    """Position en points, origine en haut à gauche de la page."""
    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    def shifted(self, dx: float = 0.0, dy: float = 0.0) -> "Point":
        return Point(x=self.x + dx, y=self.y + dy)

class Pen(BaseModel):
    """Style de texte immuable passé à chaque appel de dessin."""
    model_config = ConfigDict(frozen=True)

    font: str
    size: float
    color: str

    def using(self, **changes) -> "Pen":
        return self.model_copy(update=changes)

class _PagePainter:
    """Peint les placements d'une page; chaque primitive isole son état graphique."""

    def __init__(
        self,
        pdf: canvas.Canvas,
        layout: LayoutResult,
        design: DesignConfiguration,
        logo: Optional[LogoImage],
    ):
        self.pdf = pdf
        self.layout = layout
        self.geometry = layout.geometry
        self.design = design
        self.sizes = design.font_sizes
        self.fonts = resolve_fonts(design)
        self.logo = logo
        self.engine = LayoutEngine(design, layout.geometry)
        self.body_pen = Pen(font=self.fonts.body, size=self.sizes.body, color=design.body_text_color)

    # --- Primitives ---

    def _rl_y(self, top: float) -> float:
        return self.geometry.height - top

    def fill_rect(self, at: Point, width: float, height: float, color: str) -> None:
        self.pdf.saveState()
        self.pdf.setFillColor(to_color(color))
        self.pdf.rect(at.x, self._rl_y(at.y + height), width, height, stroke=0, fill=1)
        self.pdf.restoreState()

    def hline(self, at: Point, length: float, color: str, width: float) -> None:
        self.pdf.saveState()
        self.pdf.setStrokeColor(to_color(color))
        self.pdf.setLineWidth(width)
        rl_y = self._rl_y(at.y)
        self.pdf.line(at.x, rl_y, at.x + length, rl_y)
        self.pdf.restoreState()

    def text(self, at: Point, value: str, pen: Pen, align: Align = "left") -> None:
        """Écrit une ligne; ``at.y`` est le haut de la ligne, ``at.x`` son point d'ancrage."""
        if not value:
            return
        self.pdf.saveState()
        self.pdf.setFont(pen.font, pen.size)
        self.pdf.setFillColor(to_color(pen.color))
        baseline = self._rl_y(at.y + pen.size * BASELINE_RATIO)
        if align == "right":
            self.pdf.drawRightString(at.x, baseline, value)
        elif align == "center":
            self.pdf.drawCentredString(at.x, baseline, value)
        else:
            self.pdf.drawString(at.x, baseline, value)
        self.pdf.restoreState()

    def cell(self, column: TableColumn, top: float, value: str, pen: Pen) -> None:
        left = self.geometry.margin + column.x
        if column.align == "right":
            self.text(Point(x=left + column.width - 2, y=top), value, pen, "right")
        elif column.align == "center":
            self.text(Point(x=left + column.width / 2, y=top), value, pen, "center")
        else:
            self.text(Point(x=left + 2, y=top), value, pen)

    # --- Blocs ---

    def paint_background(self) -> None:
        self.fill_rect(Point(x=0, y=0), self.geometry.width, self.geometry.height, self.design.body_bg_color)

    def paint_header(self, block: HeaderBlock) -> None:
        design = self.design
        width = self.geometry.width
        margin = self.geometry.margin
        self.fill_rect(Point(x=0, y=0), width, HEADER_HEIGHT, design.header_bg_color)
        if design.show_border_lines:
            self.fill_rect(Point(x=0, y=HEADER_HEIGHT), width, 3, design.accent_color)

        mark_x = None
        if design.show_logo and (self.logo is not None or block.monogram):
            if block.alignment == "center":
                mark_x = (width - LOGO_SIZE) / 2 - 80
            elif block.alignment == "right":
                mark_x = width - margin - LOGO_SIZE
            else:
                mark_x = margin
            mark = Point(x=mark_x, y=(HEADER_HEIGHT - LOGO_SIZE) / 2)
            if self.logo is not None:
                self.draw_logo(mark)
            else:
                self.draw_monogram(mark, block.monogram)

        title_pen = Pen(font=self.fonts.title, size=self.sizes.title, color=design.header_text_color)
        subtitle_pen = Pen(font=self.fonts.body, size=self.sizes.small, color=design.header_text_color)
        name_top = HEADER_HEIGHT / 2 - self.sizes.title / 2 - 2

        if mark_x is None:
            anchors = {"left": margin, "center": width / 2, "right": width - margin}
            anchor = Point(x=anchors[block.alignment], y=name_top)
            align: Align = block.alignment
        else:
            text_x = margin if block.alignment == "right" else mark_x + LOGO_SIZE + 12
            anchor = Point(x=text_x, y=name_top)
            align = "left"

        self.text(anchor, block.company_name, title_pen, align)
        if block.subtitle:
            self.text(anchor.shifted(dy=self.sizes.title + 2), block.subtitle, subtitle_pen, align)

    def draw_logo(self, at: Point) -> None:
        image = ImageReader(io.BytesIO(self.logo.content))
        self.pdf.saveState()
        self.pdf.drawImage(
            image,
            at.x,
            self._rl_y(at.y + LOGO_SIZE),
            width=LOGO_SIZE,
            height=LOGO_SIZE,
            preserveAspectRatio=True,
            anchor="c",
            mask="auto",
        )
        self.pdf.restoreState()

    def draw_monogram(self, at: Point, letter: str) -> None:
        self.pdf.saveState()
        self.pdf.setFillColor(to_color(self.design.accent_color))
        self.pdf.roundRect(at.x, self._rl_y(at.y + LOGO_SIZE), LOGO_SIZE, LOGO_SIZE, 8, stroke=0, fill=1)
        self.pdf.restoreState()
        pen = Pen(font=self.fonts.title, size=self.sizes.title, color=self.design.header_text_color)
        self.text(Point(x=at.x + LOGO_SIZE / 2, y=at.y + (LOGO_SIZE - self.sizes.title) / 2), letter, pen, "center")

    def paint_info_bar(self, block: InfoBarBlock, placement: Placement) -> None:
        geometry = self.geometry
        title_pen = self.body_pen.using(font=self.fonts.body_bold, size=self.sizes.section)
        self.text(
            Point(x=geometry.margin + geometry.content_width / 2, y=placement.y),
            block.title,
            title_pen,
            "center",
        )
        label_pen = self.body_pen.using(font=self.fonts.body_bold)
        for field in placement.fields:
            origin = Point(x=geometry.margin + field.column * geometry.content_width / 2, y=field.y)
            self.text(origin, f"{field.label}:", label_pen)
            self.text(origin.shifted(dx=field.value_offset), field.lines[0], self.body_pen)

    def paint_panel(self, title: str, placement: Placement) -> None:
        geometry = self.geometry
        band = Point(x=geometry.margin, y=placement.y)
        self.fill_rect(band, geometry.content_width, self.sizes.section + 10, self.design.table_header_bg_color)
        title_pen = Pen(
            font=self.fonts.body_bold,
            size=self.sizes.section - 2,
            color=self.design.table_header_text_color,
        )
        self.text(band.shifted(dx=8, dy=5), title, title_pen)

        label_pen = self.body_pen.using(font=self.fonts.body_bold)
        for field in placement.fields:
            self.text(Point(x=geometry.margin + TEXT_INSET, y=field.y), f"{field.label}:", label_pen)
            for line_no, line in enumerate(field.lines):
                top = field.y + line_no * self.engine.field_leading
                self.text(Point(x=geometry.margin + field.value_offset, y=top), line, self.body_pen)

    def paint_text(self, block: TextBlock, placement: Placement) -> None:
        left = self.geometry.margin + TEXT_INSET
        if block.title and not placement.continued:
            title_pen = Pen(
                font=self.fonts.body_bold,
                size=self.sizes.body + 1,
                color=self.design.accent_color,
            )
            self.text(Point(x=left, y=placement.y), block.title, title_pen)
        for line_no, line in enumerate(placement.lines):
            top = placement.content_y + line_no * self.engine.text_leading
            self.text(Point(x=left, y=top), line, self.body_pen)

    def paint_table(self, block: ItemTableBlock, placement: Placement) -> None:
        geometry = self.geometry
        design = self.design
        columns = {column.key: column for column in self.layout.columns}

        # En-tête réimprimé en haut de chaque segment
        self.fill_rect(
            Point(x=geometry.margin, y=placement.y),
            geometry.content_width,
            self.engine.table_header_height,
            design.table_header_bg_color,
        )
        header_pen = Pen(font=self.fonts.body_bold, size=self.sizes.small, color=design.table_header_text_color)
        for column in self.layout.columns:
            self.cell(column, placement.y + 5, column.label, header_pen)

        cell_pen = self.body_pen.using(size=self.sizes.small)
        money_pen = cell_pen.using(font=self.fonts.mono)
        for placed in placement.rows:
            row = placed.row
            if placed.striped:
                self.fill_rect(
                    Point(x=geometry.margin, y=placed.y),
                    geometry.content_width,
                    placed.height,
                    design.table_striped_bg,
                )
            self.hline(
                Point(x=geometry.margin, y=placed.y + placed.height),
                geometry.content_width,
                design.table_border_color,
                0.5,
            )
            top = placed.y + 4
            for line_no, line in enumerate(placed.description_lines):
                self.cell(columns["description"], top + line_no * self.engine.row_leading, line, cell_pen)
            if placed.continuation:
                continue
            self.cell(columns["number"], top, row.number, cell_pen)
            self.cell(columns["unit"], top, row.unit, cell_pen)
            self.cell(columns["quantity"], top, row.quantity, cell_pen)
            self.cell(columns["unit_price"], top, row.unit_price, money_pen)
            self.cell(columns["discount"], top, row.discount, cell_pen)
            self.cell(columns["subtotal"], top, row.subtotal, money_pen.using(font=self.fonts.mono_bold))

    def paint_totals(self, block: TotalsPanelBlock, placement: Placement) -> None:
        geometry = self.geometry
        left = geometry.margin + geometry.content_width - TOTALS_WIDTH
        label_right = left + TOTALS_WIDTH - TOTALS_VALUE_WIDTH - 6
        value_right = left + TOTALS_WIDTH

        for line, field in zip(block.lines, placement.fields):
            if line.emphasis == "total":
                self.fill_rect(
                    Point(x=left - 4, y=field.y - 2),
                    TOTALS_WIDTH + 4,
                    self.sizes.section + 10,
                    self.design.accent_color,
                )
                pen = Pen(font=self.fonts.body_bold, size=self.sizes.section, color=self.design.header_text_color)
                self.text(Point(x=label_right, y=field.y + 2), line.label, pen, "right")
                self.text(Point(x=value_right, y=field.y + 2), line.value, pen.using(font=self.fonts.mono_bold), "right")
                continue

            value_pen = self.body_pen.using(font=self.fonts.mono, size=self.sizes.mono)
            if line.emphasis == "discount":
                value_pen = value_pen.using(color=DISCOUNT_COLOR)
            self.text(Point(x=label_right, y=field.y), line.label, self.body_pen, "right")
            self.text(Point(x=value_right, y=field.y), line.value, value_pen, "right")

    def paint_footer(self, page: Page) -> None:
        footer = page.footer
        if footer is None:
            return
        geometry = self.geometry
        if self.design.show_border_lines:
            self.hline(
                Point(x=geometry.margin, y=footer.rule_y),
                geometry.content_width,
                self.design.accent_color,
                1,
            )
        pen = self.body_pen.using(size=self.sizes.small - 1)
        self.text(Point(x=geometry.margin, y=footer.text_y), footer.text, pen)
        self.text(Point(x=geometry.width - geometry.margin, y=footer.text_y), footer.page_label, pen, "right")
        self.text(Point(x=geometry.margin, y=footer.note_y), footer.note, pen)

    def paint_page(self, model: DocumentModel, page: Page) -> None:
        self.paint_background()
        for placement in page.placements:
            block = model.blocks[placement.block_index]
            if isinstance(block, HeaderBlock):
                self.paint_header(block)
            elif isinstance(block, InfoBarBlock):
                self.paint_info_bar(block, placement)
            elif isinstance(block, (CustomerPanelBlock, ConditionsPanelBlock)):
                self.paint_panel(block.title, placement)
            elif isinstance(block, TextBlock):
                self.paint_text(block, placement)
            elif isinstance(block, ItemTableBlock):
                self.paint_table(block, placement)
            elif isinstance(block, TotalsPanelBlock):
                self.paint_totals(block, placement)
        self.paint_footer(page)

class ReportLabDocumentRenderer(AbstractDocumentRenderer):
    """Implémentation du renderer PDF utilisant le canvas ReportLab."""

    media_type = "application/pdf"

    def __init__(self, settings: DocumentSettings):
        self.settings = settings
        logger.info("[PDFRender] Initialisé.")

    def page_size(self, layout: LayoutResult) -> Tuple[float, float]:
        return (layout.geometry.width, layout.geometry.height)

    def render(
        self,
        model: DocumentModel,
        layout: LayoutResult,
        design: DesignConfiguration,
        logo: Optional[LogoImage] = None,
    ) -> bytes:
        logger.info(f"[PDFRender] Génération PDF '{model.metadata.title}' ({layout.page_count} page(s)).")
        buffer = io.BytesIO()
        try:
            pdf = canvas.Canvas(
                buffer,
                pagesize=self.page_size(layout),
                invariant=1,
                pageCompression=1 if self.settings.PDF_PAGE_COMPRESSION else 0,
            )
            pdf.setTitle(model.metadata.title)
            pdf.setAuthor(model.metadata.author)
            pdf.setSubject(model.metadata.subject)
            pdf.setCreator(self.settings.PDF_CREATOR)

            painter = _PagePainter(pdf, layout, design, logo)
            for page in layout.pages:
                painter.paint_page(model, page)
                pdf.showPage()
            pdf.save()
            pdf_bytes = buffer.getvalue()
        except Exception as e:
            logger.error(f"[PDFRender] Erreur ReportLab pour '{model.metadata.title}': {e}", exc_info=True)
            raise RenderFailure(f"Erreur lors de la construction du PDF: {e}", original_exception=e)
        finally:
            buffer.close()

        logger.info(f"[PDFRender] PDF généré en mémoire ({len(pdf_bytes)} bytes).")
        return pdf_bytes
