"""Moteur de mise en page et de pagination.

Deux passes:

1. passe de mise en page: chaque bloc reçoit une page et une ordonnée
   (depuis le haut de la page). Un bloc qui dépasserait la marge basse part
   entier sur une nouvelle page, sauf le tableau des articles, dont les lignes
   se répartissent sur plusieurs pages avec l'en-tête réimprimé, et les blocs
   de texte plus hauts qu'une page entière, coupés entre deux lignes;
2. passe de pied de page: le nombre total de pages étant connu, chaque page
   reçoit le même pied de page ("Página X de N").

Toutes les coordonnées sont en points, origine en haut à gauche de la page.
"""
import logging
import math
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict

from cotacao.design.domain.entities import DesignConfiguration, PageGeometry
from cotacao.documents.domain.blocks import (
    ConditionsPanelBlock,
    CustomerPanelBlock,
    DocumentModel,
    FooterBlock,
    HeaderBlock,
    InfoBarBlock,
    ItemTableBlock,
    LabeledField,
    TableRow,
    TextBlock,
    TotalsPanelBlock,
)
from cotacao.documents.domain.typography import resolve_fonts, text_width, wrap_text

logger = logging.getLogger(__name__)

HEADER_HEIGHT = 80.0
ACCENT_RULE_HEIGHT = 3.0
HEADER_GAP = 15.0
TEXT_INSET = 4.0
LOGO_SIZE = 45.0

FOOTER_RULE_OFFSET = 35.0  # depuis le bas de la page
FOOTER_TEXT_OFFSET = 30.0
FOOTER_NOTE_OFFSET = 20.0

TOTALS_WIDTH = 220.0
TOTALS_VALUE_WIDTH = 110.0

_EPSILON = 1e-6

Align = Literal["left", "center", "right"]

class TableColumn(BaseModel):
    """Colonne du tableau; ``x`` est relatif à la marge gauche."""
    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    x: float
    width: float
    align: Align

# (clé, libellé, largeur fixe, alignement); None: la description absorbe le reste
COLUMN_SPECS = (
    ("number", "#", 25.0, "center"),
    ("description", "Descrição", None, "left"),
    ("unit", "Un.", 40.0, "center"),
    ("quantity", "Qtd.", 45.0, "center"),
    ("unit_price", "Valor Un.", 70.0, "right"),
    ("discount", "Desc.%", 45.0, "center"),
    ("subtotal", "Subtotal", 75.0, "right"),
)

def table_columns(content_width: float) -> List[TableColumn]:
    """Largeurs des colonnes: six fixes, la description prend la largeur restante."""
    fixed = sum(width for _, _, width, _ in COLUMN_SPECS if width is not None)
    description_width = max(content_width - fixed, 0.0)
    columns = []
    x = 0.0
    for key, label, width, align in COLUMN_SPECS:
        actual = description_width if width is None else width
        columns.append(TableColumn(key=key, label=label, x=x, width=actual, align=align))
        x += actual
    return columns

class PlacedField(BaseModel):
    """Champ 'Libellé: valeur' positionné; la valeur commence à ``value_offset``."""
    model_config = ConfigDict(frozen=True)

    label: str
    lines: List[str]
    y: float
    height: float
    value_offset: float
    column: int = 0

class PlacedRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: TableRow
    y: float
    height: float
    description_lines: List[str]
    # Suite de la description d'une ligne coupée: seules les lignes de texte sont peintes
    continuation: bool = False

    @property
    def striped(self) -> bool:
        return self.row.striped

class Placement(BaseModel):
    """Un bloc (ou un segment de bloc) posé sur une page."""
    model_config = ConfigDict(frozen=True)

    block_index: int
    kind: str
    page_index: int
    y: float
    height: float
    content_y: Optional[float] = None
    lines: List[str] = []
    fields: List[PlacedField] = []
    rows: List[PlacedRow] = []
    continued: bool = False

class PageFooter(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    page_label: str
    rule_y: float
    text_y: float
    note: str = ""
    note_y: float = 0.0

class Page(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int
    placements: List[Placement] = []
    footer: Optional[PageFooter] = None

    @property
    def number(self) -> int:
        return self.index + 1

class LayoutResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    geometry: PageGeometry
    columns: List[TableColumn]
    pages: List[Page]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def placements_for(self, block_index: int) -> List[Placement]:
        return [
            placement
            for page in self.pages
            for placement in page.placements
            if placement.block_index == block_index
        ]

class _Flow:
    """Curseur vertical de la passe de mise en page (état local à un rendu)."""

    def __init__(self, geometry: PageGeometry):
        self.geometry = geometry
        self.pages: List[List[Placement]] = [[]]
        self.y = geometry.margin
        self.page_top = geometry.margin

    @property
    def page_index(self) -> int:
        return len(self.pages) - 1

    @property
    def at_top(self) -> bool:
        return self.y <= self.page_top + _EPSILON

    @property
    def page_capacity(self) -> float:
        return self.geometry.content_bottom - self.geometry.margin

    def fits(self, height: float) -> bool:
        return self.y + height <= self.geometry.content_bottom + _EPSILON

    def new_page(self) -> None:
        self.pages.append([])
        self.y = self.geometry.margin
        self.page_top = self.geometry.margin

    def ensure_room(self, height: float) -> None:
        """Passe à la page suivante si le bloc entier ne tient pas ici."""
        if not self.fits(height) and not self.at_top:
            self.new_page()

    def add(self, placement: Placement) -> None:
        self.pages[-1].append(placement)
        self.y = placement.y + placement.height

class LayoutEngine:
    """Calcule la position de chaque bloc pour une configuration de design donnée."""

    def __init__(self, design: DesignConfiguration, geometry: PageGeometry):
        self.design = design
        self.geometry = geometry
        self.sizes = design.font_sizes
        self.fonts = resolve_fonts(design)
        self.columns = table_columns(geometry.content_width)

    # --- Mesures ---

    @property
    def header_band_height(self) -> float:
        rule = ACCENT_RULE_HEIGHT if self.design.show_border_lines else 0.0
        return HEADER_HEIGHT + rule

    @property
    def text_leading(self) -> float:
        return self.sizes.body + 3

    @property
    def field_leading(self) -> float:
        return self.sizes.body + 2

    @property
    def table_header_height(self) -> float:
        return self.sizes.body + 10

    @property
    def row_leading(self) -> float:
        return self.sizes.small + 3

    @property
    def section_band_height(self) -> float:
        return self.sizes.section + 10

    def _label_width(self, label: str) -> float:
        return text_width(f"{label}: ", self.fonts.body_bold, self.sizes.body)

    def _measure_fields(self, fields: List[LabeledField], width: float) -> List[PlacedField]:
        """Champs positionnés à y=0; la valeur est repliée dans la largeur restante."""
        measured = []
        for field in fields:
            label_width = self._label_width(field.label)
            value_width = max(width - label_width, self.sizes.body * 4)
            lines = wrap_text(field.value, self.fonts.body, self.sizes.body, value_width)
            measured.append(PlacedField(
                label=field.label,
                lines=lines,
                y=0.0,
                height=len(lines) * self.field_leading + 2,
                value_offset=TEXT_INSET + label_width,
            ))
        return measured

    def measure_row(self, row: TableRow) -> List[str]:
        description = next(column for column in self.columns if column.key == "description")
        return wrap_text(row.description, self.fonts.body, self.sizes.small, max(description.width - 4, 1.0))

    def row_height(self, description_lines: List[str]) -> float:
        """Hauteur d'une ligne, agrandie par le repli de la description."""
        return self.sizes.body + 8 + (len(description_lines) - 1) * self.row_leading

    # --- Passe 1 ---

    def _place_header(self, index: int, block: HeaderBlock, flow: _Flow) -> None:
        flow.add(Placement(
            block_index=index,
            kind=block.kind,
            page_index=flow.page_index,
            y=0.0,
            height=self.header_band_height,
        ))
        flow.y = self.header_band_height + HEADER_GAP
        flow.page_top = flow.y

    def _place_info_bar(self, index: int, block: InfoBarBlock, flow: _Flow) -> None:
        sizes = self.sizes
        height = (sizes.section + 8) + (sizes.body + 6) + (sizes.body + 12)
        flow.ensure_room(height)
        y = flow.y
        first_row = y + sizes.section + 8
        second_row = first_row + sizes.body + 6

        entries = [
            ("Nº", block.quotation_number, first_row, 0),
            ("Data", block.quotation_date, first_row, 1),
            ("Validade", block.validity, second_row, 0),
        ]
        if block.reference:
            entries.append(("Ref.", block.reference, second_row, 1))

        fields = [
            PlacedField(
                label=label,
                lines=[value],
                y=row_y,
                height=sizes.body + 6,
                value_offset=self._label_width(label),
                column=column,
            )
            for label, value, row_y, column in entries
        ]
        flow.add(Placement(
            block_index=index,
            kind=block.kind,
            page_index=flow.page_index,
            y=y,
            height=height,
            content_y=first_row,
            fields=fields,
        ))

    def _place_panel(self, index: int, block, flow: _Flow) -> None:
        """Panneau titré (client ou conditions commerciales), jamais coupé."""
        width = self.geometry.content_width - 2 * TEXT_INSET
        measured = self._measure_fields(block.fields, width)
        head = self.sizes.section + 16
        height = head + sum(field.height for field in measured) + 12
        flow.ensure_room(height)

        y = flow.y
        cursor = y + head
        fields = []
        for field in measured:
            fields.append(field.model_copy(update={"y": cursor}))
            cursor += field.height
        flow.add(Placement(
            block_index=index,
            kind=block.kind,
            page_index=flow.page_index,
            y=y,
            height=height,
            content_y=y + head,
            fields=fields,
        ))

    def _place_text(self, index: int, block: TextBlock, flow: _Flow) -> None:
        width = self.geometry.content_width - 2 * TEXT_INSET
        lines = wrap_text(block.text, self.fonts.body, self.sizes.body, width)
        title_height = self.sizes.body + 6 if block.title else 0.0
        leading = self.text_leading
        first = True

        while lines:
            head = title_height if first else 0.0
            needed = head + len(lines) * leading + 10
            if flow.fits(needed):
                self._add_text_segment(index, block, flow, lines, head, continued=not first)
                return
            if not flow.at_top and needed <= flow.page_capacity:
                flow.new_page()
                continue

            # Bloc plus haut qu'une page: on remplit la page courante ligne par ligne
            available = self.geometry.content_bottom - flow.y - head - 10
            count = int(math.floor((available + _EPSILON) / leading))
            if count < 1:
                if not flow.at_top:
                    flow.new_page()
                    continue
                count = 1
            self._add_text_segment(index, block, flow, lines[:count], head, continued=not first)
            lines = lines[count:]
            first = False
            if lines:
                flow.new_page()

    def _add_text_segment(
        self,
        index: int,
        block: TextBlock,
        flow: _Flow,
        lines: List[str],
        head: float,
        continued: bool,
    ) -> None:
        y = flow.y
        flow.add(Placement(
            block_index=index,
            kind=block.kind,
            page_index=flow.page_index,
            y=y,
            height=head + len(lines) * self.text_leading + 10,
            content_y=y + head,
            lines=lines,
            continued=continued,
        ))

    def _place_table(self, index: int, block: ItemTableBlock, flow: _Flow) -> None:
        header_height = self.table_header_height
        bottom = self.geometry.content_bottom
        measured = [(row, self.measure_row(row)) for row in block.rows]

        # Le tableau ne commence sur la page courante que si l'en-tête et la première ligne y tiennent
        first_height = header_height + (self.row_height(measured[0][1]) if measured else 0.0)
        flow.ensure_room(first_height)

        segment_y = flow.y
        cursor = segment_y + header_height
        segment_rows: List[PlacedRow] = []
        continued = False

        def close_segment() -> None:
            nonlocal segment_y, cursor, segment_rows, continued
            flow.add(Placement(
                block_index=index,
                kind=block.kind,
                page_index=flow.page_index,
                y=segment_y,
                height=cursor - segment_y,
                content_y=segment_y + header_height,
                rows=segment_rows,
                continued=continued,
            ))
            flow.new_page()
            continued = True
            segment_y = flow.y
            cursor = segment_y + header_height
            segment_rows = []

        for row, description_lines in measured:
            pending = description_lines
            continuation = False
            while pending:
                height = self.row_height(pending)
                part = pending
                if cursor + height > bottom + _EPSILON:
                    if segment_rows:
                        close_segment()
                        continue
                    # Ligne plus haute qu'une page: la description se poursuit sur la page suivante
                    available = bottom - cursor - (self.sizes.body + 8)
                    count = int(math.floor((available + _EPSILON) / self.row_leading)) + 1
                    part = pending[:max(count, 1)]
                    height = self.row_height(part)
                segment_rows.append(PlacedRow(
                    row=row,
                    y=cursor,
                    height=height,
                    description_lines=part,
                    continuation=continuation,
                ))
                cursor += height
                pending = pending[len(part):]
                continuation = True

        flow.add(Placement(
            block_index=index,
            kind=block.kind,
            page_index=flow.page_index,
            y=segment_y,
            height=cursor - segment_y,
            content_y=segment_y + header_height,
            rows=segment_rows,
            continued=continued,
        ))

    def _place_totals(self, index: int, block: TotalsPanelBlock, flow: _Flow) -> None:
        sizes = self.sizes
        regular = [line for line in block.lines if line.emphasis != "total"]
        height = 6 + len(regular) * (sizes.body + 4) + 2 + sizes.section + 18
        flow.ensure_room(height)

        y = flow.y
        cursor = y + 6
        fields = []
        for line in block.lines:
            if line.emphasis == "total":
                cursor += 2
                fields.append(PlacedField(
                    label=line.label, lines=[line.value], y=cursor,
                    height=sizes.section + 10, value_offset=0.0,
                ))
                cursor += sizes.section + 18
            else:
                fields.append(PlacedField(
                    label=line.label, lines=[line.value], y=cursor,
                    height=sizes.body + 4, value_offset=0.0,
                ))
                cursor += sizes.body + 4
        flow.add(Placement(
            block_index=index,
            kind=block.kind,
            page_index=flow.page_index,
            y=y,
            height=height,
            content_y=y + 6,
            fields=fields,
        ))

    def layout_pass(self, model: DocumentModel) -> List[Page]:
        flow = _Flow(self.geometry)
        for index, block in enumerate(model.blocks):
            if isinstance(block, HeaderBlock):
                self._place_header(index, block, flow)
            elif isinstance(block, InfoBarBlock):
                self._place_info_bar(index, block, flow)
            elif isinstance(block, (CustomerPanelBlock, ConditionsPanelBlock)):
                self._place_panel(index, block, flow)
            elif isinstance(block, TextBlock):
                self._place_text(index, block, flow)
            elif isinstance(block, ItemTableBlock):
                self._place_table(index, block, flow)
            elif isinstance(block, TotalsPanelBlock):
                self._place_totals(index, block, flow)
            # Le pied de page n'occupe pas de place dans le flux: il est apposé en passe 2
        return [Page(index=i, placements=placements) for i, placements in enumerate(flow.pages)]

    # --- Passe 2 ---

    def stamp_footers(self, pages: List[Page], footer: FooterBlock) -> List[Page]:
        total = len(pages)
        height = self.geometry.height
        return [
            page.model_copy(update={
                "footer": PageFooter(
                    text=footer.text,
                    page_label=f"Página {page.number} de {total}",
                    rule_y=height - FOOTER_RULE_OFFSET,
                    text_y=height - FOOTER_TEXT_OFFSET,
                    note=footer.note,
                    note_y=height - FOOTER_NOTE_OFFSET,
                ),
            })
            for page in pages
        ]

    def layout(self, model: DocumentModel) -> LayoutResult:
        pages = self.stamp_footers(self.layout_pass(model), model.footer)
        logger.debug(f"[Layout] {len(model.blocks)} blocs répartis sur {len(pages)} page(s).")
        return LayoutResult(geometry=self.geometry, columns=self.columns, pages=pages)
