"""
Tests pour le moteur de mise en page et de pagination.
"""
from decimal import Decimal

import pytest

from cotacao.design.domain.entities import DesignConfiguration
from cotacao.documents.domain.builder import build_document
from cotacao.documents.domain.layout import (
    HEADER_HEIGHT,
    LayoutEngine,
    table_columns,
)
from cotacao.documents.domain.typography import text_width
from cotacao.quotations.domain.entities import LineItem

def _layout(quotation, design, company):
    model = build_document(quotation, design, company)
    engine = LayoutEngine(design, design.page_geometry())
    return model, engine, engine.layout(model)

def _table_index(model):
    return model.kinds().index("item-table")

def test_table_columns_description_absorbs_remaining_width():
    columns = table_columns(515.28)
    by_key = {column.key: column for column in columns}

    assert [column.label for column in columns] == ["#", "Descrição", "Un.", "Qtd.", "Valor Un.", "Desc.%", "Subtotal"]
    fixed = sum(column.width for column in columns if column.key != "description")
    assert by_key["description"].width == pytest.approx(515.28 - fixed)
    assert columns[-1].x + columns[-1].width == pytest.approx(515.28)

def test_table_columns_follow_paper_width():
    a4 = {c.key: c.width for c in table_columns(DesignConfiguration(paper_size="A4").page_geometry().content_width)}
    letter = {c.key: c.width for c in table_columns(DesignConfiguration(paper_size="Letter").page_geometry().content_width)}
    assert letter["description"] - a4["description"] == pytest.approx(612 - 595.28)
    assert letter["unit_price"] == a4["unit_price"]

def test_short_quotation_fits_one_page(sample_quotation, design, company):
    model, engine, result = _layout(sample_quotation, design, company)

    assert result.page_count == 1
    placements = result.pages[0].placements
    assert [model.blocks[p.block_index].kind for p in placements] == model.kinds()[:-1]

    header = placements[0]
    assert header.kind == "header"
    assert header.y == 0
    assert header.height == HEADER_HEIGHT + 3
    # Le contenu commence sous le bandeau, l'ordre vertical suit l'ordre des blocs
    assert placements[1].y == pytest.approx(HEADER_HEIGHT + 3 + 15)
    tops = [p.y for p in placements]
    assert tops == sorted(tops)

def test_without_border_lines_header_is_shorter(sample_quotation, company):
    design = DesignConfiguration(show_border_lines=False)
    _, _, result = _layout(sample_quotation, design, company)
    assert result.pages[0].placements[0].height == HEADER_HEIGHT

def test_footer_stamped_on_every_page(long_quotation, design, company):
    """Test la passe 2: même pied de page et 'Página X de N' sur chaque page."""
    model, _, result = _layout(long_quotation, design, company)
    total = result.page_count

    assert total >= 2
    for page in result.pages:
        assert page.footer is not None
        assert page.footer.text == model.footer.text
        assert page.footer.page_label == f"Página {page.number} de {total}"
        assert page.footer.rule_y == pytest.approx(design.page_geometry().height - 35)
        assert page.footer.note == "Validade: 30 dias a partir de 27/02/2026"
        assert page.footer.note_y == pytest.approx(design.page_geometry().height - 20)

def test_table_split_repeats_header_and_keeps_rows(long_quotation, design, company):
    model, engine, result = _layout(long_quotation, design, company)
    geometry = result.geometry
    segments = result.placements_for(_table_index(model))

    assert len(segments) >= 2
    assert segments[0].continued is False
    assert all(segment.continued for segment in segments[1:])
    # Une seule portion de tableau par page, chacune sur une page différente
    assert len({segment.page_index for segment in segments}) == len(segments)

    indexes = [placed.row.index for segment in segments for placed in segment.rows]
    assert indexes == list(range(60))

    for segment in segments:
        assert segment.rows, "aucun segment ne doit contenir seulement l'en-tête"
        # Les lignes commencent juste sous l'en-tête réimprimé
        assert segment.rows[0].y == pytest.approx(segment.y + engine.table_header_height)
        last = segment.rows[-1]
        assert last.y + last.height <= geometry.content_bottom + 1e-6

    for segment in segments[1:]:
        assert segment.y == pytest.approx(geometry.margin)

def test_striping_uses_global_row_index(long_quotation, design, company):
    """Test que l'alternance continue d'une page à l'autre (index absolu)."""
    model, _, result = _layout(long_quotation, design, company)
    segments = result.placements_for(_table_index(model))
    continuation_first = segments[1].rows[0]

    for segment in segments:
        for placed in segment.rows:
            assert placed.striped == (placed.row.index % 2 == 1)
    assert continuation_first.striped == (continuation_first.row.index % 2 == 1)
    row_21 = next(p for s in segments for p in s.rows if p.row.index == 20)
    assert row_21.striped is False

def test_wrapped_description_grows_row_height(sample_quotation, design, company):
    long_text = "Painel elétrico completo com disjuntores, contatores, relés térmicos " * 6
    items = [
        LineItem.build(long_text, Decimal("1"), Decimal("100"), id="1"),
        LineItem.build("Curto", Decimal("1"), Decimal("100"), id="2"),
    ]
    quotation = sample_quotation.model_copy(update={"items": items})
    model, engine, result = _layout(quotation, design, company)
    rows = result.placements_for(_table_index(model))[0].rows

    assert len(rows[0].description_lines) > 1
    assert rows[0].height == pytest.approx(engine.row_height(rows[0].description_lines))
    assert rows[0].height > rows[1].height
    assert rows[1].y == pytest.approx(rows[0].y + rows[0].height)

def test_wrapped_rows_are_accounted_before_page_break(sample_quotation, design, company):
    """Test qu'une ligne agrandie par le repli ne dépasse jamais la marge basse."""
    long_text = "Descrição extensa de serviço técnico especializado " * 8
    items = [LineItem.build(long_text, Decimal("1"), Decimal("10"), id=str(n)) for n in range(40)]
    quotation = sample_quotation.model_copy(update={"items": items})
    model, _, result = _layout(quotation, design, company)

    for segment in result.placements_for(_table_index(model)):
        for placed in segment.rows:
            assert placed.y + placed.height <= result.geometry.content_bottom + 1e-6

def test_unbreakable_reference_is_split_to_column_width(sample_quotation, design, company):
    """Test qu'une référence sans espace ne déborde pas sur les colonnes voisines."""
    sku = "REF-" + "X" * 200
    items = [LineItem.build(sku, Decimal("1"), Decimal("10"), id="1")]
    model, engine, result = _layout(sample_quotation.model_copy(update={"items": items}), design, company)
    description = next(column for column in result.columns if column.key == "description")
    placed = result.placements_for(_table_index(model))[0].rows[0]

    assert len(placed.description_lines) > 1
    assert "".join(placed.description_lines) == sku
    for line in placed.description_lines:
        assert text_width(line, engine.fonts.body, engine.sizes.small) <= description.width - 4
    assert placed.height == pytest.approx(engine.row_height(placed.description_lines))

def test_row_taller_than_a_page_continues_on_next_pages(sample_quotation, design, company):
    items = [
        LineItem.build("palavra " * 3000, Decimal("2"), Decimal("10"), id="1"),
        LineItem.build("Curto", Decimal("1"), Decimal("10"), id="2"),
    ]
    model, engine, result = _layout(sample_quotation.model_copy(update={"items": items}), design, company)
    segments = result.placements_for(_table_index(model))
    parts = [placed for segment in segments for placed in segment.rows if placed.row.index == 0]

    assert len(segments) >= 3
    assert len({segment.page_index for segment in segments}) == len(segments)
    assert parts[0].continuation is False
    assert all(part.continuation for part in parts[1:])
    all_lines = [line for part in parts for line in part.description_lines]
    assert all_lines == engine.measure_row(model.blocks[_table_index(model)].rows[0])
    for segment in segments:
        assert segment.y + segment.height <= result.geometry.content_bottom + 1e-6
        for placed in segment.rows:
            assert placed.y + placed.height <= result.geometry.content_bottom + 1e-6
    last = segments[-1].rows[-1]
    assert last.row.index == 1 and last.continuation is False

def test_blocks_are_never_split(long_quotation, design, company):
    """Test que les blocs autres que le tableau restent entiers sur une page."""
    model, _, result = _layout(long_quotation, design, company)
    bottom = result.geometry.content_bottom
    for page in result.pages:
        for placement in page.placements:
            if placement.kind in ("item-table", "header"):
                continue
            assert placement.y + placement.height <= bottom + 1e-6
            assert len(result.placements_for(placement.block_index)) == 1

def test_oversized_text_block_is_split_by_lines(sample_quotation, design, company):
    huge = "\n".join(f"Linha {n} das observações técnicas." for n in range(200))
    texts = sample_quotation.texts.model_copy(update={"technical_notes": huge})
    model, engine, result = _layout(sample_quotation.model_copy(update={"texts": texts}), design, company)

    index = next(
        i for i, block in enumerate(model.blocks)
        if block.kind == "text-block" and block.slot == "technical_notes"
    )
    segments = result.placements_for(index)
    assert len(segments) >= 2
    assert segments[0].continued is False
    assert all(segment.continued for segment in segments[1:])
    assert sum(len(segment.lines) for segment in segments) == 200
    for segment in segments:
        assert segment.y + segment.height <= result.geometry.content_bottom + 1e-6

def test_layout_is_deterministic(long_quotation, design, company):
    first = _layout(long_quotation, design, company)[2]
    second = _layout(long_quotation, design, company)[2]
    assert first == second
