import pytest

from cotacao.design.domain.entities import FONT_OPTIONS, MONO_FONT_OPTIONS, DesignConfiguration
from cotacao.documents.domain.builder import build_document
from cotacao.documents.domain.exceptions import RenderFailure
from cotacao.documents.domain.layout import LayoutEngine
from cotacao.documents.domain.renderer import LogoImage
from cotacao.documents.infrastructure.html_renderer import (
    JinjaHTMLRenderer,
    css_font_stack,
    logo_data_uri,
)

def _render_html(quotation, design, company, mode="document", logo=None, renderer=None):
    model = build_document(quotation, design, company, mode)
    layout = LayoutEngine(design, design.page_geometry(40.0)).layout(model)
    return (renderer or JinjaHTMLRenderer()).render_html(model, layout, design, logo)

def test_blocks_rendered_in_document_order(sample_quotation, design, company):
    html = _render_html(sample_quotation, design, company)

    positions = [
        html.index('data-block="header"'),
        html.index('data-block="info-bar"'),
        html.index('data-block="customer-panel"'),
        html.index('data-block="item-table"'),
        html.index('data-block="totals-panel"'),
        html.index('data-block="conditions-panel"'),
        html.index('data-block="footer"'),
    ]
    assert positions == sorted(positions)

def test_content_matches_pdf_values(sample_quotation, design, company):
    html = _render_html(sample_quotation, design, company)

    assert "Motor WEG 220V 5CV" in html
    assert "R$ 5.200,00" in html
    assert "27 de fevereiro de 2026" in html
    assert "Prezado(a) Empresa Teste Ltda," in html
    assert html.count('class="is-total"') == 1
    assert 'class="is-discount"' in html

def test_design_colors_and_paper_size_in_css(sample_quotation, company):
    design = DesignConfiguration(paper_size="Letter", accent_color="#123456")
    html = _render_html(sample_quotation, design, company)

    assert "size: Letter;" in html
    assert "#123456" in html
    assert 'data-paper="Letter"' in html

def test_striped_rows_alternate(sample_quotation, design, company):
    html = _render_html(sample_quotation, design, company)
    assert html.count('class="is-striped"') == 1

def test_preview_mode_shows_hints_for_empty_fields(bare_quotation, design, company):
    quotation = bare_quotation.model_copy(update={
        "texts": bare_quotation.texts.model_copy(update={"intro_notes": "Aos cuidados de ${customerCompany}."}),
    })

    preview = _render_html(quotation, design, company, mode="preview")
    document = _render_html(quotation, design, company, mode="document")

    assert "Aos cuidados de [Empresa]." in preview
    assert "Aos cuidados de ." in document

def test_user_text_is_escaped(sample_quotation, design, company):
    quotation = sample_quotation.model_copy(update={
        "texts": sample_quotation.texts.model_copy(update={"technical_notes": "<script>alert(1)</script>"}),
    })
    html = _render_html(quotation, design, company)

    assert "<script>" not in html
    assert "&lt;script&gt;" in html

def test_logo_embedded_as_data_uri(sample_quotation, design, company, png_bytes):
    logo = LogoImage(url="https://cdn.example.com/logo.png", content=png_bytes, content_type="image/png")
    branded = company.model_copy(update={"logo_url": logo.url})

    html = _render_html(sample_quotation, design, branded, logo=logo)

    assert 'src="data:image/png;base64,' in html
    assert "proposal__monogram" not in html.split("<body>")[1]

def test_monogram_when_no_logo(sample_quotation, company):
    html = _render_html(sample_quotation, DesignConfiguration(show_logo=True), company)
    assert '<div class="proposal__monogram" aria-hidden="true">A</div>' in html

def test_missing_template_raises_render_failure(sample_quotation, design, company):
    renderer = JinjaHTMLRenderer(template_name="inexistant.html")
    with pytest.raises(RenderFailure):
        _render_html(sample_quotation, design, company, renderer=renderer)

def test_render_returns_utf8_bytes(sample_quotation, design, company):
    model = build_document(sample_quotation, design, company)
    layout = LayoutEngine(design, design.page_geometry(40.0)).layout(model)

    content = JinjaHTMLRenderer().render(model, layout, design)

    assert content.decode("utf-8").startswith("<!DOCTYPE html>")
    assert "Automação".encode("utf-8") in content

@pytest.mark.parametrize(
    "family, expected",
    [
        ("DM Sans", "'DM Sans', sans-serif"),
        ("Playfair Display", "'Playfair Display', serif"),
        ("JetBrains Mono", "'JetBrains Mono', monospace"),
    ],
)
def test_css_font_stack(family, expected):
    assert css_font_stack(family) == expected

def test_logo_data_uri_defaults_to_png():
    logo = LogoImage(url="https://x", content=b"abc", content_type=None)
    assert logo_data_uri(logo) == "data:image/png;base64,YWJj"

def test_offered_fonts_map_to_matching_generic_family():
    assert all(css_font_stack(family).endswith("sans-serif") for family in FONT_OPTIONS)
    assert all(css_font_stack(family).endswith("monospace") for family in MONO_FONT_OPTIONS)

def test_money_sizes_follow_pdf_roles(sample_quotation, design, company):
    html = _render_html(sample_quotation, design, company)
    sizes = design.font_sizes

    assert f".proposal__table .money {{ font-size: {sizes.small}pt; }}" in html
    assert f".proposal__totals .money {{ font-size: {sizes.mono}pt; }}" in html
    assert ".proposal__totals .is-total dd { font-size: inherit;" in html
    assert f"font-size: {sizes.section}pt;" in html
    assert 'class="align-right money"' in html

def test_footer_shows_validity_note(sample_quotation, design, company):
    html = _render_html(sample_quotation, design, company)

    assert '<small class="proposal__validity">Validade: 30 dias a partir de 27/02/2026</small>' in html
