import logging
from typing import List, Optional

from cotacao.design.domain.entities import CompanyBranding, DesignConfiguration
from cotacao.documents.domain.blocks import (
    Block,
    ConditionsPanelBlock,
    CustomerPanelBlock,
    DocumentMetadata,
    DocumentModel,
    FooterBlock,
    HeaderBlock,
    InfoBarBlock,
    ItemTableBlock,
    LabeledField,
    TableRow,
    TextBlock,
    TotalsLine,
    TotalsPanelBlock,
)
from cotacao.documents.domain.formatting import (
    format_currency,
    format_date,
    format_date_short,
    format_discount,
    format_quantity,
)
from cotacao.documents.domain.interpolation import RenderMode, build_variables, interpolate
from cotacao.quotations.domain.entities import LineItem, Quotation

logger = logging.getLogger(__name__)

# Sections de texte titrées, dans leur ordre d'apparition après les conditions
TITLED_TEXT_SECTIONS = (
    ("commercial_notes", "Observações Comerciais"),
    ("technical_notes", "Observações Técnicas"),
    ("closing_notes", "Encerramento"),
)

def _populated(label: str, value: Optional[str]) -> Optional[LabeledField]:
    if value is None or not value.strip():
        return None
    return LabeledField(label=label, value=value.strip())

def _is_renderable_item(item: LineItem) -> bool:
    return bool(item.description.strip()) and item.quantity > 0 and item.unit_price > 0

def build_header(design: DesignConfiguration, company: CompanyBranding) -> HeaderBlock:
    logo_url = company.logo_url.strip() if design.show_logo else ""
    monogram = ""
    if design.show_logo and not logo_url and company.company_name:
        monogram = company.company_name.strip()[:1].upper()
    return HeaderBlock(
        company_name=company.company_name,
        subtitle=company.company_subtitle,
        logo_url=logo_url or None,
        monogram=monogram,
        alignment=design.header_layout,
    )

def build_item_table(items: List[LineItem]) -> ItemTableBlock:
    renderable = [item for item in items if _is_renderable_item(item)]
    rows = [
        TableRow(
            index=idx,
            number=str(idx + 1),
            description=item.description.strip(),
            unit=item.unit,
            quantity=format_quantity(item.quantity),
            unit_price=format_currency(item.unit_price),
            discount=format_discount(item.discount),
            subtotal=format_currency(item.subtotal),
        )
        for idx, item in enumerate(renderable)
    ]
    return ItemTableBlock(rows=rows)

def build_totals(quotation: Quotation) -> TotalsPanelBlock:
    """Sous-total et total toujours présents; remise et frete seulement si > 0."""
    lines = [TotalsLine(label="Subtotal:", value=format_currency(quotation.subtotal))]
    if quotation.total_discount > 0:
        lines.append(TotalsLine(
            label="Desconto:",
            value=f"-{format_currency(quotation.total_discount)}",
            emphasis="discount",
        ))
    if quotation.conditions.freight_value > 0:
        lines.append(TotalsLine(label="Frete:", value=format_currency(quotation.conditions.freight_value)))
    lines.append(TotalsLine(label="TOTAL:", value=format_currency(quotation.grand_total), emphasis="total"))
    return TotalsPanelBlock(lines=lines)

def build_conditions(quotation: Quotation) -> Optional[ConditionsPanelBlock]:
    conditions = quotation.conditions
    freight = conditions.freight.strip()
    if conditions.freight_value > 0:
        freight = f"{freight} ({format_currency(conditions.freight_value)})".strip()

    candidates = [
        _populated("Pagamento", conditions.payment_terms),
        _populated("Prazo de Entrega", conditions.delivery_time),
        _populated("Frete", freight),
        _populated("Garantia", conditions.warranty),
    ]
    fields = [field for field in candidates if field is not None]
    if not fields:
        return None
    return ConditionsPanelBlock(fields=fields)

def validity_note(quotation: Quotation) -> str:
    """'Validade: 30 dias a partir de 27/02/2026'; vide sans date d'émission."""
    issued = format_date_short(quotation.quotation_date)
    if not issued:
        return ""
    return f"Validade: {quotation.validity_days} dias a partir de {issued}"

def build_document(
    quotation: Quotation,
    design: DesignConfiguration,
    company: CompanyBranding,
    mode: RenderMode = "document",
) -> DocumentModel:
    """Construit la suite ordonnée des blocs d'une proposition.

    L'ordre est fixe: en-tête, barre d'infos, client, textes d'introduction,
    tableau, totaux, conditions, notes titrées, pied de page.

    Raises:
        FormatError: Si une date ou un montant de la cotação est invalide.
    """
    variables = build_variables(quotation, company, mode)
    texts = quotation.texts
    blocks: List[Block] = []

    blocks.append(build_header(design, company))

    blocks.append(InfoBarBlock(
        quotation_number=quotation.quotation_number,
        quotation_date=format_date(quotation.quotation_date),
        validity=f"{quotation.validity_days} dias",
        reference=(quotation.reference or "").strip() or None,
    ))

    customer_fields = [
        _populated("Cliente", quotation.customer_name),
        _populated("Empresa", quotation.customer_company),
        _populated("CNPJ", quotation.customer_cnpj),
        _populated("E-mail", quotation.customer_email),
        _populated("Telefone", quotation.customer_phone),
        _populated("Endereço", quotation.customer_address),
    ]
    blocks.append(CustomerPanelBlock(fields=[f for f in customer_fields if f is not None]))

    for slot in ("header_text", "intro_notes"):
        raw = getattr(texts, slot)
        if raw.strip():
            blocks.append(TextBlock(slot=slot, text=interpolate(raw, variables)))

    blocks.append(build_item_table(quotation.items))
    blocks.append(build_totals(quotation))

    conditions_block = build_conditions(quotation)
    if conditions_block is not None:
        blocks.append(conditions_block)

    for slot, title in TITLED_TEXT_SECTIONS:
        raw = getattr(texts, slot)
        if raw.strip():
            blocks.append(TextBlock(slot=slot, title=title, text=interpolate(raw, variables)))

    footer_text = interpolate(texts.footer_text, variables) if texts.footer_text.strip() else company.contact_line()
    blocks.append(FooterBlock(text=footer_text, note=validity_note(quotation)))

    metadata = DocumentMetadata(
        title=f"Cotação {quotation.quotation_number}".strip(),
        author=company.company_name,
        subject=f"Proposta Comercial - {quotation.customer_name}",
    )
    logger.debug(f"[DocumentBuilder] {len(blocks)} blocs construits pour la cotação '{quotation.quotation_number}'.")
    return DocumentModel(blocks=blocks, metadata=metadata)
