"""Modèle de document: suite ordonnée de blocs typés, indépendante du rendu.

Créé à chaque rendu, jamais persisté. Les renderers consomment les blocs
dans l'ordre exact où le builder les a émis.
"""
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from cotacao.design.domain.entities import HeaderLayout

BlockKind = Literal[
    "header",
    "info-bar",
    "customer-panel",
    "text-block",
    "item-table",
    "totals-panel",
    "conditions-panel",
    "footer",
]

TextSlot = Literal[
    "header_text",
    "intro_notes",
    "commercial_notes",
    "technical_notes",
    "closing_notes",
]

TABLE_COLUMNS: List[str] = ["#", "Descrição", "Un.", "Qtd.", "Valor Un.", "Desc.%", "Subtotal"]

class _Block(BaseModel):
    model_config = ConfigDict(frozen=True)

class LabeledField(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str

class HeaderBlock(_Block):
    kind: Literal["header"] = "header"
    company_name: str
    subtitle: str = ""
    logo_url: Optional[str] = None  # None: pas de logo demandé
    monogram: str = ""
    alignment: HeaderLayout = "left"

class InfoBarBlock(_Block):
    kind: Literal["info-bar"] = "info-bar"
    title: str = "PROPOSTA COMERCIAL"
    quotation_number: str
    quotation_date: str
    validity: str
    reference: Optional[str] = None

class CustomerPanelBlock(_Block):
    kind: Literal["customer-panel"] = "customer-panel"
    title: str = "DADOS DO CLIENTE"
    fields: List[LabeledField]

class TextBlock(_Block):
    kind: Literal["text-block"] = "text-block"
    slot: TextSlot
    title: Optional[str] = None
    text: str

class TableRow(BaseModel):
    """Ligne du tableau; ``index`` est la position dans la liste complète (base 0)."""
    model_config = ConfigDict(frozen=True)

    index: int
    number: str
    description: str
    unit: str
    quantity: str
    unit_price: str
    discount: str
    subtotal: str

    @property
    def striped(self) -> bool:
        return self.index % 2 == 1

class ItemTableBlock(_Block):
    kind: Literal["item-table"] = "item-table"
    columns: List[str] = TABLE_COLUMNS
    rows: List[TableRow] = []

TotalsEmphasis = Literal["normal", "discount", "total"]

class TotalsLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    value: str
    emphasis: TotalsEmphasis = "normal"

class TotalsPanelBlock(_Block):
    kind: Literal["totals-panel"] = "totals-panel"
    lines: List[TotalsLine]

    @property
    def grand_total(self) -> TotalsLine:
        return next(line for line in self.lines if line.emphasis == "total")

class ConditionsPanelBlock(_Block):
    kind: Literal["conditions-panel"] = "conditions-panel"
    title: str = "CONDIÇÕES COMERCIAIS"
    fields: List[LabeledField]

class FooterBlock(_Block):
    kind: Literal["footer"] = "footer"
    text: str
    # Rappel de validité, sous le texte du pied de page
    note: str = ""

Block = Annotated[
    Union[
        HeaderBlock,
        InfoBarBlock,
        CustomerPanelBlock,
        TextBlock,
        ItemTableBlock,
        TotalsPanelBlock,
        ConditionsPanelBlock,
        FooterBlock,
    ],
    Field(discriminator="kind"),
]

class DocumentMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    author: str
    subject: str

class DocumentModel(BaseModel):
    """Blocs ordonnés d'une proposition et métadonnées du fichier produit."""
    model_config = ConfigDict(frozen=True)

    blocks: List[Block]
    metadata: DocumentMetadata

    @property
    def footer(self) -> FooterBlock:
        for block in self.blocks:
            if isinstance(block, FooterBlock):
                return block
        raise LookupError("Le modèle de document ne contient pas de pied de page.")

    def kinds(self) -> List[str]:
        return [block.kind for block in self.blocks]
