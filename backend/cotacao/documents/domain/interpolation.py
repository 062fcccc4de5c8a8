"""Substitution des variables ``${identifiant}`` dans les textes libres.

Politique retenue pour tous les contextes de rendu:

* un identifiant absent du vocabulaire reste tel quel dans le texte;
* un identifiant connu dont la valeur est vide donne une chaîne vide en mode
  ``document`` et une indication entre crochets (``[Nome do Cliente]``) en
  mode ``preview``.
"""
import re
from typing import Dict, Literal, Mapping, Union

from cotacao.design.domain.entities import CompanyBranding
from cotacao.documents.domain.formatting import format_currency, format_date
from cotacao.quotations.domain.entities import Quotation

RenderMode = Literal["document", "preview"]

PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z0-9_]+)\}")

# Indications affichées dans l'aperçu de l'assistant quand le champ est vide
PREVIEW_HINTS: Dict[str, str] = {
    "customerName": "[Nome do Cliente]",
    "customerEmail": "[E-mail]",
    "customerPhone": "[Telefone]",
    "customerCompany": "[Empresa]",
    "customerCNPJ": "[CNPJ]",
    "customerAddress": "[Endereço]",
    "reference": "[Referência]",
}

VARIABLE_NAMES = (
    "customerName", "customerCompany", "customerEmail", "customerPhone",
    "customerCNPJ", "customerAddress", "reference", "validityDays",
    "quotationNumber", "quotationDate", "createdAt", "grandTotal", "subtotal",
    "totalDiscount", "companyName", "companyPhone", "companyEmail",
    "paymentTerms", "deliveryTime", "freight", "warranty",
)

def interpolate(template: str, variables: Mapping[str, Union[str, int]]) -> str:
    """Remplace chaque ``${nom}`` présent dans ``variables``.

    Sensible à la casse, sans expansion récursive: une valeur substituée
    n'est jamais re-analysée. Les identifiants inconnus restent littéraux.
    """
    if not template:
        return ""

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        return str(variables[name])

    return PLACEHOLDER_RE.sub(_replace, template)

def build_variables(
    quotation: Quotation,
    company: CompanyBranding,
    mode: RenderMode = "document",
) -> Dict[str, str]:
    """Construit le vocabulaire fermé des variables pour une cotação.

    Raises:
        FormatError: Si la date ou un montant de la cotação est invalide.
    """
    conditions = quotation.conditions
    issue_date = format_date(quotation.quotation_date)

    values: Dict[str, str] = {
        "customerName": quotation.customer_name or "",
        "customerCompany": quotation.customer_company or "",
        "customerEmail": quotation.customer_email or "",
        "customerPhone": quotation.customer_phone or "",
        "customerCNPJ": quotation.customer_cnpj or "",
        "customerAddress": quotation.customer_address or "",
        "reference": quotation.reference or "",
        "validityDays": str(quotation.validity_days),
        "quotationNumber": quotation.quotation_number,
        "quotationDate": issue_date,
        "createdAt": issue_date,
        "grandTotal": format_currency(quotation.grand_total),
        "subtotal": format_currency(quotation.subtotal),
        "totalDiscount": format_currency(quotation.total_discount),
        "companyName": company.company_name,
        "companyPhone": company.phone,
        "companyEmail": company.email,
        "paymentTerms": conditions.payment_terms,
        "deliveryTime": conditions.delivery_time,
        "freight": conditions.freight,
        "warranty": conditions.warranty,
    }

    if mode == "preview":
        for name, hint in PREVIEW_HINTS.items():
            if not values[name].strip():
                values[name] = hint

    return values
