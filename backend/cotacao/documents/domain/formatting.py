"""Formatage monétaire (BRL) et des dates (pt-BR) pour les propositions.

Fonctions pures et déterministes: une entrée invalide lève ``FormatError``
au lieu de produire un texte du type "NaN".
"""
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_EVEN
from typing import Union

from cotacao.documents.domain.exceptions import FormatError

Amount = Union[Decimal, int, float, str]

CURRENCY_SYMBOL = "R$"
CENT = Decimal("0.01")

MONTH_NAMES = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]

def to_decimal(value: Amount) -> Decimal:
    """Convertit un montant en Decimal fini.

    Raises:
        FormatError: Si la valeur n'est pas un nombre fini.
    """
    if isinstance(value, bool):
        raise FormatError(value, "booléen reçu à la place d'un montant")
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        # str() évite la représentation binaire complète des float
        number = Decimal(str(value))
    elif isinstance(value, str):
        try:
            number = Decimal(value.strip())
        except InvalidOperation:
            raise FormatError(value, "montant non numérique")
    else:
        raise FormatError(value, f"type non supporté ({type(value).__name__})")

    if not number.is_finite():
        raise FormatError(value, "montant non fini")
    return number

def _group_thousands(number: Decimal) -> str:
    """'5200.00' -> '5.200,00' (séparateurs brésiliens)."""
    text = f"{number:,.2f}"
    return text.replace(",", "\x00").replace(".", ",").replace("\x00", ".")

def format_currency(amount: Amount) -> str:
    """Formate un montant en réais: ``R$ 5.200,00``.

    Arrondi au centime avec l'arrondi bancaire (ROUND_HALF_EVEN).
    Les montants négatifs sont préfixés par '-': ``-R$ 12,50``.
    """
    number = to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_EVEN)
    sign = "-" if number < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL} {_group_thousands(abs(number))}"

def format_number(value: Amount) -> str:
    """Nombre sans zéros superflus, virgule décimale: 3 -> '3', 2.50 -> '2,5'."""
    number = to_decimal(value)
    if number == number.to_integral_value():
        return str(int(number))
    text = format(number.normalize(), "f")
    return text.replace(".", ",")

def format_quantity(value: Amount) -> str:
    return format_number(value)

def format_discount(value: Amount) -> str:
    """Cellule 'Desc.%' du tableau: '-' pour une remise nulle, sinon '10%'."""
    number = to_decimal(value)
    if number == 0:
        return "-"
    return f"{format_number(number)}%"

def parse_date(value: Union[str, date, datetime]) -> date:
    """Interprète une date ISO ('2026-02-27' ou un datetime ISO complet).

    Raises:
        FormatError: Si la date est illisible.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise FormatError(value, f"type de date non supporté ({type(value).__name__})")

    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise FormatError(value, "date ISO attendue (AAAA-MM-JJ)")

def format_date(value: Union[str, date, datetime]) -> str:
    """Date longue en portugais: '27 de fevereiro de 2026'.

    Une chaîne vide donne une chaîne vide (date non renseignée).
    """
    if isinstance(value, str) and not value.strip():
        return ""
    parsed = parse_date(value)
    return f"{parsed.day:02d} de {MONTH_NAMES[parsed.month - 1]} de {parsed.year}"

def format_date_short(value: Union[str, date, datetime]) -> str:
    """Date courte: '27/02/2026'."""
    if isinstance(value, str) and not value.strip():
        return ""
    parsed = parse_date(value)
    return f"{parsed.day:02d}/{parsed.month:02d}/{parsed.year}"
