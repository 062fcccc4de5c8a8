"""Exceptions spécifiques au domaine Quotation."""

from typing import List, Optional

class QuotationDomainException(Exception):
    """Classe de base pour les exceptions du domaine Quotation."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class QuotationNotFoundException(QuotationDomainException):
    """Levée lorsqu'une cotação n'existe pas ou n'appartient pas à l'utilisateur."""
    def __init__(self, quotation_id: int):
        super().__init__(f"Cotação avec ID {quotation_id} non trouvée.")
        self.quotation_id = quotation_id

class InvalidQuotationStatusException(QuotationDomainException):
    """Levée lorsque le statut fourni pour une cotação est invalide."""
    def __init__(self, status: str, allowed: List[str]):
        allowed_str = ", ".join(allowed)
        super().__init__(f"Le statut '{status}' est invalide. Statuts autorisés: {allowed_str}.")
        self.status = status
        self.allowed = allowed

class DuplicateQuotationNumberException(QuotationDomainException):
    """Levée lorsque le numéro attribué est déjà pris (création concurrente)."""
    def __init__(self, quotation_number: str, original_exception: Optional[Exception] = None):
        super().__init__(f"Le numéro de cotação '{quotation_number}' est déjà utilisé.")
        self.quotation_number = quotation_number
        self.original_exception = original_exception
