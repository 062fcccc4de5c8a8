"""Exceptions spécifiques au domaine Documents."""

from typing import Any, Optional

class DocumentDomainException(Exception):
    """Classe de base pour les exceptions du domaine Documents."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class FormatError(DocumentDomainException):
    """Levée lorsqu'un montant ou une date ne peut pas être formaté."""
    def __init__(self, value: Any, reason: str):
        super().__init__(f"Valeur non formatable {value!r}: {reason}")
        self.value = value
        self.reason = reason

class AssetFetchError(DocumentDomainException):
    """Levée lorsque le logo est injoignable ou n'est pas une image valide.

    Cette erreur est récupérée localement: le rendu continue sans logo.
    """
    def __init__(self, url: str, reason: str):
        super().__init__(f"Impossible de récupérer le logo '{url}': {reason}")
        self.url = url
        self.reason = reason

class RenderFailure(DocumentDomainException):
    """Échec générique du rendu d'un document. Aucun document partiel n'est produit."""
    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        full_message = f"Erreur lors du rendu du document: {message}"
        if original_exception:
            full_message += f" (Erreur originale: {original_exception})"
        super().__init__(full_message)
        self.original_exception = original_exception
