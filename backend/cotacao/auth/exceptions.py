"""
Exceptions HTTP du module d'authentification (401 avec challenge Bearer).
"""
from fastapi import HTTPException, status

from cotacao.auth.constants import (
    ERROR_TOKEN_INVALID,
    ERROR_TOKEN_MISSING,
    HEADER_WWW_AUTHENTICATE,
    HEADER_WWW_AUTHENTICATE_VALUE,
)

class BearerAuthException(HTTPException):
    """401 accompagnée de l'en-tête WWW-Authenticate: Bearer."""
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={HEADER_WWW_AUTHENTICATE: HEADER_WWW_AUTHENTICATE_VALUE},
        )

class TokenInvalidException(BearerAuthException):
    """Token JWT invalide, expiré ou sans identifiant utilisateur."""
    def __init__(self):
        super().__init__(ERROR_TOKEN_INVALID)

class TokenMissingException(BearerAuthException):
    def __init__(self):
        super().__init__(ERROR_TOKEN_MISSING)
