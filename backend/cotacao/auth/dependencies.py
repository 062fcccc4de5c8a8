"""
Dépendances FastAPI pour l'authentification.
"""
import logging
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from cotacao.auth.constants import OAUTH2_TOKEN_URL
from cotacao.auth.exceptions import TokenInvalidException, TokenMissingException
from cotacao.auth.security import decode_access_token

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=OAUTH2_TOKEN_URL, auto_error=False)

async def get_current_user_id(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> int:
    """Retourne l'ID de l'utilisateur porté par le token Bearer.

    Raises:
        TokenMissingException: Si aucun token n'est fourni.
        TokenInvalidException: Si le token est invalide ou expiré.
    """
    if token is None:
        logger.warning("Token manquant dans la requête.")
        raise TokenMissingException()

    user_id = decode_access_token(token)
    if user_id is None:
        raise TokenInvalidException()
    return user_id

CurrentUserIdDep = Annotated[int, Depends(get_current_user_id)]
