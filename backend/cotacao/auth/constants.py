"""
Constantes du module d'authentification.
"""

# --- Messages d'erreur ---
ERROR_TOKEN_INVALID = "Token d'authentification invalide ou expiré"
ERROR_TOKEN_MISSING = "Token d'authentification manquant"

# --- En-têtes HTTP ---
HEADER_WWW_AUTHENTICATE = "WWW-Authenticate"
HEADER_WWW_AUTHENTICATE_VALUE = "Bearer"

# --- OAuth2 ---
OAUTH2_TOKEN_URL = "/auth/token"
