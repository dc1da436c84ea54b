"""
Authentication for X API requests.

- OAuth1Signer: OAuth 1.0a HMAC-SHA1 Authorization headers
- ClientCredentialsProvider: OAuth 2.0 app-only bearer tokens
- RequestSigner: picks one per request, with OAuth 1.0a fallback
"""

from .oauth1 import OAuth1Signer, generate_nonce, percent_encode
from .oauth2 import ClientCredentialsProvider, OAuth2Config, OAuth2Token
from .signer import RequestSigner

__all__ = [
    "OAuth1Signer",
    "generate_nonce",
    "percent_encode",
    "ClientCredentialsProvider",
    "OAuth2Config",
    "OAuth2Token",
    "RequestSigner",
]
