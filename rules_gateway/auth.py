#!/usr/bin/env python3
# =============================================================================
# Keycloak Identity Client
# =============================================================================
# Resolves a bearer token to the caller identity by validating the Keycloak
# JWT signature against the realm JWKs.

import logging
from typing import Any, Dict, Optional, Set

import jwt
from jwt import PyJWKClient

from .config import Settings
from .errors import TokenValidationError
from .models import Identity

logger = logging.getLogger(__name__)


def _issuer_variants(issuer: str) -> Set[str]:
    variants = {issuer}
    if issuer.startswith("http://"):
        variants.add(issuer.replace("http://", "https://", 1))
    elif issuer.startswith("https://"):
        variants.add(issuer.replace("https://", "http://", 1))
    return variants


class KeycloakIdentityClient:
    """Identity lookup backed by Keycloak-issued JWTs."""

    def __init__(self, settings: Settings, jwks_client: Optional[PyJWKClient] = None):
        self.settings = settings
        self._jwks_client = jwks_client
        self.allowed_issuers = self._build_allowed_issuers()

    @property
    def jwks_client(self) -> PyJWKClient:
        if self._jwks_client is None:
            logger.debug("Creating PyJWKClient with JWKS_URL: %s", self.settings.jwks_url)
            self._jwks_client = PyJWKClient(self.settings.jwks_url)
        return self._jwks_client

    def _build_allowed_issuers(self) -> Set[str]:
        allowed = _issuer_variants(self.settings.keycloak_issuer_url)
        if self.settings.keycloak_public_url:
            public_url = self.settings.keycloak_public_url.rstrip("/")
            if not public_url.endswith("/auth"):
                public_url = f"{public_url}/auth"
            allowed |= _issuer_variants(f"{public_url}/realms/{self.settings.keycloak_realm}")
        return allowed

    def decode(self, token: str) -> Dict[str, Any]:
        """
        Validate a Keycloak JWT and return its claims.

        Raises:
            TokenValidationError: if the token is empty, badly signed,
                expired or minted by an unknown issuer
        """
        if not token:
            raise TokenValidationError("Token is empty")

        try:
            signing_key = self.jwks_client.get_signing_key_from_jwt(token)
        except jwt.PyJWKClientError as e:
            logger.error(f"Failed to get signing key from JWKS: {e}")
            raise TokenValidationError(f"Failed to get signing key: {e}") from e
        except jwt.DecodeError as e:
            logger.warning(f"Token decode error: {e}")
            raise TokenValidationError("Token decode failed") from e

        try:
            payload = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256", "RS512"],
                audience=self.settings.keycloak_client_id,
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_aud": False,
                    "verify_iss": False,  # checked against the whitelist below
                },
            )
        except jwt.ExpiredSignatureError as e:
            logger.warning("Token expired")
            raise TokenValidationError("Token has expired") from e
        except jwt.InvalidSignatureError as e:
            logger.warning("Invalid token signature")
            raise TokenValidationError("Invalid token signature") from e
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
            raise TokenValidationError(f"Invalid token: {e}") from e

        issuer = payload.get("iss")
        if issuer not in self.allowed_issuers:
            logger.warning("Token issuer %s not in allowed issuers %s", issuer, self.allowed_issuers)
            raise TokenValidationError("Invalid token issuer")

        return payload

    def identify(self, token: str) -> Identity:
        payload = self.decode(token)
        subject = payload.get("sub")
        if not subject:
            raise TokenValidationError("Token has no subject")
        return Identity(id=subject, email=payload.get("email"))
