"""
Shared pytest fixtures for rules gateway tests.

Provides mock JWT tokens, fake identity / channel collaborators and a
mocked Kuiper session so that tests never depend on real services.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import jwt as pyjwt
import pytest
import requests

from rules_gateway.config import Settings
from rules_gateway.errors import ChannelLookupError, TokenValidationError
from rules_gateway.kuiper import KuiperClient
from rules_gateway.models import Identity
from rules_gateway.service import RulesEngineService

from helpers import (
    TEST_KEYCLOAK_PUBLIC_URL,
    TEST_KEYCLOAK_REALM,
    TEST_KEYCLOAK_URL,
    TEST_KUIPER_URL,
    TEST_THINGS_URL,
    USER_ID,
    VALID_TOKEN,
    make_response,
)


# ---------------------------------------------------------------------------
# RSA key pair for signing/verifying test JWTs (RS256)
# ---------------------------------------------------------------------------
_rsa_private_key = None
_rsa_public_key = None


def _get_rsa_keys():
    """Lazily generate an RSA key pair for test JWT signing."""
    global _rsa_private_key, _rsa_public_key
    if _rsa_private_key is None:
        from cryptography.hazmat.primitives import serialization
        from cryptography.hazmat.primitives.asymmetric import rsa

        private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        _rsa_private_key = private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
        _rsa_public_key = private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    return _rsa_private_key, _rsa_public_key


def create_test_jwt(
    claims: dict | None = None,
    *,
    user_id: str = USER_ID,
    email: str = "testuser@example.com",
    issuer: str | None = None,
    expired: bool = False,
):
    """Create an RS256 JWT signed with the session test key."""
    now = datetime.now(tz=timezone.utc)
    exp = now - timedelta(hours=1) if expired else now + timedelta(hours=1)

    if issuer is None:
        issuer = f"{TEST_KEYCLOAK_URL}/auth/realms/{TEST_KEYCLOAK_REALM}"

    payload = {
        "sub": user_id,
        "email": email,
        "iss": issuer,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    if claims:
        payload.update(claims)

    priv, _ = _get_rsa_keys()
    return pyjwt.encode(payload, priv, algorithm="RS256")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def settings():
    return Settings(
        kuiper_url=TEST_KUIPER_URL,
        things_url=TEST_THINGS_URL,
        keycloak_url=TEST_KEYCLOAK_URL,
        keycloak_public_url=TEST_KEYCLOAK_PUBLIC_URL,
        keycloak_realm=TEST_KEYCLOAK_REALM,
        request_timeout=5,
    )


@pytest.fixture
def mock_jwt_token():
    """Return a factory function that creates test JWT tokens."""
    return create_test_jwt


@pytest.fixture
def rsa_keys():
    """Return ``(private_key_pem, public_key_pem)`` bytes for RS256 signing."""
    return _get_rsa_keys()


@pytest.fixture
def identity_client():
    """Identity collaborator accepting only ``VALID_TOKEN``."""
    client = MagicMock()

    def identify(token):
        if token != VALID_TOKEN:
            raise TokenValidationError("Invalid token")
        return Identity(id=USER_ID, email="testuser@example.com")

    client.identify.side_effect = identify
    return client


@pytest.fixture
def channel_client():
    """Channel collaborator where every channel except ``forbidden`` exists."""
    client = MagicMock()

    def channel(channel_id, token):
        if channel_id == "forbidden":
            raise ChannelLookupError(f"Channel {channel_id} lookup failed with status 404")
        return {"id": channel_id}

    client.channel.side_effect = channel
    return client


@pytest.fixture
def kuiper_session():
    session = MagicMock(spec=requests.Session)
    session.request.return_value = make_response(200, json_data={})
    return session


@pytest.fixture
def service(identity_client, channel_client, kuiper_session, settings):
    return RulesEngineService(
        identity_client=identity_client,
        channel_client=channel_client,
        kuiper=KuiperClient(settings, session=kuiper_session),
        settings=settings,
    )
