"""
Constants and response builders shared by the test modules.

Kept out of conftest.py: pytest loads conftest as a special module, so it
should not be imported directly by tests.
"""

import json
from unittest.mock import MagicMock

import requests

TEST_KEYCLOAK_URL = "http://keycloak-test:8080"
TEST_KEYCLOAK_PUBLIC_URL = "https://auth.test.example.com"
TEST_KEYCLOAK_REALM = "nekazari"
TEST_KUIPER_URL = "http://kuiper-test:9081"
TEST_THINGS_URL = "http://things-test:8182"

VALID_TOKEN = "valid-token"
USER_ID = "6c1a-22b0-4f9e"
USER_PREFIX = "6c1a22b04f9e_"


def make_response(status_code: int = 200, json_data=None, text: str | None = None):
    """Build a mocked ``requests.Response``."""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    if json_data is not None:
        response.json.return_value = json_data
        response.text = json.dumps(json_data) if text is None else text
    else:
        response.json.side_effect = requests.JSONDecodeError("Expecting value", text or "", 0)
        response.text = text or ""
    return response
