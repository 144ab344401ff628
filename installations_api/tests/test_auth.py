import time
from unittest import mock

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient

from installations_api import auth
from installations_api.main import app
from installations_api.tests.conftest import TENANT

ISSUER = "https://login.solarbiz.example/realms/installers"
CLIENT_ID = "installations-web"
JWKS_URI = f"{ISSUER}/protocol/openid-connect/certs"

SIGNING_KEY = rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(autouse=True)
def oidc_mode(monkeypatch):
    monkeypatch.setenv("INSTALLATIONS_OIDC_ENABLED", "true")
    monkeypatch.setenv("INSTALLATIONS_PLATFORM_API_BASE", "https://platform.solarbiz.example")
    auth._OIDC_CACHE.update({"expires_at": 0, "config": None, "jwks_by_issuer": {}})
    yield
    auth._OIDC_CACHE.update({"expires_at": 0, "config": None, "jwks_by_issuer": {}})


def _response(payload):
    return mock.Mock(json=mock.Mock(return_value=payload), raise_for_status=mock.Mock())


def _fake_get(url, params=None, timeout=None):
    if url.endswith("/api/auth/oidc/config"):
        return _response({"allowed_providers": [{"issuer": ISSUER, "client_id": CLIENT_ID}]})
    if url == f"{ISSUER}/.well-known/openid-configuration":
        return _response({"jwks_uri": JWKS_URI})
    raise AssertionError(f"unexpected GET {url}")


def _oidc_token(issuer=ISSUER, **extra):
    now = int(time.time())
    payload = {
        "iss": issuer,
        "aud": CLIENT_ID,
        "iat": now,
        "exp": now + 600,
        "sub": "installer-7",
        "tenant_id": TENANT,
        "roles": ["installer"],
        **extra,
    }
    return jwt.encode(payload, SIGNING_KEY, algorithm="RS256", headers={"kid": "rotated-key"})


def _signing_key():
    return mock.Mock(key=SIGNING_KEY.public_key())


@mock.patch("installations_api.auth.jwt.PyJWKClient")
@mock.patch("installations_api.auth.requests.get", side_effect=_fake_get)
def test_oidc_token_is_verified_against_provider_jwks(mock_get, mock_jwk_client):
    mock_jwk_client.return_value.get_signing_key_from_jwt.return_value = _signing_key()

    claims = auth.decode_token(_oidc_token())

    assert claims["sub"] == "installer-7"
    assert claims["tenant_id"] == TENANT
    mock_jwk_client.assert_called_once_with(JWKS_URI)
    config_call = mock_get.call_args_list[0]
    assert config_call.args[0] == "https://platform.solarbiz.example/api/auth/oidc/config"
    assert config_call.kwargs["params"] == {"appId": "installations.platform"}


@mock.patch("installations_api.auth.jwt.PyJWKClient")
@mock.patch("installations_api.auth.requests.get", side_effect=_fake_get)
def test_unknown_kid_refreshes_jwks_once(mock_get, mock_jwk_client):
    stale, fresh = mock.Mock(), mock.Mock()
    stale.get_signing_key_from_jwt.side_effect = jwt.PyJWKClientError("Unable to find a matching signing key")
    fresh.get_signing_key_from_jwt.return_value = _signing_key()
    mock_jwk_client.side_effect = [stale, fresh]

    claims = auth.decode_token(_oidc_token())

    assert claims["roles"] == ["installer"]
    assert mock_jwk_client.call_count == 2
    discovery_calls = [call for call in mock_get.call_args_list if call.args[0].endswith("openid-configuration")]
    assert len(discovery_calls) == 2


@mock.patch("installations_api.auth.jwt.PyJWKClient")
@mock.patch("installations_api.auth.requests.get", side_effect=_fake_get)
def test_unknown_kid_after_refresh_is_rejected(mock_get, mock_jwk_client):
    mock_jwk_client.return_value.get_signing_key_from_jwt.side_effect = jwt.PyJWKClientError("no matching key")

    response = TestClient(app).get("/installations", headers={"Authorization": f"Bearer {_oidc_token()}"})

    assert response.status_code == 401
    assert mock_jwk_client.call_count == 2


@mock.patch("installations_api.auth.jwt.PyJWKClient")
@mock.patch("installations_api.auth.requests.get", side_effect=_fake_get)
def test_token_from_unknown_issuer_is_rejected(mock_get, mock_jwk_client):
    token = _oidc_token(issuer="https://evil.example/realms/installers")

    response = TestClient(app).get("/installations", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Unknown OIDC issuer"
    mock_jwk_client.assert_not_called()


@mock.patch("installations_api.auth.jwt.PyJWKClient")
@mock.patch("installations_api.auth.requests.get", side_effect=_fake_get)
def test_oidc_user_reaches_tenant_scoped_routes(mock_get, mock_jwk_client, installation):
    mock_jwk_client.return_value.get_signing_key_from_jwt.return_value = _signing_key()

    response = TestClient(app).get("/installations", headers={"Authorization": f"Bearer {_oidc_token()}"})

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [installation.id]
    assert [call.args[0] for call in mock_get.call_args_list].count(
        "https://platform.solarbiz.example/api/auth/oidc/config"
    ) == 1
