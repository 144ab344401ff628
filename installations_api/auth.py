import os
import time
from typing import Any, Dict

import jwt
import requests
from fastapi import Depends, HTTPException, Request, status

from installations_api import config

ASYMMETRIC_ALGORITHMS = ["RS256", "RS384", "RS512", "ES256", "ES384", "ES512"]

_OIDC_CACHE: Dict[str, Any] = {
    "expires_at": 0,
    "config": None,
    "jwks_by_issuer": {},
}


def _get_required_env(name: str) -> str:
    value = os.environ.get(name, "").strip()
    if not value:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Missing required environment variable: {name}",
        )
    return value


def _load_oidc_config(force: bool = False) -> Dict[str, Any]:
    now = int(time.time())
    if not force and _OIDC_CACHE.get("config") and now < int(_OIDC_CACHE.get("expires_at", 0)):
        return _OIDC_CACHE["config"]
    response = requests.get(
        f"{config.platform_base_url()}/api/auth/oidc/config",
        params={"appId": config.oidc_app_id()},
        timeout=10,
    )
    response.raise_for_status()
    payload = response.json()
    _OIDC_CACHE["config"] = payload
    _OIDC_CACHE["expires_at"] = now + 300
    return payload


def _provider_by_issuer(issuer: str) -> Dict[str, Any]:
    providers = _load_oidc_config().get("allowed_providers") or []
    for provider in providers:
        if str(provider.get("issuer", "")).rstrip("/") == issuer.rstrip("/"):
            return provider
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown OIDC issuer")


def _jwks_for_issuer(issuer: str, force: bool = False) -> str:
    cache_key = issuer.rstrip("/")
    if not force and cache_key in _OIDC_CACHE["jwks_by_issuer"]:
        return _OIDC_CACHE["jwks_by_issuer"][cache_key]
    discovery = requests.get(f"{cache_key}/.well-known/openid-configuration", timeout=10)
    discovery.raise_for_status()
    jwks_uri = discovery.json().get("jwks_uri")
    if not jwks_uri:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="OIDC discovery missing jwks_uri")
    _OIDC_CACHE["jwks_by_issuer"][cache_key] = jwks_uri
    return jwks_uri


def _verify_with_jwks(token: str, issuer: str, client_id: str, *, force: bool) -> Dict[str, Any]:
    jwk_client = jwt.PyJWKClient(_jwks_for_issuer(issuer, force=force))
    signing_key = jwk_client.get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=ASYMMETRIC_ALGORITHMS,
        issuer=issuer,
        audience=client_id,
    )


def _decode_oidc_token(token: str) -> Dict[str, Any]:
    unverified = jwt.decode(token, options={"verify_signature": False, "verify_exp": False})
    issuer = str(unverified.get("iss") or "").strip()
    if not issuer:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token missing issuer")
    provider = _provider_by_issuer(issuer)
    client_id = str(provider.get("client_id") or "").strip()
    if not client_id:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="OIDC provider missing client_id")
    try:
        return _verify_with_jwks(token, issuer, client_id, force=False)
    except (jwt.PyJWKClientError, jwt.InvalidSignatureError):
        # Unknown KID or rotated key; refresh discovery/JWKS and retry once.
        return _verify_with_jwks(token, issuer, client_id, force=True)


def decode_token(token: str) -> Dict[str, Any]:
    if config.oidc_enabled():
        claims = _decode_oidc_token(token)
    else:
        claims = jwt.decode(
            token,
            _get_required_env("INSTALLATIONS_JWT_SECRET"),
            algorithms=["HS256"],
            issuer=config.jwt_issuer(),
            audience=config.jwt_audience(),
        )
    if claims.get("roles") is None:
        claims["roles"] = ["viewer"]
    return claims


def require_user(request: Request) -> Dict[str, Any]:
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
        )
    token = auth_header.replace("Bearer ", "", 1).strip()
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing bearer token",
        )
    try:
        claims = decode_token(token)
    except jwt.PyJWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {exc}",
        ) from exc
    request.state.user = claims
    return claims


def require_tenant(user=Depends(require_user)) -> str:
    tenant_id = str(user.get("tenant_id") or "").strip()
    if not tenant_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Token is not scoped to a tenant")
    return tenant_id
