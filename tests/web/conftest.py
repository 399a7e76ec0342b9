"""Shared fixtures for web API tests."""

import os
import time
from contextlib import asynccontextmanager
from unittest.mock import patch

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi.testclient import TestClient
from jose import jwk, jwt

AUTH_DOMAIN = "brewlog.eu.auth0.com"
CLIENT_ID = "spa-client-123"
KID = "test-key-1"


@pytest.fixture(scope="session")
def rsa_keys():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture(scope="session")
def jwks(rsa_keys):
    _, public_pem = rsa_keys
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk.update({"kid": KID, "use": "sig", "alg": "RS256"})
    return {"keys": [public_jwk]}


@pytest.fixture
def make_token(rsa_keys):
    private_pem, _ = rsa_keys

    def _make(kid=KID, expires_in=3600, **claims):
        now = int(time.time())
        payload = {
            "iss": f"https://{AUTH_DOMAIN}/",
            "sub": "auth0|user-1",
            "aud": CLIENT_ID,
            "iat": now,
            "exp": now + expires_in,
            "email": "barista@example.com",
        }
        payload.update(claims)
        payload = {k: v for k, v in payload.items() if v is not None}
        headers = {"kid": kid} if kid else {}
        return jwt.encode(payload, private_pem, algorithm="RS256", headers=headers)

    return _make


@pytest.fixture
def jwks_client(jwks):
    """AsyncClient serving the JWKS document; records each fetch."""
    fetches = []

    def handler(request: httpx.Request) -> httpx.Response:
        fetches.append(str(request.url))
        if request.url.path == "/.well-known/jwks.json":
            return httpx.Response(200, json=jwks)
        return httpx.Response(404, json={})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client.fetches = fetches
    return client


@pytest.fixture
def store_env():
    return {
        "AIRTABLE_BASE_ID": "appMAIN",
        "AIRTABLE_API_KEY": "patMAIN",
        "AUTH0_DOMAIN": AUTH_DOMAIN,
        "AUTH0_CLIENT_ID": CLIENT_ID,
    }


@pytest.fixture
def proxy_stack(store_factory, verifier_factory):
    """A ProxyRouter over fakes plus a patch that makes the route use it."""
    from web.policy import AccessPolicy
    from web.proxy import ProxyRouter

    store = store_factory()
    verifier = verifier_factory()
    policy = AccessPolicy(store)
    router = ProxyRouter(store, policy, verifier=verifier)

    @asynccontextmanager
    async def _open_proxy(settings):
        yield router

    return router, _open_proxy


@pytest.fixture
def client(store_env, proxy_stack):
    """Test client whose proxy route runs against in-memory fakes."""
    _, open_proxy = proxy_stack
    patches = [
        patch.dict(os.environ, store_env),
        patch("web.routes.proxy.open_proxy", open_proxy),
    ]
    for p in patches:
        p.start()

    from web.app import app

    yield TestClient(app)

    for p in reversed(patches):
        p.stop()
