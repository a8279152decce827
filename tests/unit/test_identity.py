# tests/unit/test_identity.py
from __future__ import annotations

import time

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

from blog_service.domain.exceptions import AuthError, InternalError
from blog_service.infrastructure.identity import GoogleIdentityVerifier, upscale_avatar

PROJECT_ID = "blog-auth"
CERTS_URL = "https://certs.example.test/jwk"
KID = "key-1"


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture(scope="module")
def signing_key():
    """RSA key pair as (private PEM, public JWK)."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk["kid"] = KID
    return private_pem, public_jwk


def make_verifier(handler) -> GoogleIdentityVerifier:
    verifier = GoogleIdentityVerifier(project_id=PROJECT_ID, certs_url=CERTS_URL)
    verifier.client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return verifier


@pytest.fixture()
def verifier(signing_key):
    _, public_jwk = signing_key

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == CERTS_URL
        return httpx.Response(200, json={"keys": [public_jwk]})

    return make_verifier(handler)


def sign(signing_key, kid=KID, **overrides) -> str:
    private_pem, _ = signing_key
    now = int(time.time())
    claims = {
        "iss": f"https://securetoken.google.com/{PROJECT_ID}",
        "aud": PROJECT_ID,
        "sub": "google-uid-1",
        "iat": now,
        "exp": now + 3600,
        "email": "ada@gmail.com",
        "email_verified": True,
        "name": "Ada Lovelace",
        "picture": "https://lh3.googleusercontent.com/a/photo=s96-c",
    }
    claims.update(overrides)
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": kid})


# -------------------------------- Avatar ---------------------------------- #
def test_upscale_avatar():
    assert upscale_avatar("https://lh3/a/photo=s96-c") == "https://lh3/a/photo=s384-c"
    assert upscale_avatar("https://lh3/a/photo") == "https://lh3/a/photo"
    assert upscale_avatar(None) is None


# ------------------------------ Verification ------------------------------ #
async def test_valid_token_yields_identity(verifier, signing_key):
    identity = await verifier.verify(sign(signing_key))

    assert identity.email == "ada@gmail.com"
    assert identity.name == "Ada Lovelace"
    assert identity.picture == "https://lh3.googleusercontent.com/a/photo=s384-c"


async def test_missing_name_falls_back_to_email(verifier, signing_key):
    identity = await verifier.verify(sign(signing_key, name=None))
    assert identity.name == "ada"


@pytest.mark.parametrize(
    "overrides",
    [
        {"aud": "someone-else"},
        {"iss": "https://securetoken.google.com/someone-else"},
        {"exp": int(time.time()) - 60},
        {"email": None},
        {"email_verified": False},
    ],
)
async def test_rejected_claims(verifier, signing_key, overrides):
    with pytest.raises(AuthError):
        await verifier.verify(sign(signing_key, **overrides))


async def test_unknown_key_id(verifier, signing_key):
    with pytest.raises(AuthError):
        await verifier.verify(sign(signing_key, kid="rotated-away"))


@pytest.mark.parametrize("assertion", ["", "not-a-token"])
async def test_malformed_assertion(verifier, assertion):
    with pytest.raises(AuthError):
        await verifier.verify(assertion)


async def test_provider_failure_is_internal(signing_key):
    verifier = make_verifier(lambda request: httpx.Response(503))

    with pytest.raises(InternalError) as exc:
        await verifier.verify(sign(signing_key))
    assert exc.value.status_code == 500


async def test_unstarted_verifier_is_internal(signing_key):
    verifier = GoogleIdentityVerifier(project_id=PROJECT_ID, certs_url=CERTS_URL)

    with pytest.raises(InternalError):
        await verifier.verify(sign(signing_key))


async def test_stop_closes_client(verifier):
    await verifier.stop()
    assert verifier.client.is_closed
