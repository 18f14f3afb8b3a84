"""
Apple Maps token issuer tests.
"""

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from sentinel.adapters.apple.token import AppleMapsTokenProvider


@pytest.fixture(scope="module")
def key_pair():
    private = ec.generate_private_key(ec.SECP256R1())
    pem = private.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    return pem, private.public_key()


class TestAppleMapsTokenProvider:
    async def test_static_token(self):
        provider = AppleMapsTokenProvider(static_token="static")
        assert provider.configured
        assert await provider.get_token() == "static"

    async def test_missing_credentials(self):
        provider = AppleMapsTokenProvider(team_id="TEAM", key_id=None, private_key=None)
        assert not provider.configured
        assert await provider.get_token() is None

    async def test_signed_token(self, key_pair, clock):
        pem, public = key_pair
        clock.now = 1_700_000_000
        provider = AppleMapsTokenProvider("TEAM", "KEY", pem, ttl_sec=1800, clock=clock)

        token = await provider.get_token()

        assert jwt.get_unverified_header(token)["kid"] == "KEY"
        claims = jwt.decode(token, public, algorithms=["ES256"], options={"verify_exp": False})
        assert claims == {"iss": "TEAM", "iat": 1_700_000_000, "exp": 1_700_001_800}

    async def test_escaped_newlines_accepted(self, key_pair, clock):
        pem, _ = key_pair
        provider = AppleMapsTokenProvider("TEAM", "KEY", pem.replace("\n", "\\n"), clock=clock)
        assert await provider.get_token() is not None

    async def test_token_cached_until_refresh_margin(self, key_pair, clock):
        pem, _ = key_pair
        provider = AppleMapsTokenProvider("TEAM", "KEY", pem, ttl_sec=1800, clock=clock)

        first = await provider.get_token()
        clock.advance(1000)
        assert await provider.get_token() == first
        clock.advance(760)
        assert await provider.get_token() != first

    async def test_bad_key(self, clock):
        provider = AppleMapsTokenProvider("TEAM", "KEY", "not a pem", clock=clock)
        assert await provider.get_token() is None
