"""Tests for GitHub App identity loading and JWT generation."""

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ghapp_creds.core.errors import ConfigError, MissingSettingError
from ghapp_creds.github.auth import (
    AppIdentity,
    AppIdInvalidError,
    AppKeyInvalidError,
    create_app_jwt,
)
from tests.conftest import TEST_PRIVATE_KEY, make_settings


class TestAppIdentity:
    def test_loads_from_settings(self) -> None:
        identity = AppIdentity.from_settings(make_settings())
        assert identity.app_id == 12345

    def test_private_key_not_in_repr(self) -> None:
        identity = AppIdentity.from_settings(make_settings())
        assert "private_key" not in repr(identity)

    def test_missing_app_id(self) -> None:
        with pytest.raises(MissingSettingError, match="GITHUB_APP_ID"):
            AppIdentity.from_settings(make_settings(github_app_id=""))

    def test_missing_app_key(self) -> None:
        with pytest.raises(MissingSettingError, match="GITHUB_APP_KEY"):
            AppIdentity.from_settings(make_settings(github_app_key=""))

    @pytest.mark.parametrize("raw", ["abc", "12.5", "0", "-3"])
    def test_invalid_app_id(self, raw: str) -> None:
        with pytest.raises(AppIdInvalidError) as exc_info:
            AppIdentity.from_settings(make_settings(github_app_id=raw))
        assert exc_info.value.app_id == raw
        assert isinstance(exc_info.value, ConfigError)

    def test_garbage_key(self) -> None:
        with pytest.raises(AppKeyInvalidError):
            AppIdentity.from_settings(make_settings(github_app_key="not a pem"))

    def test_non_rsa_key(self) -> None:
        key = ec.generate_private_key(ec.SECP256R1())
        pem = key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        ).decode()
        with pytest.raises(AppKeyInvalidError, match="RSA"):
            AppIdentity.from_settings(make_settings(github_app_key=pem))


class TestCreateAppJwt:
    def test_creates_valid_jwt(self) -> None:
        token = create_app_jwt(AppIdentity.from_settings(make_settings()))
        assert isinstance(token, str)
        assert len(token) > 0

    def test_jwt_contains_correct_issuer(self) -> None:
        token = create_app_jwt(AppIdentity.from_settings(make_settings()))
        decoded = jwt.decode(token, options={"verify_signature": False})
        assert decoded["iss"] == "12345"

    def test_jwt_expiry_is_roughly_9_minutes(self) -> None:
        token = create_app_jwt(AppIdentity.from_settings(make_settings()))
        decoded = jwt.decode(token, options={"verify_signature": False})

        # exp - iat should be ~10 minutes (9 min + 60s backdate)
        duration = decoded["exp"] - decoded["iat"]
        assert 540 <= duration <= 600

    def test_jwt_verifies_with_public_key(self) -> None:
        identity = AppIdentity.from_settings(make_settings())
        token = create_app_jwt(identity)
        public_key = serialization.load_pem_private_key(
            TEST_PRIVATE_KEY.encode(), password=None
        ).public_key()
        decoded = jwt.decode(token, public_key, algorithms=["RS256"])
        assert decoded["iss"] == "12345"
