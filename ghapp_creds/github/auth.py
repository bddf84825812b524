"""GitHub App authentication.

Loads the app identity from settings and signs the JWT used to act as the
app. The private key is the PEM contents supplied through GITHUB_APP_KEY;
it is never logged or written to disk.

GitHub App auth flow:
1. Generate a JWT signed with the App's private key
2. Use it to find the installation and request an installation token
3. Hand the installation token to git as the password
"""

import time
from dataclasses import dataclass, field

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey

from ghapp_creds.core.config import Settings
from ghapp_creds.core.errors import ConfigError, MissingSettingError


class AppIdInvalidError(ConfigError):
    def __init__(self, app_id: str, reason: str):
        self.app_id = app_id
        super().__init__(f"App ID {app_id!r} wasn't a positive integer: {reason}")


class AppKeyInvalidError(ConfigError):
    def __init__(self, reason: str):
        super().__init__(f"App key wasn't a valid RSA key: {reason}")


def _parse_app_id(raw: str) -> int:
    try:
        app_id = int(raw.strip())
    except ValueError as exc:
        raise AppIdInvalidError(raw, str(exc)) from exc
    if app_id <= 0:
        raise AppIdInvalidError(raw, "must be greater than zero")
    return app_id


def _load_private_key(pem: str) -> RSAPrivateKey:
    try:
        key = serialization.load_pem_private_key(pem.encode("utf-8"), password=None)
    except (ValueError, TypeError) as exc:
        raise AppKeyInvalidError(str(exc)) from exc
    if not isinstance(key, RSAPrivateKey):
        raise AppKeyInvalidError(f"expected an RSA key, got {type(key).__name__}")
    return key


@dataclass(frozen=True)
class AppIdentity:
    """A GitHub App's numeric id and private signing key."""

    app_id: int
    private_key: RSAPrivateKey = field(repr=False)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppIdentity":
        """Build the identity from GITHUB_APP_ID / GITHUB_APP_KEY.

        Raises:
            ConfigError: If either value is missing or invalid.
        """
        if not settings.github_app_id:
            raise MissingSettingError("GITHUB_APP_ID")
        if not settings.github_app_key:
            raise MissingSettingError("GITHUB_APP_KEY")
        return cls(
            app_id=_parse_app_id(settings.github_app_id),
            private_key=_load_private_key(settings.github_app_key),
        )


def create_app_jwt(identity: AppIdentity) -> str:
    """Create a JWT for authenticating as the GitHub App.

    JWTs are valid for up to 10 minutes. We use 9 minutes
    to avoid clock-skew rejections.
    """
    now = int(time.time())
    payload = {
        "iat": now - 60,  # Backdate 60s to handle clock skew
        "exp": now + (9 * 60),  # 9 minutes
        "iss": str(identity.app_id),
    }
    try:
        return jwt.encode(payload, identity.private_key, algorithm="RS256")
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        raise AppKeyInvalidError(str(exc)) from exc
