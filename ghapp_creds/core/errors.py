"""Root of the credential helper's exception hierarchy.

Every component raises a subclass of CredentialHelperError so the entry
point can report any failure the same way. Each component boundary owns
its own subtree:

  ConfigError: core.config / github.auth
  GitHubAPIError: github.client, github.installations
  TokenAcquisitionError: github.service
  CacheError: credentials.cache
  DocumentReadError / DocumentWriteError: protocol.document
  MissingCredentialsError: helper
"""


class CredentialHelperError(Exception):
    """Base class for every error the credential helper reports."""


class ConfigError(CredentialHelperError):
    """Raised when required configuration is missing or invalid."""


class MissingSettingError(ConfigError):
    """A required environment variable is unset or empty."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Required environment variable {name} is not set")
