"""Types for the credentials module."""

from pydantic import BaseModel, ConfigDict, Field


class CredentialPair(BaseModel):
    """Username/password handed to git.

    For a GitHub App the username is the stringified app id and the
    password is an installation access token. Instances are frozen;
    a new pair replaces an old one wholesale.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)
