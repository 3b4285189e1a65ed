"""Credential resolution for AQS requests."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from aqsmcp.errors import MissingCredentialError


class CredentialSettings(BaseSettings):
    """Default credentials from AQS_EMAIL / AQS_API_KEY.

    Instantiated on every resolution so environment changes are picked up
    without restarting the server.
    """

    email: str | None = Field(None, description="Registered AQS email address")
    api_key: str | None = Field(None, description="AQS API key")

    model_config = SettingsConfigDict(env_prefix="AQS_", extra="ignore")


@dataclass(frozen=True)
class Credentials:
    email: str
    key: str

    def as_params(self) -> dict[str, str]:
        return {"email": self.email, "key": self.key}


def resolve_credentials(email: str | None = None, key: str | None = None) -> Credentials:
    """
    Prefer caller-supplied credentials, falling back to the environment.

    Raises:
        MissingCredentialError: if either value is missing from both sources.
            Email is checked first.
    """
    defaults = CredentialSettings()

    resolved_email = email or defaults.email
    resolved_key = key or defaults.api_key

    if not resolved_email:
        raise MissingCredentialError(
            "email",
            "Email is required. Provide it as a parameter or set AQS_EMAIL environment variable.",
        )
    if not resolved_key:
        raise MissingCredentialError(
            "key",
            "API key is required. Provide it as a parameter or set AQS_API_KEY environment variable.",
        )

    return Credentials(email=resolved_email, key=resolved_key)
