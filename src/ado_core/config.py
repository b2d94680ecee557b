"""Runtime settings for the Azure DevOps connection.

Settings are resolved once at startup from environment variables and then
passed explicitly into the connection. Nothing reads the environment while
a request is being served.
"""
import enum
import logging
import os
import re
from functools import lru_cache
from typing import Mapping, Optional

from pydantic import BaseModel, Field, ValidationError, model_validator

from .errors import AzureDevOpsValidationError

logger = logging.getLogger("ado-core.config")

ORGANIZATION_URL_PATTERN = re.compile(r"https?://dev\.azure\.com/([^/]+)")


class AuthMethod(str, enum.Enum):
    """How the connection obtains its credential."""
    PAT = "pat"
    AZURE_IDENTITY = "azure-identity"
    AZURE_CLI = "azure-cli"


class Settings(BaseModel):
    """Connection settings for one Azure DevOps organization."""

    organization_url: str = Field(..., min_length=1)
    auth_method: AuthMethod = AuthMethod.AZURE_IDENTITY
    personal_access_token: Optional[str] = None
    default_project: Optional[str] = None
    api_version: str = "7.1"
    request_timeout: float = Field(30.0, gt=0)
    max_concurrent_fetches: int = Field(16, ge=1, description="Cap on in-flight content fetches per search batch")

    @model_validator(mode="after")
    def check_credentials(self) -> "Settings":
        if self.auth_method == AuthMethod.PAT and not self.personal_access_token:
            raise ValueError("personal_access_token is required when auth_method is 'pat'")
        return self

    @property
    def organization(self) -> str:
        """Organization name extracted from the organization URL."""
        match = ORGANIZATION_URL_PATTERN.match(self.organization_url)
        if not match:
            raise AzureDevOpsValidationError("Could not extract organization from connection URL")
        return match.group(1)


# Environment variable -> Settings field
ENV_VARS: dict[str, str] = {
    "AZURE_DEVOPS_ORG_URL": "organization_url",
    "AZURE_DEVOPS_AUTH_METHOD": "auth_method",
    "AZURE_DEVOPS_PAT": "personal_access_token",
    "AZURE_DEVOPS_DEFAULT_PROJECT": "default_project",
    "AZURE_DEVOPS_API_VERSION": "api_version",
    "AZURE_DEVOPS_REQUEST_TIMEOUT": "request_timeout",
    "AZURE_DEVOPS_MAX_CONCURRENT_FETCHES": "max_concurrent_fetches",
}


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build settings from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Validated Settings

    Raises:
        AzureDevOpsValidationError: If a variable is missing or malformed
    """
    environ = os.environ if environ is None else environ
    values = {}
    for env_name, field_name in ENV_VARS.items():
        raw = environ.get(env_name)
        if raw is None or raw.strip() == "":
            continue
        values[field_name] = raw.strip().lower() if field_name == "auth_method" else raw.strip()

    try:
        settings = Settings(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'settings'}: {err['msg']}" for err in e.errors()
        )
        raise AzureDevOpsValidationError(f"Invalid configuration: {problems}") from e

    logger.info(f"Loaded settings for {settings.organization_url} (auth: {settings.auth_method.value})")
    return settings


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, resolved on first use."""
    return load_settings()
