"""Authenticated connection to one Azure DevOps organization.

The connection owns a single httpx.AsyncClient shared by every tool call.
It is safe to issue many requests concurrently through it; its client and
credential are created up front and never replaced.
"""
import asyncio
import base64
import logging
from typing import Any, Optional

import httpx

from .clients import CoreApi, GitApi, SearchApi, WorkItemTrackingApi
from .config import AuthMethod, Settings
from .errors import (
    AzureDevOpsAuthenticationError,
    AzureDevOpsError,
    classify_http_error,
    classify_request_error,
)

logger = logging.getLogger("ado-core.connection")

# Azure DevOps resource id used for Entra ID token acquisition
AZURE_DEVOPS_RESOURCE_ID = "499b84ac-1321-427f-aa17-267ca6975798"
AZURE_DEVOPS_SCOPE = f"{AZURE_DEVOPS_RESOURCE_ID}/.default"


def _default_credential(auth_method: AuthMethod):
    from azure.identity import AzureCliCredential, DefaultAzureCredential

    if auth_method == AuthMethod.AZURE_CLI:
        return AzureCliCredential()
    return DefaultAzureCredential()


class AzureDevOpsConnection:
    """Opaque handle exposing the remote subsystems of an organization.

    Usage:
        async with AzureDevOpsConnection(settings) as connection:
            git_api = await connection.get_git_api()
    """

    def __init__(
        self,
        settings: Settings,
        http_client: Optional[httpx.AsyncClient] = None,
        credential: Any = None,
    ):
        self.settings = settings
        self.organization_url = settings.organization_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self.organization_url + "/",
            timeout=settings.request_timeout,
        )
        self._owns_credential = credential is None and settings.auth_method != AuthMethod.PAT
        self._credential = _default_credential(settings.auth_method) if self._owns_credential else credential

    async def __aenter__(self) -> "AzureDevOpsConnection":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
        if self._owns_credential:
            self._credential.close()

    @property
    def organization(self) -> str:
        return self.settings.organization

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def get_authorization_header(self) -> str:
        """Produce the Authorization header value for the next request.

        PAT auth uses HTTP Basic with an empty user name. Every other method
        asks azure-identity for a bearer token scoped to Azure DevOps.

        Raises:
            AzureDevOpsAuthenticationError: If no credential can be obtained
        """
        if self.settings.auth_method == AuthMethod.PAT:
            token = base64.b64encode(f":{self.settings.personal_access_token}".encode()).decode()
            return f"Basic {token}"

        try:
            access_token = await asyncio.to_thread(self._credential.get_token, AZURE_DEVOPS_SCOPE)
        except Exception as e:
            raise AzureDevOpsAuthenticationError(f"Failed to get authorization header: {e}") from e

        if not access_token or not access_token.token:
            raise AzureDevOpsAuthenticationError(
                "Failed to get authorization header: Failed to acquire token for Azure DevOps"
            )
        return f"Bearer {access_token.token}"

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[dict] = None,
        json: Any = None,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        """Send one authenticated request and classify any failure.

        `url` is relative to the organization URL unless absolute. None-valued
        query parameters are dropped. Nothing is retried.
        """
        query = {"api-version": self.settings.api_version}
        if params:
            query.update({k: v for k, v in params.items() if v is not None})

        request_headers = {"Authorization": await self.get_authorization_header()}
        if headers:
            request_headers.update(headers)

        try:
            response = await self._client.request(method, url, params=query, json=json, headers=request_headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error during {method} {e.request.url}:")
            logger.error(f"  Status: {e.response.status_code}")
            logger.error(f"  Response text: {e.response.text}")
            raise classify_http_error(e) from e
        except httpx.RequestError as e:
            logger.error(f"Request error during {method} {url}: {type(e).__name__}: {e}")
            raise classify_request_error(e) from e
        return response

    async def test_connection(self) -> None:
        """Verify credentials by listing a single project."""
        core_api = await self.get_core_api()
        try:
            await core_api.get_projects(top=1)
        except AzureDevOpsError as e:
            raise AzureDevOpsAuthenticationError(f"Failed to connect to Azure DevOps: {e.message}") from e

    # ------------------------------------------------------------------
    # Capability accessors
    # ------------------------------------------------------------------

    async def get_core_api(self) -> CoreApi:
        return CoreApi(self)

    async def get_work_item_tracking_api(self) -> WorkItemTrackingApi:
        return WorkItemTrackingApi(self)

    async def get_git_api(self) -> GitApi:
        return GitApi(self)

    async def get_search_api(self) -> SearchApi:
        return SearchApi(self)
