"""Catalog collaborators backed by Bedrock and by HTTP model-list endpoints."""

from __future__ import annotations

import logging

import boto3
import httpx
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from bedlaunch.catalog.errors import CatalogError, CatalogErrorCode, catalog_unavailable

_LOGGER = logging.getLogger(__name__)

_SYSTEM_DEFINED = "SYSTEM_DEFINED"
_RECOMMENDED_CONTEXTS = {
    "main": "code",
    "fast": "code-fast",
    "heavy": "code-heavy",
}


class BedrockCatalogFetcher:
    """List system-defined cross-region inference profiles."""

    def __init__(
        self,
        *,
        aws_profile: str,
        region: str,
        timeout_seconds: float = 30.0,
    ) -> None:
        """Store AWS coordinates for later fetches.

        Args:
            aws_profile: Shared-config credentials profile name.
            region: AWS region hosting the Bedrock control plane.
            timeout_seconds: Connect/read timeout applied to each request.
        """
        self.aws_profile = aws_profile
        self.region = region
        self.timeout_seconds = timeout_seconds

    def _client(self) -> object:
        config = Config(
            connect_timeout=self.timeout_seconds,
            read_timeout=self.timeout_seconds,
            retries={"max_attempts": 3, "mode": "adaptive"},
        )
        session = boto3.Session(
            profile_name=self.aws_profile or None,
            region_name=self.region,
        )
        return session.client("bedrock", config=config)

    def fetch(self) -> list[str]:
        """Return every inference profile identifier, in API order.

        Returns:
            Identifier strings.

        Raises:
            CatalogError: ``catalog_unavailable`` on credential or API failure.
        """
        identifiers: list[str] = []
        try:
            client = self._client()
            kwargs: dict[str, str] = {"typeEquals": _SYSTEM_DEFINED}
            while True:
                page = client.list_inference_profiles(**kwargs)  # type: ignore[attr-defined]
                for summary in page.get("inferenceProfileSummaries", []):
                    identifier = summary.get("inferenceProfileId")
                    if identifier:
                        identifiers.append(identifier)
                token = page.get("nextToken")
                if not token:
                    break
                kwargs["nextToken"] = token
        except ClientError as exc:
            error_code = exc.response.get("Error", {}).get("Code", "")
            _LOGGER.debug("Bedrock API error: %s", error_code)
            raise catalog_unavailable("failed to list inference profiles", cause=exc) from exc
        except BotoCoreError as exc:
            raise catalog_unavailable("failed to load AWS config", cause=exc) from exc
        _LOGGER.debug(
            "Fetched %d inference profiles from %s", len(identifiers), self.region
        )
        return identifiers


class ApiModelInfo(BaseModel):
    """One entry from an HTTP ``/v1/models`` listing."""

    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    description: str = ""
    recommended: list[str] = Field(default_factory=list)


class _ApiModelsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: list[ApiModelInfo] = Field(default_factory=list)


def normalize_base_url(base_url: str) -> str:
    """Trim, drop trailing slash, and default to ``https://``.

    Args:
        base_url: User-entered base URL.

    Returns:
        Normalized URL.
    """
    url = base_url.strip().rstrip("/")
    if url.startswith(("http://", "https://")):
        return url
    return f"https://{url}"


class ApiModelFetcher:
    """List models from an HTTP completion API."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Store endpoint coordinates.

        Args:
            base_url: API base URL; normalized before use.
            api_key: Bearer token.
            timeout_seconds: Request timeout.
            transport: Optional httpx transport override.
        """
        self.base_url = normalize_base_url(base_url)
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    def fetch_models(self) -> list[ApiModelInfo]:
        """Fetch the model listing.

        Returns:
            Parsed model entries.

        Raises:
            CatalogError: ``catalog_unavailable`` on transport or HTTP failure
                (``data["status_code"]`` set for HTTP errors), ``catalog_empty``
                when the listing is empty.
        """
        endpoint = f"{self.base_url}/v1/models"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            with httpx.Client(
                timeout=self.timeout_seconds, transport=self._transport
            ) as client:
                response = client.get(endpoint, headers=headers)
        except httpx.HTTPError as exc:
            raise catalog_unavailable("failed to fetch models", cause=exc) from exc
        if response.status_code != httpx.codes.OK:
            raise CatalogError(
                CatalogErrorCode.UNAVAILABLE,
                f"API returned status {response.status_code}: {response.text}",
                data={"status_code": response.status_code},
            )
        try:
            payload = _ApiModelsResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise catalog_unavailable("failed to parse response", cause=exc) from exc
        if not payload.data:
            raise CatalogError(CatalogErrorCode.EMPTY, "no models available from API")
        return payload.data

    def fetch(self) -> list[str]:
        """Return the listed model IDs."""
        return [model.id for model in self.fetch_models()]


def api_provider(model_id: str) -> str:
    """Return the lower-cased provider prefix of ``provider/model`` IDs, or ``""``."""
    provider, sep, _ = model_id.partition("/")
    return provider.lower() if sep else ""


def api_friendly_name(model_id: str) -> str:
    """Derive a display name from an API model ID.

    ``anthropic/claude-sonnet-4-5`` becomes ``Claude Sonnet 4 5``.
    """
    name = model_id.rsplit("/", 1)[-1]
    return name.replace("-", " ").title()


def is_recommended(model: ApiModelInfo, context: str) -> bool:
    """Return whether ``model`` is recommended for ``main``/``fast``/``heavy``."""
    api_context = _RECOMMENDED_CONTEXTS.get(context)
    return api_context is not None and api_context in model.recommended
