"""
Overpass API Feature Store.

Fetches mountain passes, rivers and towns/cities/villages inside a
bounding box from the OpenStreetMap Overpass API in one query.
Rivers are ways and come back with a center point (``out center``).

API Documentation: https://wiki.openstreetmap.org/wiki/Overpass_API
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
    before_sleep_log,
)

from app.config import DEFAULT_OVERPASS_URL
from app.models import BoundingBox, Feature
from core.feature_store import features_from_elements
from providers.base import ProviderRequestError

# Logger
logger = logging.getLogger("overpass")

TIMEOUT = 30.0
USER_AGENT = "route-landmarks/0.1"

# Retry Configuration
RETRY_ATTEMPTS = 3
RETRY_WAIT_MIN = 2  # seconds
RETRY_WAIT_MAX = 30  # seconds
RETRY_STATUS_CODES = {429, 502, 503, 504}

QUERY_TEMPLATE = """[out:json][timeout:25];(
  node["mountain_pass"="yes"]({bbox});
  way["waterway"="river"]({bbox});
  node["place"~"town|city|village"]({bbox});
);out center tags;"""


def build_query(bbox: BoundingBox) -> str:
    """Overpass QL query for all landmark kinds inside ``bbox``."""
    return QUERY_TEMPLATE.format(bbox=bbox.as_overpass())


def _is_retryable_error(exception: BaseException) -> bool:
    """Check if exception is retryable."""
    if isinstance(exception, httpx.HTTPStatusError):
        return exception.response.status_code in RETRY_STATUS_CODES
    if isinstance(exception, (httpx.ConnectError, httpx.ReadTimeout)):
        return True
    return False


class OverpassProvider:
    """
    Overpass API feature store.

    One POST per lookup; transient errors are retried with exponential
    backoff, everything else is raised as ProviderRequestError.
    """

    def __init__(
        self,
        url: str = DEFAULT_OVERPASS_URL,
        timeout_s: float = TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize provider.

        Args:
            url: Overpass interpreter endpoint
            timeout_s: Per-request HTTP timeout
            client: Optional pre-configured client (tests, connection reuse)
        """
        self._url = url
        self._timeout_s = timeout_s
        self._client = client

    @property
    def name(self) -> str:
        """Provider identifier."""
        return "overpass"

    async def lookup(self, bbox: BoundingBox) -> List[Feature]:
        """
        Fetch landmark features inside ``bbox``.

        Raises:
            ProviderRequestError: On HTTP errors, after max retries, or
                if the response is not an Overpass JSON document
        """
        query = build_query(bbox)
        logger.debug("Overpass query for bbox %s", bbox.as_overpass())

        data = await self._request_with_errors(query)
        elements = data.get("elements") if isinstance(data, dict) else None
        if not isinstance(elements, list):
            raise ProviderRequestError("overpass", "Malformed response: no 'elements' list")

        features = features_from_elements(elements)
        logger.info("Overpass returned %d elements, %d usable features", len(elements), len(features))
        return features

    async def _request_with_errors(self, query: str) -> Dict[str, Any]:
        """Run the retried request and map failures to ProviderRequestError."""
        try:
            return await self._request(query)
        except httpx.HTTPStatusError as e:
            raise ProviderRequestError(
                "overpass",
                f"API error: {e.response.status_code} - {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise ProviderRequestError("overpass", f"Request failed: {e}") from e
        except ValueError as e:
            raise ProviderRequestError("overpass", f"Invalid JSON response: {e}") from e

    @retry(
        stop=stop_after_attempt(RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=RETRY_WAIT_MIN, max=RETRY_WAIT_MAX),
        retry=retry_if_exception(_is_retryable_error),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _request(self, query: str) -> Dict[str, Any]:
        """
        POST query to the Overpass interpreter with retry logic.

        Retries on:
        - HTTP 429, 502, 503, 504
        - Connection errors
        - Read timeouts
        """
        headers = {"User-Agent": USER_AGENT}
        if self._client is not None:
            response = await self._client.post(self._url, data={"data": query}, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout_s) as client:
                response = await client.post(self._url, data={"data": query}, headers=headers)
        response.raise_for_status()
        return response.json()
