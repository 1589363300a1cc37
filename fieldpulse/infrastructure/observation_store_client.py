"""
Infrastructure layer: observation store client with retry logic.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from fieldpulse.config import settings
from fieldpulse.domain.models import HealthAssessment, IndexObservation
from fieldpulse.infrastructure.store_endpoints import StoreConstants, StoreEndpoints
from fieldpulse.services.domain.ingestion import parse_assessments, parse_observations

logger = logging.getLogger(__name__)


class PageResponse(BaseModel):
    """Paginated list response from the store."""
    count: int
    next: Optional[str] = None
    previous: Optional[str] = None
    results: List[Dict[str, Any]]


class StoreClientError(Exception):
    """Raised when the observation store rejects or fails a request."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ObservationStoreClient:
    """
    Client for the store holding parcel observations and assessments.
    Implements retry logic with exponential backoff.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None):
        """Initialize the store client with configuration."""
        self.base_url = base_url or settings.store_base_url
        self.api_key = api_key if api_key is not None else settings.store_api_key
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "accept": StoreConstants.CONTENT_TYPE_JSON,
            },
            timeout=StoreConstants.DEFAULT_TIMEOUT,
        )

    async def __aenter__(self) -> "ObservationStoreClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    @retry(
        stop=stop_after_attempt(settings.max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.retry_backoff_multiplier,
            min=settings.retry_min_wait,
            max=settings.retry_max_wait,
        ),
        retry=retry_if_exception_type((httpx.HTTPStatusError, httpx.RequestError)),
        reraise=True,
    )
    async def _make_request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Make an HTTP request with retry logic.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: Store endpoint path or absolute pagination URL
            **kwargs: Additional arguments for the request

        Returns:
            Response data as dictionary

        Raises:
            StoreClientError: If the store rejects the request
        """
        try:
            response = await self.client.request(method, endpoint, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            # Retry on server errors (5xx)
            if e.response.status_code >= 500:
                raise
            # Don't retry on client errors (4xx)
            raise StoreClientError(
                f"Store request failed: {e.response.status_code} - {e.response.text}",
                status_code=e.response.status_code,
            )

    async def _get_all(self, endpoint: str) -> List[Dict[str, Any]]:
        """Follow pagination links and collect every result."""
        results: List[Dict[str, Any]] = []
        next_url: Optional[str] = endpoint
        params: Optional[Dict[str, Any]] = {"page_size": StoreConstants.DEFAULT_PAGE_SIZE}

        while next_url:
            try:
                data = await self._make_request("GET", next_url, params=params)
            except httpx.HTTPStatusError as e:
                raise StoreClientError(
                    f"Store unavailable after retries: {e.response.status_code}",
                    status_code=502,
                )
            except httpx.RequestError as e:
                raise StoreClientError(f"Store request error: {str(e)}", status_code=502)

            page = PageResponse(**data)
            results.extend(page.results)
            next_url = page.next
            # The next link already carries its query string
            params = None

        return results

    async def get_observations(self, parcel_id: str) -> List[IndexObservation]:
        """
        Fetch all index observations of a parcel.

        Args:
            parcel_id: Parcel identifier

        Returns:
            List of validated IndexObservation records

        Raises:
            StoreClientError: If the request fails
        """
        raw = await self._get_all(StoreEndpoints.observations(parcel_id))
        logger.debug(f"Fetched {len(raw)} observations for parcel {parcel_id}")
        return parse_observations(raw)

    async def get_assessments(self, parcel_id: str) -> List[HealthAssessment]:
        """
        Fetch all health assessments of a parcel.

        Args:
            parcel_id: Parcel identifier

        Returns:
            List of validated HealthAssessment records

        Raises:
            StoreClientError: If the request fails
            InvariantViolationError: If an assessment's problem areas exceed 100%
        """
        raw = await self._get_all(StoreEndpoints.assessments(parcel_id))
        logger.debug(f"Fetched {len(raw)} assessments for parcel {parcel_id}")
        return parse_assessments(raw, area_tolerance=settings.zone_area_tolerance)


# Singleton instance
_store_client: Optional[ObservationStoreClient] = None


def get_store_client() -> ObservationStoreClient:
    """
    Get or create the singleton store client instance.

    Returns:
        ObservationStoreClient instance
    """
    global _store_client
    if _store_client is None:
        _store_client = ObservationStoreClient()
    return _store_client
