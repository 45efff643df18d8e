"""
ReportFetcher - pulls pivot report rows from the host platform API.

Request:
  GET {base_url}{dataset report path}?apply_preference=1&$start_date=...&$end_date=...

Response body:
  {
    "Data": [
      {"Row_Material": "Copper", "Column_Material": "Copper", "Value_Qty": "120"},
      ...
    ],
    ...
  }

A body without a list under "Data" is an empty report, not an error.
Transport errors, non-2xx statuses and undecodable JSON raise
ReportFetchError so the caller can abort that dataset only.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from services.toplists.datasets import DatasetSpec
from services.toplists.dates import DateRange
from services.toplists.errors import ReportFetchError

logger = logging.getLogger(__name__)


@runtime_checkable
class ReportFetcher(Protocol):
    async def fetch(
        self,
        account_id: str,
        dataset: DatasetSpec,
        date_range: DateRange,
    ) -> list[dict[str, Any]]: ...


def _extract_rows(payload: Any) -> list[dict[str, Any]]:
    if not isinstance(payload, dict):
        return []
    data = payload.get("Data")
    if not isinstance(data, list):
        return []
    return [row for row in data if isinstance(row, dict)]


class HttpReportFetcher:
    """
    httpx-based report client.

    Usage:
        async with httpx.AsyncClient(base_url=settings.host_api_base_url) as client:
            fetcher = HttpReportFetcher(client, token=settings.host_api_token)
            rows = await fetcher.fetch(account_id, MATERIALS, date_range)
    """

    def __init__(self, client: httpx.AsyncClient, token: str = "") -> None:
        """
        Args:
            client: AsyncClient with base_url and timeout already configured.
            token:  Bearer token for the host API. Omitted from requests when empty.
        """
        self._client = client
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def fetch(
        self,
        account_id: str,
        dataset: DatasetSpec,
        date_range: DateRange,
    ) -> list[dict[str, Any]]:
        params = {"apply_preference": "1", **date_range.query_params()}
        path = dataset.path_for(account_id)

        try:
            resp = await self._client.get(path, params=params, headers=self._headers())
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "%s report returned %d for range %s: %s",
                dataset.log_tag,
                exc.response.status_code,
                date_range,
                exc.response.text[:200],
            )
            raise ReportFetchError(
                dataset.key,
                f"HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ReportFetchError(dataset.key, f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise ReportFetchError(dataset.key, "response body is not JSON") from exc

        rows = _extract_rows(payload)
        logger.debug("%s fetched %d rows for %s", dataset.log_tag, len(rows), date_range)
        return rows
