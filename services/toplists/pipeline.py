"""
Top-list refresh pipeline.

Flow per refresh:
  1. Take a generation number from the RefreshFence
  2. Wait (bounded) for the account id; if it never arrives, skip the whole
     refresh without touching any slot
  3. For every dataset, concurrently and independently:
       fetch report -> detect keys -> extract top N -> publish
     Empty report, undetectable keys or no diagonal rows clear the slots.
  4. Return a RefreshSummary with one outcome per dataset

Isolation:
  A dataset pipeline never raises. Fetch and detection failures are logged,
  reported to Sentry and recorded as FAILED; the other datasets still run.
  Slot write failures are handled per slot by SlotPublisher.

Stale runs:
  When fencing is enabled, a dataset whose refresh has been superseded by a
  newer one (date range changed while this run was fetching) does not
  publish. The newer refresh owns the slots.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Sequence

import sentry_sdk

from services.toplists.collaborators.account import AccountProvider
from services.toplists.collaborators.reports import ReportFetcher
from services.toplists.collaborators.variables import VariableStore
from services.toplists.datasets import DEFAULT_DATASETS, DatasetSpec
from services.toplists.dates import DateRange
from services.toplists.errors import AccountNotReadyError
from services.toplists.extraction.extractor import extract_top_n
from services.toplists.extraction.keys import DetectionStatus, detect_keys
from services.toplists.slots import SlotPublisher

logger = logging.getLogger(__name__)

# Default bound on waiting for the host account id
DEFAULT_ACCOUNT_TIMEOUT_S = 10.0


class DatasetOutcome(str, enum.Enum):
    PUBLISHED = "published"
    CLEARED_EMPTY = "cleared_empty"
    CLEARED_UNDETECTABLE = "cleared_undetectable"
    CLEARED_NO_MATCHES = "cleared_no_matches"
    SUPERSEDED = "superseded"
    FAILED = "failed"


@dataclass
class DatasetResult:
    dataset: str
    outcome: DatasetOutcome
    labels: list[str] = field(default_factory=list)
    failed_slots: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "dataset": self.dataset,
            "outcome": self.outcome.value,
            "labels": list(self.labels),
            "failedSlots": list(self.failed_slots),
            "error": self.error,
        }


@dataclass
class RefreshSummary:
    generation: int
    date_range: DateRange
    skipped: bool = False
    skip_reason: str | None = None
    results: dict[str, DatasetResult] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generation": self.generation,
            "startDate": self.date_range.start.isoformat(),
            "endDate": self.date_range.end.isoformat(),
            "skipped": self.skipped,
            "skipReason": self.skip_reason,
            "datasets": {key: r.to_dict() for key, r in self.results.items()},
        }


class RefreshFence:
    """
    Monotonic generation counter shared by all refreshes of one slot store.

    begin() hands out a new generation; is_current() tells a running refresh
    whether a newer one has started since.
    """

    def __init__(self) -> None:
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def begin(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, generation: int) -> bool:
        return generation == self._latest


class TopListRefresher:
    """
    Runs the per-dataset pipelines against injected collaborators.

    Usage:
        refresher = TopListRefresher(account=provider, fetcher=fetcher, store=store)
        summary = await refresher.refresh(DateRange.from_strings("2026-10-01", "2026-10-31"))
    """

    def __init__(
        self,
        account: AccountProvider,
        fetcher: ReportFetcher,
        store: VariableStore,
        datasets: Sequence[DatasetSpec] = DEFAULT_DATASETS,
        account_timeout_s: float = DEFAULT_ACCOUNT_TIMEOUT_S,
        fence: RefreshFence | None = None,
    ) -> None:
        """
        Args:
            account:           resolves the host account id.
            fetcher:           report source.
            store:             slot variable store.
            datasets:          datasets refreshed on every run.
            account_timeout_s: how long to wait for the account id.
            fence:             stale-run fence; None disables fencing
                               (last writer wins).
        """
        self._account = account
        self._fetcher = fetcher
        self._store = store
        self._publisher = SlotPublisher(store)
        self._datasets = tuple(datasets)
        self._account_timeout_s = account_timeout_s
        self._fence = fence
        self._unfenced_generation = 0

    @property
    def account(self) -> AccountProvider:
        return self._account

    @property
    def publisher(self) -> SlotPublisher:
        return self._publisher

    @property
    def datasets(self) -> tuple[DatasetSpec, ...]:
        return self._datasets

    def _begin(self) -> int:
        if self._fence is not None:
            return self._fence.begin()
        self._unfenced_generation += 1
        return self._unfenced_generation

    def _is_stale(self, generation: int) -> bool:
        return self._fence is not None and not self._fence.is_current(generation)

    async def refresh(self, date_range: DateRange) -> RefreshSummary:
        generation = self._begin()
        summary = RefreshSummary(generation=generation, date_range=date_range)

        try:
            account_id = await self._account.wait_for_account(self._account_timeout_s)
        except AccountNotReadyError as exc:
            logger.warning("[TopData] Missing account id, skipping refresh: %s", exc)
            summary.skipped = True
            summary.skip_reason = "account_not_ready"
            return summary

        results = await asyncio.gather(
            *(
                self.refresh_dataset(dataset, account_id, date_range, generation)
                for dataset in self._datasets
            )
        )
        for result in results:
            summary.results[result.dataset] = result

        logger.info(
            "[TopData] Refresh %d for %s done: %s",
            generation,
            date_range,
            {key: r.outcome.value for key, r in summary.results.items()},
        )
        return summary

    async def refresh_dataset(
        self,
        dataset: DatasetSpec,
        account_id: str,
        date_range: DateRange,
        generation: int,
    ) -> DatasetResult:
        """Run one dataset pipeline. Never raises."""
        try:
            return await self._run_dataset(dataset, account_id, date_range, generation)
        except Exception as exc:
            logger.exception("%s Error refreshing for %s", dataset.log_tag, date_range)
            sentry_sdk.capture_message(
                f"{dataset.log_tag} refresh failed: {type(exc).__name__}: {exc}",
                level="error",
            )
            return DatasetResult(
                dataset=dataset.key,
                outcome=DatasetOutcome.FAILED,
                error=f"{type(exc).__name__}: {exc}",
            )

    async def _run_dataset(
        self,
        dataset: DatasetSpec,
        account_id: str,
        date_range: DateRange,
        generation: int,
    ) -> DatasetResult:
        rows = await self._fetcher.fetch(account_id, dataset, date_range)

        if self._is_stale(generation):
            logger.info(
                "%s Refresh %d superseded by %d; not publishing",
                dataset.log_tag,
                generation,
                self._fence.latest if self._fence else generation,
            )
            return DatasetResult(dataset=dataset.key, outcome=DatasetOutcome.SUPERSEDED)

        detection = detect_keys(rows)

        if detection.status is DetectionStatus.EMPTY:
            logger.info("%s No data for %s; clearing slots", dataset.log_tag, date_range)
            return await self._clear(dataset, DatasetOutcome.CLEARED_EMPTY)

        if detection.status is DetectionStatus.UNDETECTABLE:
            logger.warning(
                "%s Could not detect row/column/value keys. Sample row: %r",
                dataset.log_tag,
                detection.sample,
            )
            return await self._clear(dataset, DatasetOutcome.CLEARED_UNDETECTABLE)

        ranked = extract_top_n(rows, detection.keys)
        if not ranked:
            logger.info("%s No matching row/column labels; clearing slots", dataset.log_tag)
            return await self._clear(dataset, DatasetOutcome.CLEARED_NO_MATCHES)

        report = await self._publisher.publish(dataset.kind, ranked)
        if logger.isEnabledFor(logging.DEBUG):
            # Read-back is diagnostic only; the publish outcome stands either way
            try:
                stored = await self._publisher.snapshot(dataset.kind)
            except Exception:
                logger.warning("%s Slot read-back failed", dataset.log_tag, exc_info=True)
            else:
                logger.debug("%s Stored for %s: %s", dataset.log_tag, date_range, stored)

        return DatasetResult(
            dataset=dataset.key,
            outcome=DatasetOutcome.PUBLISHED,
            labels=[entry.label for entry in ranked],
            failed_slots=report.failed,
        )

    async def _clear(self, dataset: DatasetSpec, outcome: DatasetOutcome) -> DatasetResult:
        report = await self._publisher.clear(dataset.kind)
        return DatasetResult(dataset=dataset.key, outcome=outcome, failed_slots=report.failed)
