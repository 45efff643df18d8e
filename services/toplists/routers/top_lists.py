"""
POST /top-lists/refresh  - Re-run the top-N pipelines for a date range.
POST /top-lists/account  - Host supplies the account id once it is known.
GET  /top-lists/{key}    - Current slot values for one dataset.

The host dashboard posts its account id once it is available, and calls
refresh on load and whenever the date picker changes. Refresh never fails
because of report data: empty or unusable reports clear the slots and the
summary says so.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from services.toplists.collaborators.account import DeferredAccountProvider
from services.toplists.datasets import DATASETS_BY_KEY
from services.toplists.dates import DateRange
from services.toplists.errors import InvalidDateRangeError
from services.toplists.pipeline import TopListRefresher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/top-lists", tags=["top-lists"])


def _get_refresher(request: Request) -> TopListRefresher:
    refresher = getattr(request.app.state, "refresher", None)
    if refresher is None:
        raise HTTPException(status_code=503, detail="Refresher unavailable")
    return refresher


class RefreshRequest(BaseModel):
    startDate: str = Field(..., description="ISO date YYYY-MM-DD, inclusive")
    endDate: str = Field(..., description="ISO date YYYY-MM-DD, inclusive")


@router.post("/refresh")
async def refresh_top_lists(body: RefreshRequest, request: Request) -> dict:
    """
    Refresh every dataset's top-N slots for the given range.

    The account wait happens inside the refresh; when the account never
    becomes available the summary is returned with skipped=true and no
    slot is touched.
    """
    refresher = _get_refresher(request)

    try:
        date_range = DateRange.from_strings(body.startDate, body.endDate)
    except InvalidDateRangeError as exc:
        logger.info("Rejected refresh request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))

    summary = await refresher.refresh(date_range)

    return {
        "success": True,
        "data": summary.to_dict(),
        "requestId": request.state.request_id,
    }


class AccountRequest(BaseModel):
    accountId: str = Field(..., min_length=1, description="Host account id")


@router.post("/account")
async def set_account(body: AccountRequest, request: Request) -> dict:
    """
    Resolve the account id that refreshes wait on.

    The first id wins; a later, different id is ignored and the resolved
    one is returned. Returns 409 when the account is fixed by configuration.
    """
    refresher = _get_refresher(request)
    provider = refresher.account
    if not isinstance(provider, DeferredAccountProvider):
        raise HTTPException(status_code=409, detail="Account id is fixed by configuration")

    provider.resolve(body.accountId)
    logger.info("Account id resolved for top-list refreshes")

    return {
        "success": True,
        "data": {"accountId": provider.account_id},
        "requestId": request.state.request_id,
    }


@router.get("/{key}")
async def get_top_list(key: str, request: Request) -> dict:
    dataset = DATASETS_BY_KEY.get(key)
    if dataset is None:
        raise HTTPException(status_code=404, detail=f"Unknown dataset: {key}")

    refresher = _get_refresher(request)
    slots = await refresher.publisher.snapshot(dataset.kind)

    return {
        "success": True,
        "data": {
            "dataset": dataset.key,
            "kind": dataset.kind,
            "slots": slots,
            "labels": [value for value in slots.values() if value],
        },
        "requestId": request.state.request_id,
    }
