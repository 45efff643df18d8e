"""
Host platform collaborators, injected into the refresh pipeline.

  AccountProvider  - resolves the account id once, with a timeout
  ReportFetcher    - fetches pivot report rows for a date range
  VariableStore    - string key/value store holding the output slots
"""

from services.toplists.collaborators.account import (
    AccountProvider,
    DeferredAccountProvider,
    StaticAccountProvider,
)
from services.toplists.collaborators.reports import HttpReportFetcher, ReportFetcher
from services.toplists.collaborators.variables import (
    InMemoryVariableStore,
    RedisVariableStore,
    VariableStore,
)

__all__ = [
    "AccountProvider",
    "DeferredAccountProvider",
    "StaticAccountProvider",
    "HttpReportFetcher",
    "ReportFetcher",
    "InMemoryVariableStore",
    "RedisVariableStore",
    "VariableStore",
]
