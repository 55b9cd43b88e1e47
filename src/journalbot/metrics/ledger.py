"""Ledger metrics.

Counters:
- journal_records_added_total{journal}
- journal_transitions_total{journal,status}
- journal_lookup_misses_total{journal}

Gauge:
- recommendation_success_rate{journal}
"""

from __future__ import annotations

from typing import Any, Optional

from .core import safe_counter, safe_gauge

_records_added: Optional[Any] = None
_transitions: Optional[Any] = None
_lookup_misses: Optional[Any] = None
_success_rate: Optional[Any] = None


def get_records_added_total():
    global _records_added
    if _records_added is None:
        _records_added = safe_counter("journal_records_added_total", "Records appended to a journal", ["journal"])
    return _records_added


def get_transitions_total():
    global _transitions
    if _transitions is None:
        _transitions = safe_counter("journal_transitions_total", "Status transitions applied", ["journal", "status"])
    return _transitions


def get_lookup_misses_total():
    global _lookup_misses
    if _lookup_misses is None:
        _lookup_misses = safe_counter("journal_lookup_misses_total", "Operations on unknown record ids", ["journal"])
    return _lookup_misses


def get_success_rate_gauge():
    global _success_rate
    if _success_rate is None:
        _success_rate = safe_gauge("recommendation_success_rate", "Implemented share of recommendations (percent)", ["journal"])
    return _success_rate


def inc_added(journal: str) -> None:
    get_records_added_total().labels(journal).inc()


def inc_transition(journal: str, status: str) -> None:
    get_transitions_total().labels(journal, status).inc()


def inc_lookup_miss(journal: str) -> None:
    get_lookup_misses_total().labels(journal).inc()


def set_success_rate(journal: str, rate: float) -> None:
    get_success_rate_gauge().labels(journal).set(rate)
