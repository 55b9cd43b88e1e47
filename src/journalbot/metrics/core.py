"""Core metrics helpers for journalbot.

Provides duplicate-tolerant collector constructors and a thin wrapper to start
the Prometheus HTTP server while tolerating bind failures (useful for a cron
driven CLI that may run while a previous invocation still holds the port).
"""

import logging
import os
from typing import Optional, Sequence

from prometheus_client import Counter, Gauge, REGISTRY, start_http_server


class _NoOp:
    def labels(self, *args, **kwargs):
        return self

    def inc(self, *args, **kwargs):
        return None

    def set(self, *args, **kwargs):
        return None


def _disabled() -> bool:
    return os.getenv("DISABLE_PROMETHEUS", "0") == "1"


def _registered(name: str):
    coll = getattr(REGISTRY, "_names_to_collectors", {}).get(name)
    if coll is not None:
        return coll
    for coll in list(getattr(REGISTRY, "_collector_to_names", {}).keys()):
        if getattr(coll, "_name", None) == name:
            return coll
    return None


def safe_counter(name: str, doc: str, labelnames: Sequence[str]):
    if _disabled():
        return _NoOp()
    try:
        return Counter(name, doc, labelnames)
    except ValueError:
        # Already registered (module reloaded); reuse the existing collector
        return _registered(name) or _NoOp()


def safe_gauge(name: str, doc: str, labelnames: Sequence[str]):
    if _disabled():
        return _NoOp()
    try:
        return Gauge(name, doc, labelnames)
    except ValueError:
        return _registered(name) or _NoOp()


def start_server_safe(port: int) -> Optional[int]:
    """Start Prometheus metrics server; return port or None if failed.

    Logs a warning and continues if the port cannot be bound.
    """
    try:
        start_http_server(port)
        logging.info(f"Prometheus metrics server started on :{port}")
        return port
    except OSError as e:
        logging.warning(f"Failed to start Prometheus server on :{port}: {e}")
        return None
