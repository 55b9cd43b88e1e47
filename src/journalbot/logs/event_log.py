from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

logger = logging.getLogger("journalbot.ledger")


def log_ledger_event(
    event: str,
    journal: str,
    record_id: Optional[str] = None,
    level: int = logging.INFO,
    **extra: Any,
) -> None:
    """Emit a structured JSON log line for a journal mutation.

    Keys: event, journal, record_id, ts, component, schema_version (+ extra)
    """
    payload: Dict[str, Any] = {
        "event": str(event),
        "journal": str(journal),
        "record_id": record_id,
        "ts": datetime.now(timezone.utc).isoformat(),
        "component": "ledger",
        "schema_version": "v1",
    }
    if extra:
        payload["extra"] = extra
    logger.log(level, json.dumps(payload, separators=(",", ":"), default=str))
