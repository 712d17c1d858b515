# ==============================
# Logging Bootstrap
# ==============================
"""
Logging bootstrap.

Goals:
- Centralize logger configuration using Settings.logging.
- Provide structured context fields (collection, endpoint, tier).
- Keep it simple: stdlib logging + JSON-line formatter.

Modules log through logging.getLogger(__name__); only entrypoints call
bootstrap_logger().
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ragcore.config.schema import Settings


STRUCTURED_FIELDS = ("collection", "endpoint", "tier", "party")


@dataclass(frozen=True)
class LogContext:
    collection: Optional[str] = None
    endpoint: Optional[str] = None
    tier: Optional[str] = None
    party: Optional[str] = None


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        # Optional structured extras
        for k in STRUCTURED_FIELDS:
            value = getattr(record, k, None)
            if value is not None:
                payload[k] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def bootstrap_logger(settings: Settings) -> logging.Logger:
    """
    Configure root logger based on settings.
    Returns the package logger ("ragcore").
    """
    level = getattr(logging, settings.logging.level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    # clear existing handlers to avoid duplicates in reload
    root.handlers = []

    if settings.logging.console:
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        if settings.logging.json_lines:
            handler.setFormatter(JsonLineFormatter())
        else:
            handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)

    # httpx logs every request at INFO; keep it out of the way unless debugging
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    return logging.getLogger("ragcore")


def with_context(logger: logging.Logger, ctx: LogContext) -> logging.LoggerAdapter:
    return logging.LoggerAdapter(
        logger,
        {
            "collection": ctx.collection,
            "endpoint": ctx.endpoint,
            "tier": ctx.tier,
            "party": ctx.party,
        },
    )
