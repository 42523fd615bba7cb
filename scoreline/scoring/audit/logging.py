"""Structured audit logging for scoring passes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from scoreline.config.scoring_rules import ScoringRules

from ..types import AggregateTotals
from .hashing import compute_aggregates_hash, compute_rules_hash


class ScoringAuditLogger:
    """Structured logger for the scoring audit trail.

    Records which rules a pass ran under and a hash of what it committed.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        """Initialize the audit logger.

        Args:
            logger: Optional logger instance (creates one if not provided)
            level: Level for start/commit records; failures never go below WARNING
        """
        self.logger = logger or logging.getLogger("scoring.audit")
        self.level = level

    def log_pass_start(self, pass_name: str, rules: ScoringRules, **context: Any) -> None:
        self.logger.log(self.level, {
            "event": "pass_start",
            "pass": pass_name,
            "rules": rules.model_dump(),
            "rules_hash": compute_rules_hash(rules)[:16] + "...",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **context,
        })

    def log_pass_committed(
        self,
        pass_name: str,
        totals: Iterable[AggregateTotals],
        **context: Any,
    ) -> None:
        totals = list(totals)
        self.logger.log(self.level, {
            "event": "pass_committed",
            "pass": pass_name,
            "n_aggregates": len(totals),
            "aggregates_hash": compute_aggregates_hash(totals),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **context,
        })

    def log_pass_failed(self, pass_name: str, reason: str, **context: Any) -> None:
        self.logger.log(max(self.level, logging.WARNING), {
            "event": "pass_failed",
            "pass": pass_name,
            "reason": reason,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **context,
        })


# Default instance
_audit_logger: Optional[ScoringAuditLogger] = None


def get_audit_logger() -> ScoringAuditLogger:
    """Get or create the default audit logger."""
    global _audit_logger
    if _audit_logger is None:
        _audit_logger = ScoringAuditLogger()
    return _audit_logger


def set_audit_logger(audit_logger: Optional[ScoringAuditLogger]) -> None:
    """Replace the default audit logger (None restores lazy creation)."""
    global _audit_logger
    _audit_logger = audit_logger


__all__ = [
    "ScoringAuditLogger",
    "get_audit_logger",
    "set_audit_logger",
]
