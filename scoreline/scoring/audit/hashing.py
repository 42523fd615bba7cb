"""Deterministic hashing for scoring inputs and outputs.

Two runs over the same rules and source data must produce the same hashes,
which makes incremental drift visible when compared with a full recalculation.
"""

from __future__ import annotations

import hashlib
import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable

from scoreline.config.scoring_rules import ScoringRules

from ..types import AggregateTotals


def _serialize_value(val: Any) -> Any:
    """Serialize a value for deterministic hashing."""
    if val is None:
        return None
    elif isinstance(val, Enum):
        return val.value
    elif isinstance(val, datetime):
        return val.isoformat()
    elif isinstance(val, dict):
        return {str(k): _serialize_value(v) for k, v in sorted(val.items())}
    elif isinstance(val, (list, tuple)):
        return [_serialize_value(v) for v in val]
    elif isinstance(val, (int, float, str, bool)):
        return val
    else:
        return str(val)


def compute_hash(data: Dict[str, Any]) -> str:
    """Compute deterministic SHA256 hash of a dictionary.

    The hash is computed from a canonical JSON representation
    with sorted keys and consistent formatting.
    """
    serialized = _serialize_value(data)
    canonical = json.dumps(serialized, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def compute_rules_hash(rules: ScoringRules) -> str:
    return compute_hash(rules.model_dump())


def compute_aggregates_hash(totals: Iterable[AggregateTotals]) -> str:
    """Hash a set of user aggregates independent of iteration order."""
    entries = sorted(
        (
            {
                "user_id": t.user_id,
                "total_points": t.total_points,
                "stats": t.stats(),
            }
            for t in totals
        ),
        key=lambda e: e["user_id"],
    )
    return compute_hash({"aggregates": entries})


__all__ = [
    "compute_hash",
    "compute_rules_hash",
    "compute_aggregates_hash",
]
