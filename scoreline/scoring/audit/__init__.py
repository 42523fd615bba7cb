"""Audit trail for scoring passes.

Provides tools for:
- Hashing rule sets and committed aggregates deterministically
- Logging pass start/commit/failure for later comparison
"""

from __future__ import annotations

__all__: list[str] = []
