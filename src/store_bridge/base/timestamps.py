"""createdAt/updatedAt stamping applied by collections in timestamp mode."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from .fields import is_operator_update

CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"


def utcnow() -> datetime:
    """Current UTC time truncated to the millisecond precision stores keep."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def stamp_insert(document: Mapping[str, Any], now: datetime | None = None) -> dict[str, Any]:
    """Return a copy of ``document`` with both stamps, caller values winning."""
    now = now or utcnow()
    return {CREATED_AT: now, UPDATED_AT: now, **document}


def _paths_outside(update: Mapping[str, Any], operator: str) -> set[str]:
    paths: set[str] = set()
    for key, fields in update.items():
        if key != operator and key.startswith("$") and isinstance(fields, Mapping):
            paths.update(fields)
    return paths


def stamp_update(update: Mapping[str, Any], now: datetime | None = None) -> dict[str, Any]:
    """Return a copy of ``update`` that refreshes updatedAt.

    A replacement document gets ``updatedAt`` merged in. An operator update gets
    ``updatedAt`` merged into ``$set`` and ``createdAt`` into ``$setOnInsert``, so
    only an upsert that inserts stamps the creation time. A stamp is skipped when
    another operator already targets that field.
    """
    now = now or utcnow()
    if not is_operator_update(update):
        return {UPDATED_AT: now, **update}

    stamped = dict(update)
    if UPDATED_AT not in _paths_outside(update, "$set"):
        stamped["$set"] = {UPDATED_AT: now, **update.get("$set", {})}
    if CREATED_AT not in _paths_outside(update, "$setOnInsert"):
        stamped["$setOnInsert"] = {CREATED_AT: now, **update.get("$setOnInsert", {})}
    return stamped


def carry_created_at(
    replacement: Mapping[str, Any], existing: Mapping[str, Any] | None
) -> dict[str, Any]:
    """Return ``replacement`` with the replaced document's createdAt kept.

    An explicit createdAt in the replacement wins.
    """
    if existing is None or CREATED_AT not in existing or CREATED_AT in replacement:
        return dict(replacement)
    return {CREATED_AT: existing[CREATED_AT], **replacement}
