"""Mapping of raw warehouse rows into the public response shapes.

The warehouse driver hands back plain mappings whose date columns may be
driver objects (``datetime``/``date``) or wrapper mappings carrying the
string under ``"value"``. Nothing past these functions sees either form:
every date leaves here as a plain string.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping

from app.schemas.aml_case import AMLCase, OffenseHistoryEntry, UserInfo


def unwrap_date(value: Any) -> str | None:
    """Return the plain date string held by ``value``, or ``None``."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        inner = value.get("value")
        return None if inner is None else str(inner)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def row_to_case(row: Mapping[str, Any]) -> AMLCase:
    return AMLCase(
        user_id=row["user_id"],
        created_at=unwrap_date(row["created_at"]) or "",
        analyst=row["analyst"],
        days_since_creation=row["days_since_creation"],
        status=row["status"],
        high_value=row["high_value"],
    )


def row_to_user_info(row: Mapping[str, Any]) -> UserInfo:
    data = dict(row)
    data["cardholder_created_at"] = unwrap_date(row.get("cardholder_created_at"))
    data["merchant_created_at"] = unwrap_date(row.get("merchant_created_at"))
    return UserInfo.model_validate(data)


def row_to_offense_entry(row: Mapping[str, Any]) -> OffenseHistoryEntry:
    return OffenseHistoryEntry(
        offense_date=unwrap_date(row.get("offense_date")) or "",
        conclusion=row.get("conclusion"),
        priority=row.get("priority"),
        description=row.get("description"),
        analyst=row.get("analyst"),
        offense_name=row.get("offense_name"),
    )
