"""Pure helpers behind the Streamlit pages: login identity, filters, chart data."""

from __future__ import annotations

import re
from collections import Counter

SORT_FIELDS = {
    "Days pending": "days_since_creation",
    "Created at": "created_at",
    "User ID": "user_id",
}


def user_from_email(email: str) -> dict:
    """Derive the display identity for an email-only login."""
    local = email.split("@")[0]
    name = " ".join(w.capitalize() for w in re.split(r"[._]", local) if w)
    initials = "".join(w[0] for w in name.split()[:2]).upper()
    return {"name": name, "email": email, "role": "AML Analyst", "initials": initials}


def unique_analysts(cases: list[dict]) -> list[str]:
    return sorted({c["analyst"] for c in cases if c.get("analyst")})


def filter_cases(
    cases: list[dict],
    *,
    search: str = "",
    status: str = "all",
    high_value: str = "all",
    analyst: str = "all",
    sort_by: str = "days_since_creation",
    descending: bool = True,
) -> list[dict]:
    needle = search.strip().lower()
    result = []
    for c in cases:
        if needle and needle not in str(c["user_id"]) and needle not in (c.get("analyst") or "").lower():
            continue
        if status != "all" and c.get("status") != status:
            continue
        if high_value != "all" and c.get("high_value") != high_value:
            continue
        if analyst != "all" and c.get("analyst") != analyst:
            continue
        result.append(c)
    return sorted(result, key=lambda c: c[sort_by], reverse=descending)


def counts_by(cases: list[dict], field: str) -> dict[str, int]:
    return dict(Counter(str(c.get(field)) for c in cases).most_common())


def alerts_by_date(cases: list[dict], last_days: int = 15) -> dict[str, int]:
    """Cases per creation date, oldest first, limited to the last ``last_days`` dates."""
    counts = Counter(c["created_at"][:10] for c in cases if c.get("created_at"))
    dates = sorted(counts)[-last_days:]
    return {d: counts[d] for d in dates}
