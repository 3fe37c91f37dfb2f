"""Thin requests wrapper for the AML Case Review API."""

from __future__ import annotations

import os

import requests

BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")


class APIError(RuntimeError):
    pass


def _url(path: str) -> str:
    return f"{BASE_URL}{path}"


def _unwrap(resp: requests.Response) -> dict:
    """Return the JSON envelope, raising ``APIError`` with the server's message."""
    try:
        body = resp.json()
    except ValueError:
        resp.raise_for_status()
        raise APIError(f"HTTP {resp.status_code}: non-JSON response")
    if not resp.ok:
        detail = body.get("detail", body) if isinstance(body, dict) else body
        if isinstance(detail, dict):
            message = detail.get("message") or detail.get("error") or f"HTTP {resp.status_code}"
        elif isinstance(detail, list) and detail:
            message = "; ".join(str(d.get("msg", d)) for d in detail if isinstance(d, dict))
        else:
            message = f"HTTP {resp.status_code}"
        raise APIError(message)
    return body


def list_cases(refresh: bool = False) -> dict:
    params = {"refresh": "true"} if refresh else None
    resp = requests.get(_url("/api/cases"), params=params, timeout=300)
    return _unwrap(resp)


def refresh_cases() -> dict:
    resp = requests.post(_url("/api/cases/refresh"), timeout=300)
    return _unwrap(resp)


def get_stats() -> dict:
    resp = requests.get(_url("/api/cases/stats"), timeout=300)
    return _unwrap(resp)


def get_case(user_id: int) -> dict:
    resp = requests.get(_url(f"/api/cases/{user_id}"), timeout=60)
    return _unwrap(resp)["data"]


def get_user_info(user_id: int) -> dict:
    resp = requests.get(_url(f"/api/cases/{user_id}/user-info"), timeout=60)
    return _unwrap(resp)["data"]


def get_offense_history(user_id: int) -> list[dict]:
    resp = requests.get(_url(f"/api/cases/{user_id}/offense-history"), timeout=60)
    return _unwrap(resp)["data"]


def send_resolution(user_id: int, conclusion: str, priority: str, description: str) -> dict:
    resp = requests.post(
        _url("/api/resolution"),
        json={
            "user_id": user_id,
            "conclusion": conclusion,
            "priority": priority,
            "description": description,
        },
        timeout=60,
    )
    return _unwrap(resp)
