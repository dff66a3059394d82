"""Small helpers shared by API tests."""

from __future__ import annotations


def json_headers(auth_token: str | None = None) -> dict[str, str]:
    """Build JSON request headers, optionally with a bearer token."""
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if auth_token:
        headers["Authorization"] = f"Bearer {auth_token}"
    return headers


def assert_problem(resp, status: int, code: str | None = None) -> dict:
    """Assert an RFC 7807 response and return its body."""
    assert resp.status_code == status, resp.get_data(as_text=True)
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["status"] == status
    if code is not None:
        assert body["code"] == code
    return body
