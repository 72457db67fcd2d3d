from __future__ import annotations

import hmac

from fastapi import Request

AUTH_HEADER = "Authorization"
AUTH_SCHEME = "Bearer"


def expected_credential(token: str) -> str:
    return f"{AUTH_SCHEME} {token}"


def extract_credential(request: Request) -> str | None:
    return request.headers.get(AUTH_HEADER) or None


def is_request_authorized(request: Request, token: str) -> bool:
    provided = extract_credential(request)
    if not provided:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected_credential(token).encode("utf-8"))
