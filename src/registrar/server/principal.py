"""Caller identity for HTTP requests.

Authentication happens in front of the service; the authenticated principal
arrives in the ``X-Principal`` header. Requests without it are rejected.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Header, HTTPException, status


def caller_principal(
    x_principal: Annotated[str | None, Header()] = None,
) -> str:
    """Return the calling principal or raise 401."""
    principal = (x_principal or "").strip()
    if not principal:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-Principal header",
        )
    return principal
