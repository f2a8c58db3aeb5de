from __future__ import annotations

from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Health check endpoint.

    Never rate limited, so load balancers keep seeing the service as healthy
    even while clients are being throttled.
    """

    return {"status": "ok"}
