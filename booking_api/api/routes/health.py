from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request) -> dict:
    """Liveness check.

    Reports whether Acuity credentials are configured, so a deploy missing
    them is visible without calling a data route.
    """

    return {
        "status": "ok",
        "acuity_configured": request.app.state.acuity_client is not None,
    }
