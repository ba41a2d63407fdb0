from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.adapters.store.base import AbstractKeyValueStore
from app.core.dependencies import get_store

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(
    store: Annotated[AbstractKeyValueStore | None, Depends(get_store)],
) -> dict:
    """Liveness check.

    ``storage`` reports whether rate limiting and auditing are active; the
    service stays healthy either way.
    """

    return {"status": "ok", "storage": "enabled" if store is not None else "disabled"}
