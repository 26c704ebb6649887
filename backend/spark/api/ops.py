"""Operations endpoints providing health checks and metrics."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from spark.api.deps import get_store
from spark.domain.identity.store import ProfileStore
from spark.settings import settings

router = APIRouter(prefix="", tags=["ops"])


@router.get("/health/live")
async def health_live() -> dict[str, str]:
	return {"status": "ok", "service": settings.service_name}


@router.get("/health/ready")
async def health_ready(store: ProfileStore = Depends(get_store)) -> dict[str, object]:
	return {"status": "ok", "backend": settings.store_backend, "profiles": len(store.profiles)}


@router.get("/metrics")
async def prometheus_metrics() -> Response:
	payload = generate_latest()
	return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
