from __future__ import annotations

from fastapi import APIRouter

from debate_room.api.deps import RuntimeDep

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(runtime: RuntimeDep) -> dict[str, str | int]:
    return {"status": "ready", "rooms": len(runtime.rooms.list_ids())}
