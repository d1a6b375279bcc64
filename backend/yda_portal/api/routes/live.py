"""
YDA Portal - Live Admin Stream
==============================
Server-Sent Events for one admin screen: guard state, table changes, toasts
and login redirects.
"""

from __future__ import annotations

import json
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from fastapi.security import HTTPAuthorizationCredentials

from yda_portal.api.deps.auth import security
from yda_portal.console.gateways import LocalAuthGateway, LocalRoleGateway
from yda_portal.console.screen import AdminScreen, PING
from yda_portal.core.config import get_settings
from yda_portal.core.logging import get_logger
from yda_portal.models import MediaItem, SiteSettings, Submission
from yda_portal.services.content_store import TABLES

router = APIRouter(prefix="/admin", tags=["Admin Live"])
logger = get_logger("routes.live")
settings = get_settings()

WATCHABLE = {
    **{name: spec.table for name, spec in TABLES.items()},
    "submissions": Submission.__tablename__,
    "media": MediaItem.__tablename__,
    "settings": SiteSettings.__tablename__,
}


def _watched_tables(raw: str) -> list[str]:
    names = [name.strip() for name in raw.split(",") if name.strip()]
    unknown = [name for name in names if name not in WATCHABLE]
    if unknown or not names:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "code": "unknown_table",
                "message": f"Unknown tables: {', '.join(unknown) or '(none)'}",
                "allowed": sorted(WATCHABLE),
            },
        )
    return [WATCHABLE[name] for name in names]


def _sse(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False, default=str)}\n\n"


@router.get("/live")
async def live(
    request: Request,
    tables: str = Query(..., max_length=500),
    notifications: bool = Query(default=True),
    access_token: Optional[str] = Query(default=None, max_length=4096),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
):
    """
    Open a live admin screen.

    EventSource clients cannot set headers, so the token may also be passed
    as ``access_token``.
    """
    watched = _watched_tables(tables)
    token = credentials.credentials if credentials else access_token
    screen = AdminScreen(
        LocalAuthGateway(token),
        LocalRoleGateway(),
        watched,
        show_notifications=notifications,
    )

    async def _stream():
        try:
            await screen.open()
            async for event, data in screen.events(keepalive_seconds=settings.realtime_keepalive_seconds):
                if event == PING and await request.is_disconnected():
                    break
                yield _sse(event, data)
        finally:
            screen.close()

    return StreamingResponse(
        _stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
