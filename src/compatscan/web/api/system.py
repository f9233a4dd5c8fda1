"""REST API for preflight checks and target listing."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Request

from compatscan.targets import PLUGIN, list_targets
from compatscan.web.responses import fail, get_ctx, ok

router = APIRouter(tags=["system"])


@router.get("/preflight")
async def preflight(request: Request):
    ctx = get_ctx(request)
    report = await asyncio.to_thread(ctx.scanner.check_system_requirements)
    if report.ready:
        return ok(report.to_dict())
    return fail(report.to_dict(), status_code=503)


@router.get("/targets")
async def targets(request: Request):
    config = get_ctx(request).config
    found = list_targets(config.plugins_dir, config.themes_dir)
    return ok(
        {
            "plugins": [t.to_dict() for t in found if t.type == PLUGIN],
            "themes": [t.to_dict() for t in found if t.type != PLUGIN],
        }
    )
