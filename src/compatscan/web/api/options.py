"""REST API for persisted scan options."""

from __future__ import annotations

from fastapi import APIRouter, Request
from pydantic import BaseModel

from compatscan.web.responses import get_ctx, ok

router = APIRouter(tags=["options"])


class OptionsUpdate(BaseModel):
    report_mode: str | None = None
    batch_size: int | str | None = None
    php_version: str | None = None
    skip_vendor: bool | str | None = None


@router.get("/options")
async def load_options(request: Request):
    options = await get_ctx(request).options.load()
    return ok(options.to_dict())


@router.put("/options")
async def save_options(body: OptionsUpdate, request: Request):
    """Save options; invalid values are clamped to defaults, not rejected."""
    saved = await get_ctx(request).options.save(body.model_dump(exclude_none=True))
    return ok({"message": "Options saved successfully.", **saved.to_dict()})
