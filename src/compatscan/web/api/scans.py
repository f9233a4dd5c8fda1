"""REST API for batched scan sessions and the legacy one-shot scans."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel

from compatscan.context import AppContext
from compatscan.options import VENDOR_EXCLUSIONS, normalize_batch_size, parse_flag
from compatscan.scanner.engine import MSG_NO_FILES
from compatscan.session.manager import MSG_SESSION_NOT_FOUND
from compatscan.targets import resolve_target
from compatscan.web.responses import fail, get_ctx, ok

logger = logging.getLogger(__name__)

router = APIRouter(tags=["scans"])

MSG_INVALID_TARGET = "Invalid scan target specified."


class TargetRequest(BaseModel):
    type: str = ""
    slug: str = ""


class ProgressRequest(TargetRequest):
    batch_size: int | str | None = None
    skip_vendor: bool | str | None = None


class StopRequest(BaseModel):
    scan_id: str | None = None


def _target_path(ctx: AppContext, body: TargetRequest) -> str | None:
    path = resolve_target(
        body.type, body.slug, ctx.config.plugins_dir, ctx.config.themes_dir
    )
    return str(path) if path else None


@router.post("/scans")
async def start_scan(body: ProgressRequest, request: Request):
    """Discover files for a target and open a batch session."""
    ctx = get_ctx(request)
    scan_path = _target_path(ctx, body)
    if not scan_path:
        return fail(MSG_INVALID_TARGET)

    options = await ctx.options.load()
    batch_size = normalize_batch_size(
        body.batch_size if body.batch_size is not None else options.batch_size,
        options.batch_size,
    )
    skip_vendor = parse_flag(body.skip_vendor, options.skip_vendor)
    exclusions = VENDOR_EXCLUSIONS if skip_vendor else ()

    progress = await ctx.scanner.get_scan_progress(scan_path, batch_size, exclusions)
    return ok(progress.to_dict())


@router.post("/scans/stop")
async def stop_scan(request: Request, body: StopRequest | None = None):
    ctx = get_ctx(request)
    scan_id = body.scan_id if body else None
    stopped = await ctx.scanner.stop_scan(scan_id)
    return ok({"message": "Scan stop requested.", "sessions": stopped})


@router.post("/scans/run")
async def run_scan(body: TargetRequest, request: Request):
    """Scan a whole target in a single linter run."""
    ctx = get_ctx(request)
    scan_path = _target_path(ctx, body)
    if not scan_path:
        return fail(MSG_INVALID_TARGET)

    options = await ctx.options.load()
    output = await asyncio.to_thread(ctx.scanner.run, scan_path, options.php_version)
    return ok({"output": output})


@router.post("/scans/batch-all")
async def scan_all_batches(body: TargetRequest, request: Request):
    """Lint every batch of a target in one request."""
    ctx = get_ctx(request)
    scan_path = _target_path(ctx, body)
    if not scan_path:
        return fail(MSG_INVALID_TARGET)

    options = await ctx.options.load()
    reports = await asyncio.to_thread(
        ctx.scanner.scan_in_batches,
        scan_path,
        options.batch_size,
        options.php_version,
    )
    if not reports:
        return ok({"message": MSG_NO_FILES})
    return ok({"batches": [r.to_dict() for r in reports]})


@router.post("/scans/{scan_id}/batches/{batch_number}")
async def process_batch(scan_id: str, batch_number: int, request: Request):
    """Lint one batch of a session; the client drives the order."""
    ctx = get_ctx(request)
    batch = await ctx.scanner.prepare_batch(scan_id, batch_number)
    if not batch.ok:
        status = 404 if batch.message == MSG_SESSION_NOT_FOUND else 400
        return fail(batch.to_dict(), status_code=status)

    options = await ctx.options.load()
    result = await asyncio.to_thread(
        ctx.scanner.lint_slice, batch, options.php_version
    )
    logger.debug(
        "Scan %s batch %d/%d: %d errors, %d warnings",
        scan_id,
        result.batch_number,
        result.total_batches,
        result.errors,
        result.warnings,
    )
    return ok(result.to_dict())


@router.delete("/scans/{scan_id}")
async def delete_scan(scan_id: str, request: Request):
    await get_ctx(request).scanner.finish_scan(scan_id)
    return ok({"scan_id": scan_id, "status": "deleted"})
