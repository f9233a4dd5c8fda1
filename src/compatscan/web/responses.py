"""Response envelope shared by every endpoint."""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from compatscan.context import AppContext


def ok(data: dict | list) -> dict:
    return {"success": True, "data": data}


def fail(data: dict | str, status_code: int = 400) -> JSONResponse:
    if isinstance(data, str):
        data = {"message": data}
    return JSONResponse(status_code=status_code, content={"success": False, "data": data})


def get_ctx(request: Request) -> AppContext:
    return request.app.state.ctx
