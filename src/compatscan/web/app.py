"""FastAPI application factory for the compatscan HTTP boundary."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from compatscan import __version__
from compatscan.config import CompatScanConfig
from compatscan.context import AppContext, open_context
from compatscan.web.responses import fail

logger = logging.getLogger(__name__)


def create_app(
    config: CompatScanConfig | None = None,
    context: AppContext | None = None,
) -> FastAPI:
    """Build the application; the context is opened in the lifespan."""
    config = config or (context.config if context else CompatScanConfig.load())

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        ctx = context or await open_context(config)
        app.state.ctx = ctx
        try:
            yield
        finally:
            if context is None:
                await ctx.close()

    app = FastAPI(
        title="compatscan",
        version=__version__,
        docs_url="/api/docs",
        lifespan=lifespan,
    )

    from compatscan.web.api.options import router as options_router
    from compatscan.web.api.scans import router as scans_router
    from compatscan.web.api.system import router as system_router

    app.include_router(system_router, prefix="/api")
    app.include_router(scans_router, prefix="/api")
    app.include_router(options_router, prefix="/api")

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        logger.debug("Rejected request to %s: %s", request.url.path, problems)
        return fail(f"Invalid request: {problems}")

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "data": {"message": f"Exception: {exc}"}},
        )

    return app
