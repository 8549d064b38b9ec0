"""FastAPI application entrypoint for docaudit service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..config import ConfigError, load_config
from ..models import ManifestError
from ..orchestrator import AuditOutcome, Auditor


class ExampleExecutionDisabled(RuntimeError):
    """Raised when a request asks to run examples on a server that does not allow it."""


class AuditRequest(BaseModel):
    manifest: Dict[str, Any]
    run_examples: Optional[bool] = None
    min_coverage: Optional[int] = Field(default=None, ge=0, le=100)
    fail_on_drift: Optional[bool] = None


class AuditResponse(BaseModel):
    passed: bool
    coverage_score: int
    summary_line: str
    summary: Dict[str, Any]
    failures: List[str]
    manifest: Dict[str, Any]


class HealthResponse(BaseModel):
    status: str


def _default_auditor() -> Auditor:
    return Auditor(load_config(Path.cwd()))


def create_app(auditor_factory: Callable[[], Auditor] = _default_auditor) -> FastAPI:
    """Create the FastAPI application exposing docaudit operations."""
    app = FastAPI(title="DocAudit Service", version="1.0.0")

    async def get_auditor() -> Auditor:
        return auditor_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/audit", response_model=AuditResponse)
    async def audit(
        payload: AuditRequest,
        auditor: Auditor = Depends(get_auditor),
    ) -> AuditResponse:
        # Request bodies may only turn execution off; enabling it is server config.
        if payload.run_examples and not auditor.config.examples.run:
            raise ExampleExecutionDisabled("Example execution is disabled on this server")

        def _run_audit() -> AuditOutcome:
            return auditor.run(
                payload.manifest,
                run_examples=payload.run_examples,
                min_coverage=payload.min_coverage,
                fail_on_drift=payload.fail_on_drift,
            )

        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, _run_audit)
        data = outcome.to_dict()
        return AuditResponse(
            passed=outcome.passed,
            coverage_score=outcome.coverage_score,
            summary_line=data["summaryLine"],
            summary=data["summary"],
            failures=data["failures"],
            manifest=data["manifest"],
        )

    @app.exception_handler(ManifestError)
    async def manifest_error_handler(_: Any, exc: ManifestError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ExampleExecutionDisabled)
    async def execution_disabled_handler(_: Any, exc: ExampleExecutionDisabled) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["AuditRequest", "AuditResponse", "ExampleExecutionDisabled", "create_app", "run_service"]
