from __future__ import annotations

import os
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, Response
from loguru import logger
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from api.catalog import load_catalog_records
from api.commands import router as commands_router
from api.config.settings import Settings, load_settings
from api.db import dispose_engines, init_db
from api.deps import run_command
from api.entries import router as entries_router
from api.export import router as export_router
from api.logging_config import configure_logging
from api.measure import router as measure_router
from api.missions import router as missions_router
from api.session import router as session_router
from engine.commands import LoadCatalog
from engine.context import EngineContext
from engine.errors import EngineError


def build_engine(settings: Settings) -> EngineContext:
    return EngineContext(
        default_radius_m=settings.default_boundary_radius_m,
        min_description_length=settings.min_description_length,
        export_prefix=settings.export_prefix,
    )


def build_app(
    settings: Optional[Settings] = None,
    catalog: Optional[List[Dict[str, Any]]] = None,
) -> FastAPI:
    # Resolve ONCE. Never re-resolve later. Never mutate per-request.
    settings = settings or load_settings()
    service = os.getenv("FG_SERVICE", "fieldgate-core")
    configure_logging(settings.log_level, service=service, env=settings.env)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            init_db()
            app.state.db_init_ok = True
            app.state.db_init_error = None
        except Exception as e:
            app.state.db_init_ok = False
            app.state.db_init_error = f"{type(e).__name__}: {e}"
            logger.exception("DB init failed")

        # the catalog must be in place before any mission-dependent command
        try:
            records = catalog if catalog is not None else load_catalog_records(settings.mission_config_path)
            result = run_command(app.state.engine, LoadCatalog(missions=records))
            if not result.ok:
                app.state.catalog_error = result.hint
                logger.error("mission_catalog_rejected", extra={"error": result.to_dict().get("error")})
        except (OSError, ValueError, EngineError) as e:
            app.state.catalog_error = f"{type(e).__name__}: {e}"
            logger.exception("mission catalog load failed")
        yield
        dispose_engines()

    app = FastAPI(title="fieldgate-core", version="0.1.0", lifespan=lifespan)

    # Freeze state at build time
    app.state.settings = settings
    app.state.service = service
    app.state.env = settings.env
    app.state.app_instance_id = str(uuid.uuid4())
    app.state.db_init_ok = False
    app.state.db_init_error = None
    app.state.catalog_error = None
    app.state.engine = build_engine(settings)

    # Routes
    app.include_router(missions_router)
    app.include_router(session_router)
    app.include_router(entries_router)
    app.include_router(measure_router)
    app.include_router(export_router)
    app.include_router(commands_router)

    @app.get("/health")
    async def health(request: Request) -> dict:
        return {
            "status": "ok",
            "service": request.app.state.service,
            "env": request.app.state.env,
            "app_instance_id": request.app.state.app_instance_id,
        }

    @app.get("/health/live")
    async def health_live() -> dict:
        return {"status": "live"}

    @app.get("/health/ready")
    async def health_ready() -> dict:
        if not bool(app.state.db_init_ok):
            raise HTTPException(status_code=503, detail=f"db_init_failed: {app.state.db_init_error or 'unknown'}")

        engine = app.state.engine
        if not engine.store.loaded:
            raise HTTPException(
                status_code=503,
                detail=f"catalog_not_loaded: {app.state.catalog_error or 'pending'}",
            )

        return {"status": "ready", "missions": len(engine.store)}

    @app.get("/metrics")
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return app


app = build_app()
