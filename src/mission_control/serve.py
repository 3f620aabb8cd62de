"""API server for ``mission-control serve``.

Created: 2026-09-17

Starts the ``/api/v1/`` routers and the runner event webhook with CORS for
local dashboards.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def create_app():
    """Build the FastAPI application with every Mission Control router."""
    from fastapi import FastAPI
    from fastapi.middleware.cors import CORSMiddleware

    from mission_control import __version__
    from mission_control.api import mount_routers

    app = FastAPI(
        title="Mission Control API",
        description="Coordination hub for a squad of AI agents.",
        version=__version__,
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Mission-Control-Secret"],
    )

    mount_routers(app)

    return app


def run_server(
    host: str = "127.0.0.1",
    port: int = 8787,
    dev: bool = False,
) -> None:
    """Start the API server."""
    import uvicorn
    from rich.console import Console

    console = Console()
    console.rule("[bold]MISSION CONTROL API SERVER")
    console.print(f"\nAPI docs: http://{host}:{port}/api/v1/docs\n")

    if dev:
        import pathlib

        src_dir = str(pathlib.Path(__file__).resolve().parent.parent)
        uvicorn.run(
            "mission_control.serve:create_app",
            factory=True,
            host=host,
            port=port,
            reload=True,
            reload_dirs=[src_dir],
            reload_includes=["*.py"],
            log_level="debug",
        )
    else:
        app = create_app()
        uvicorn.run(app, host=host, port=port)
