from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pathlib import Path
import os

from .routers.analysis import router as analysis_router
from .routers.meetings import router as meetings_router
from .config import load_settings
from .logging import setup_logging, install_app_logging
from .errors import install_error_handlers

__version__ = "0.3.0"


def _load_env_file(env_path: Path) -> None:
    """Minimal .env loader: KEY=VALUE lines into os.environ if not set.
    - Ignores comments and blank lines
    - Strips surrounding quotes
    - Supports optional 'export ' prefix
    """
    if not env_path.is_file():
        return
    try:
        lines = env_path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError):
        return
    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.lower().startswith("export "):
            line = line[7:].lstrip()
        if "=" not in line:
            continue
        k, v = line.split("=", 1)
        key = k.strip()
        val = v.strip().strip('"').strip("'")
        if key:
            os.environ.setdefault(key, val)


def create_app() -> FastAPI:
    # Load environment from optional .env files (repo root and worker dir)
    package_dir = Path(__file__).resolve().parent
    worker_dir = package_dir.parent
    repo_root = worker_dir.parent
    _load_env_file(repo_root / ".env")
    _load_env_file(worker_dir / ".env")

    settings = load_settings()
    setup_logging()

    app = FastAPI(title="Meeting Insights Worker", version=__version__)
    app.state.settings = settings

    # CORS
    allow = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    install_app_logging(app)
    install_error_handlers(app)

    # Versioned API
    app.include_router(analysis_router, prefix="/v1")
    app.include_router(meetings_router, prefix="/v1")

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return {"status": "ok"}
    return app


# Convenience for `uvicorn meeting_insights.app:app`
app = create_app()
