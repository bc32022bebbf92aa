"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from contrastsight import __version__
from contrastsight.config import settings

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.contrastsight_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)


def create_app() -> FastAPI:
    app = FastAPI(
        title="ContrastSight",
        description="Symbol contrast audit — WCAG 2.1 non-text contrast against solid backgrounds",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from contrastsight.api.router import api_router

    app.include_router(api_router)

    return app


app = create_app()
