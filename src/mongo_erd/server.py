"""
HTTP shell exposing the generated diagram.

Every request to ``/erd`` runs a full, isolated generation; no state is
shared between requests.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from mongo_erd.discovery import generate_erd
from mongo_erd.exceptions import ConnectivityError
from mongo_erd.metadata import MongoMetadataExtractor
from mongo_erd.models import ErdConfig

logger = logging.getLogger(__name__)

ExtractorFactory = Callable[[ErdConfig], Any]


def _default_extractor(config: ErdConfig) -> MongoMetadataExtractor:
    return MongoMetadataExtractor(config.url)


def create_app(
    config: ErdConfig,
    extractor_factory: Optional[ExtractorFactory] = None,
) -> FastAPI:
    """Build the FastAPI app serving the ERD for ``config``."""
    factory = extractor_factory or _default_extractor
    app = FastAPI(title="MongoDB ERD", version="0.2.0")

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/erd", response_class=PlainTextResponse)
    def erd() -> PlainTextResponse:
        extractor = factory(config)
        try:
            with extractor:
                diagram = generate_erd(config, extractor=extractor)
        except ConnectivityError as e:
            logger.error(f"ERD request failed: {e}")
            return PlainTextResponse("Error generating ERD", status_code=500)
        return PlainTextResponse(diagram)

    return app


def run_server(config: ErdConfig, log_level: str = "info") -> None:
    """Serve the ERD over HTTP until interrupted."""
    app = create_app(config)
    logger.info(f"Server running at http://{config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_level=log_level)
