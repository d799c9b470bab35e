"""FastAPI application entry-point."""

from typing import Optional

import numpy as np
import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import Settings, get_settings
from ..errors import SastError
from ..logging_config import setup_logging
from . import database
from .error_handlers import (
    general_exception_handler,
    http_exception_handler,
    sast_error_handler,
    validation_exception_handler,
)
from .routes import router

API_PREFIX = "/api"


def create_app(settings: Optional[Settings] = None, rng: Optional[np.random.Generator] = None) -> FastAPI:
    """Application factory."""

    settings = settings or get_settings()
    app = FastAPI(
        title=settings.project_name,
        description="Reference analytics and session endpoints for the SAST dashboard.",
        version=__version__,
    )
    app.state.settings = settings
    app.state.rng = rng if rng is not None else np.random.default_rng()

    database.init_db(settings.database_path)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register error handlers
    app.add_exception_handler(SastError, sast_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(router, prefix=API_PREFIX)
    return app


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="127.0.0.1", port=8000)


if __name__ == "__main__":
    main()
