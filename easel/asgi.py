"""ASGI application factory for Easel."""

from typing import Any

from advanced_alchemy.extensions.litestar import SQLAlchemyPlugin
from litestar import Litestar
from litestar.datastructures import State
from litestar.exceptions import HTTPException

from easel.config import Settings, get_settings
from easel.controllers.files import FilesController
from easel.controllers.images import ImagesController
from easel.db.session import create_db_config
from easel.lib.exceptions import http_exception_handler, internal_server_error_handler
from easel.lib.storage import MediaGateway


EXCEPTION_HANDLERS: dict[type[Exception], Any] = {
    HTTPException: http_exception_handler,
    Exception: internal_server_error_handler,
}


def create_app(settings: Settings | None = None) -> Litestar:
    """Create the Litestar application with the media gateway in app state."""
    settings = settings or get_settings()

    db_config = create_db_config(settings)
    gateway = MediaGateway(settings.media, db_config.create_session_maker())

    return Litestar(
        route_handlers=[ImagesController, FilesController],
        plugins=[SQLAlchemyPlugin(config=db_config)],
        exception_handlers=EXCEPTION_HANDLERS,
        state=State({"settings": settings, "media_gateway": gateway}),
        debug=settings.debug,
    )


app = create_app()
