import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from farmplot.crud import create_table
from farmplot.db import create_engine, create_session_factory
from farmplot.domain.clock import Clock, SystemClock
from farmplot.errors import FarmError, InvalidItem, NotFound, PlayerExists, StorageFailure
from farmplot.load_secrets import log_level, server_port
from farmplot.routers import players
from farmplot.services.plot_db import PlotService

logging.basicConfig(level=log_level)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)

ERROR_STATUS = {
    InvalidItem: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    PlayerExists: status.HTTP_409_CONFLICT,
    StorageFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def farm_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = next(
        (code for exc_class, code in ERROR_STATUS.items() if isinstance(exc, exc_class)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    if status_code >= 500:
        logging.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(engine: AsyncEngine | None = None, clock: Clock | None = None) -> FastAPI:
    """Build the application

    Args:
        engine (AsyncEngine | None): Database engine, the configured one if None
        clock (Clock | None): Source of the current instant, wall clock if None

    Returns:
        FastAPI: The application with routers and error handlers attached
    """
    engine = engine if engine is not None else create_engine()
    clock = clock if clock is not None else SystemClock()

    @asynccontextmanager
    async def lifespan(app):
        """Create tables if needed. This function is called to start the server."""
        await create_table(engine)
        logging.info("DB Initialized")
        try:
            yield
        finally:
            await engine.dispose()
            logging.info("Stop Server")

    app = FastAPI(lifespan=lifespan)
    app.state.plot_service = PlotService(create_session_factory(engine), clock)
    app.add_exception_handler(FarmError, farm_error_handler)
    app.include_router(players.player_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.info(f"Listening on {server_port}")
    uvicorn.run("farmplot.main:app", host="0.0.0.0", port=server_port)
