from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from daycycle.api.routes import router
from daycycle.services.runtime import build_scheduler
from daycycle.services.scheduler import Scheduler
from daycycle.settings import Settings


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    scheduler: Scheduler = fastapi_app.state.scheduler

    # the loop timer arms on the running loop, so start from inside it
    scheduler.start()
    try:
        yield
    finally:
        scheduler.stop()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="daycycle", lifespan=lifespan)
    app.state.settings = settings
    app.state.scheduler = build_scheduler(settings)

    app.include_router(router)
    return app


def run() -> None:
    import uvicorn

    settings = Settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
