import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roomrent.api.routers import contracts, invoices, landlords, rooms, sensor_data, tenants, usage
from roomrent.config import config
from roomrent.cron import scheduler_loop
from roomrent.errors import ServiceError
from roomrent.services.notification_service import setup_notifications


@asynccontextmanager
async def lifespan(app: FastAPI):
    notifier = setup_notifications()
    logging.info(f"Notification provider: {notifier.name}")

    scheduler = None
    if config.SCHEDULER_ENABLED:
        scheduler = asyncio.create_task(scheduler_loop())

    yield

    if scheduler:
        scheduler.cancel()
        try:
            await scheduler
        except asyncio.CancelledError:
            pass
    await notifier.close()


async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logging.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app() -> FastAPI:
    app = FastAPI(title="RoomRent", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Router registration
    app.include_router(landlords.router)
    app.include_router(tenants.router)
    app.include_router(rooms.router)
    app.include_router(contracts.router)
    app.include_router(usage.router)
    app.include_router(sensor_data.router)
    app.include_router(invoices.router)

    return app


app = create_app()
