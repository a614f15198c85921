# agenda/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from agenda.data import shop_settings
from agenda.db import init_db
from agenda.errors import BookingError
from agenda.routers import appointments_routes, businesses_routes, clients_routes

logging.basicConfig(
    level=shop_settings["log_level"],
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Agenda API ready (policy=%s)", shop_settings["transition_policy"])
    yield


app = FastAPI(title="Agenda", lifespan=lifespan)

app.include_router(businesses_routes.router)
app.include_router(appointments_routes.router)
app.include_router(clients_routes.router)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/health")
def health_check():
    return {"status": "ok"}
