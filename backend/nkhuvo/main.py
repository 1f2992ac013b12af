import logging

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from .database import engine
from .models.generated import Base
from .redis_client import redis_client
from .routers import bookings, slots

logger = logging.getLogger(__name__)

app = FastAPI(title="NKHUVO Booking API")


@app.on_event("startup")
def initialize_database() -> None:
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.exception("Database initialization failed. Check DATABASE_URL.")


@app.get("/health")
def health():
    return {"redis": redis_client.ping()}


app.include_router(slots.router)
app.include_router(bookings.router)
