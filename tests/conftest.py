import os
from datetime import date, datetime, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('REDIS_URL', 'redis://localhost:6379/15')

from nkhuvo.models.generated import Base, Bookings, Services  # noqa: E402


class FakeRedis:
    """Dict-backed stand-in for the few Redis commands the hold store uses."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.expiry: dict[str, int] = {}
        self.scripts: list[str] = []

    def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = value
        if ex is not None:
            self.expiry[key] = ex
        return True

    def delete(self, *keys):
        deleted = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.expiry.pop(key, None)
                deleted += 1
        return deleted

    def eval(self, script, numkeys, *args):
        # Only the hold store's compare-and-delete release script is supported
        self.scripts.append(script)
        keys, token = args[:numkeys], args[numkeys]
        return self.delete(*[key for key in keys if self.store.get(key) == token])

    def ping(self):
        return True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def add_service(db_session):
    def _add(**fields) -> Services:
        values = {
            'provider_id': 'p1',
            'name': 'DJ Maninho',
            'category': 'Musica',
            'booking_type': 'time_bound',
            'hours_type': 'custom',
            'hours_start': '08:00',
            'hours_end': '20:00',
            'unavailable_dates': '[]',
            'price': 15000.0,
        }
        values.update(fields)
        service = Services(**values)
        db_session.add(service)
        db_session.commit()
        db_session.refresh(service)
        return service

    return _add


@pytest.fixture
def add_booking(db_session):
    def _add(service_id: int, day: date, start_hour: int, end_hour: int | None = None, status: str = 'confirmed') -> Bookings:
        booking = Bookings(
            service_id=service_id,
            date_start=datetime.combine(day, time(start_hour)),
            date_end=datetime.combine(day, time(end_hour)) if end_hour is not None else None,
            status=status,
        )
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)
        return booking

    return _add
