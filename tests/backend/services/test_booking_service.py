from datetime import date, datetime, time

import pytest

from nkhuvo.models.generated import Bookings
from nkhuvo.services.booking import create_booking, selection_bounds
from nkhuvo.services.slots import (
    BookingConfig,
    InvalidSelectionError,
    SlotHoldStore,
    SlotSelection,
    SlotUnavailableError,
    StaleAvailabilityError,
    load_service_calculator,
)

TODAY = date(2026, 10, 19)
DAY = date(2026, 10, 20)


@pytest.fixture
def hold_store(fake_redis) -> SlotHoldStore:
    return SlotHoldStore(fake_redis, BookingConfig())


def calculator_for(db_session, service_id: int):
    return load_service_calculator(db_session, service_id, BookingConfig(), today=lambda: TODAY)


def test_selection_bounds() -> None:
    assert selection_bounds(SlotSelection(DAY, 14, 18)) == (
        datetime(2026, 10, 20, 14),
        datetime(2026, 10, 20, 18),
    )
    assert selection_bounds(SlotSelection(DAY, 10)) == (datetime(2026, 10, 20, 10), None)
    assert selection_bounds(SlotSelection(DAY, 10, 10)) == (datetime(2026, 10, 20, 10), None)

    start, end = selection_bounds(SlotSelection(DAY, 22, 24))
    assert end == datetime.combine(DAY, time.max)
    assert end.date() == start.date()


def test_load_service_calculator_returns_none_for_unknown_or_inactive(db_session, add_service) -> None:
    inactive = add_service(is_active=0)

    assert calculator_for(db_session, 999) is None
    assert calculator_for(db_session, inactive.id) is None


def test_create_booking_persists_pending_row_and_releases_hold(db_session, add_service, hold_store, fake_redis) -> None:
    service = add_service()
    calculator = calculator_for(db_session, service.id)

    booking = create_booking(
        db_session,
        calculator,
        hold_store,
        SlotSelection(DAY, 14, 18),
        amount=15000.0,
        location='Maputo',
        event_id='e1',
    )

    assert booking.id is not None
    assert booking.status == 'pending'
    assert booking.date_start == datetime(2026, 10, 20, 14)
    assert booking.date_end == datetime(2026, 10, 20, 18)
    assert booking.location == 'Maputo'
    assert fake_redis.store == {}

    options = {o.hour: o.bookable for o in calculator.start_time_options(DAY)}
    assert [h for h, bookable in options.items() if not bookable] == [14, 15, 16, 17]


def test_second_booking_for_same_hours_is_stale(db_session, add_service, hold_store) -> None:
    service = add_service()
    calculator = calculator_for(db_session, service.id)
    create_booking(db_session, calculator, hold_store, SlotSelection(DAY, 14, 18), location='Maputo')

    with pytest.raises(StaleAvailabilityError):
        create_booking(db_session, calculator, hold_store, SlotSelection(DAY, 12, 16), location='Matola')

    assert db_session.query(Bookings).count() == 1


def test_cancelled_booking_frees_hours(db_session, add_service, add_booking, hold_store) -> None:
    service = add_service()
    add_booking(service.id, DAY, 14, 18, status='cancelled')
    calculator = calculator_for(db_session, service.id)

    booking = create_booking(db_session, calculator, hold_store, SlotSelection(DAY, 15, 16), location='Beira')

    assert booking.status == 'pending'


def test_held_hours_are_rejected_without_writing(db_session, add_service, hold_store, fake_redis) -> None:
    service = add_service()
    calculator = calculator_for(db_session, service.id)
    hold_store.acquire(service.id, DAY, [15])

    with pytest.raises(SlotUnavailableError):
        create_booking(db_session, calculator, hold_store, SlotSelection(DAY, 14, 16), location='Maputo')

    assert db_session.query(Bookings).count() == 0
    assert list(fake_redis.store) == [f'slot_hold:{service.id}:2026-10-20:15:00']


def test_invalid_selection_takes_no_hold(db_session, add_service, hold_store, fake_redis) -> None:
    service = add_service(hours_type='custom', hours_start='09:00', hours_end='17:00')
    calculator = calculator_for(db_session, service.id)

    with pytest.raises(InvalidSelectionError):
        create_booking(db_session, calculator, hold_store, SlotSelection(DAY, 15, 19), location='Maputo')

    assert fake_redis.store == {}


def test_delivery_booking_blocks_single_hour(db_session, add_service, hold_store) -> None:
    service = add_service(booking_type='delivery_bound', category='Catering')
    calculator = calculator_for(db_session, service.id)

    booking = create_booking(db_session, calculator, hold_store, SlotSelection(DAY, 10), location='Maputo')

    assert booking.date_end is None
    assert [o.hour for o in calculator.start_time_options(DAY) if not o.bookable] == [10]


def test_all_day_booking_until_midnight_blocks_rest_of_day(db_session, add_service, hold_store) -> None:
    service = add_service(hours_type='24h')
    calculator = calculator_for(db_session, service.id)

    create_booking(db_session, calculator, hold_store, SlotSelection(DAY, 22, 24), location='Pemba')

    assert [o.hour for o in calculator.start_time_options(DAY) if not o.bookable] == [22, 23]
    assert calculator.end_time_options(DAY, 20) == [21, 22]
