from datetime import date

import pytest

from nkhuvo.services.slots import BookingConfig, SlotHoldStore, SlotUnavailableError, StaleAvailabilityError
from nkhuvo.services.slots.hold_store import selection_hours

DAY = date(2026, 10, 20)


@pytest.fixture
def store(fake_redis) -> SlotHoldStore:
    return SlotHoldStore(fake_redis, BookingConfig(hold_ttl_seconds=120))


def test_selection_hours() -> None:
    assert selection_hours(14, 17) == [14, 15, 16]
    assert selection_hours(10, None) == [10]
    assert selection_hours(10, 10) == [10]


def test_acquire_sets_one_key_per_hour_with_ttl(store, fake_redis) -> None:
    token = store.acquire(7, DAY, [14, 15])

    assert fake_redis.store == {
        'slot_hold:7:2026-10-20:14:00': token,
        'slot_hold:7:2026-10-20:15:00': token,
    }
    assert set(fake_redis.expiry.values()) == {120}


def test_conflicting_hold_rolls_back_partial_acquire(store, fake_redis) -> None:
    first = store.acquire(7, DAY, [16])

    with pytest.raises(SlotUnavailableError) as exception_info:
        store.acquire(7, DAY, [14, 15, 16])

    assert isinstance(exception_info.value, StaleAvailabilityError)
    assert fake_redis.store == {'slot_hold:7:2026-10-20:16:00': first}


def test_holds_are_per_service(store, fake_redis) -> None:
    store.acquire(7, DAY, [14])
    store.acquire(8, DAY, [14])

    assert len(fake_redis.store) == 2


def test_release_only_deletes_own_holds(store, fake_redis) -> None:
    mine = store.acquire(7, DAY, [14])
    theirs = store.acquire(7, DAY, [15])

    assert store.release(7, DAY, [14, 15], mine) == 1
    assert fake_redis.store == {'slot_hold:7:2026-10-20:15:00': theirs}
    assert store.release(7, DAY, [14], mine) == 0


def test_release_keeps_hold_retaken_after_expiry(store, fake_redis) -> None:
    stale = store.acquire(7, DAY, [14, 15])
    # The 14:00 hold expired and another booking took it
    fake_redis.store['slot_hold:7:2026-10-20:14:00'] = 'other-token'

    assert store.release(7, DAY, [14, 15], stale) == 1
    assert fake_redis.store == {'slot_hold:7:2026-10-20:14:00': 'other-token'}


def test_release_checks_and_deletes_in_one_script(store, fake_redis) -> None:
    token = store.acquire(7, DAY, [14])

    assert store.release(7, DAY, [14], token) == 1
    assert len(fake_redis.scripts) == 1
    assert store.release(7, DAY, [], token) == 0
    assert len(fake_redis.scripts) == 1
