"""Shared fixtures: a fresh SQLite database per test, seeded clubs and a frozen clock."""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FINALIZER_ENABLED", "false")

from datetime import time
from decimal import Decimal

import pytest
import pytest_asyncio

from booking_engine.core.clock import FixedClock
from booking_engine.core.database import build_engine, build_sessionmaker, init_db
from booking_engine.core.requester import Requester
from booking_engine.models import Club, Court, OperatingHours, TariffRule, User
from booking_engine.services.booking import BookingService
from booking_engine.services.lifecycle import ReservationLifecycle
from booking_engine.services.reporting import ReportingService

from tests.helpers import MANAGER_ID, NOW, OTHER_MANAGER_ID, OTHER_PLAYER_ID, PLAYER_ID


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_sessionmaker(engine)


@pytest_asyncio.fixture
async def db(session_factory, seed):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed(session_factory):
    """
    Two clubs.

    Club 1 opens 08:00 and closes 02:00 the next day every day, has a 500
    add-on, night pricing from 22:00 to 06:00 and a Monday 08:00-18:00 rule
    at 1500. Court 1 costs 1000 by day and 1400 at night; court 2 has no
    night price.

    Club 2 is open around the clock. Court 3 costs 800; court 4 has no price.
    """
    async with session_factory() as session:
        club = Club(
            id=1,
            name="Club Norte",
            manager_user_id=MANAGER_ID,
            add_on_price=Decimal("500"),
            night_start=time(22, 0),
            night_end=time(6, 0),
            timezone="America/Argentina/Buenos_Aires",
        )
        other_club = Club(id=2, name="Club Sur", manager_user_id=OTHER_MANAGER_ID)
        session.add_all([club, other_club])
        await session.flush()

        session.add_all(
            [
                Court(id=1, club_id=1, name="Cancha 1", day_price=Decimal("1000"), night_price=Decimal("1400")),
                Court(id=2, club_id=1, name="Cancha 2", day_price=Decimal("1000")),
                Court(id=3, club_id=2, name="Cancha A", day_price=Decimal("800")),
                Court(id=4, club_id=2, name="Cancha B", state="maintenance"),
            ]
        )
        for weekday in range(1, 8):
            session.add(OperatingHours(club_id=1, weekday=weekday, opens_at=time(8, 0), closes_at=time(2, 0)))
            session.add(OperatingHours(club_id=2, weekday=weekday, opens_at=time(0, 0), closes_at=time(0, 0)))
        session.add(
            TariffRule(
                club_id=1,
                weekday=1,
                starts_at=time(8, 0),
                ends_at=time(18, 0),
                price_per_hour=Decimal("1500"),
            )
        )
        session.add_all(
            [
                User(id=PLAYER_ID, name="Ana", surname="Gómez", phone="1155550000", email="ana@example.com"),
                User(id=OTHER_PLAYER_ID, name="Bruno", surname="Paz", email="bruno@example.com"),
            ]
        )
        await session.commit()


@pytest.fixture
def booking(clock):
    return BookingService(clock=clock)


@pytest.fixture
def lifecycle(clock):
    return ReservationLifecycle(clock=clock)


@pytest.fixture
def reporting(clock):
    return ReportingService(clock=clock)


@pytest.fixture
def player():
    return Requester(user_id=PLAYER_ID)


@pytest.fixture
def other_player():
    return Requester(user_id=OTHER_PLAYER_ID)


@pytest.fixture
def manager():
    return Requester(user_id=MANAGER_ID, club_id=1)


@pytest.fixture
def other_manager():
    return Requester(user_id=OTHER_MANAGER_ID, club_id=2)
