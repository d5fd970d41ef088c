import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from datetime import date
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app import app as fastapi_app
from app.api.installments import models as installment_models  # noqa: F401
from app.api.reservations.models import Buyer, Departure, Reservation, Tour
from app.db.main import get_session


ADMIN_HEADERS = {"AuthStatus": "AUTHENTICATED", "UserId": "admin-1", "UserType": "admin"}


def client_headers(user_id) -> dict:
    return {"AuthStatus": "AUTHENTICATED", "UserId": str(user_id), "UserType": "client"}


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def client(session_maker):
    async def override_get_session():
        async with session_maker() as session:
            yield session

    fastapi_app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(
        transport=ASGITransport(app=fastapi_app), base_url="http://test"
    ) as client:
        yield client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_reservation(session):
    async def _make(
        total_price: Decimal = Decimal("1000.00"),
        status: str = "approved",
        email: str = "ana.torres@example.com",
    ) -> Reservation:
        buyer = Buyer(name="Ana Torres", email=email)
        tour = Tour(title="Patagonia Trek", location="El Chalten", price=Decimal("500.00"))
        session.add_all([buyer, tour])
        await session.flush()

        departure = Departure(
            tour_id=tour.id,
            departure_date=date(2024, 3, 15),
            return_date=date(2024, 3, 25),
            total_seats=20,
        )
        session.add(departure)
        await session.flush()

        reservation = Reservation(
            tour_id=tour.id,
            departure_id=departure.id,
            user_id=buyer.id,
            buyer_name=buyer.name,
            buyer_email=buyer.email,
            number_of_passengers=2,
            total_price=total_price,
            status=status,
        )
        session.add(reservation)
        await session.commit()
        return reservation

    return _make


@pytest.fixture
async def reservation(make_reservation):
    return await make_reservation()
