"""
Test Configuration and Fixtures

This module provides:
- Environment setup before any application module reads settings
- A fresh SQLite database per test (aiosqlite, WAL + busy timeout)
- Seed helpers for events, coupons, promotions, point grants and reviews
- JWT helpers for the HTTP tests

Architecture:
- Unit tests (test/**/unit/): mock the unit of work, never touch the database
- Integration tests: real SqlAlchemyUnitOfWork over the per-test database
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the loguru sinks are built at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['DATABASE_URL'] = f'sqlite+aiosqlite:///{test_log_dir / "checkout_default.db"}'
    os.environ['EXPIRATION_SWEEP_ENABLED'] = 'false'
    os.environ['SECRET_KEY'] = 'test_secret_key'
    os.environ['CRON_SECRET'] = 'test_cron_secret'
    os.environ['PAYMENT_CALLBACK_SECRET'] = 'test_payment_callback_secret'
    os.environ['TAX_RATE'] = '0.11'
    os.environ['HOLD_DURATION_MINUTES'] = '60'
    os.environ['POINT_DEFAULT_EXPIRY_DAYS'] = '365'
    os.environ['POINT_REFUND_EXPIRY_DAYS'] = '365'
    os.environ['LOCK_RETRY_ATTEMPTS'] = '5'
    os.environ['LOCK_RETRY_BASE_DELAY_SECONDS'] = '0.01'


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import AsyncGenerator, Callable  # noqa: E402
from datetime import datetime, timedelta  # noqa: E402
from typing import Any, Optional  # noqa: E402

import pytest  # noqa: E402

from src.platform.database.orm_db_setting import Database  # noqa: E402
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork, UnitOfWorkFactory  # noqa: E402
from src.platform.types.utc_datetime import utc_now  # noqa: E402
from src.service.checkout.domain.entity.event_entity import Event, EventTier  # noqa: E402
from src.service.checkout.domain.enum.discount_type import DiscountType  # noqa: E402
from src.service.checkout.domain.enum.user_role import UserRole  # noqa: E402
from src.service.checkout.domain.value_object.current_user import CurrentUser  # noqa: E402
from src.service.checkout.driven_adapter.model import (  # noqa: E402
    CouponModel,
    PointTransactionModel,
    PromotionModel,
    ReviewModel,
)
from src.service.checkout.driving_adapter.http_controller.auth.jwt_auth import JwtAuth  # noqa: E402


DEFAULT_TIER = 'VIP'
DEFAULT_TIER_PRICE = 100000
DEFAULT_TIER_CAPACITY = 10

ADMIN_USER = CurrentUser(id=1, email='admin@test.com', name='Admin', role=UserRole.ADMIN)
BUYER_USER = CurrentUser(id=2, email='buyer@test.com', name='Buyer', role=UserRole.BUYER)
ANOTHER_BUYER_USER = CurrentUser(
    id=3, email='another_buyer@test.com', name='Another Buyer', role=UserRole.BUYER
)
SELLER_USER = CurrentUser(id=4, email='seller@test.com', name='Seller', role=UserRole.SELLER)


# =============================================================================
# Database
# =============================================================================
@pytest.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    db = Database(db_url=f'sqlite+aiosqlite:///{tmp_path / "checkout_test.db"}')
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def uow_factory(database: Database) -> UnitOfWorkFactory:
    return lambda: SqlAlchemyUnitOfWork(session_factory=database.session)


# =============================================================================
# Seed helpers
# =============================================================================
@pytest.fixture
def seed_event(uow_factory: UnitOfWorkFactory) -> Callable[..., Any]:
    async def _seed(
        *,
        name: str = 'Spring Concert',
        tiers: Optional[list[EventTier]] = None,
    ) -> Event:
        tiers = tiers or [
            EventTier(
                tier_name=DEFAULT_TIER, price=DEFAULT_TIER_PRICE, capacity=DEFAULT_TIER_CAPACITY
            )
        ]
        async with uow_factory() as uow:
            event = await uow.inventory_ledger.create_event(event=Event(name=name, tiers=tiers))
            await uow.commit()
        return event

    return _seed


@pytest.fixture
def seed_coupon(database: Database) -> Callable[..., Any]:
    async def _seed(
        *,
        code: str,
        user_id: int = BUYER_USER.id,
        value: int = 10,
        discount_type: DiscountType = DiscountType.PERCENTAGE,
        expires_at: Optional[datetime] = None,
        is_used: bool = False,
    ) -> int:
        async with database.session() as session:
            coupon = CouponModel(
                code=code,
                user_id=user_id,
                discount_value=value,
                discount_type=discount_type.value,
                expires_at=expires_at or utc_now() + timedelta(days=30),
                is_used=is_used,
            )
            session.add(coupon)
            await session.commit()
            return coupon.id

    return _seed


@pytest.fixture
def seed_promotion(database: Database) -> Callable[..., Any]:
    async def _seed(
        *,
        event_id: int,
        code: str,
        value: int = 5000,
        discount_type: DiscountType = DiscountType.FIXED,
        usage_limit: Optional[int] = None,
        usage_count: int = 0,
        is_active: bool = True,
    ) -> int:
        now = utc_now()
        async with database.session() as session:
            promotion = PromotionModel(
                event_id=event_id,
                code=code,
                discount_value=value,
                discount_type=discount_type.value,
                start_date=now - timedelta(days=1),
                end_date=now + timedelta(days=30),
                is_active=is_active,
                usage_limit=usage_limit,
                usage_count=usage_count,
            )
            session.add(promotion)
            await session.commit()
            return promotion.id

    return _seed


@pytest.fixture
def seed_points(database: Database) -> Callable[..., Any]:
    async def _seed(
        *,
        user_id: int = BUYER_USER.id,
        points: int,
        expires_at: Optional[datetime] = None,
        description: str = 'Seed grant',
    ) -> int:
        async with database.session() as session:
            grant = PointTransactionModel(
                user_id=user_id,
                points=points,
                remaining=points,
                description=description,
                expires_at=expires_at or utc_now() + timedelta(days=365),
                is_expired=False,
                created_at=utc_now(),
            )
            session.add(grant)
            await session.commit()
            return grant.id

    return _seed


@pytest.fixture
def seed_review(database: Database) -> Callable[..., Any]:
    async def _seed(*, user_id: int, event_id: int, rating: int) -> None:
        async with database.session() as session:
            session.add(ReviewModel(user_id=user_id, event_id=event_id, rating=rating))
            await session.commit()

    return _seed


# =============================================================================
# Auth helpers
# =============================================================================
@pytest.fixture
def auth_headers() -> Callable[[CurrentUser], dict[str, str]]:
    jwt_auth = JwtAuth()

    def _headers(user: CurrentUser) -> dict[str, str]:
        return {'Authorization': f'Bearer {jwt_auth.create_jwt_token(user)}'}

    return _headers


@pytest.fixture
def admin_user() -> CurrentUser:
    return ADMIN_USER


@pytest.fixture
def buyer_user() -> CurrentUser:
    return BUYER_USER


@pytest.fixture
def another_buyer_user() -> CurrentUser:
    return ANOTHER_BUYER_USER


@pytest.fixture
def seller_user() -> CurrentUser:
    return SELLER_USER


@pytest.fixture
def default_tier() -> str:
    return DEFAULT_TIER
