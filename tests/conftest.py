"""Pytest configuration and fixtures."""

import asyncio
import smtplib
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from focus_space.core.config import Settings
from focus_space.db import AdminRepository, CourseRepository, init_db
from focus_space.models.admin import Admin, AdminRole, hash_password
from focus_space.models.course import Course, CourseCategory, TimeSlot
from focus_space.services.instagram import InstagramTokenManager
from focus_space.web import create_app

# Monday, 2 March 2026
FROZEN_NOW = datetime(2026, 3, 2, 10, 0, 0)

ADMIN_EMAIL = "coach@focusspace.tw"
ADMIN_PASSWORD = "password123"
# bcrypt is slow on purpose; hash once per session
ADMIN_PASSWORD_HASH = hash_password(ADMIN_PASSWORD)


def frozen_clock() -> datetime:
    return FROZEN_NOW


class FakeMailer:
    """Records emails instead of sending them."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[tuple[str, str]] = []

    async def send_booking_created(self, booking) -> bool:
        if self.fail:
            raise smtplib.SMTPException("SMTP server unavailable")
        self.sent.append(("created", booking.booking_number))
        return True

    async def send_booking_confirmed(self, booking) -> bool:
        if self.fail:
            raise smtplib.SMTPException("SMTP server unavailable")
        self.sent.append(("confirmed", booking.booking_number))
        return True


def make_personal_course(**overrides) -> Course:
    """One-on-one training on Mon/Wed/Fri."""
    fields = dict(
        title="一對一私人教練",
        description="依照個人目標量身打造的訓練課程",
        category=CourseCategory.PERSONAL,
        start_date=date(2026, 3, 1),
        end_date=date(2026, 6, 30),
        weekdays=[1, 3, 5],
        time_slots=[
            TimeSlot("09:00", "10:00"),
            TimeSlot("10:00", "11:00"),
            TimeSlot("14:00", "15:00"),
        ],
        duration=60,
        price=1500,
        instructor="Amy",
    )
    fields.update(overrides)
    return Course(**fields)


def make_group_course(**overrides) -> Course:
    """Small group class starting next week, Tue/Thu evenings."""
    fields = dict(
        title="TRX 小團體課",
        description="懸吊訓練小團體課程，強化核心與全身肌力",
        category=CourseCategory.GROUP,
        start_date=date(2026, 3, 10),
        end_date=date(2026, 5, 31),
        weekdays=[2, 4],
        time_slots=[TimeSlot("19:00", "20:00")],
        duration=60,
        price=800,
        max_participants=3,
    )
    fields.update(overrides)
    return Course(**fields)


def seed_course(db_path: Path, course: Course) -> Course:
    return asyncio.run(CourseRepository(db_path).create(course, now=FROZEN_NOW))


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def db_path(temp_db_path):
    """Temporary database with the schema created."""
    asyncio.run(init_db(temp_db_path))
    return temp_db_path


@pytest.fixture
def settings(temp_db_path):
    return Settings(
        database_path=temp_db_path,
        environment="local",
        session_secret="test-session-secret",
        api_secret="s3cret",
        ig_token="IG_TOKEN_ORIGINAL",
        ig_token_cache=temp_db_path.parent / ".token-cache.json",
    )


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(db_path, settings, mailer):
    return create_app(
        db_path=db_path,
        settings=settings,
        mailer=mailer,
        token_manager=InstagramTokenManager(settings),
        clock=frozen_clock,
    )


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def admin_account(db_path):
    admin = Admin(
        email=ADMIN_EMAIL,
        name="Coach Amy",
        role=AdminRole.ADMIN,
        password_hash=ADMIN_PASSWORD_HASH,
    )
    return asyncio.run(AdminRepository(db_path).create(admin))


@pytest.fixture
def admin_client(app, admin_account):
    """Client with a logged-in admin session."""
    client = TestClient(app)
    response = client.post(
        "/api/admin/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def personal_course(db_path):
    return seed_course(db_path, make_personal_course())


@pytest.fixture
def group_course(db_path):
    return seed_course(db_path, make_group_course())
