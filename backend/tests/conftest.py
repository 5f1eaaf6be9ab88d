# backend/tests/conftest.py
"""
Pytest configuration for inkmatch.

Every test gets a fresh in-memory SQLite profile store (StaticPool, so the
TestClient worker threads share the one connection) with the haversine math
functions registered.
"""

import os

# Point the application at an in-memory store BEFORE any inkmatch import.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("CI", "true")

from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, Optional, Sequence, Tuple

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.orm import Session, sessionmaker

from inkmatch.database import Base, build_engine, get_db
from inkmatch.main import app
from inkmatch.models import (
    PortfolioImage,
    Profile,
    ProfileAmenity,
    ProfileService,
    ProfileSpecialty,
    ProfileWorkingHours,
    Specialty,
)

BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def engine():
    test_engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Session:
    """A fresh session per test."""
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def client(db: Session):
    """Create a test client with the test database."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)

    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def specialty_factory(db: Session) -> Callable[..., Specialty]:
    def _make(name: str, category: str = "style", description: Optional[str] = None) -> Specialty:
        specialty = Specialty(name=name, category=category, description=description)
        db.add(specialty)
        db.flush()
        return specialty

    return _make


WorkingWindow = Tuple[str, int, int]


@pytest.fixture
def profile_factory(db: Session) -> Callable[..., Profile]:
    """
    Build a profile with its facet rows.

    ``created_minutes`` offsets ``created_at`` from a fixed base time so
    newest-first ordering is deterministic.
    """
    counter = {"n": 0}

    def _make(
        name: Optional[str] = None,
        *,
        profile_type: str = "artist",
        specialties: Iterable[Specialty] = (),
        services: Sequence[str] = (),
        amenities: Sequence[str] = (),
        working_hours: Sequence[WorkingWindow] = (),
        portfolio_images: int = 0,
        created_minutes: Optional[int] = None,
        profile_id: Optional[str] = None,
        **fields,
    ) -> Profile:
        counter["n"] += 1
        n = counter["n"]
        profile = Profile(
            name=name or f"Profile {n}",
            profile_type=profile_type,
            created_at=BASE_TIME + timedelta(minutes=created_minutes if created_minutes is not None else n),
            **fields,
        )
        if profile_id is not None:
            profile.id = profile_id
        profile.specialties = [ProfileSpecialty(specialty_id=s.id) for s in specialties]
        profile.services = [ProfileService(name=s) for s in services]
        profile.amenities = [ProfileAmenity(name=a) for a in amenities]
        profile.working_hours = [
            ProfileWorkingHours(weekday=day, opens_minute=opens, closes_minute=closes)
            for day, opens, closes in working_hours
        ]
        profile.portfolio_images = [
            PortfolioImage(title=f"Piece {i}", image_url=f"https://img.example/{n}/{i}.jpg")
            for i in range(portfolio_images)
        ]
        db.add(profile)
        db.flush()
        return profile

    return _make
