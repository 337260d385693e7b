from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mapty.database import init_db
from mapty.dependencies import get_activity_service
from mapty.main import app
from mapty.services.activity import ActivityService
from mapty.services.geolocation import StaticLocationProvider
from mapty.services.map_renderer import MarkerBoard
from mapty.services.persistence import InMemoryBlobStorage, WorkoutRepository

LONDON = (51.505, -0.09)
APRIL_4 = datetime(2024, 4, 4, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def storage():
    return InMemoryBlobStorage()


@pytest.fixture
def repository(storage):
    return WorkoutRepository(storage)


@pytest.fixture
def board():
    return MarkerBoard()


@pytest.fixture
def service(repository, board):
    return ActivityService(repository, board, StaticLocationProvider(LONDON))


@pytest.fixture
def client(service):
    service.start()
    app.dependency_overrides[get_activity_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
