import os

# Must be set before tablebook.database creates the engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["EXPIRY_SWEEP_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient

from tablebook.database import Base, SessionLocal, engine
from tablebook.main import app
from tablebook.models import Restaurant


LAYOUT = [
    {"id": "t1", "type": "table", "label": "1", "seats": 2, "shape": "circle", "x": 10, "y": 10},
    {"id": "t2", "type": "table", "label": "2", "seats": 4, "x": 100, "y": 10},
    {"id": "w1", "type": "wall", "x": 0, "y": 0, "width": 200, "height": 5},
    {"id": "txt", "type": "text", "label": "Bar", "x": 50, "y": 50},
]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def restaurant(db):
    r = Restaurant(name="Test Bistro", work_starts="10:00", work_ends="23:00", layout=LAYOUT, floors=[])
    db.add(r)
    db.commit()
    db.refresh(r)
    return r


@pytest.fixture
def client(db):
    # No context manager: startup (and the expiry sweep) is not run
    return TestClient(app)
