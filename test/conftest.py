import os
import tempfile

# The engine is built at import time, so the database must be chosen first
_db_dir = tempfile.mkdtemp(prefix="airline-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'airline.db')}"
os.environ["SEED_DATA"] = "0"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from airline_api import config  # noqa: E402
from airline_api.db.seed import seed_database  # noqa: E402
from airline_api.db.session import create_db_and_tables, engine  # noqa: E402
from airline_api.log import setup_logging  # noqa: E402
from airline_api.main import app  # noqa: E402
from init_db import login  # noqa: E402

setup_logging("WARNING")


@pytest.fixture(autouse=True)
def database():
    """Fresh schema with the admin user and the two seeded aircraft"""
    SQLModel.metadata.drop_all(engine)
    create_db_and_tables()
    with Session(engine) as session:
        seed_database(session)
    yield


@pytest.fixture
def session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def admin_headers(client) -> dict:
    return login(client, config.admin_email, config.admin_password)
