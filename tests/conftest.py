import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from baker_recipes.app.api.deps import get_db_session
from baker_recipes.app.db import models  # noqa: F401
from baker_recipes.app.db.base import Base
from baker_recipes.app.main import create_app


@pytest.fixture(scope="session")
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def db_session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(bind=connection, autocommit=False, autoflush=False, future=True)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        transaction.rollback()
        connection.close()


@pytest.fixture
def app(db_session):
    app = create_app()

    def override_db():
        yield db_session

    app.dependency_overrides[get_db_session] = override_db
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def basic_loaf():
    return {
        "name": "Basic Loaf",
        "quantity": 1,
        "weightPerUnit": 900,
        "totalWeight": 900,
        "ingredients": [
            {"name": "Flour", "type": "flour", "percentage": 100, "weight": 500},
            {"name": "Water", "type": "liquid", "percentage": 70, "weight": 350},
            {"name": "Salt", "type": "salt", "percentage": 2, "weight": 10},
            {"name": "Yeast", "type": "yeast", "percentage": 8, "weight": 40},
        ],
        "instructions": "Mix.",
    }
