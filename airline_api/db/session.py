from typing import Annotated

from fastapi import Depends
from loguru import logger
from sqlalchemy import event
from sqlmodel import create_engine, Session, SQLModel

from .. import config


def _connect_args(url: str) -> dict:
    # TestClient and uvicorn workers hand the connection between threads
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(config.database_url, connect_args=_connect_args(config.database_url))


if engine.dialect.name == "sqlite":
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        # SQLite ignores REFERENCES clauses unless asked per connection
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_and_tables():
    # Table classes must be imported before metadata is complete
    from . import aircraft, flights, reservations, users  # noqa: F401

    logger.info(f"Creating tables on {engine.url.render_as_string(hide_password=True)}")
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_session)]
