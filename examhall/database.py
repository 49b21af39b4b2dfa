from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from examhall import config


def make_engine(url):
    if not url.startswith("sqlite"):
        return create_engine(url)

    # an in-memory database only lives as long as its single connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        engine = create_engine(
            url,
            connect_args = {"check_same_thread": False},
            poolclass = StaticPool
        )
    else:
        engine = create_engine(
            url,
            connect_args = {"check_same_thread": False}
        )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


engine = make_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(autocommit = False, autoflush = False, bind = engine)

Base = declarative_base()
