"""
Database configuration and session management
"""
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for models
Base = declarative_base()


def make_engine(database_url: str):
    """Create engine; SQLite connections are shared across request threads"""
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, pool_pre_ping=True)

    kwargs = {"connect_args": {"check_same_thread": False}}
    # In-memory databases only exist for the connection that created them
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine):
    """Create tables if they don't exist"""
    Base.metadata.create_all(bind=engine)


# Dependency
def get_db(request: Request):
    """Get database session"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
