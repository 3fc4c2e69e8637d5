from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker


def create_db_engine(database_url: str, **kwargs) -> Engine:
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(database_url, future=True, **kwargs)


def create_session_factory(database_url: str = None, engine: Engine = None) -> sessionmaker:
    """
    Build the session factory the application is wired with.

    Either an engine or a URL is given; the factory is handed to
    ``create_app`` so every app instance owns its own store.
    """
    if engine is None:
        if not database_url:
            raise ValueError("database_url or engine is required")
        engine = create_db_engine(database_url)
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
        future=True,
    )
