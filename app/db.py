from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session

from app.config import settings


class Base(DeclarativeBase):
    pass


def _serialize_sqlite_writers(engine) -> None:
    # pysqlite defers BEGIN until the first write; take the write lock up front
    # so concurrent units of work queue on busy_timeout instead of deadlocking.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_engine(database_url: str | None = None, **kwargs):
    url = make_url(database_url or settings.database_url)
    if url.get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": 30}
        engine = create_engine(url, connect_args=connect_args, **kwargs)
        _serialize_sqlite_writers(engine)
        return engine
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
        **kwargs,
    )


def get_engine():
    from app.container import container

    return container.engine()


def SessionLocal() -> Session:
    from app.container import container

    return container.session_factory()()


def get_db():
    """Centralized database session dependency for FastAPI.

    Yields a database session and ensures it is closed after the request.
    Use this as a dependency in FastAPI route handlers.

    Example:
        @app.get("/materials")
        def get_materials(db: Session = Depends(get_db)):
            return db.query(Material).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session):
    """Commit everything done inside the block, or roll all of it back.

    Services that touch more than one row (request approval, usage logging)
    wrap their writes in this so a failure never leaves partial state behind.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
