"""Dependency injection container.

This module owns the process-wide datastore handle so nothing else builds
engines or sessions on its own.

Usage:
    from app.container import container

    # In request handling (see app.db.get_db)
    db = container.session_factory()()

    # In tests
    configure_container(test_engine)
    with container.notifier.override(providers.Object(RecordingNotifier())):
        material_requests.submit(db, ...)
"""

from __future__ import annotations

from dependency_injector import containers, providers  # type: ignore[import-not-found]
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.db import build_engine


def _get_notifier():
    from app.services.notifications import in_app_notifier
    return in_app_notifier


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    Provides:
    - The SQLAlchemy engine (one per process)
    - The session factory bound to that engine
    - The notification sink used by the workflow services
    """

    engine = providers.Singleton(build_engine, settings.database_url)
    session_factory = providers.Singleton(
        sessionmaker,
        bind=engine,
        autoflush=False,
    )

    notifier = providers.Singleton(_get_notifier)


# Global container instance
container = Container()


def get_container() -> Container:
    """Get the global container instance."""
    return container


def configure_container(engine) -> Container:
    """Point the container at an already-built engine.

    Args:
        engine: SQLAlchemy engine every session should be bound to

    Returns:
        Configured container instance
    """
    container.engine.override(providers.Object(engine))
    container.session_factory.reset()
    return container


def reset_container() -> None:
    container.engine.reset_override()
    container.engine.reset()
    container.session_factory.reset()


def shutdown_container() -> None:
    """Dispose the process engine's connection pool at shutdown."""
    if container.engine.overridden:
        return
    container.engine().dispose()
    container.engine.reset()
    container.session_factory.reset()
