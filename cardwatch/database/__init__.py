from .postgres_client import (
    Base,
    build_database_url,
    create_engine,
    create_schema,
    create_session_factory,
)

__all__ = [
    "Base",
    "build_database_url",
    "create_engine",
    "create_schema",
    "create_session_factory",
]
