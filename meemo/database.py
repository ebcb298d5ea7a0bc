import asyncio
import contextvars
import threading

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from meemo.config import env


def get_database_url():
  """Get database URL with SSL configuration if needed."""
  database_url = env.DATABASE_URL

  if not database_url.startswith("postgresql"):
    return database_url

  # Add SSL parameters for staging/prod environments
  if (env.is_staging() or env.is_production()) and "?" not in database_url:
    database_url += "?sslmode=require"
  elif (env.is_staging() or env.is_production()) and "sslmode" not in database_url:
    database_url += "&sslmode=require"

  return database_url


def get_engine_options(database_url: str) -> dict:
  """Engine keyword arguments appropriate for the database backend."""
  if database_url.startswith("sqlite"):
    options = {"connect_args": {"check_same_thread": False}, "echo": env.DATABASE_ECHO}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
      # A single shared connection keeps the in-memory database alive
      options["poolclass"] = StaticPool
    return options

  return {
    "pool_size": env.DATABASE_POOL_SIZE,
    "max_overflow": env.DATABASE_MAX_OVERFLOW,
    "pool_timeout": env.DATABASE_POOL_TIMEOUT,
    "pool_recycle": env.DATABASE_POOL_RECYCLE,
    "pool_pre_ping": True,
    "echo": env.DATABASE_ECHO,
  }


def enable_sqlite_foreign_keys(target_engine: Engine) -> None:
  """SQLite ignores ON DELETE CASCADE unless foreign keys are switched on."""
  if target_engine.dialect.name != "sqlite":
    return

  @event.listens_for(target_engine, "connect")
  def _set_sqlite_pragma(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


_request_scope = contextvars.ContextVar("db_request_scope", default=None)


def activate_request_scope():
  """
  Activate a request-scoped SQLAlchemy session context.

  Returns:
      ContextVar token if a new scope was set, otherwise None.
  """
  if _request_scope.get() is not None:
    return None
  return _request_scope.set(object())


def deactivate_request_scope(token):
  """Reset request scope context if it was set."""
  if token is None:
    return
  try:
    _request_scope.reset(token)
  except ValueError:
    # Context may differ if the dependency ran in a worker thread.
    _request_scope.set(None)


def _session_scope():
  """
  Return an identifier for the current execution context.

  FastAPI runs multiple requests in the same thread via asyncio tasks.
  Using the current task as the scope avoids sharing the same SQLAlchemy
  Session across concurrent requests while still supporting threaded usage.
  """
  scope_id = _request_scope.get()
  if scope_id is not None:
    return scope_id

  try:
    current_task = asyncio.current_task()
  except RuntimeError:
    current_task = None

  if current_task is not None:
    return current_task

  return threading.get_ident()


engine = create_engine(get_database_url(), **get_engine_options(get_database_url()))
enable_sqlite_foreign_keys(engine)
SessionFactory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
session = scoped_session(SessionFactory, scopefunc=_session_scope)


class Base(DeclarativeBase):
  """Base class for all models."""

  pass


Model = Base
Model.query = session.query_property()


def init_db(target_engine: Engine | None = None) -> None:
  """Create all tables that do not exist yet."""
  # Register every model on the metadata before creating tables
  from meemo.models import iam  # noqa: F401

  Base.metadata.create_all(bind=target_engine or engine)


def get_db_session():
  """Get database session for FastAPI dependency injection."""
  db = session()
  try:
    yield db
  finally:
    session.remove()
