import os

# Configuration is read at import time, so the test environment must be in
# place before any meemo module loads
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-meemo-tests-only")
os.environ.setdefault("AWS_S3_BUCKET", "meemo-test")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import boto3
import pytest
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from moto import mock_aws
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from meemo.database import (
  Model as Base,
  enable_sqlite_foreign_keys,
  get_db_session,
  get_engine_options,
)
from meemo.middleware.auth.jwt import create_access_token
from meemo.operations.aws import S3FileStorage, get_file_storage

# Speed up password hashing for tests by reducing bcrypt rounds
from meemo.security import password as password_module

password_module.PasswordSecurity.BCRYPT_ROUNDS = 4  # Fast for tests

TEST_BUCKET = "meemo-test"
TEST_PASSWORD = "s3cret-pass"


@pytest.fixture(scope="session")
def test_engine():
  """Create a test database engine (in-memory SQLite unless overridden)."""
  database_url = os.environ.get("TEST_DATABASE_URL", "sqlite://")

  engine = create_engine(database_url, **get_engine_options(database_url))
  enable_sqlite_foreign_keys(engine)

  # Import models so every table is registered before create_all
  from meemo.models import iam  # noqa: F401

  Base.metadata.drop_all(bind=engine)
  Base.metadata.create_all(bind=engine)
  yield engine
  engine.dispose()


@pytest.fixture(scope="session")
def test_db(test_engine):
  """Create a test database session."""
  TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=test_engine
  )
  return TestingSessionLocal()


@pytest.fixture
def db_session(test_db):
  """Alias for test_db to match test expectations."""
  return test_db


@pytest.fixture(autouse=True)
def setup_database(test_db):
  """Clean every table after each test."""
  yield test_db
  test_db.rollback()
  for table in reversed(Base.metadata.sorted_tables):
    test_db.execute(table.delete())
  test_db.commit()
  test_db.expunge_all()


@pytest.fixture
def s3_client():
  """Mocked S3 client with the test bucket created."""
  with mock_aws():
    client = boto3.client("s3", region_name="us-east-1")
    client.create_bucket(Bucket=TEST_BUCKET)
    yield client


@pytest.fixture
def file_storage(s3_client):
  """Storage adapter bound to the mocked bucket."""
  return S3FileStorage(bucket=TEST_BUCKET, region_name="us-east-1", s3_client=s3_client)


def _override_dependencies(test_db, file_storage):
  def override_get_db():
    yield test_db

  app.dependency_overrides[get_db_session] = override_get_db
  app.dependency_overrides[get_file_storage] = lambda: file_storage


@pytest.fixture
def client(test_db, file_storage):
  """Create a test client."""
  _override_dependencies(test_db, file_storage)
  yield TestClient(app)

  # Reset the dependency overrides
  app.dependency_overrides = {}


@pytest.fixture
async def async_client(test_db, file_storage):
  """Create an async test client."""
  _override_dependencies(test_db, file_storage)

  transport = ASGITransport(app=app)
  async with AsyncClient(transport=transport, base_url="http://test") as ac:
    yield ac

  # Reset the dependency overrides
  app.dependency_overrides = {}


def make_user(session, email: str, first_name: str = "Test", last_name: str = "User"):
  from meemo.models.iam import User
  from meemo.security import PasswordSecurity

  return User.create(
    first_name=first_name,
    last_name=last_name,
    email=email,
    password_hash=PasswordSecurity.hash_password(TEST_PASSWORD),
    session=session,
  )


def auth_headers(user) -> dict:
  token, _ = create_access_token(user.id, user.email)
  return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_user(test_db):
  """Create a test user with a known password."""
  return make_user(test_db, "alice@example.com", "Alice", "Owner")


@pytest.fixture
def other_user(test_db):
  return make_user(test_db, "bob@example.com", "Bob", "Other")


@pytest.fixture
def test_user_headers(test_user):
  return auth_headers(test_user)


@pytest.fixture
def other_user_headers(other_user):
  return auth_headers(other_user)


@pytest.fixture
def test_password():
  return TEST_PASSWORD
