#!/usr/bin/env python3
"""Database and bucket management utility."""

import argparse
from typing import Optional, Sequence

from meemo.database import engine, init_db, session
from meemo.exceptions import DuplicateEntityError, EntityNotFoundError
from meemo.logger import logger
from meemo.models.iam import File, RefreshToken, User
from meemo.operations.aws import S3FileStorage
from meemo.security import PasswordSecurity


def initialize_database():
  """Create any missing tables."""
  init_db()
  logger.info(f"✅ Tables created on {engine.url.render_as_string(hide_password=True)}")


def list_users():
  """List all users in the database."""
  users = User.get_all(session)

  if not users:
    logger.info("No users found in the database")
    return

  logger.info(f"Found {len(users)} users:")
  for user in users:
    files = File.list_by_owner(user.email, session)
    used = File.get_total_used_space(user.email, session)
    logger.info(f"  - {user.email} ({user.full_name}) - {len(files)} files, {used} bytes")


def create_user(email: str, first_name: str, last_name: str, password: str) -> bool:
  """Create a new user."""
  validation = PasswordSecurity.validate_password(password)
  if not validation.is_valid:
    logger.error(f"❌ Invalid password: {'; '.join(validation.errors)}")
    return False

  try:
    user = User.create(
      first_name=first_name,
      last_name=last_name,
      email=email,
      password_hash=PasswordSecurity.hash_password(password),
      session=session,
    )
  except DuplicateEntityError:
    logger.error(f"❌ User with email {email} already exists")
    return False

  logger.info(f"✅ Created user: {user.email}")
  return True


def delete_user(email: str) -> bool:
  """Delete a user with their file metadata. Stored objects are not removed."""
  try:
    User.delete_by_email(email, session)
  except EntityNotFoundError:
    logger.error(f"❌ User with email {email} not found")
    return False

  logger.info(f"✅ Deleted user: {email}")
  return True


def cleanup_tokens() -> int:
  """Delete expired and revoked refresh tokens."""
  count = RefreshToken.cleanup_expired_tokens(session)
  logger.info(f"✅ Removed {count} expired or revoked refresh tokens")
  return count


def create_bucket(bucket: Optional[str] = None):
  storage = S3FileStorage(bucket=bucket)
  storage.create_bucket()
  logger.info(f"✅ Bucket ready: {storage.bucket}")


def delete_bucket(bucket: Optional[str] = None, force: bool = False):
  storage = S3FileStorage(bucket=bucket)
  storage.delete_bucket(force=force)
  logger.info(f"✅ Deleted bucket: {storage.bucket}")


def build_parser() -> argparse.ArgumentParser:
  parser = argparse.ArgumentParser(description="Database management utility")
  subparsers = parser.add_subparsers(dest="command", help="Available commands")

  subparsers.add_parser("init-db", help="Create database tables")
  subparsers.add_parser("list-users", help="List all users")

  create_user_parser = subparsers.add_parser("create-user", help="Create a new user")
  create_user_parser.add_argument("email", help="User email")
  create_user_parser.add_argument("first_name", help="First name")
  create_user_parser.add_argument("last_name", help="Last name")
  create_user_parser.add_argument("password", help="User password")

  delete_user_parser = subparsers.add_parser("delete-user", help="Delete a user")
  delete_user_parser.add_argument("email", help="User email")

  subparsers.add_parser(
    "cleanup-tokens", help="Delete expired and revoked refresh tokens"
  )

  create_bucket_parser = subparsers.add_parser(
    "create-bucket", help="Create the storage bucket"
  )
  create_bucket_parser.add_argument("--bucket", help="Bucket name (default: env)")

  delete_bucket_parser = subparsers.add_parser(
    "delete-bucket", help="Delete the storage bucket"
  )
  delete_bucket_parser.add_argument("--bucket", help="Bucket name (default: env)")
  delete_bucket_parser.add_argument(
    "--force", action="store_true", help="Delete all objects first"
  )

  return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
  parser = build_parser()
  args = parser.parse_args(argv)

  if args.command == "init-db":
    initialize_database()
  elif args.command == "list-users":
    list_users()
  elif args.command == "create-user":
    return 0 if create_user(args.email, args.first_name, args.last_name, args.password) else 1
  elif args.command == "delete-user":
    return 0 if delete_user(args.email) else 1
  elif args.command == "cleanup-tokens":
    cleanup_tokens()
  elif args.command == "create-bucket":
    create_bucket(args.bucket)
  elif args.command == "delete-bucket":
    delete_bucket(args.bucket, args.force)
  else:
    parser.print_help()
    return 1

  return 0


if __name__ == "__main__":
  raise SystemExit(main())
