"""Helpers for receiving and serving file content."""

import os
import tempfile
from typing import AsyncIterator, BinaryIO, Tuple
from urllib.parse import quote

from ...config.constants import DEFAULT_CONTENT_TYPE, UPLOAD_SPOOL_MAX_BYTES


def extension_from_mime_type(mime_type: str) -> str:
  """
  File extension implied by a MIME type, including the leading dot.

  ``image/png`` gives ``.png``, ``image/svg+xml`` gives ``.svg``,
  ``text/plain; charset=utf-8`` gives ``.plain``. Generic binary content and
  malformed types give an empty string.
  """
  if not mime_type or mime_type == DEFAULT_CONTENT_TYPE or "/" not in mime_type:
    return ""

  subtype = mime_type.split("/", 1)[1]
  subtype = subtype.split(";", 1)[0].split("+", 1)[0].strip()
  return f".{subtype}" if subtype else ""


def ensure_file_extension(filename: str, mime_type: str) -> str:
  """Append an extension derived from the MIME type when the name has none."""
  if os.path.splitext(filename)[1]:
    return filename
  return filename + extension_from_mime_type(mime_type)


def content_disposition(filename: str, mime_type: str) -> str:
  """Attachment header value with an ASCII fallback and an RFC 5987 name."""
  name = ensure_file_extension(filename, mime_type)
  ascii_name = name.encode("ascii", "replace").decode("ascii").replace('"', "'")
  return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(name)}"


async def spool_upload(
  chunks: AsyncIterator[bytes], limit: int
) -> Tuple[BinaryIO, int]:
  """
  Copy an upload stream into a temporary file, stopping past ``limit`` bytes.

  Content stays in memory up to ``UPLOAD_SPOOL_MAX_BYTES`` and moves to disk
  after that. Reading stops at the first chunk that crosses ``limit``; that
  chunk is not written and the returned size is then greater than ``limit``,
  which callers reject. The file is rewound before it is returned.
  """
  spool = tempfile.SpooledTemporaryFile(max_size=UPLOAD_SPOOL_MAX_BYTES)
  size = 0
  try:
    async for chunk in chunks:
      size += len(chunk)
      if size > limit:
        break
      spool.write(chunk)
  except BaseException:
    spool.close()
    raise

  spool.seek(0)
  return spool, size
