"""Per-owner storage quota."""

from dataclasses import dataclass
from typing import Optional

from ...config import env
from ...exceptions import InsufficientStorageError


@dataclass(frozen=True)
class StorageInfo:
  used_bytes: int
  available_bytes: int
  total_bytes: int


class QuotaPolicy:
  """Rejects content that would push an owner's usage past a fixed ceiling."""

  def __init__(self, ceiling_bytes: Optional[int] = None):
    self.ceiling_bytes = (
      env.STORAGE_QUOTA_BYTES if ceiling_bytes is None else ceiling_bytes
    )

  def allows(self, used_bytes: int, incoming_bytes: int) -> bool:
    return used_bytes + incoming_bytes <= self.ceiling_bytes

  def check(self, used_bytes: int, incoming_bytes: int) -> None:
    """
    Raises:
        InsufficientStorageError: If ``used + incoming`` exceeds the ceiling
    """
    if not self.allows(used_bytes, incoming_bytes):
      raise InsufficientStorageError(used_bytes, incoming_bytes, self.ceiling_bytes)

  def remaining(self, used_bytes: int) -> int:
    return max(self.ceiling_bytes - used_bytes, 0)

  def storage_info(self, used_bytes: int) -> StorageInfo:
    return StorageInfo(
      used_bytes=used_bytes,
      available_bytes=self.remaining(used_bytes),
      total_bytes=self.ceiling_bytes,
    )
