from .s3 import S3FileStorage, get_file_storage

__all__ = ["S3FileStorage", "get_file_storage"]
