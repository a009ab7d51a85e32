import re
from enum import Enum


class StorageBackend(Enum):
    FILESYSTEM = "filesystem"
    GCS = "gcs"


# Three dot-separated segments of the URL-safe base64 alphabet.
SIGNED_TOKEN_PATTERN = re.compile(r"[A-Za-z0-9_-]{2,}\.[A-Za-z0-9_-]{2,}\.[A-Za-z0-9_-]{2,}")

DEFAULT_MAX_TOKEN_LENGTH = 4096

PEM_LABEL = "PRIVATE KEY"
PEM_CONTENT_TYPE = "application/x-pem-file"

MIN_BACKUPS = 1
MAX_BACKUPS = 32
