from .filesystem import FilesystemCheckpointSource
from .http_client import HTTPCheckpointSource

__all__ = ["FilesystemCheckpointSource", "HTTPCheckpointSource"]
