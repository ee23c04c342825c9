"""Host process collaborator: request/response client and push event stream."""

from .base import AbstractHostClient
from .http_client import HttpHostClient
from .event_stream import HostEventStream

__all__ = [
    "AbstractHostClient",
    "HttpHostClient",
    "HostEventStream",
]
