from .base import HttpDelegate, IblHttpDelegate
from .client import IblClient
from .request import Request

__all__ = [
    "HttpDelegate",
    "IblHttpDelegate",
    "IblClient",
    "Request",
]
