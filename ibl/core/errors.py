"""
Exceptions raised at the transport boundary of the iBL client
"""
from typing import Optional


class TransportError(Exception):
    """A request to the iBL API failed (HTTP error status, network failure, bad body)"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url
        self.body = body

    def __repr__(self) -> str:
        return f"TransportError({str(self)!r}, status_code={self.status_code!r}, url={self.url!r})"
