"""
Request layer over an HTTP delegate
Builds URLs, shapes query parameters, unwraps response properties and auto-paginates
"""
import copy
import logging
from typing import Optional, Dict, Any, List

from .base import HttpDelegate

logger = logging.getLogger(__name__)

AUTO_PAGINATE = "autoPaginate"
DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 20


def to_request_params(opts: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Clone caller options into query params, minus the reserved autoPaginate flag"""
    params = copy.deepcopy(dict(opts)) if opts else {}
    params.pop(AUTO_PAGINATE, None)
    return params


def _has_more_pages(envelope: Any, response_property: str) -> bool:
    """True while count > page * per_page; counters may sit on the envelope or on its property"""
    if not isinstance(envelope, dict):
        return False
    counters = envelope
    if "count" not in counters and isinstance(envelope.get(response_property), dict):
        counters = envelope[response_property]
    try:
        return counters["count"] > counters["page"] * counters["per_page"]
    except (KeyError, TypeError):
        return False


class Request:
    """Fetches iBL resources relative to a fixed base URL"""

    def __init__(self, delegate: HttpDelegate, base_url: str):
        self.base_url = base_url.rstrip("/")
        self.delegate = delegate

    def create_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def get(self, path: str, opts: Optional[Dict[str, Any]] = None) -> Any:
        """Fetch the raw envelope at `path`; delegate errors propagate untouched"""
        url = self.create_url(path)
        params = to_request_params(opts)
        logger.debug(f"[IblRequest] GET {url} {params}")
        return await self.delegate.get(url, params)

    async def get_with_property_filter(
        self, path: str, response_property: str, opts: Optional[Dict[str, Any]] = None
    ) -> Any:
        """Fetch `path` and return only envelope[response_property] (None when absent)"""
        envelope = await self.get(path, opts)
        if not isinstance(envelope, dict):
            return None
        return envelope.get(response_property)

    async def get_with_auto_pagination(
        self, path: str, response_property: str, opts: Optional[Dict[str, Any]] = None
    ) -> List[Any]:
        """
        Walk every page of a paginated list, one request at a time.

        Returns the full envelope of each page in order. A failing page
        aborts the walk and nothing collected so far is returned.
        """
        opts = to_request_params(opts)
        opts.setdefault("page", DEFAULT_PAGE)
        opts.setdefault("per_page", DEFAULT_PER_PAGE)

        pages = []
        while True:
            envelope = await self.get(path, opts)
            pages.append(envelope)
            if not _has_more_pages(envelope, response_property):
                break
            opts["page"] = int(opts["page"]) + 1

        logger.debug(f"[IblRequest] Collected {len(pages)} page(s) of {response_property} from {path}")
        return pages
