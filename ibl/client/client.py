"""
Main iBL client - unified interface
Maps each catalogue view onto the request layer through the endpoint table
"""
import asyncio
import logging
from typing import Optional, Dict, Any

from ..core.config import DEFAULT_BASE_URL
from .base import HttpDelegate
from .callbacks import Callback, register_callback, split_callback
from .endpoints import ENDPOINTS, POPULAR_GROUP, CallStyle, Pids, is_valid_id, join_pids
from .request import AUTO_PAGINATE, Request

logger = logging.getLogger(__name__)

Options = Optional[Dict[str, Any]]


class IblClient:
    """
    Async client for the iPlayer Business Layer API
    API base: http://ibl.api.bbci.co.uk/ibl/v1

    Every method returns an asyncio.Task. Pass a callback(err, result) as the
    last argument, or in place of the options, to be notified as well.
    """

    def __init__(self, delegate: HttpDelegate, base_url: Optional[str] = None):
        self.delegate = delegate
        self.request = Request(delegate, base_url or DEFAULT_BASE_URL)

    @property
    def base_url(self) -> str:
        return self.request.base_url

    def _dispatch(self, name: str, opts: Any = None, callback: Optional[Callback] = None, **path_values) -> asyncio.Task:
        """Run the endpoint called `name` in its call style and hand the result to the callback adapter"""
        endpoint = ENDPOINTS[name]
        opts, callback = split_callback(opts, callback)

        if endpoint.style is CallStyle.STATIC_LIST:
            resource_id = path_values.get("id")
            if is_valid_id(resource_id):
                response = self.request.get(f"{endpoint.path}/{resource_id}")
            else:
                response = self.request.get_with_property_filter(endpoint.path, endpoint.response_property)
            return register_callback(response, callback=callback)

        path = endpoint.build_path(**path_values)
        if opts and opts.get(AUTO_PAGINATE):
            response = self.request.get_with_auto_pagination(path, endpoint.response_property, opts)
        else:
            response = self.request.get_with_property_filter(path, endpoint.response_property, opts)
        return register_callback(response, callback=callback)

    # === Episodes ===
    def get_episodes(self, pids: Pids, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        """Fetch one or more episodes by pid"""
        return self._dispatch("episodes", opts, callback, ids=join_pids(pids))

    def get_group_episodes(self, group_id: str, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        """Fetch the episodes of a group"""
        return self._dispatch("group_episodes", opts, callback, id=group_id)

    def get_popular_episodes(self, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        """Fetch the "popular" group's episodes"""
        return self.get_group_episodes(POPULAR_GROUP, opts, callback)

    def get_episode_recommendations(self, episode_id: str, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        return self._dispatch("episode_recommendations", opts, callback, id=episode_id)

    # === Programmes ===
    def get_programme_episodes(self, programme_id: str, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        return self._dispatch("programme_episodes", opts, callback, id=programme_id)

    def get_programmes(self, pids: Pids, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        """Fetch one or more programmes by pid"""
        return self._dispatch("programmes", opts, callback, ids=join_pids(pids))

    def get_category_programmes(self, category: str, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        return self._dispatch("category_programmes", opts, callback, id=category)

    # === Highlights ===
    def get_category_highlights(self, category_id: str, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        return self._dispatch("category_highlights", opts, callback, id=category_id)

    def get_channel_highlights(self, channel_id: str, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        return self._dispatch("channel_highlights", opts, callback, id=channel_id)

    def get_home_highlights(self, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        return self._dispatch("home_highlights", opts, callback)

    # === Channels ===
    def get_channel_broadcasts(self, channel_id: str, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        return self._dispatch("channel_broadcasts", opts, callback, id=channel_id)

    # === Static lists ===
    def get_categories(self, category_id: Any = None, callback: Optional[Callback] = None) -> asyncio.Task:
        """All categories, or the raw record of one category when given its id"""
        category_id, callback = split_callback(category_id, callback)
        return self._dispatch("categories", callback=callback, id=category_id)

    def get_channels(self, channel_id: Any = None, callback: Optional[Callback] = None) -> asyncio.Task:
        """All channels, or the raw record of one channel when given its id"""
        channel_id, callback = split_callback(channel_id, callback)
        return self._dispatch("channels", callback=callback, id=channel_id)

    # === Utility ===
    def raw(self, path: str, opts: Options = None, callback: Optional[Callback] = None) -> asyncio.Task:
        """Fetch any path below the base URL and return the whole response"""
        opts, callback = split_callback(opts, callback)
        return register_callback(self.request.get(path, opts), callback=callback)

    async def close(self) -> None:
        """Release resources held by the delegate (e.g. a cache connection)"""
        close = getattr(self.delegate, "close", None)
        if close is None:
            return
        result = close()
        if asyncio.iscoroutine(result):
            await result
        logger.debug("[IblClient] Closed")

    async def __aenter__(self) -> "IblClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
