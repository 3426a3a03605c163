"""
iBL endpoint table
Each client method is one row: path template, response property and call style
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Sequence, Union

Pids = Union[str, Sequence[str]]


class CallStyle(str, Enum):
    # Unwrapped property, auto-paginated on request
    FILTERED = "filtered"
    # Whole collection, or the raw record when a valid id is given
    STATIC_LIST = "static_list"


@dataclass(frozen=True)
class Endpoint:
    path: str
    response_property: str
    style: CallStyle = CallStyle.FILTERED

    def build_path(self, **values: Any) -> str:
        return self.path.format(**values)


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def join_pids(pids: Pids) -> str:
    """Comma-join pids in the order given; a lone string counts as one pid"""
    if isinstance(pids, str) or not isinstance(pids, (list, tuple)):
        pids = [pids]
    return ",".join("" if pid is None else str(pid) for pid in pids)


ENDPOINTS: Dict[str, Endpoint] = {
    "episodes": Endpoint("/episodes/{ids}", "episodes"),
    "group_episodes": Endpoint("/groups/{id}/episodes", "group_episodes"),
    "episode_recommendations": Endpoint("/episodes/{id}/recommendations", "episode_recommendations"),
    "programme_episodes": Endpoint("/programmes/{id}/episodes", "programme_episodes"),
    "programmes": Endpoint("/programmes/{ids}", "programmes"),
    "category_programmes": Endpoint("/categories/{id}/programmes", "category_programmes"),
    "category_highlights": Endpoint("/categories/{id}/highlights", "category_highlights"),
    "channel_highlights": Endpoint("/channels/{id}/highlights", "channel_highlights"),
    "home_highlights": Endpoint("/home/highlights", "home_highlights"),
    "channel_broadcasts": Endpoint("/channels/{id}/broadcasts", "broadcasts"),
    "categories": Endpoint("/categories", "categories", CallStyle.STATIC_LIST),
    "channels": Endpoint("/channels", "channels", CallStyle.STATIC_LIST),
}

POPULAR_GROUP = "popular"
