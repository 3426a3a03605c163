"""Pytest fixtures: a recording fake delegate and a local stand-in for the iBL API."""

import copy
import json
from pathlib import Path

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from ibl import create_custom_client
from ibl.core.errors import TransportError

FIXTURES = Path(__file__).parent / "fixtures"
BASE_URL = "http://ibl.test/ibl/v1"
API_PREFIX = "/ibl/v1"


def _next_reply(queue):
    # The last queued reply keeps answering once the others are used up.
    return queue.pop(0) if len(queue) > 1 else queue[0]


class FakeDelegate:
    """Answers GETs from queued replies keyed by path and records every call."""

    def __init__(self, base_url=BASE_URL):
        self.base_url = base_url
        self.replies = {}
        self.calls = []
        self.closed = False

    def reply(self, path, body=None, error=None):
        self.replies.setdefault(path, []).append((body, error))
        return self

    async def get(self, url, params):
        self.calls.append((url, params))
        path = url[len(self.base_url):]
        queue = self.replies.get(path)
        if not queue:
            raise TransportError(f"Received HTTP code 404 for GET {url}", status_code=404, url=url)
        body, error = _next_reply(queue)
        if error is not None:
            raise error
        return copy.deepcopy(body)

    async def close(self):
        self.closed = True


class FakeIblApi:
    """aiohttp handler serving queued JSON replies under /ibl/v1."""

    def __init__(self):
        self.replies = {}
        self.requests = []
        self.base_url = None

    def reply(self, path, status=200, body=None, headers=None, raw=None):
        self.replies.setdefault(path, []).append((status, body, headers, raw))
        return self

    def hits(self, path):
        return [query for requested, query in self.requests if requested == path]

    async def handle(self, request):
        path = request.path[len(API_PREFIX):]
        self.requests.append((path, dict(request.query)))
        queue = self.replies.get(path)
        if not queue:
            return web.json_response({"error": {"details": "Not found"}}, status=404)
        status, body, headers, raw = _next_reply(queue)
        if raw is not None:
            return web.Response(status=status, text=raw, headers=headers)
        if body is None:
            return web.Response(status=status, headers=headers)
        return web.json_response(body, status=status, headers=headers)


@pytest.fixture
def load_fixture():
    def _load(name):
        return json.loads((FIXTURES / f"{name}.json").read_text(encoding="utf-8"))

    return _load


@pytest.fixture
def delegate():
    return FakeDelegate()


@pytest.fixture
def client(delegate):
    return create_custom_client(delegate, BASE_URL)


@pytest_asyncio.fixture
async def ibl_api():
    api = FakeIblApi()
    app = web.Application()
    app.router.add_get("/{tail:.*}", api.handle)
    server = TestServer(app)
    await server.start_server()
    api.base_url = str(server.make_url(API_PREFIX))
    yield api
    await server.close()
