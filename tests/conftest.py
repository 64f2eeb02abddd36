"""
Shared fixtures for md_api_client tests.
"""

import json

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from md_api_client.digest import digest, password_hash
from md_api_client.transport import HttpTransport

BASE_URL = "http://api.test"


class MockTransport(HttpTransport):
    """
    Mock transport for testing.

    ``replies`` maps a method name to the decoded body to return, an
    exception to raise, or a callable taking the form fields as a dict.
    """

    def __init__(self, replies=None):
        self.replies = dict(replies or {})
        self.posts = []
        self.closed = False

    async def post(self, url, fields):
        self.posts.append((url, list(fields)))
        method = url[len(BASE_URL) + 1:]
        if method not in self.replies:
            return {"success": False, "msg": f"Unknown method {method}"}
        reply = self.replies[method]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(dict(fields))
        return reply

    async def close(self):
        self.closed = True

    def methods(self):
        return [url[len(BASE_URL) + 1:] for url, _ in self.posts]

    def fields_for(self, method):
        return [fields for url, fields in self.posts if url == f"{BASE_URL}/{method}"]


def ok(data=None):
    return {"success": True, "data": data}


def fail(msg):
    return {"success": False, "msg": msg}


@pytest.fixture
def transport():
    return MockTransport()


# In-memory md_api_server used by the end-to-end tests.
ACCOUNTS = {
    "alice": password_hash("alice", "secret"),
}


class FakeApiServer:
    """Speaks the md_api wire protocol over aiohttp."""

    def __init__(self):
        self.challenges = set()
        self.sessions = {}
        self.requests = []
        self._counter = 0
        self.app = web.Application()
        self.app.router.add_post("/{method:.+}", self.handle)
        self.handlers = {
            "session/request_login_token": self.request_login_token,
            "session/login": self.login,
            "session/logout": self.logout,
            "session/keep_alive": self.keep_alive,
            "multicall/multicall": self.multicall,
            "echo": self.echo,
            "whoami": self.whoami,
        }

    def _next(self, prefix):
        self._counter += 1
        return f"{prefix}{self._counter}"

    async def handle(self, request):
        method = request.match_info["method"]
        if method == "broken":
            return web.Response(text="<html>oops</html>", status=500)
        if method == "latin1":
            return web.Response(body=b'{"success": true, "data": "\xff\xfe"}',
                                content_type="application/json")
        form = dict(await request.post())
        self.requests.append((method, form))
        return web.json_response(self.run(method, form))

    def run(self, method, params):
        handler = self.handlers.get(method)
        if handler is None:
            return fail(f"Unknown method {method}")
        return handler(params)

    def request_login_token(self, params):
        token = self._next("challenge-")
        self.challenges.add(token)
        return ok({"token": token})

    def login(self, params):
        username = params.get("username", "")
        stored = ACCOUNTS.get(username.lower())
        for challenge in list(self.challenges):
            if stored and digest(stored, challenge) == params.get("password_hash"):
                self.challenges.discard(challenge)
                token = self._next("session-")
                self.sessions[token] = username
                return ok({"session": {"token": token, "user": username}})
        return fail("Invalid credentials")

    def logout(self, params):
        if self.sessions.pop(params.get("token"), None) is None:
            return fail("Not logged in")
        return ok()

    def keep_alive(self, params):
        if params.get("token") not in self.sessions:
            return fail("Not logged in")
        return ok()

    def echo(self, params):
        return ok(params)

    def whoami(self, params):
        user = self.sessions.get(params.get("token"))
        return ok({"user": user}) if user else fail("Not logged in")

    def multicall(self, params):
        calls = json.loads(params["content"])["calls"]
        responses = []
        for call in calls:
            call = dict(call)
            method = call.pop("method")
            breaking = call.pop("breaking", False)
            if "token" in params and "token" not in call:
                call["token"] = params["token"]
            response = self.run(method, {k: str(v) for k, v in call.items()})
            responses.append(response)
            if breaking and not response["success"]:
                break
        return ok({"responses": responses})


@pytest_asyncio.fixture
async def api_server():
    server = FakeApiServer()
    test_server = TestServer(server.app)
    await test_server.start_server()
    server.url = f"http://{test_server.host}:{test_server.port}"
    try:
        yield server
    finally:
        await test_server.close()


