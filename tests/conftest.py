import json

import httpx
import pytest

from github_tools.extension import GitHubToolsExtension
from github_tools.models.config import RepositoryConfig

API = "https://api.github.com/repos/o/r/contents"


class FakeGitHub:
    """Stands in for api.github.com and any source URL the tests fetch.

    `existing` maps a contents path to the sha GET returns; anything else 404s.
    """

    def __init__(self):
        self.requests = []
        self.existing = {}
        self.put_status = 201
        self.get_status = None
        self.get_body = None
        self.sources = {}
        self.fail_on = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if request.method in self.fail_on:
            raise httpx.ConnectError("boom", request=request)

        if url in self.sources:
            status, body = self.sources[url]
            return httpx.Response(status, content=body, headers={"content-type": "application/octet-stream"})

        if url.startswith(API):
            path = request.url.raw_path.decode().split("/contents/", 1)[1]
            if request.method == "GET":
                if self.get_body is not None:
                    return httpx.Response(200, content=self.get_body)
                if self.get_status is not None:
                    return httpx.Response(self.get_status, json={"message": "nope"})
                if path in self.existing:
                    return httpx.Response(200, json={"sha": self.existing[path], "path": path})
                return httpx.Response(404, json={"message": "Not Found"})
            if request.method == "PUT":
                return httpx.Response(self.put_status, json={"content": {"path": path}})

        return httpx.Response(404)

    @property
    def puts(self):
        return [r for r in self.requests if r.method == "PUT"]

    def put_body(self, index=-1):
        return json.loads(self.puts[index].content)


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def transport(fake_github):
    return httpx.MockTransport(fake_github.handler)


@pytest.fixture
def config():
    return RepositoryConfig(token="t", owner="o", repo="r", branch="main")


@pytest.fixture
def extension(transport):
    return GitHubToolsExtension(transport=transport)


@pytest.fixture
def configured_extension(extension):
    extension.set_github_config({"TOKEN": "t", "OWNER": "o", "REPO": "r", "BRANCH": "main"})
    return extension
