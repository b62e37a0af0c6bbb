import json

import httpx
import pytest

GET_URL = "https://api.replicate.com/v1/predictions/abc123"
CANCEL_URL = GET_URL + "/cancel"


def job(**overrides) -> dict:
    """A Replicate job object as returned by POST /v1/predictions."""
    body = {
        "id": "abc123",
        "version": "v",
        "status": "starting",
        "output": None,
        "error": None,
        "logs": "",
        "created_at": "2023-03-01T10:00:00.000000Z",
        "completed_at": None,
        "urls": {"get": GET_URL, "cancel": CANCEL_URL},
    }
    body.update(overrides)
    return body


def done(output: str, **overrides) -> dict:
    fields = {
        "status": "succeeded",
        "output": output,
        "completed_at": "2023-03-01T10:00:03.000000Z",
        "metrics": {"predict_time": 1.25},
    }
    fields.update(overrides)
    return job(**fields)


def _fresh(response: httpx.Response) -> httpx.Response:
    return httpx.Response(
        response.status_code, headers=response.headers, content=response.content
    )


class FakeReplicate:
    """Serves one POST response, then GET responses in order. Records every request."""

    def __init__(self, post: httpx.Response, polls: list[httpx.Response] | None = None):
        self._post = post
        self._polls = list(polls or [])
        self.requests: list[httpx.Request] = []
        self.events: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.events.append(request.method)
        match request.method:
            case "POST":
                return _fresh(self._post)
            case _:
                # the last response repeats forever
                return _fresh(self._polls.pop(0) if len(self._polls) > 1 else self._polls[0])

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    @property
    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def gets(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def posted_json(self) -> dict:
        return json.loads(self.posts[0].content)


@pytest.fixture
def replicate_factory():
    def make(post=None, polls=None) -> FakeReplicate:
        return FakeReplicate(post or httpx.Response(201, json=job()), polls)

    return make
