"""Unit tests for the HTTP service clients using httpx.MockTransport."""
import json
import httpx
import pytest
from docmigrator.core.errors import ConversionError
from docmigrator.core.github import GitHubClient
from docmigrator.core.images import ImageHostClient
from docmigrator.core.llm import ModelClient


class Recorder:
    """Collects requests and answers with canned responses keyed by (method, path)."""
    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body = self.routes[(request.method, request.url.path)]
        return httpx.Response(status, json=body)

    @property
    def transport(self):
        return httpx.MockTransport(self)


def _github(routes):
    rec = Recorder(routes)
    client = GitHubClient(token="t", repository="o/r", api_base="https://api.test", transport=rec.transport)
    return client, rec


def test_list_open_issues_drops_pull_requests():
    """The issues endpoint also returns PRs; those are filtered out."""
    client, rec = _github({
        ("GET", "/repos/o/r/issues"): (200, [
            {"number": 1, "title": "https://en.cppreference.com/w/cpp/comments.html", "labels": []},
            {"number": 2, "title": "some PR", "pull_request": {"url": "x"}},
        ]),
    })
    issues = client.list_open_issues("migrate-cppref-page")
    assert [i.number for i in issues] == [1]
    params = rec.requests[0].url.params
    assert params["labels"] == "migrate-cppref-page"
    assert params["state"] == "open"
    assert rec.requests[0].headers["Authorization"] == "Bearer t"


def test_create_pr_sends_draft_flag():
    client, rec = _github({
        ("POST", "/repos/o/r/pulls"): (201, {"number": 99, "html_url": "https://gh/pr/99", "draft": True}),
    })
    pr = client.create_pr(head="migrate/1-abc", base="main", title="feat", body="b")
    assert pr.number == 99
    sent = json.loads(rec.requests[0].content)
    assert sent == {"title": "feat", "head": "migrate/1-abc", "base": "main", "body": "b", "draft": True}


def test_update_issue_and_comment():
    client, rec = _github({
        ("PATCH", "/repos/o/r/issues/3"): (200, {"number": 3}),
        ("POST", "/repos/o/r/issues/3/comments"): (201, {"id": 1}),
    })
    client.update_issue(3, state="closed")
    client.create_comment(3, "hello")
    assert json.loads(rec.requests[0].content) == {"state": "closed"}
    assert json.loads(rec.requests[1].content) == {"body": "hello"}


def test_delete_branch_and_errors():
    client, rec = _github({
        ("DELETE", "/repos/o/r/git/refs/heads/migrate/1-abc"): (204, None),
        ("DELETE", "/repos/o/r/git/refs/heads/migrate/2-abc"): (422, {"message": "nope"}),
    })
    client.delete_branch("migrate/1-abc")
    with pytest.raises(httpx.HTTPStatusError):
        client.delete_branch("migrate/2-abc")


def test_list_branches_paginates():
    """Pages are requested until a short page comes back."""
    pages = {1: [{"name": f"b{i}"} for i in range(100)], 2: [{"name": "last"}]}

    def handler(request):
        return httpx.Response(200, json=pages[int(request.url.params["page"])])

    client = GitHubClient(token="t", repository="o/r", api_base="https://api.test",
                          transport=httpx.MockTransport(handler))
    names = [b.name for b in client.list_branches()]
    assert len(names) == 101
    assert names[-1] == "last"


def _model(status=200, body=None):
    body = body if body is not None else {"choices": [{"message": {"content": "  converted  "}}]}
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(status, json=body)

    client = ModelClient(api_key="k", model="m", api_base="https://llm.test/v1",
                         transport=httpx.MockTransport(handler))
    return client, seen


def test_model_client_returns_stripped_content():
    client, seen = _model()
    assert client.complete("sys", "usr") == "converted"
    payload = json.loads(seen[0].content)
    assert payload["model"] == "m"
    assert [m["role"] for m in payload["messages"]] == ["system", "user"]
    assert seen[0].url.path == "/v1/chat/completions"


@pytest.mark.parametrize("status,body", [
    (500, {"error": "down"}),
    (200, {"choices": []}),
    (200, {"choices": [{"message": {"content": ""}}]}),
])
def test_model_client_errors_are_retryable_conversion_errors(status, body):
    client, _ = _model(status, body)
    with pytest.raises(ConversionError) as exc:
        client.complete("s", "u")
    assert exc.value.retryable


def test_image_upload_reads_nested_or_flat_url():
    def nested(request):
        assert request.url.params["key"] == "secret"
        assert b'name="image"' in request.read()
        return httpx.Response(200, json={"data": {"url": "https://img/1.png"}})

    client = ImageHostClient("https://img.test/upload", api_key="secret", transport=httpx.MockTransport(nested))
    assert client.upload(b"\x89PNG") == "https://img/1.png"

    flat = httpx.MockTransport(lambda r: httpx.Response(200, json={"url": "https://img/2.png"}))
    assert ImageHostClient("https://img.test/upload", transport=flat).upload(b"x") == "https://img/2.png"

    empty = httpx.MockTransport(lambda r: httpx.Response(200, json={}))
    with pytest.raises(ValueError):
        ImageHostClient("https://img.test/upload", transport=empty).upload(b"x")
