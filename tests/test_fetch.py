"""Unit tests for page fetching and content extraction (no network calls)."""
import httpx
import pytest
from docmigrator.agents.impl_fetch import FetchAgent, extract_content, fetch_page
from docmigrator.core.errors import ExtractionError, FetchError
from docmigrator.core.workflow import MigrationJob

URL = "https://en.cppreference.com/w/cpp/comments.html"

PAGE = """<html><head><title>Comments - cppreference.com</title></head><body>
<h1 id="firstHeading" class="firstHeading">Comments</h1>
<div id="mw-content-text">
  <div class="t-navbar">cpp / language / comments</div>
  <div id="toc">Contents 1 Syntax 2 Notes</div>
  <p>Comments serve as a sort of in-code documentation.</p>
  <h3>Syntax<span class="editsection">[edit]</span></h3>
  <pre>/* comment */</pre>
  <div class="t-example-live-link">Run this code</div>
</div>
</body></html>"""


def _transport(status=200, text=PAGE):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text=text)
    return httpx.MockTransport(handler)


def test_extract_content_removes_noise():
    """Navigation, toc, edit links and live-run links are stripped from the markup."""
    extracted = extract_content(PAGE, URL)
    assert extracted.title == "Comments"
    assert extracted.url == URL
    for noise in ("t-navbar", "toc", "editsection", "Run this code"):
        assert noise not in extracted.html
    assert "in-code documentation" in extracted.html


def test_extracted_text_starts_with_heading():
    """The linearized text carries the heading, a blank line, then the body."""
    extracted = extract_content(PAGE, URL)
    assert extracted.text.startswith("Comments\n\n")
    assert "Comments serve as a sort of in-code documentation." in extracted.text
    assert "/* comment */" in extracted.text
    assert "[edit]" not in extracted.text


def test_missing_content_raises_extraction_error():
    with pytest.raises(ExtractionError):
        extract_content("<html><body><p>nothing here</p></body></html>", URL)


def test_fetch_page_non_success_raises():
    """A 404 is a fetch failure, which the engine may retry."""
    with pytest.raises(FetchError) as exc:
        fetch_page(URL, transport=_transport(status=404, text="not found"))
    assert "404" in str(exc.value)
    assert exc.value.retryable


def test_fetch_page_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(FetchError):
        fetch_page(URL, transport=httpx.MockTransport(handler))


def test_fetch_agent_produces_extracted_artifact(ctx):
    job = MigrationJob(issue_number=5, title=URL, source_url=URL)
    result = FetchAgent(transport=_transport()).run(job, ctx)
    extracted = result.artifacts["extracted"]
    assert extracted.title == "Comments"
    assert "Comments" in result.message
