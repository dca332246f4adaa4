import logging
from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup

from docmigrator.agents.base import BaseAgent, AgentResult
from docmigrator.core.errors import ExtractionError, FetchError
from docmigrator.core.workflow import JobStage
from docmigrator.text.dom import from_soup, linearize

log = logging.getLogger(__name__)

CONTENT_SELECTOR = "#mw-content-text"
HEADING_SELECTOR = "#firstHeading"
NOISE_SELECTORS = [
    ".t-navbar",             # site navigation
    ".editsection",          # inline "edit" links
    ".t-example-live-link",  # "run this code" links
    "#toc",                  # table of contents
]


@dataclass
class ExtractedContent:
    html: str
    title: str
    url: str
    text: str  # linearized, kept for the diff only


def fetch_page(url: str, transport: httpx.BaseTransport = None) -> str:
    try:
        with httpx.Client(timeout=60, follow_redirects=True, transport=transport) as client:
            r = client.get(url)
    except httpx.HTTPError as e:
        raise FetchError(f"Failed to fetch {url}: {e}") from e
    if not r.is_success:
        raise FetchError(f"Failed to fetch {url}: {r.status_code}")
    return r.text


def extract_content(html: str, url: str) -> ExtractedContent:
    soup = BeautifulSoup(html, "html.parser")
    content = soup.select_one(CONTENT_SELECTOR)
    if content is None:
        raise ExtractionError(f"Could not find {CONTENT_SELECTOR} in {url}")

    for selector in NOISE_SELECTORS:
        for node in content.select(selector):
            node.decompose()

    heading = soup.select_one(HEADING_SELECTOR)
    title = heading.get_text().strip() if heading else ""
    body_text = linearize(from_soup(content))
    return ExtractedContent(
        html=content.decode_contents(),
        title=title,
        url=url,
        text=f"{title}\n\n{body_text}" if title else body_text,
    )


class FetchAgent(BaseAgent):
    stage = JobStage.FETCHING

    def __init__(self, transport: httpx.BaseTransport = None):
        self.transport = transport

    def run(self, job, ctx):
        log.info(f"Fetching {job.source_url}", extra={"job_id": job.id, "stage": str(self.stage)})
        html = fetch_page(job.source_url, transport=self.transport)
        extracted = extract_content(html, job.source_url)
        return AgentResult(
            self.stage,
            f"Extracted '{extracted.title}' ({len(extracted.html)} chars of markup)",
            {"extracted": extracted},
        )
