from __future__ import annotations
import httpx
from dataclasses import dataclass
from typing import List, Optional
from docmigrator.core.config import settings
from docmigrator.schemas.github import Branch, Issue, PullRequest


@dataclass
class GitHubClient:
    token: str
    repository: str  # "owner/name"
    api_base: str = settings.github_api_base
    transport: Optional[httpx.BaseTransport] = None

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=f"{self.api_base}/repos/{self.repository}",
            headers=self._headers(),
            timeout=60,
            transport=self.transport,
        )

    def _paginate(self, path: str, params: dict, per_page: int = 100) -> List[dict]:
        items: List[dict] = []
        page = 1
        with self._client() as client:
            while True:
                r = client.get(path, params={**params, "per_page": per_page, "page": page})
                r.raise_for_status()
                data = r.json()
                items.extend(data)
                if len(data) < per_page:
                    return items
                page += 1

    def list_open_issues(self, label: str, per_page: int = 50) -> List[Issue]:
        """Open issues carrying ``label``; pull requests the endpoint mixes in are dropped."""
        with self._client() as client:
            r = client.get("/issues", params={"labels": label, "state": "open", "per_page": per_page})
            r.raise_for_status()
            issues = [Issue.model_validate(item) for item in r.json()]
        return [i for i in issues if not i.is_pull_request]

    def update_issue(self, number: int, **fields) -> dict:
        with self._client() as client:
            r = client.patch(f"/issues/{number}", json=fields)
            r.raise_for_status()
            return r.json()

    def create_comment(self, number: int, body: str) -> dict:
        with self._client() as client:
            r = client.post(f"/issues/{number}/comments", json={"body": body})
            r.raise_for_status()
            return r.json()

    def create_pr(self, head: str, base: str, title: str, body: str, draft: bool = True) -> PullRequest:
        with self._client() as client:
            r = client.post(
                "/pulls",
                json={"title": title, "head": head, "base": base, "body": body, "draft": draft},
            )
            r.raise_for_status()
            return PullRequest.model_validate(r.json())

    def list_open_pulls(self) -> List[PullRequest]:
        return [PullRequest.model_validate(p) for p in self._paginate("/pulls", {"state": "open"})]

    def list_branches(self) -> List[Branch]:
        return [Branch.model_validate(b) for b in self._paginate("/branches", {})]

    def delete_branch(self, name: str) -> None:
        with self._client() as client:
            r = client.delete(f"/git/refs/heads/{name}")
            r.raise_for_status()

# NOTE: For production, prefer a GitHub App installation token over a PAT.
