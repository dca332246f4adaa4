from __future__ import annotations
import logging
import time
from pathlib import Path
from typing import Optional

import httpx
from git import Repo
from git.exc import GitError

from docmigrator.agents.base import BaseAgent, AgentResult
from docmigrator.core.errors import PublishError
from docmigrator.core.slugs import key_from_url
from docmigrator.core.workflow import JobStage
from docmigrator.text.render import visualize_text_diff

log = logging.getLogger(__name__)

BRANCH_PREFIX = "migrate/"
NO_DIFF_MARKER = "_No diff available._"
COLOR_LEGEND = (
    "<small>Left: original page, right: migrated page. "
    "Red marks words that became less frequent, green marks words that became more frequent; "
    "brighter means a larger change.</small>"
)


def _base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while True:
        n, r = divmod(n, 36)
        out = digits[r] + out
        if n == 0:
            return out


def branch_name(issue_number: int, now_ms: Optional[int] = None) -> str:
    """``migrate/<issue>-<base36 ms timestamp>``; unique per job and per attempt."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{BRANCH_PREFIX}{issue_number}-{_base36(now_ms)}"


def pr_title(source_url: str, issue_number: int) -> str:
    return f"feat: migrate {key_from_url(source_url)} from cppref [#{issue_number}]"


def generate_pr_body(
    *,
    model: str,
    source_url: str,
    repository: str,
    branch: str,
    rel_path: str,
    issue_number: int,
    image_url: Optional[str],
) -> str:
    """Change-request body: attribution, edit link, close directive, diff, legend."""
    diff_section = f"![diff]({image_url})" if image_url else NO_DIFF_MARKER
    lines = [
        f"Automatically migrated from {source_url} by {model}.",
        "",
        f"[Edit {rel_path}](https://github.com/{repository}/edit/{branch}/{rel_path})",
        "",
        f"Close #{issue_number}",
        "",
        "## Text diff",
        "",
        diff_section,
        "",
        COLOR_LEGEND,
    ]
    return "\n".join(lines)


def commit_and_push(repo: Repo, path: Path, branch: str, message: str, base_branch: str,
                    user_name: str, user_email: str) -> str:
    """Commit exactly ``path`` on a fresh ``branch``, push it and return to ``base_branch``."""
    with repo.config_writer() as cw:
        cw.set_value("user", "name", user_name)
        cw.set_value("user", "email", user_email)
    repo.git.checkout("-b", branch)
    try:
        repo.git.add("--", str(path))
        repo.git.commit("-m", message, "--", str(path))
        commit_hash = repo.head.commit.hexsha
        repo.git.push("origin", branch, set_upstream=True)
    finally:
        repo.git.checkout(base_branch)
    return commit_hash


class PublishAgent(BaseAgent):
    stage = JobStage.PUBLISHING

    def run(self, job, ctx):
        extra = {"job_id": job.id, "stage": str(self.stage)}
        settings = ctx.settings
        path: Path = job.artifacts["document_path"]
        rel_path = path.resolve().relative_to(ctx.corpus_dir.resolve()).as_posix()
        title = pr_title(job.source_url, job.issue_number)
        branch = branch_name(job.issue_number)

        try:
            repo = Repo(ctx.corpus_dir)
            commit_hash = commit_and_push(
                repo, path, branch, title, settings.base_branch,
                settings.git_user_name, settings.git_user_email,
            )
        except (GitError, OSError) as e:
            raise PublishError(f"Git operation failed: {e}") from e
        log.info(f"Pushed {branch} ({commit_hash[:8]})", extra=extra)

        image_url = self._upload_diff(job, ctx, extra)

        body = generate_pr_body(
            model=settings.model,
            source_url=job.source_url,
            repository=settings.github_repository,
            branch=branch,
            rel_path=rel_path,
            issue_number=job.issue_number,
            image_url=image_url,
        )
        try:
            pr = ctx.github.create_pr(head=branch, base=settings.base_branch, title=title, body=body, draft=True)
        except httpx.HTTPError as e:
            raise PublishError(f"Failed to open pull request for {branch}: {e}") from e

        log.info(f"Opened draft PR #{pr.number}", extra=extra)
        return AgentResult(self.stage, f"Opened draft PR #{pr.number}", {
            "branch": branch,
            "commit_hash": commit_hash,
            "pr_number": pr.number,
            "pr_url": pr.html_url,
        })

    def _upload_diff(self, job, ctx, extra) -> Optional[str]:
        built_text = job.artifacts.get("built_text")
        if built_text is None:
            return None
        image = visualize_text_diff(job.artifacts["extracted"].text, built_text)
        if image is None:
            log.info("Texts match, no diff image", extra=extra)
            return None
        if ctx.images is None:
            log.warning("No image host configured, leaving the diff out", extra=extra)
            return None
        try:
            return ctx.images.upload(image, filename=f"diff-{job.issue_number}.png")
        except (httpx.HTTPError, ValueError) as e:
            raise PublishError(f"Failed to upload diff image: {e}") from e
