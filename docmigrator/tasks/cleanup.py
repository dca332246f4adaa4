"""Sweep for migration branches left behind by jobs that failed after pushing."""
from __future__ import annotations
import logging
from typing import List
import httpx
from docmigrator.agents.impl_publish import BRANCH_PREFIX
from docmigrator.core.github import GitHubClient

log = logging.getLogger(__name__)


def find_abandoned_branches(github: GitHubClient, prefix: str = BRANCH_PREFIX) -> List[str]:
    open_heads = {pr.head.ref for pr in github.list_open_pulls() if pr.head}
    return sorted(
        b.name for b in github.list_branches()
        if b.name.startswith(prefix) and b.name not in open_heads
    )


def cleanup_branches(github: GitHubClient, dry_run: bool = False) -> List[str]:
    """Delete abandoned branches; returns the ones actually deleted (or that would be)."""
    abandoned = find_abandoned_branches(github)
    log.info(f"Found {len(abandoned)} migration branches without an open PR")
    if dry_run:
        for name in abandoned:
            log.info(f"Would delete {name}")
        return abandoned

    deleted = []
    for name in abandoned:
        try:
            github.delete_branch(name)
        except httpx.HTTPError as e:
            log.error(f"Failed to delete branch {name}: {e}")
            continue
        log.info(f"Deleted remote branch {name}")
        deleted.append(name)
    return deleted
