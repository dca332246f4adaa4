"""Markdown progress table for the whole slug table."""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote
from docmigrator.core.slugs import SlugResolver


@dataclass
class EntryStatus:
    key: str
    slug: Optional[str]
    migrated: bool


def is_migrated(docs_dir: Path, slug: str) -> bool:
    return (docs_dir / f"{slug}.mdx").exists() or (docs_dir / slug / "index.mdx").exists()


def collect_status(slugs: SlugResolver, docs_dir: Path) -> List[EntryStatus]:
    return [
        EntryStatus(key=key, slug=slug, migrated=bool(slug) and is_migrated(docs_dir, slug))
        for key, slug in slugs.items()
    ]


def render_progress(statuses: List[EntryStatus], repository: str, label: str,
                    source_base: str = "https://en.cppreference.com/w",
                    site_base: str = "https://cppdoc.cc",
                    now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    migrated = sum(1 for s in statuses if s.migrated)
    pct = (migrated / len(statuses) * 100) if statuses else 0.0
    lines = [
        "### cppreference.com Migration Progress",
        f"#### Overall Progress: {migrated} / {len(statuses)} migrated ({pct:.2f}%)",
        f"Updated at {now.isoformat()}",
        "",
        "| Status | Source | Migrated | Entry |",
        "|--------|--------|----------|-------|",
    ]
    for s in statuses:
        source_url = f"{source_base}/{s.key}.html"
        entry = s.slug if s.slug else f"{s.key} (source)"
        if s.migrated:
            lines.append(f"| ✅ | [source]({source_url}) | [page]({site_base}/{s.slug}) | `{entry}` |")
        elif s.slug:
            new_issue = (
                f"https://github.com/{repository}/issues/new"
                f"?title={quote(source_url, safe='')}&labels={quote(label)}"
            )
            lines.append(f"| ❌ | [source]({source_url}) | [request]({new_issue}) | `{entry}` |")
        else:
            lines.append(f"| ❌ | [source]({source_url}) | N/A | `{entry}` |")
    return "\n".join(lines) + "\n"
