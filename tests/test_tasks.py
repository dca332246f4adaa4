"""Tests for branch cleanup, the progress table and the command-line entry point."""
import json
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch
import httpx
from docmigrator.core.slugs import SlugResolver
from docmigrator.main import build_parser, main
from docmigrator.schemas.github import Branch, BranchRef, PullRequest
from docmigrator.tasks.cleanup import cleanup_branches, find_abandoned_branches
from docmigrator.tasks.progress import collect_status, render_progress


def _github(branches, open_heads):
    github = MagicMock()
    github.list_branches.return_value = [Branch(name=n) for n in branches]
    github.list_open_pulls.return_value = [
        PullRequest(number=i, head=BranchRef(ref=h)) for i, h in enumerate(open_heads)
    ]
    return github


def test_find_abandoned_branches():
    """Only migration branches without an open PR qualify."""
    github = _github(["main", "migrate/1-a", "migrate/2-b", "feature/x"], ["migrate/2-b"])
    assert find_abandoned_branches(github) == ["migrate/1-a"]


def test_cleanup_dry_run_deletes_nothing():
    github = _github(["migrate/1-a"], [])
    assert cleanup_branches(github, dry_run=True) == ["migrate/1-a"]
    github.delete_branch.assert_not_called()


def test_cleanup_continues_after_delete_error():
    github = _github(["migrate/1-a", "migrate/2-b"], [])
    github.delete_branch.side_effect = [httpx.HTTPError("forbidden"), None]
    assert cleanup_branches(github) == ["migrate/2-b"]
    assert github.delete_branch.call_count == 2


def test_progress_table(tmp_path):
    """Migrated, pending and unmapped entries each get their own row style."""
    slugs = SlugResolver({
        "cpp/comments": "cpp/comments",
        "cpp/language/main_function": "cpp/language/main_function",
        "cpp/keyword/goto": None,
    })
    docs = tmp_path / "docs"
    (docs / "cpp").mkdir(parents=True)
    (docs / "cpp" / "comments.mdx").write_text("x")

    statuses = collect_status(slugs, docs)
    assert [s.migrated for s in statuses] == [True, False, False]

    report = render_progress(statuses, repository="o/r", label="migrate-cppref-page",
                             now=datetime(2025, 1, 1, tzinfo=timezone.utc))
    assert "1 / 3 migrated (33.33%)" in report
    assert "Updated at 2025-01-01T00:00:00+00:00" in report
    assert "[page](https://cppdoc.cc/cpp/comments)" in report
    assert ("https://github.com/o/r/issues/new?title="
            "https%3A%2F%2Fen.cppreference.com%2Fw%2Fcpp%2Flanguage%2Fmain_function.html"
            "&labels=migrate-cppref-page") in report
    assert "| N/A | `cpp/keyword/goto (source)` |" in report


def test_progress_of_empty_table():
    assert "0 / 0 migrated (0.00%)" in render_progress([], repository="o/r", label="l")


def test_parser_defaults_to_run():
    assert build_parser().parse_args([]).command is None
    args = build_parser().parse_args(["cleanup-branches", "--dry-run"])
    assert args.command == "cleanup-branches"
    assert args.dry_run


def test_main_run_without_credentials_exits_nonzero(settings_factory):
    settings = settings_factory(github_token=None, openrouter_api_key=None)
    with patch("docmigrator.main.run_batch") as run_batch:
        assert main(["run"], settings=settings) == 1
    run_batch.assert_not_called()


def test_main_run_processes_batch(tmp_path, settings_factory):
    (tmp_path / "migrate").mkdir()
    (tmp_path / "migrate" / "slug_map.json").write_text(
        json.dumps([{"cppref": "cpp/comments", "cppdoc": "cpp/comments"}])
    )
    settings = settings_factory(corpus_dir=str(tmp_path))
    with patch("docmigrator.main.run_batch") as run_batch:
        assert main([], settings=settings) == 0
    ctx = run_batch.call_args.args[0]
    assert ctx.slugs.resolve("cpp/comments") == "cpp/comments"
    assert ctx.images is None


def test_main_cleanup_requires_repository(settings_factory):
    settings = settings_factory(github_repository=None)
    assert main(["cleanup-branches"], settings=settings) == 1


def test_main_progress_writes_file(tmp_path, settings_factory):
    (tmp_path / "migrate").mkdir()
    (tmp_path / "migrate" / "slug_map.json").write_text(json.dumps({"cpp/comments": "cpp/comments"}))
    out = tmp_path / "PROGRESS.md"
    settings = settings_factory(corpus_dir=str(tmp_path))
    assert main(["progress", "--output", str(out)], settings=settings) == 0
    assert "0 / 1 migrated" in out.read_text(encoding="utf-8")
