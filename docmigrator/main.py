"""
Migration bot entry point.
Usage: docmigrator [run | cleanup-branches [--dry-run] | progress [--output FILE]]
"""
import argparse
import logging
import sys
from pathlib import Path

from docmigrator.core.config import Settings, settings as default_settings
from docmigrator.core.context import RunContext, missing_credentials
from docmigrator.core.github import GitHubClient
from docmigrator.core.logging import configure_logging
from docmigrator.core.slugs import SlugResolver
from docmigrator.tasks.cleanup import cleanup_branches
from docmigrator.tasks.jobs import run_batch
from docmigrator.tasks.progress import collect_status, render_progress

log = logging.getLogger(__name__)


def cmd_run(args, settings: Settings) -> int:
    missing = missing_credentials(settings)
    if missing:
        log.error(f"Missing {', '.join(missing)}")
        return 1
    ctx = RunContext.from_settings(settings)
    log.info(f"Loaded {len(ctx.slugs)} slug mappings")
    run_batch(ctx)
    return 0


def cmd_cleanup(args, settings: Settings) -> int:
    if not settings.github_token or not settings.github_repository:
        log.error("Missing GITHUB_TOKEN or GITHUB_REPOSITORY")
        return 1
    github = GitHubClient(
        token=settings.github_token,
        repository=settings.github_repository,
        api_base=settings.github_api_base,
    )
    cleanup_branches(github, dry_run=args.dry_run)
    return 0


def cmd_progress(args, settings: Settings) -> int:
    corpus = Path(settings.corpus_dir)
    slugs = SlugResolver.load(corpus / settings.slug_map_path)
    report = render_progress(
        collect_status(slugs, corpus / settings.docs_root),
        repository=settings.github_repository or "owner/repo",
        label=settings.issue_label,
    )
    output = Path(args.output) if args.output else corpus / "MIGRATE_PROGRESS.md"
    output.write_text(report, encoding="utf-8")
    log.info(f"Written to {output}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docmigrator", description="Migrate labelled reference pages into the docs corpus")
    sub = parser.add_subparsers(dest="command")
    sub.add_parser("run", help="Process open migration tickets (default)")
    cleanup = sub.add_parser("cleanup-branches", help="Delete migration branches that have no open PR")
    cleanup.add_argument("--dry-run", action="store_true", help="Only list the branches")
    progress = sub.add_parser("progress", help="Write the migration progress table")
    progress.add_argument("--output", help="Output file (default: MIGRATE_PROGRESS.md in the corpus)")
    return parser


COMMANDS = {
    None: cmd_run,
    "run": cmd_run,
    "cleanup-branches": cmd_cleanup,
    "progress": cmd_progress,
}


def main(argv=None, settings: Settings = None) -> int:
    settings = settings or default_settings
    configure_logging(settings.log_level)
    args = build_parser().parse_args(argv)
    return COMMANDS[args.command](args, settings)


if __name__ == "__main__":
    sys.exit(main())
