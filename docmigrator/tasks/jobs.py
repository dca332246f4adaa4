from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional
from docmigrator.core.context import RunContext
from docmigrator.core.engine import WorkflowEngine
from docmigrator.core.workflow import JobStage, MigrationJob, linked_title
from docmigrator.schemas.github import Issue

log = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    done: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)


def job_from_issue(issue: Issue) -> MigrationJob:
    return MigrationJob(issue_number=issue.number, title=issue.title)


def report_success(ctx: RunContext, job: MigrationJob) -> None:
    ctx.github.update_issue(job.issue_number, title=linked_title(job.title, job.pr_number))
    ctx.github.create_comment(job.issue_number, f"Migration complete! Opened PR #{job.pr_number}.")


def report_failure(ctx: RunContext, job: MigrationJob) -> None:
    ctx.github.create_comment(
        job.issue_number,
        f"Migration failed: {job.error_message}\n\nClosing this issue.",
    )
    ctx.github.update_issue(job.issue_number, state="closed")


def run_job(ctx: RunContext, engine: WorkflowEngine, job: MigrationJob) -> MigrationJob:
    """Run one job; whatever happens inside stays inside this job."""
    try:
        log.info(f"Processing issue: {job.title}", extra={"job_id": job.id, "stage": str(job.stage)})
        engine.run(job)
    except Exception as e:
        log.exception("Job failed", extra={"job_id": job.id, "stage": str(job.stage)})
        job.fail(str(e))

    try:
        if job.stage is JobStage.FAILED:
            report_failure(ctx, job)
        elif job.pr_number is not None:
            report_success(ctx, job)
    except Exception:
        log.exception("Could not report job outcome to the ticket", extra={"job_id": job.id, "stage": str(job.stage)})
    return job


def run_batch(ctx: RunContext, engine: Optional[WorkflowEngine] = None,
              issues: Optional[List[Issue]] = None) -> BatchSummary:
    """Poll labelled tickets and process them one after another."""
    engine = engine or WorkflowEngine(ctx)
    if issues is None:
        issues = ctx.github.list_open_issues(ctx.settings.issue_label)
    log.info(f"Found {len(issues)} open issues labelled {ctx.settings.issue_label}")

    summary = BatchSummary()
    for issue in issues:
        job = run_job(ctx, engine, job_from_issue(issue))
        if job.stage is JobStage.FAILED:
            summary.failed.append(job.issue_number)
        elif job.pr_number is None:
            summary.skipped.append(job.issue_number)
        else:
            summary.done.append(job.issue_number)

    log.info(
        f"Batch finished: {len(summary.done)} done, {len(summary.skipped)} skipped, {len(summary.failed)} failed"
    )
    return summary
