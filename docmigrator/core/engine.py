from __future__ import annotations
import logging
import re
from typing import Optional
from docmigrator.core.context import RunContext
from docmigrator.core.errors import InvalidTicketError
from docmigrator.core.retry import attempt
from docmigrator.core.workflow import PIPELINE, JobStage, MigrationJob, has_pr_reference
from docmigrator.agents.registry import AgentRegistry

log = logging.getLogger(__name__)

# Only these stages talk to flaky services; everything else fails on first error.
RETRIED_STAGES = {JobStage.FETCHING, JobStage.CONVERTING}


def extract_source_url(title: str, host: str) -> Optional[str]:
    match = re.search(rf"https?://(?:[\w-]+\.)*{re.escape(host)}/w/\S+", title)
    return match.group(0) if match else None


class WorkflowEngine:
    """Drives a single job through the pipeline. Errors propagate to the caller."""

    def __init__(self, ctx: RunContext, registry: Optional[AgentRegistry] = None):
        self.ctx = ctx
        self.registry = registry or AgentRegistry.default()

    def _set_stage(self, job: MigrationJob, stage: JobStage) -> None:
        job.advance(stage)
        log.info("Entering stage", extra={"job_id": job.id, "stage": str(stage)})

    def _run_stage(self, job: MigrationJob, stage: JobStage):
        agent = self.registry.get(stage)
        if stage not in RETRIED_STAGES:
            return agent.run(job, self.ctx)
        outcome = attempt(
            lambda: agent.run(job, self.ctx),
            attempts=self.ctx.settings.retry_attempts,
            delay=self.ctx.settings.retry_delay,
            sleep=self.ctx.sleep,
            log_extra={"job_id": job.id, "stage": str(stage)},
        )
        return outcome.unwrap()

    def run(self, job: MigrationJob) -> MigrationJob:
        if has_pr_reference(job.title):
            log.info("Ticket already linked to a PR, skipping", extra={"job_id": job.id, "stage": str(job.stage)})
            job.advance(JobStage.DONE)
            return job

        job.source_url = job.source_url or extract_source_url(job.title, self.ctx.settings.source_host)
        if not job.source_url:
            raise InvalidTicketError(f"No {self.ctx.settings.source_host} link found in ticket title")

        for stage in PIPELINE:
            self._set_stage(job, stage)
            result = self._run_stage(job, stage)
            job.artifacts.update(result.artifacts)
            log.info(result.message, extra={"job_id": job.id, "stage": str(stage)})

        job.pr_number = job.artifacts.get("pr_number")
        job.advance(JobStage.DONE)
        return job
