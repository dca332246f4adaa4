import logging
from pathlib import Path
from typing import Optional

import yaml

from docmigrator.agents.base import BaseAgent, AgentResult
from docmigrator.core.slugs import key_from_url
from docmigrator.core.workflow import JobStage

log = logging.getLogger(__name__)

DESCRIPTION = "Auto-generated from cppreference"


def render_frontmatter(title: str, source_url: Optional[str] = None) -> str:
    fields = {"title": title, "description": DESCRIPTION}
    if source_url:
        fields["source"] = source_url
    dumped = yaml.safe_dump(fields, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"---\n{dumped}---\n\n"


def write_document(path: Path, body: str, title: str, source_url: Optional[str] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_frontmatter(title, source_url) + body.rstrip("\n") + "\n", encoding="utf-8")
    return path


class WriteAgent(BaseAgent):
    stage = JobStage.WRITING

    def run(self, job, ctx):
        extracted = job.artifacts["extracted"]
        document = job.artifacts["document"]

        # SlugResolutionError here is fatal to the job: there is nowhere to write.
        slug = ctx.slugs.output_path(key_from_url(job.source_url))
        path = write_document(ctx.document_path(slug), document.body, extracted.title, job.source_url)

        log.info(f"Wrote {path}", extra={"job_id": job.id, "stage": str(self.stage)})
        return AgentResult(self.stage, f"Wrote {path.name}", {"slug": slug, "document_path": path})
