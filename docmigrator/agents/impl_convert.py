import logging
from pathlib import Path

from docmigrator.agents.base import BaseAgent, AgentResult
from docmigrator.agents.mdx_postprocess import postprocess
from docmigrator.core.workflow import JobStage

log = logging.getLogger(__name__)

PROMPT_TEMPLATE = Path(__file__).resolve().parent.parent / "prompts" / "convert.md"
DOCS_PLACEHOLDER = "{{LLM_DOCS}}"


def build_system_prompt(component_docs: Path) -> str:
    template = PROMPT_TEMPLATE.read_text(encoding="utf-8")
    docs = component_docs.read_text(encoding="utf-8") if component_docs.is_file() else ""
    return template.replace(DOCS_PLACEHOLDER, docs)


def build_user_prompt(html: str, title: str, url: str) -> str:
    return (
        "// Convert the following HTML content from cppreference.com into MDX format.\n"
        f"// Title: {title}\n"
        f"// URL: {url}\n"
        "// HTML Content:\n"
        f"{html}\n"
    )


class ConvertAgent(BaseAgent):
    stage = JobStage.CONVERTING

    def run(self, job, ctx):
        extra = {"job_id": job.id, "stage": str(self.stage)}
        extracted = job.artifacts["extracted"]

        system = build_system_prompt(ctx.corpus_dir / ctx.settings.component_docs_path)
        raw = ctx.llm.complete(system, build_user_prompt(extracted.html, extracted.title, extracted.url))
        log.debug("Raw model output: %s", raw, extra=extra)

        document = postprocess(raw, ctx.slugs)
        log.info(
            f"Converted to {len(document.body)} chars of MDX using {len(document.components)} components",
            extra=extra,
        )
        return AgentResult(self.stage, "Converted page to MDX", {"document": document})
