import logging
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from docmigrator.agents.base import BaseAgent, AgentResult
from docmigrator.core.errors import BuildVerificationError
from docmigrator.core.workflow import JobStage
from docmigrator.text.dom import html_to_text

log = logging.getLogger(__name__)


@dataclass
class CommandResult:
    command: str
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    launch_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.launch_error is None and self.returncode == 0

    def diagnostic(self) -> str:
        lines = [f"Command `{self.command}` failed (exit code: {self.returncode})"]
        if self.launch_error:
            lines += ["", f"Error: {self.launch_error}"]
        if self.stdout.strip():
            lines += ["", "stdout:", "```", self.stdout.strip(), "```"]
        if self.stderr.strip():
            lines += ["", "stderr:", "```", self.stderr.strip(), "```"]
        return "\n".join(lines)


def run_command(command: str, cwd: Path) -> CommandResult:
    try:
        proc = subprocess.run(shlex.split(command), cwd=cwd, capture_output=True, text=True)
    except OSError as e:
        return CommandResult(command, None, launch_error=str(e))
    return CommandResult(command, proc.returncode, proc.stdout, proc.stderr)


class VerifyAgent(BaseAgent):
    stage = JobStage.VERIFYING

    def run(self, job, ctx):
        extra = {"job_id": job.id, "stage": str(self.stage)}
        settings = ctx.settings

        if settings.format_command:
            fmt = run_command(settings.format_command, ctx.corpus_dir)
            if not fmt.ok:
                log.warning(f"Format step failed, continuing: {fmt.diagnostic()}", extra=extra)

        build = run_command(settings.build_command, ctx.corpus_dir)
        if not build.ok:
            raise BuildVerificationError(
                build.diagnostic(),
                returncode=build.returncode,
                stdout=build.stdout,
                stderr=build.stderr,
                launch_error=build.launch_error,
            )
        log.info("Build passed", extra=extra)

        built_text = None
        built_page = ctx.built_page_path(job.artifacts["slug"])
        if built_page.is_file():
            built_text = html_to_text(built_page.read_text(encoding="utf-8"), settings.built_content_selector)
        else:
            log.warning(f"Built page not found at {built_page}, no diff will be rendered", extra=extra)

        return AgentResult(self.stage, "Build passed", {"built_text": built_text})
