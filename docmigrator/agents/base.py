from dataclasses import dataclass, field
from typing import Dict, Any
from docmigrator.core.workflow import JobStage

@dataclass
class AgentResult:
    stage: JobStage
    message: str
    artifacts: Dict[str, Any] = field(default_factory=dict)

class BaseAgent:
    """One pipeline stage. ``run`` returns on success and raises a ``MigrationError`` otherwise."""
    stage: JobStage
    def run(self, job, ctx) -> AgentResult:
        raise NotImplementedError
