from dataclasses import dataclass
from typing import Dict
from docmigrator.core.workflow import JobStage
from docmigrator.agents.base import BaseAgent
from docmigrator.agents.impl_fetch import FetchAgent
from docmigrator.agents.impl_convert import ConvertAgent
from docmigrator.agents.impl_write import WriteAgent
from docmigrator.agents.impl_verify import VerifyAgent
from docmigrator.agents.impl_publish import PublishAgent

@dataclass
class AgentRegistry:
    mapping: Dict[JobStage, BaseAgent]

    def get(self, stage: JobStage) -> BaseAgent:
        return self.mapping[stage]

    @staticmethod
    def default() -> "AgentRegistry":
        return AgentRegistry(mapping={
            JobStage.FETCHING: FetchAgent(),
            JobStage.CONVERTING: ConvertAgent(),
            JobStage.WRITING: WriteAgent(),
            JobStage.VERIFYING: VerifyAgent(),
            JobStage.PUBLISHING: PublishAgent(),
        })
