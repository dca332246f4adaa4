from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class Label(BaseModel):
    model_config = ConfigDict(extra="ignore")
    name: str


class Issue(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: int
    title: str
    state: str = "open"
    labels: List[Label] = []
    pull_request: Optional[dict] = None

    @property
    def is_pull_request(self) -> bool:
        return self.pull_request is not None


class BranchRef(BaseModel):
    model_config = ConfigDict(extra="ignore")
    ref: str


class PullRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    number: int
    html_url: str = ""
    state: str = "open"
    draft: bool = False
    head: Optional[BranchRef] = None


class Branch(BaseModel):
    model_config = ConfigDict(extra="ignore")
    name: str
