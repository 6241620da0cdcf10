"""
Teardown schemas.
"""
from typing import List

from pydantic import BaseModel, Field, computed_field


class TeardownStepResult(BaseModel):
    table: str
    deleted: int


class TeardownReport(BaseModel):
    steps: List[TeardownStepResult] = Field(default_factory=list)

    @computed_field
    def total_deleted(self) -> int:
        return sum(step.deleted for step in self.steps)
