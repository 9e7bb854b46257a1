"""Orchestration request, plan and result models."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from agentcore.models.agent_schemas import AgentResponse
from agentcore.models.enums import OrchestrationState, TaskStatus


class OrchestrationTask(BaseModel):
    """A unit of agent work with declared dependencies on other tasks."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    agent_id: str = Field(min_length=1)
    input: str
    depends_on: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)


class OrchestrationPlan(BaseModel):
    """Dependency-respecting execution waves (topological layering)."""
    waves: list[list[str]] = Field(default_factory=list)

    @property
    def task_count(self) -> int:
        return sum(len(wave) for wave in self.waves)


class TaskFailure(BaseModel):
    """Per-task failure record. Recorded in the result map, never raised."""
    model_config = ConfigDict(frozen=True)

    error_type: str
    message: str
    failed_dependency: Optional[str] = None


class TaskResult(BaseModel):
    task_id: str
    status: TaskStatus
    response: Optional[AgentResponse] = None
    failure: Optional[TaskFailure] = None
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.status == TaskStatus.COMPLETED


class OrchestrationStats(BaseModel):
    total_tasks: int
    successful_tasks: int
    failed_tasks: int
    skipped_tasks: int
    total_duration_ms: int
    average_duration_ms: float


class OrchestrationResult(BaseModel):
    """One TaskResult per submitted task id."""
    state: OrchestrationState = OrchestrationState.COMPLETED
    plan: OrchestrationPlan = Field(default_factory=OrchestrationPlan)
    results: dict[str, TaskResult] = Field(default_factory=dict)

    def __getitem__(self, task_id: str) -> TaskResult:
        return self.results[task_id]

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.results

    def __len__(self) -> int:
        return len(self.results)

    def content(self, task_id: str) -> Optional[str]:
        """Text output of a completed task, None otherwise."""
        result = self.results.get(task_id)
        if result is None or result.response is None:
            return None
        return result.response.content

    def stats(self) -> OrchestrationStats:
        results = list(self.results.values())
        total_duration = sum(r.duration_ms for r in results)
        return OrchestrationStats(
            total_tasks=len(results),
            successful_tasks=sum(1 for r in results if r.status == TaskStatus.COMPLETED),
            failed_tasks=sum(1 for r in results if r.status == TaskStatus.FAILED),
            skipped_tasks=sum(1 for r in results if r.status == TaskStatus.SKIPPED),
            total_duration_ms=total_duration,
            average_duration_ms=total_duration / len(results) if results else 0.0,
        )
