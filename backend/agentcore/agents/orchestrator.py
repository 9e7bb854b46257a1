"""AgentOrchestrator: dependency-ordered execution of multi-agent task graphs."""

import asyncio
import logging
import time
from typing import Any, Callable, Iterable, Optional, Sequence

from agentcore.agents.base import AgentFactory, BaseAgent, get_agent_factory
from agentcore.exceptions import AgentNotFoundError, PlanningError
from agentcore.models.agent_schemas import AgentResponse
from agentcore.models.enums import OrchestrationState, TaskStatus
from agentcore.models.orchestration import (
    OrchestrationPlan, OrchestrationResult, OrchestrationTask, TaskFailure, TaskResult,
)

logger = logging.getLogger(__name__)

PARALLEL_SEPARATOR = "\n\n---\n\n"


class AgentOrchestrator:
    """
    Runs a set of OrchestrationTasks against agents registered in an AgentFactory.

    Lifecycle per request: RECEIVED -> PLANNED -> EXECUTING -> COMPLETED, or
    FAILED when planning rejects the graph (PlanningError, nothing dispatched).
    Individual task failures never raise; they are recorded per task and their
    transitive dependents are skipped.
    """

    def __init__(self, factory: Optional[AgentFactory] = None) -> None:
        self._factory = factory

    @property
    def factory(self) -> AgentFactory:
        return self._factory or get_agent_factory()

    def _resolve_agent(self, agent_id: str) -> BaseAgent:
        agent = self.factory.get_agent(agent_id)
        if agent is None:
            raise AgentNotFoundError(f"Agent '{agent_id}' not found", agent_id=agent_id)
        return agent

    # ── Planning ───────────────────────────────────────────────

    def plan(self, tasks: Sequence[OrchestrationTask]) -> OrchestrationPlan:
        """Validate the dependency graph and layer it into execution waves."""
        by_id: dict[str, OrchestrationTask] = {}
        for task in tasks:
            if task.id in by_id:
                raise PlanningError(f"Duplicate task id '{task.id}'", task_ids=[task.id])
            by_id[task.id] = task

        for task in tasks:
            unknown = [dep for dep in task.depends_on if dep not in by_id]
            if unknown:
                raise PlanningError(
                    f"Task '{task.id}' depends on unknown task(s): {', '.join(unknown)}",
                    task_ids=[task.id, *unknown],
                )

        # Kahn's algorithm, one layer at a time; submission order is kept within a wave
        remaining = {t.id: set(t.depends_on) for t in tasks}
        waves: list[list[str]] = []
        placed: set[str] = set()
        while remaining:
            wave = [task_id for task_id, deps in remaining.items() if deps <= placed]
            if not wave:
                cycle = sorted(remaining)
                raise PlanningError(
                    f"Dependency cycle among tasks: {', '.join(cycle)}", task_ids=cycle,
                )
            waves.append(wave)
            placed.update(wave)
            for task_id in wave:
                del remaining[task_id]

        return OrchestrationPlan(waves=waves)

    # ── Execution ──────────────────────────────────────────────

    async def execute(self, tasks: Iterable[OrchestrationTask | dict[str, Any]]) -> OrchestrationResult:
        tasks = [t if isinstance(t, OrchestrationTask) else OrchestrationTask.model_validate(t) for t in tasks]
        logger.info("Orchestration state=%s tasks=%d", OrchestrationState.RECEIVED, len(tasks))

        try:
            plan = self.plan(tasks)
        except PlanningError as exc:
            logger.error("Orchestration state=%s error=%s", OrchestrationState.FAILED, exc)
            raise
        logger.info("Orchestration state=%s waves=%d", OrchestrationState.PLANNED, len(plan.waves))

        by_id = {t.id: t for t in tasks}
        results: dict[str, TaskResult] = {}

        logger.info("Orchestration state=%s", OrchestrationState.EXECUTING)
        for index, wave in enumerate(plan.waves):
            runnable: list[OrchestrationTask] = []
            for task_id in wave:
                task = by_id[task_id]
                blocked_by = next(
                    (dep for dep in task.depends_on if results[dep].status != TaskStatus.COMPLETED),
                    None,
                )
                if blocked_by is not None:
                    results[task_id] = self._skipped(task, blocked_by)
                else:
                    runnable.append(task)

            logger.debug("Wave %d dispatching=%s skipped=%d", index, [t.id for t in runnable],
                         len(wave) - len(runnable))
            wave_results = await asyncio.gather(*(self._run_task(t, results) for t in runnable))
            for result in wave_results:
                results[result.task_id] = result

        # one entry per submitted task, in submission order
        ordered = {t.id: results[t.id] for t in tasks}
        outcome = OrchestrationResult(state=OrchestrationState.COMPLETED, plan=plan, results=ordered)
        stats = outcome.stats()
        logger.info(
            "Orchestration state=%s completed=%d failed=%d skipped=%d",
            OrchestrationState.COMPLETED, stats.successful_tasks, stats.failed_tasks, stats.skipped_tasks,
        )
        return outcome

    async def _run_task(self, task: OrchestrationTask, results: dict[str, TaskResult]) -> TaskResult:
        start = time.monotonic()
        upstream = {dep: results[dep].response.content for dep in task.depends_on}
        try:
            agent = self._resolve_agent(task.agent_id)
            response = await agent.process(
                self._merge_input(task, upstream),
                {**task.context, **upstream} or None,
            )
        except Exception as e:
            logger.warning("Task failed task=%s agent=%s error=%s", task.id, task.agent_id, e)
            return TaskResult(
                task_id=task.id,
                status=TaskStatus.FAILED,
                failure=TaskFailure(error_type=type(e).__name__, message=str(e)),
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        return TaskResult(
            task_id=task.id,
            status=TaskStatus.COMPLETED,
            response=response,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    @staticmethod
    def _merge_input(task: OrchestrationTask, upstream: dict[str, str]) -> str:
        """Append each dependency's output to the task input, in declared order."""
        if not upstream:
            return task.input
        sections = [task.input]
        for dep_id, content in upstream.items():
            sections.append(f"Output of task '{dep_id}':\n{content}")
        return "\n\n".join(sections)

    @staticmethod
    def _skipped(task: OrchestrationTask, blocked_by: str) -> TaskResult:
        logger.info("Skipping task=%s blocked_by=%s", task.id, blocked_by)
        return TaskResult(
            task_id=task.id,
            status=TaskStatus.SKIPPED,
            failure=TaskFailure(
                error_type="DependencyFailed",
                message=f"Dependency '{blocked_by}' did not complete",
                failed_dependency=blocked_by,
            ),
        )

    # ── Pipelines ──────────────────────────────────────────────

    async def execute_workflow(
        self,
        agent_ids: Sequence[str],
        input_text: str,
        transformers: Optional[Sequence[Optional[Callable[[str, int], str]]]] = None,
    ) -> str:
        """Run agents in sequence, each consuming the previous output. Errors propagate."""
        current = input_text
        for index, agent_id in enumerate(agent_ids):
            agent = self._resolve_agent(agent_id)
            response = await agent.process(current)
            current = response.content
            if transformers and index < len(transformers) and transformers[index]:
                current = transformers[index](current, index)
        return current

    async def execute_parallel(
        self,
        requests: Sequence[dict[str, Any]],
        combiner: Optional[Callable[[list[str]], str]] = None,
    ) -> str:
        """Fan out {agent_id, input, context?} requests concurrently and join the outputs."""
        agents = [self._resolve_agent(r["agent_id"]) for r in requests]
        responses: list[AgentResponse] = await asyncio.gather(*(
            agent.process(r["input"], r.get("context")) for agent, r in zip(agents, requests)
        ))
        contents = [r.content for r in responses]
        return combiner(contents) if combiner else PARALLEL_SEPARATOR.join(contents)
