"""agentcore exception hierarchy."""


class AgentCoreError(Exception):
    """Base exception for all agentcore errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(AgentCoreError):
    """Required configuration (e.g. the API credential) is missing or invalid."""
    pass


class ApiError(AgentCoreError):
    """The completion endpoint answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int, body: str = "", **kw):
        super().__init__(message, **kw)
        self.status_code = status_code
        self.body = body


class NetworkError(AgentCoreError):
    """The request never produced a response (DNS, connection, transport, timeout)."""
    pass


class LLMResponseError(AgentCoreError):
    """The endpoint answered 2xx but the body could not be interpreted."""
    pass


class ValidationError(AgentCoreError):
    """An AgentResponse failed caller-supplied acceptance criteria."""

    def __init__(self, message: str, errors: list[str], **kw):
        super().__init__(message, **kw)
        self.errors = errors


class PlanningError(AgentCoreError):
    """An orchestration request has a cyclic or unsatisfiable dependency graph."""

    def __init__(self, message: str, task_ids: list[str] | None = None, **kw):
        super().__init__(message, **kw)
        self.task_ids = task_ids or []


class AgentNotFoundError(AgentCoreError):
    """No agent is registered under the requested id."""

    def __init__(self, message: str, agent_id: str, **kw):
        super().__init__(message, **kw)
        self.agent_id = agent_id
