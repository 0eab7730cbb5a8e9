"""
src/orchestrator/errors.py

Exceptions raised by the gateway, the run loop, the local store and the tool
handlers.
All of them propagate to the calling screen.
"""


from typing import Optional


class AssistantError(Exception):
    """Base class for everything this package raises on purpose."""


class ConfigurationError(AssistantError):
    """A required setting (e.g. the gateway credential) is missing or invalid."""


class GatewayRequestError(AssistantError):

    def __init__(self, operation: str, message: str):

        super().__init__(f"{operation} failed: {message}")
        self.operation = operation


class MalformedToolOutput(AssistantError):

    def __init__(self, message: str, raw: str = ""):

        super().__init__(message)
        self.raw = raw


class NoToolOutput(AssistantError):

    def __init__(self, run_id: str, status: str):

        super().__init__(f"Run {run_id} ended with status '{status}' without a tool output.")
        self.run_id = run_id
        self.status = status


class RunTimeout(AssistantError):

    def __init__(self, run_id: str, attempts: int, elapsed: float):

        super().__init__(f"Run {run_id} still active after {attempts} polls ({elapsed:.1f}s).")
        self.run_id = run_id
        self.attempts = attempts
        self.elapsed = elapsed


class UnknownTool(AssistantError):

    def __init__(self, name: str, tool_call_id: Optional[str] = None):

        super().__init__(f"Unknown tool: {name}")
        self.name = name
        self.tool_call_id = tool_call_id


class StoreError(AssistantError):
    """The caller's local store is unreadable or holds the wrong shape."""


class InvalidCallerId(StoreError):

    def __init__(self, caller_id: str):

        super().__init__(f"Invalid caller id: {caller_id!r}")
        self.caller_id = caller_id
