"""
Error taxonomy shared by the router, the invoker and the tools.

Only `ConfigError` is allowed to end the process; everything else is turned
into a failed `ToolResult` before it leaves a turn.
"""


class AdaError(Exception):
    """Base class for all errors raised by the assistant."""

    kind = "error"


class ScopeError(AdaError):
    """The requested tool is not reachable from the active agent."""

    kind = "scope"


class SchemaError(AdaError):
    """The arguments supplied to a tool do not satisfy its schema."""

    kind = "schema"


class OracleError(AdaError):
    """The language model call failed or returned something unusable."""

    kind = "oracle"


class ToolExecutionError(AdaError):
    """The underlying file, process or network operation failed."""

    kind = "execution"


class ConfigError(AdaError):
    kind = "config"
