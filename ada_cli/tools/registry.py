import inspect
import logging

from dataclasses import dataclass, field
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from jsonschema import Draft7Validator, ValidationError

from ..errors import AdaError, SchemaError
from .diff import FileDiff

logger = logging.getLogger(__name__)

# Capability categories a tool can belong to.
TOOL_CATEGORIES = ("code-search", "file-ops", "git", "shell", "web")

_PARAM_TYPES = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    dict: "object",
}


@dataclass(frozen=True)
class Tool:
    """A named unit of capability with a declared argument schema."""

    name: str
    description: str
    parameters: Dict[str, Any]
    category: str
    function: Callable[..., Any] = field(repr=False, compare=False)
    mutating: bool = False

    def execute(self, arguments: Dict[str, Any]) -> Any:
        return self.function(**arguments)

    def to_llm_spec(self) -> Dict:
        # Format the tool in the OpenAI function format
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


@dataclass(frozen=True)
class ToolCall:
    tool_name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolResult:
    """The normalized outcome of a single tool call."""

    success: bool
    tool_name: str = ""
    title: str = ""
    summary: str = ""
    output: str = ""
    diffs: Tuple[FileDiff, ...] = ()
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def failure(
        cls,
        tool_name: str,
        error: Union[AdaError, str],
        kind: Optional[str] = None,
        **kwargs,
    ) -> "ToolResult":
        if kind is None:
            kind = error.kind if isinstance(error, AdaError) else "error"
        return cls(
            success=False,
            tool_name=tool_name,
            title=kwargs.pop("title", tool_name),
            error=str(error),
            error_kind=kind,
            **kwargs,
        )


def _json_schema_for(hint) -> Dict:
    """Convert a Python type hint into a JSON schema fragment."""
    origin = get_origin(hint)
    if origin is Union:
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        if len(members) == 1:
            return _json_schema_for(members[0])
        return {"type": "string"}

    if origin is list:
        schema = {"type": "array"}
        item_hints = get_args(hint)
        if item_hints:
            schema["items"] = _json_schema_for(item_hints[0])
        return schema

    if origin is dict:
        return {"type": "object"}

    return {"type": _PARAM_TYPES.get(hint, "string")}


def tool(
    category: str,
    name: Optional[str] = None,
    params: Optional[Dict[str, Dict]] = None,
    mutating: bool = False,
):
    """
    Declares a function as a tool.

    The argument schema is built from the function signature: parameters
    without a default are required, and type hints are mapped to JSON schema
    types. `params` merges extra schema keywords (description, enum, items)
    into the generated property of the same name.
    """
    if category not in TOOL_CATEGORIES:
        raise ValueError(f"Unknown tool category '{category}'.")

    def decorator(func):
        signature = inspect.signature(func)
        type_hints = get_type_hints(func)
        extra = params or {}

        args_schema = {
            "type": "object",
            "properties": {},
            "required": [],
            "additionalProperties": False,
        }

        for param_name, param in signature.parameters.items():
            param_schema = _json_schema_for(type_hints.get(param_name, str))
            param_schema.update(extra.get(param_name, {}))
            args_schema["properties"][param_name] = param_schema

            # If parameter has no default, it's required
            if param.default == inspect.Parameter.empty:
                args_schema["required"].append(param_name)

        unknown = set(extra) - set(args_schema["properties"])
        if unknown:
            raise ValueError(
                f"Tool '{func.__name__}' describes unknown parameters: {sorted(unknown)}"
            )
        Draft7Validator.check_schema(args_schema)

        func.__tool__ = Tool(
            name=name or func.__name__,
            description=inspect.cleandoc(func.__doc__) if func.__doc__ else "",
            parameters=args_schema,
            category=category,
            function=func,
            mutating=mutating,
        )
        return func

    return decorator


class ToolRegistry:
    """The fixed catalog of tools, read-only once initialized."""

    def __init__(self, tools: Iterable[Tool] = ()):
        self._tools: Dict[str, Tool] = {}
        self._frozen = False
        for t in tools:
            self.register(t)

    @classmethod
    def from_functions(cls, functions: Iterable[Callable]) -> "ToolRegistry":
        tools = []
        for func in functions:
            if not hasattr(func, "__tool__"):
                raise ValueError(f"'{func.__name__}' is not decorated with @tool.")
            tools.append(func.__tool__)
        return cls(tools).freeze()

    def register(self, t: Tool):
        if self._frozen:
            raise RuntimeError("The tool registry is read-only once initialized.")
        if t.name in self._tools:
            raise ValueError(f"Tool '{t.name}' is already registered.")
        self._tools[t.name] = t
        logger.debug("Registered tool: %s (%s)", t.name, t.category)

    def freeze(self) -> "ToolRegistry":
        self._frozen = True
        return self

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def by_category(self, category: str) -> List[Tool]:
        return [t for t in self._tools.values() if t.category == category]

    def get_tools(self, names: Iterable[str]) -> List[Dict]:
        """Returns the LLM specs of the named tools, skipping unknown names."""
        return [self._tools[n].to_llm_spec() for n in names if n in self._tools]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


##############################################################################


def _format_path(path) -> str:
    """Renders a jsonschema error path as `files[0].content`."""
    text = ""
    for part in path:
        if isinstance(part, int):
            text += f"[{part}]"
        else:
            text += f".{part}" if text else str(part)
    return text


def _describe(error: ValidationError) -> str:
    path = _format_path(error.absolute_path)
    if error.validator == "type":
        return (
            f"Argument '{path}' must be of type {error.validator_value}, "
            f"got {type(error.instance).__name__}."
        )
    if error.validator == "enum":
        choices = ", ".join(repr(choice) for choice in error.validator_value)
        return f"Argument '{path}' must be one of: {choices}."
    if error.validator == "required":
        missing = [name for name in error.validator_value if name not in error.instance]
        return f"Argument '{path}' is missing field '{missing[0]}'."
    return f"Argument '{path}' is invalid: {error.message}"


def validate_arguments(schema: Dict, arguments: Any) -> Dict[str, Any]:
    """
    Checks `arguments` against a tool's argument schema.

    Returns the arguments to call the tool with: optional arguments passed as
    null are dropped so the tool's own defaults apply. Raises SchemaError
    before anything is executed.
    """
    if not isinstance(arguments, dict):
        raise SchemaError(
            f"Arguments must be an object, got {type(arguments).__name__}."
        )

    cleaned = {name: value for name, value in arguments.items() if value is not None}
    errors = sorted(
        Draft7Validator(schema).iter_errors(cleaned),
        key=lambda e: (len(e.absolute_path), list(map(str, e.absolute_path))),
    )
    if not errors:
        return cleaned

    # Top-level problems are reported together, the rest one at a time
    missing = [
        name
        for error in errors
        if error.validator == "required" and not error.absolute_path
        for name in error.validator_value
        if name not in cleaned
    ]
    if missing:
        raise SchemaError(f"Missing required argument(s): {', '.join(dict.fromkeys(missing))}.")

    if any(e.validator == "additionalProperties" and not e.absolute_path for e in errors):
        unknown = sorted(set(cleaned) - set(schema.get("properties", {})))
        raise SchemaError(f"Unknown argument(s): {', '.join(unknown)}.")

    raise SchemaError(_describe(errors[0]))
