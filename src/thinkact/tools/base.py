"""
Tool abstractions.

A tool is anything with metadata (name, description, parameters, for prompting) that can execute a
loosely-typed parameter mapping.  :class:`FunctionTool` covers the common case: a plain function
whose single argument is a :class:`ToolParams` model.  The model's field names (or aliases) are the
declared correspondence between the keys the model sends and the function's typed parameters.
"""

import inspect
import json
import logging
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Callable,
    Generic,
    List,
    Mapping,
    Type,
    TypeVar,
    get_type_hints,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    ValidationError,
)

from thinkact.core.errors import ToolExecutionError
from thinkact.core.schema import (
    ToolMetadata,
    ToolParameter,
)

logger = logging.getLogger(__name__)


class ToolParams(BaseModel):
    """Base class for tool parameter shapes.  Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


P = TypeVar("P", bound=ToolParams)


class BaseTool(ABC):
    """Capability the agent can invoke by name."""

    @abstractmethod
    def metadata(self) -> ToolMetadata:
        """Name, description and parameters used to present the tool to the model."""

    @abstractmethod
    def execute(self, params: Mapping[str, Any]) -> Any:
        """Run the tool with the decoded tool-call arguments."""

    @property
    def name(self) -> str:
        return self.metadata().name


def _type_name(annotation: Any) -> str:
    if getattr(annotation, "__args__", None) is None and hasattr(annotation, "__name__"):
        return annotation.__name__
    return str(annotation).replace("typing.", "")


def _describe_parameters(model: Type[BaseModel]) -> List[ToolParameter]:
    return [
        ToolParameter(
            name=field.alias or field_name,
            description=field.description or "",
            type=_type_name(field.annotation),
        )
        for field_name, field in model.model_fields.items()
    ]


def _infer_params_model(fn: Callable[..., Any]) -> Type[ToolParams]:
    parameters = list(inspect.signature(fn).parameters)
    if len(parameters) != 1:
        raise TypeError(f"Tool function '{fn.__name__}' must take exactly one parameter model.")
    model = get_type_hints(fn).get(parameters[0])
    if not (inspect.isclass(model) and issubclass(model, ToolParams)):
        raise TypeError(
            f"The parameter of tool function '{fn.__name__}' must be annotated with a "
            "ToolParams subclass."
        )
    return model


class FunctionTool(BaseTool, Generic[P]):
    """Tool backed by a function taking one :class:`ToolParams` instance."""

    def __init__(
        self,
        fn: Callable[[P], Any],
        name: str,
        description: str | None = None,
        params_model: Type[P] | None = None,
    ):
        self._fn = fn
        self.params_model: Type[P] = params_model or _infer_params_model(fn)  # type: ignore
        description = description or inspect.getdoc(fn) or ""
        if not name.strip():
            raise ValueError("Tool name must not be empty.")
        if not description.strip():
            raise ValueError(f"Tool '{name}' needs a description.")
        # Derived once; the metadata never changes after construction.
        self._metadata = ToolMetadata(
            name=name,
            description=description,
            parameters=_describe_parameters(self.params_model),
        )

    def metadata(self) -> ToolMetadata:
        return self._metadata

    def parse_params(self, params: Mapping[str, Any]) -> P:
        """
        Convert the untyped mapping into the declared parameter model.

        The mapping was decoded from JSON, so it is validated with pydantic's strict JSON rules:
        enums, tuples, dates and paths accept their JSON forms while ``"2"`` is still not an int.

        Raises
        ------
        ToolExecutionError
            On missing, mistyped or unknown parameters.
        """
        try:
            payload = json.dumps(dict(params))
        except (TypeError, ValueError) as exc:
            raise ToolExecutionError(
                f"Arguments for tool '{self.name}' are not JSON values: {exc}"
            ) from exc
        try:
            return self.params_model.model_validate_json(payload, strict=True)
        except ValidationError as exc:
            raise ToolExecutionError(f"Invalid arguments for tool '{self.name}': {exc}") from exc

    def execute(self, params: Mapping[str, Any]) -> Any:
        typed = self.parse_params(params)
        logger.debug("Calling tool function '%s' with %r", self.name, typed)
        return self._fn(typed)


def tool(name: str, description: str | None = None) -> Callable[[Callable[[P], Any]], FunctionTool[P]]:
    """
    Turn a function into a :class:`FunctionTool`.

    Used as a decorator::

        class AddParams(ToolParams):
            x: int
            y: int

        @tool("add")
        def add(params: AddParams) -> int:
            \"\"\"Add two integers.\"\"\"
            return params.x + params.y

    The description defaults to the function's docstring.
    """

    def wrapper(fn: Callable[[P], Any]) -> FunctionTool[P]:
        return FunctionTool(fn, name=name, description=description)

    return wrapper
