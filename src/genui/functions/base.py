"""Client Function Registry - named, schema-described functions for bindings."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, Iterable, Iterator

from ..core.logging_config import get_logger
from ..core.stream import Stream

if TYPE_CHECKING:
    from .context import ExecutionContext

logger = get_logger(__name__)


class UnknownFunctionError(LookupError):
    """A binding called a function that is not registered."""

    pass


class FunctionArgumentError(ValueError):
    """Function arguments do not satisfy the function's schema."""

    pass


class ReturnType(str, Enum):
    """Type of value a client function produces."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ANY = "any"
    VOID = "void"


# ============================================================================
# Function Contracts
# ============================================================================


class ClientFunction(ABC):
    """
    A function callable from a binding descriptor.

    execute() returns a stream. When a bound argument changes, the resolver
    cancels the previous stream and calls execute() again with the new
    arguments, so implementations never track argument changes themselves.
    A stream may still emit several values if the function watches an
    internal source (a data path looked up through the context, a clock).
    """

    name: ClassVar[str]
    description: ClassVar[str] = ""
    argument_schema: ClassVar[dict[str, Any]] = {"type": "object", "properties": {}}
    return_type: ClassVar[ReturnType] = ReturnType.ANY

    @abstractmethod
    def execute(self, args: dict[str, Any], context: "ExecutionContext") -> Stream[Any]:
        """Invoke the function with a snapshot of resolved arguments."""
        ...

    def describe(self) -> dict[str, Any]:
        """Description for model/tool introspection."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.argument_schema,
            "returnType": self.return_type.value,
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"


class SynchronousClientFunction(ClientFunction):
    """A function computing a single value; exceptions become stream errors."""

    def execute(self, args: dict[str, Any], context: "ExecutionContext") -> Stream[Any]:
        try:
            return Stream.value(self.execute_sync(args, context))
        except Exception as e:
            return Stream.error(e)

    @abstractmethod
    def execute_sync(self, args: dict[str, Any], context: "ExecutionContext") -> Any:
        ...


# ============================================================================
# Registry
# ============================================================================


class FunctionRegistry:
    """
    Functions available to bindings, keyed by name.

    Built with the basic functions unless an explicit list is given.
    """

    def __init__(self, functions: Iterable[ClientFunction] | None = None) -> None:
        self._functions: dict[str, ClientFunction] = {}

        if functions is None:
            from .basic import basic_functions

            functions = basic_functions()

        for function in functions:
            self.register(function)

    def register(self, function: ClientFunction) -> None:
        """Register a function, replacing any previous one with the same name."""
        if function.name in self._functions:
            logger.warning("function_replaced", function=function.name)
        self._functions[function.name] = function
        logger.debug("function_registered", function=function.name)

    def get(self, name: str) -> ClientFunction | None:
        return self._functions.get(name)

    def require(self, name: str) -> ClientFunction:
        """
        Get a function by name.

        Raises:
            UnknownFunctionError: If no function has that name
        """
        function = self._functions.get(name)
        if function is None:
            raise UnknownFunctionError(f"Unknown function '{name}'")
        return function

    def names(self) -> list[str]:
        return sorted(self._functions)

    def describe_all(self) -> list[dict[str, Any]]:
        """Descriptions of every function, sorted by name."""
        return [self._functions[name].describe() for name in self.names()]

    def __contains__(self, name: object) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)

    def __iter__(self) -> Iterator[ClientFunction]:
        return iter(self._functions.values())
