"""
Binding resolution.

A binding descriptor in a component's properties is one of:

- a literal: "Hello", 3, true, [1, 2], {"any": "plain object"}
- a path reference: {"path": "/user/name"} or {"path": "name"} (relative)
- a function call: {"function": "formatNumber", "args": {"value": {"path": "price"}}}
- a wrapped literal: {"literalString": "Hello"}
- a path with an initial value: {"path": "/form/agree", "literalBoolean": false}

ExecutionContext.resolve() turns a descriptor into a live Stream that keeps
emitting as the data it depends on changes.
"""

from abc import ABC, abstractmethod
from typing import Any

from returns.result import Failure

from ..core.config import Settings, get_settings
from ..core.logging_config import get_logger
from ..core.stream import (
    Sink,
    Stream,
    Teardown,
    ValueNotifier,
    combine_latest,
    combine_latest_list,
)
from ..core.validate import validate_arguments
from ..models.data_model import DataModel
from ..models.data_path import DataPath
from ..monitoring.metrics import metrics_collector
from .base import ClientFunction, FunctionArgumentError, FunctionRegistry, UnknownFunctionError

logger = get_logger(__name__)

LITERAL_KEYS = ("literalString", "literalNumber", "literalBoolean", "literalArray")
FUNCTION_KEYS = frozenset({"function", "args", "returnType"})

_MISSING = object()


# ============================================================================
# Truthiness
# ============================================================================


def is_truthy(value: Any) -> bool:
    """Condition truthiness: None, False, 0, "" and empty collections are false."""
    if value is None or isinstance(value, bool):
        return bool(value)
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, (str, list, tuple, dict, set)):
        return len(value) > 0
    return True


def as_bool(value: Any) -> bool:
    """Boolean-combinator truthiness: bools are themselves, None is false, all else true."""
    if isinstance(value, bool):
        return value
    return value is not None


# ============================================================================
# Descriptor Classification
# ============================================================================


def _literal_of(descriptor: dict[str, Any]) -> Any:
    """Value of a wrapped literal ({"literalString": "x"}), or _MISSING."""
    present = [key for key in LITERAL_KEYS if key in descriptor]
    if len(present) != 1:
        return _MISSING
    return descriptor[present[0]]


def is_path_binding(descriptor: Any) -> bool:
    if not isinstance(descriptor, dict) or not isinstance(descriptor.get("path"), str):
        return False
    extra = set(descriptor) - {"path"}
    return not extra or (len(extra) == 1 and extra <= set(LITERAL_KEYS))


def is_function_call(descriptor: Any) -> bool:
    return (
        isinstance(descriptor, dict)
        and isinstance(descriptor.get("function"), str)
        and set(descriptor) <= FUNCTION_KEYS
    )


def is_literal_wrapper(descriptor: Any) -> bool:
    return isinstance(descriptor, dict) and len(descriptor) == 1 and _literal_of(descriptor) is not _MISSING


# ============================================================================
# Contexts
# ============================================================================


class ExecutionContext(ABC):
    """Where a binding is evaluated: a data model, a current path and functions."""

    @property
    @abstractmethod
    def path(self) -> DataPath:
        ...

    @abstractmethod
    def get_function(self, name: str) -> ClientFunction | None:
        ...

    @abstractmethod
    def resolve_path(self, path: DataPath | str) -> DataPath:
        """Resolve path against the current path."""
        ...

    @abstractmethod
    def get_value(self, path: DataPath | str) -> Any:
        ...

    @abstractmethod
    def update(self, path: DataPath | str, contents: Any) -> None:
        ...

    @abstractmethod
    def subscribe(self, path: DataPath | str) -> ValueNotifier[Any]:
        ...

    @abstractmethod
    def subscribe_stream(self, path: DataPath | str) -> Stream[Any]:
        ...

    @abstractmethod
    def nested(self, relative_path: DataPath | str) -> "ExecutionContext":
        """Context for a descendant, e.g. one row of a list template."""
        ...

    @abstractmethod
    def resolve(self, descriptor: Any) -> Stream[Any]:
        """Live stream of the value a binding descriptor stands for."""
        ...

    def evaluate_condition(self, descriptor: Any) -> Stream[bool]:
        """Live truthiness of a descriptor."""
        return self.resolve(descriptor).map(is_truthy).distinct()


class DataContext(ExecutionContext):
    """ExecutionContext over a DataModel."""

    def __init__(
        self,
        data_model: DataModel,
        path: DataPath | str | None = None,
        functions: FunctionRegistry | None = None,
        settings: Settings | None = None,
    ) -> None:
        if isinstance(path, str):
            path = DataPath.parse(path)
        self.data_model = data_model
        self.functions = functions if functions is not None else FunctionRegistry()
        self.settings = settings or get_settings()
        self._path = (path or DataPath.root()).as_absolute()

    @property
    def path(self) -> DataPath:
        return self._path

    def get_function(self, name: str) -> ClientFunction | None:
        return self.functions.get(name)

    def resolve_path(self, path: DataPath | str) -> DataPath:
        if isinstance(path, str):
            path = DataPath.parse(path)
        return path.resolve(self._path).as_absolute()

    def get_value(self, path: DataPath | str) -> Any:
        return self.data_model.get(self.resolve_path(path))

    def update(self, path: DataPath | str, contents: Any) -> None:
        self.data_model.update(self.resolve_path(path), contents)

    def subscribe(self, path: DataPath | str) -> ValueNotifier[Any]:
        return self.data_model.subscribe(self.resolve_path(path))

    def subscribe_stream(self, path: DataPath | str) -> Stream[Any]:
        return self.data_model.watch(self.resolve_path(path))

    def nested(self, relative_path: DataPath | str) -> "DataContext":
        if isinstance(relative_path, str):
            relative_path = DataPath.parse(relative_path)
        return DataContext(
            self.data_model,
            self._path.join(relative_path),
            functions=self.functions,
            settings=self.settings,
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, descriptor: Any) -> Stream[Any]:
        if isinstance(descriptor, list):
            return combine_latest_list([self.resolve(item) for item in descriptor])
        if is_function_call(descriptor):
            return self._resolve_call(descriptor["function"], descriptor.get("args") or {})
        if is_path_binding(descriptor):
            return self._resolve_path_binding(descriptor["path"], _literal_of(descriptor))
        if is_literal_wrapper(descriptor):
            return Stream.value(_literal_of(descriptor))
        return Stream.value(descriptor)

    def _resolve_path_binding(self, path_text: str, initial: Any) -> Stream[Any]:
        path = self.resolve_path(path_text)

        def produce(sink: Sink[Any]) -> Teardown | None:
            try:
                if initial is not _MISSING and self.data_model.get(path) is None:
                    self.data_model.update(path, initial)
                watched = self.data_model.watch(path).distinct()
            except Exception as e:
                logger.warning("binding_failed", path=str(path), error=str(e))
                sink.error(e)
                return None
            return watched.listen(sink.emit, sink.error, sink.close).cancel

        return Stream(produce)

    def _resolve_call(self, name: str, args: Any) -> Stream[Any]:
        function = self.get_function(name)
        if function is None:
            logger.warning("unknown_function", function=name)
            metrics_collector.record_function_error(name)
            return Stream.error(UnknownFunctionError(f"Unknown function '{name}'"))
        if not isinstance(args, dict):
            return Stream.error(FunctionArgumentError(f"Arguments of '{name}' must be an object"))

        arg_streams = {key: self.resolve(value) for key, value in args.items()}
        return combine_latest(arg_streams).switch_map(lambda snapshot: self._invoke(function, snapshot))

    def _invoke(self, function: ClientFunction, args: dict[str, Any]) -> Stream[Any]:
        if self.settings.strict_function_args:
            result = validate_arguments(function.argument_schema, args)
            if isinstance(result, Failure):
                failure = result.failure()
                where = f" at '{failure.field}'" if failure.field else ""
                metrics_collector.record_function_error(function.name)
                return Stream.error(
                    FunctionArgumentError(f"Invalid arguments for '{function.name}'{where}: {failure.message}")
                )

        try:
            stream = function.execute(args, self)
        except Exception as e:
            stream = Stream.error(e)
        return _count_errors(stream, function.name)


def _count_errors(stream: Stream[Any], function_name: str) -> Stream[Any]:
    def produce(sink: Sink[Any]) -> Teardown:
        def on_error(error: Exception) -> None:
            logger.debug("function_error", function=function_name, error=str(error))
            metrics_collector.record_function_error(function_name)
            sink.error(error)

        return stream.listen(sink.emit, on_error, sink.close).cancel

    return Stream(produce)
