"""
Path-addressed, observable data documents.

Each surface owns one DataModel. Field segments address dicts, index
segments address lists. Writes create missing containers along the way
but never coerce an existing value of the wrong kind.
"""

from typing import Any

from ..core.logging_config import get_logger
from ..core.stream import DisposedError, Sink, Stream, Teardown, ValueNotifier
from .data_path import DataPath, Segment

logger = get_logger(__name__)


class StructuralConflictError(ValueError):
    """A path passes through an existing value of the wrong container kind."""

    def __init__(self, path: DataPath, expected: str, found: Any) -> None:
        self.path = path
        self.expected = expected
        self.found_type = type(found).__name__
        super().__init__(f"Expected {expected} at '{path}' but found {self.found_type}")


def _container_kind(segment: Segment) -> str:
    return "list" if isinstance(segment, int) else "dict"


class DataModel:
    """
    A JSON-like document with per-path observation.

    Writes are copy-on-write along the written spine: every container on
    the way to the target is copied and the rest is shared. A failing write
    leaves the document untouched, and values already handed out are never
    mutated.
    """

    def __init__(self, data: Any = None) -> None:
        self._data: Any = {} if data is None else data
        self._notifiers: dict[DataPath, ValueNotifier[Any]] = {}
        self._disposed = False

    @property
    def data(self) -> Any:
        """Current root value."""
        self._check()
        return self._data

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, path: DataPath | str) -> Any:
        """
        Read the value at path.

        Missing keys, out-of-range indices and traversal through None
        all yield None.

        Raises:
            StructuralConflictError: If an existing value is the wrong container kind
            DisposedError: If the model was disposed
        """
        self._check()
        return self._read(self._normalize(path))

    def _read(self, path: DataPath) -> Any:
        node = self._data
        for depth, segment in enumerate(path.segments):
            if node is None:
                return None
            if isinstance(segment, int):
                if not isinstance(node, list):
                    raise StructuralConflictError(DataPath(path.segments[:depth]), "list", node)
                if segment >= len(node):
                    return None
                node = node[segment]
            else:
                if not isinstance(node, dict):
                    raise StructuralConflictError(DataPath(path.segments[:depth]), "dict", node)
                node = node.get(segment)
        return node

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def update(self, path: DataPath | str, contents: Any) -> None:
        """
        Write contents at path.

        A root path replaces the whole document. Otherwise missing dicts
        and lists are created on the way down; an index past the end of a
        list pads it with None.

        Raises:
            StructuralConflictError: If the path passes through a value of the
                wrong container kind (nothing is written)
            DisposedError: If the model was disposed
        """
        self._check()
        path = self._normalize(path)

        if path.is_root:
            self._data = contents
        else:
            self._data = self._assign(self._data, path, 0, contents)

        logger.debug("data_model_updated", path=str(path))
        self._notify(path)

    def _assign(self, node: Any, path: DataPath, depth: int, value: Any) -> Any:
        """Return a copy of node with value written at path.segments[depth:]."""
        if depth == len(path.segments):
            return value

        segment = path.segments[depth]
        if isinstance(segment, int):
            if node is None:
                node = []
            elif not isinstance(node, list):
                raise StructuralConflictError(DataPath(path.segments[:depth]), "list", node)
            copy = list(node)
            if segment >= len(copy):
                copy.extend([None] * (segment + 1 - len(copy)))
            copy[segment] = self._assign(copy[segment], path, depth + 1, value)
            return copy

        if node is None:
            node = {}
        elif not isinstance(node, dict):
            raise StructuralConflictError(DataPath(path.segments[:depth]), "dict", node)
        copy = dict(node)
        copy[segment] = self._assign(copy.get(segment), path, depth + 1, value)
        return copy

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    def subscribe(self, path: DataPath | str) -> ValueNotifier[Any]:
        """
        Live view of the value at path.

        Notifiers are cached per path, so every caller observing the same
        location shares one. The current value is available immediately.
        A cached notifier is released once the last watch() listener on it
        cancels and nothing else listens to it.
        """
        self._check()
        path = self._normalize(path)
        notifier = self._notifiers.get(path)
        if notifier is None:
            notifier = ValueNotifier(self._read_lenient(path))
            self._notifiers[path] = notifier
        return notifier

    def watch(self, path: DataPath | str) -> Stream[Any]:
        """
        Stream of the value at path.

        Emits the current value on listen, then again whenever a write
        touches path, one of its ancestors or one of its descendants.
        """
        self._check()
        path = self._normalize(path)

        def produce(sink: Sink[Any]) -> Teardown:
            notifier = self.subscribe(path)
            subscription = notifier.stream().listen(sink.emit, sink.error, sink.close)

            def teardown() -> None:
                subscription.cancel()
                self._release(path, notifier)

            return teardown

        return Stream(produce)

    def _release(self, path: DataPath, notifier: ValueNotifier[Any]) -> None:
        if self._disposed or notifier.has_listeners:
            return
        if self._notifiers.get(path) is notifier:
            del self._notifiers[path]
            notifier.dispose()

    @property
    def watched_paths(self) -> list[DataPath]:
        """Paths with a live notifier."""
        return list(self._notifiers)

    def _notify(self, written: DataPath) -> None:
        affected = [
            path
            for path in self._notifiers
            if path.starts_with(written) or written.starts_with(path)
        ]
        # Ancestors before descendants
        for path in sorted(affected, key=len):
            notifier = self._notifiers.get(path)
            if notifier is not None and not notifier.disposed:
                notifier.value = self._read_lenient(path)

    def _read_lenient(self, path: DataPath) -> Any:
        try:
            return self._read(path)
        except StructuralConflictError:
            logger.debug("data_model_conflicting_watch", path=str(path))
            return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def dispose(self) -> None:
        """Release every notifier (idempotent)."""
        if self._disposed:
            return
        self._disposed = True
        for notifier in self._notifiers.values():
            notifier.dispose()
        self._notifiers.clear()

    def _check(self) -> None:
        if self._disposed:
            raise DisposedError("DataModel was used after being disposed")

    @staticmethod
    def _normalize(path: DataPath | str) -> DataPath:
        if isinstance(path, str):
            path = DataPath.parse(path)
        return path.as_absolute()
