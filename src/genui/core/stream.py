"""Live value streams.

Push-based, synchronous primitives behind every bound value:

- Stream: cold; runs its producer once per listener
- Subscription: idempotent cancel handle that tears the producer down
- ValueNotifier: holds a current value and notifies on change
- Broadcast: hot multicast channel, no buffering or replay

Listeners run inline when a value is emitted. Errors are events, not
terminal: a stream keeps delivering after reporting one.
"""

import asyncio
from collections.abc import AsyncGenerator, AsyncIterable, Callable, Mapping
from typing import Any, Generic, TypeVar

from .logging_config import get_logger

T = TypeVar("T")
U = TypeVar("U")
K = TypeVar("K")

logger = get_logger(__name__)

Teardown = Callable[[], None]


class DisposedError(RuntimeError):
    """Operation attempted on a disposed object."""

    pass


def _report_unhandled(error: Exception) -> None:
    logger.error("unhandled_stream_error", error=str(error), error_type=type(error).__name__)


def _ignore() -> None:
    pass


class Subscription:
    """Cancel handle for a single listener."""

    def __init__(self, on_cancel: Teardown | None = None) -> None:
        self._on_cancel = on_cancel
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop delivery and release the producer (idempotent)."""
        if self._cancelled:
            return
        self._cancelled = True
        on_cancel, self._on_cancel = self._on_cancel, None
        if on_cancel is not None:
            on_cancel()


class Sink(Generic[T]):
    """Producer-side handle forwarding events to one listener."""

    def __init__(
        self,
        on_value: Callable[[T], None],
        on_error: Callable[[Exception], None],
        on_done: Callable[[], None],
    ) -> None:
        self._on_value = on_value
        self._on_error = on_error
        self._on_done = on_done
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, value: T) -> None:
        if not self._closed:
            self._on_value(value)

    def error(self, error: Exception) -> None:
        if not self._closed:
            self._on_error(error)

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._on_done()

    def detach(self) -> None:
        """Stop delivering without signalling done (listener cancelled)."""
        self._closed = True


Producer = Callable[[Sink[T]], Teardown | None]


class Stream(Generic[T]):
    """
    Cold push stream.

    The producer is invoked once per listen() with a fresh Sink and may
    return a teardown callable, run when that listener cancels.
    """

    def __init__(self, producer: Producer[T]) -> None:
        self._producer = producer

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def value(cls, value: T) -> "Stream[T]":
        """Single immediate value, then done."""

        def produce(sink: Sink[T]) -> None:
            sink.emit(value)
            sink.close()

        return cls(produce)

    @classmethod
    def error(cls, error: Exception) -> "Stream[Any]":
        """Single error event, then done."""

        def produce(sink: Sink[Any]) -> None:
            sink.error(error)
            sink.close()

        return cls(produce)

    @classmethod
    def empty(cls) -> "Stream[Any]":
        return cls(lambda sink: sink.close())

    @classmethod
    def from_async(cls, source: AsyncIterable[T]) -> "Stream[T]":
        """
        Bridge an async iterable into a stream.

        Consumption runs as a task on the running event loop; cancelling
        the subscription cancels the task.
        """

        def produce(sink: Sink[T]) -> Teardown:
            async def pump() -> None:
                try:
                    async for item in source:
                        sink.emit(item)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    sink.error(e)
                sink.close()

            task = asyncio.get_running_loop().create_task(pump())
            return task.cancel

        return cls(produce)

    # ------------------------------------------------------------------
    # Listening
    # ------------------------------------------------------------------

    def listen(
        self,
        on_value: Callable[[T], None],
        on_error: Callable[[Exception], None] | None = None,
        on_done: Callable[[], None] | None = None,
    ) -> Subscription:
        """
        Start the producer for a new listener.

        Args:
            on_value: Called with every value
            on_error: Called with every error (logged if omitted)
            on_done: Called once when the producer finishes

        Returns:
            Subscription whose cancel() tears the producer down
        """
        sink: Sink[T] = Sink(on_value, on_error or _report_unhandled, on_done or _ignore)
        teardown: Teardown | None = None

        def cancel() -> None:
            sink.detach()
            if teardown is not None:
                teardown()

        subscription = Subscription(cancel)
        result = self._producer(sink)
        if subscription.cancelled:
            # Cancelled while the producer was still starting up
            if result is not None:
                result()
        else:
            teardown = result
        return subscription

    def peek(self, default: Any = None) -> Any:
        """Return the first value emitted synchronously on listen, or default."""
        captured: list[T] = []
        subscription = self.listen(captured.append, lambda e: None)
        subscription.cancel()
        return captured[0] if captured else default

    async def iterate(self) -> AsyncGenerator[T, None]:
        """
        Consume the stream from async code.

        Errors are raised from the iterator; the subscription is cancelled
        when the consumer stops iterating.
        """
        queue: asyncio.Queue[tuple[str, Any]] = asyncio.Queue()
        subscription = self.listen(
            lambda v: queue.put_nowait(("value", v)),
            lambda e: queue.put_nowait(("error", e)),
            lambda: queue.put_nowait(("done", None)),
        )
        try:
            while True:
                kind, payload = await queue.get()
                if kind == "done":
                    return
                if kind == "error":
                    raise payload
                yield payload
        finally:
            subscription.cancel()

    # ------------------------------------------------------------------
    # Operators
    # ------------------------------------------------------------------

    def map(self, fn: Callable[[T], U]) -> "Stream[U]":
        def produce(sink: Sink[U]) -> Teardown:
            def on_value(value: T) -> None:
                try:
                    mapped = fn(value)
                except Exception as e:
                    sink.error(e)
                    return
                sink.emit(mapped)

            return self.listen(on_value, sink.error, sink.close).cancel

        return Stream(produce)

    def distinct(self) -> "Stream[T]":
        """Drop values equal to the previously emitted one."""

        def produce(sink: Sink[T]) -> Teardown:
            last: list[T] = []

            def on_value(value: T) -> None:
                if last and _same(last[0], value):
                    return
                last[:] = [value]
                sink.emit(value)

            return self.listen(on_value, sink.error, sink.close).cancel

        return Stream(produce)

    def switch_map(self, fn: Callable[[T], "Stream[U]"]) -> "Stream[U]":
        """
        Map every value to an inner stream, keeping only the latest one.

        Each new outer value cancels the previous inner subscription
        before the next inner stream is started.
        """

        def produce(sink: Sink[U]) -> Teardown:
            inner: Subscription | None = None
            inner_done = True
            outer_done = False

            def on_inner_done() -> None:
                nonlocal inner_done
                inner_done = True
                if outer_done:
                    sink.close()

            def on_outer(value: T) -> None:
                nonlocal inner, inner_done
                if inner is not None:
                    inner.cancel()
                    inner = None
                    inner_done = True
                try:
                    next_stream = fn(value)
                except Exception as e:
                    sink.error(e)
                    return
                inner_done = False
                inner = next_stream.listen(sink.emit, sink.error, on_inner_done)

            def on_outer_done() -> None:
                nonlocal outer_done
                outer_done = True
                if inner_done:
                    sink.close()

            outer = self.listen(on_outer, sink.error, on_outer_done)

            def teardown() -> None:
                outer.cancel()
                if inner is not None:
                    inner.cancel()

            return teardown

        return Stream(produce)


def _same(a: Any, b: Any) -> bool:
    if a is b:
        return True
    # bool is an int subclass; False must not equal 0 here
    return type(a) is type(b) and a == b


def combine_latest(sources: Mapping[K, Stream[Any]]) -> Stream[dict[K, Any]]:
    """
    Combine keyed streams into a stream of snapshots.

    Emits once every source has produced a value, then again whenever any
    source emits. An empty mapping emits {} once. Done when all sources are.
    """
    keys = list(sources)

    def produce(sink: Sink[dict[K, Any]]) -> Teardown | None:
        if not keys:
            sink.emit({})
            sink.close()
            return None

        latest: dict[K, Any] = {}
        finished: set[K] = set()
        subscriptions: list[Subscription] = []

        def on_value(key: K, value: Any) -> None:
            latest[key] = value
            if len(latest) == len(keys):
                sink.emit({k: latest[k] for k in keys})

        def on_done(key: K) -> None:
            finished.add(key)
            if len(finished) == len(keys):
                sink.close()

        for key in keys:
            subscriptions.append(
                sources[key].listen(
                    lambda v, key=key: on_value(key, v),
                    sink.error,
                    lambda key=key: on_done(key),
                )
            )

        def teardown() -> None:
            for subscription in subscriptions:
                subscription.cancel()

        return teardown

    return Stream(produce)


def combine_latest_list(sources: list[Stream[Any]]) -> Stream[list[Any]]:
    """Positional form of combine_latest."""
    count = len(sources)
    return combine_latest(dict(enumerate(sources))).map(
        lambda snapshot: [snapshot[i] for i in range(count)]
    )


class ValueNotifier(Generic[T]):
    """
    Holds a value and notifies listeners when it changes.

    Setting an equal value is a no-op. A listener that raises is logged
    and does not stop the others. After dispose(), adding listeners or
    setting the value raises DisposedError.
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._listeners: list[Callable[[T], None]] = []
        self._disposed = False

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self._check()
        if _same(self._value, new_value):
            return
        self._value = new_value
        self.notify_listeners()

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def has_listeners(self) -> bool:
        return bool(self._listeners)

    def add_listener(self, listener: Callable[[T], None]) -> None:
        self._check()
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[T], None]) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_listeners(self) -> None:
        self._check()
        for listener in list(self._listeners):
            try:
                listener(self._value)
            except Exception:
                logger.exception("listener_failed", notifier=type(self).__name__)

    def stream(self) -> Stream[T]:
        """Current value on listen, then every change."""

        def produce(sink: Sink[T]) -> Teardown:
            self._check()
            listener = sink.emit
            self.add_listener(listener)
            sink.emit(self._value)
            return lambda: self.remove_listener(listener)

        return Stream(produce)

    def dispose(self) -> None:
        self._disposed = True
        self._listeners.clear()

    def _check(self) -> None:
        if self._disposed:
            raise DisposedError(f"{type(self).__name__} was used after being disposed")


class Broadcast(Generic[T]):
    """
    Hot multicast channel.

    Listeners only see events added after they subscribed. close() sends
    done to every listener; adding to a closed channel raises.
    """

    def __init__(self, name: str = "broadcast") -> None:
        self.name = name
        self._sinks: list[Sink[T]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def listener_count(self) -> int:
        return len(self._sinks)

    @property
    def stream(self) -> Stream[T]:
        def produce(sink: Sink[T]) -> Teardown | None:
            if self._closed:
                sink.close()
                return None
            self._sinks.append(sink)
            return lambda: self._remove(sink)

        return Stream(produce)

    def add(self, event: T) -> None:
        if self._closed:
            raise DisposedError(f"Channel '{self.name}' is closed")
        for sink in list(self._sinks):
            try:
                sink.emit(event)
            except Exception:
                logger.exception("channel_listener_failed", channel=self.name)

    def add_error(self, error: Exception) -> None:
        if self._closed:
            raise DisposedError(f"Channel '{self.name}' is closed")
        for sink in list(self._sinks):
            sink.error(error)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        sinks, self._sinks = self._sinks, []
        for sink in sinks:
            sink.close()

    def _remove(self, sink: Sink[T]) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)
