"""Lazily computed field attributes keyed by a hash of their bindings.

A field title, description or option list can be given as
``Deferred(fn, bindings)``. Whenever the field is asked to refresh, the
current bindings are hashed; a new hash either hits the per-hash cache or
dispatches ``fn`` as a command. The result comes back as a
:class:`DeferredResultMsg` tagged with the hash it was computed for and is
only applied if that hash is still the current one.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, is_dataclass
from enum import Enum
from typing import Any, Callable, Generic, Mapping, TypeVar

from tf_common.errors import DeferredEvaluationError, error_to_payload, wrap_error
from tf_ui.tui.core.messages import Cmd, DeferredResultMsg
from tf_ui.tui.system.models import Ref

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Deferred(Generic[T]):
    """A value computed by ``fn`` and recomputed when ``bindings`` change.

    ``bindings`` may be a callable returning the values ``fn`` depends on,
    a :class:`Ref`, or any (possibly mutable) container; it is hashed by
    content on every refresh.
    """

    fn: Callable[[], T]
    bindings: Any = None


class EvalState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    READY = "ready"


def _freeze(value: Any) -> Any:
    if isinstance(value, Ref):
        return ("ref", _freeze(value.value))
    if isinstance(value, Mapping):
        return tuple(sorted(((repr(k), _freeze(v)) for k, v in value.items())))
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(item) for item in value)
    if is_dataclass(value) and not isinstance(value, type):
        return (type(value).__name__, _freeze(vars(value)))
    try:
        hash(value)
    except TypeError:
        return repr(value)
    return value


def binding_hash(bindings: Any) -> int:
    """Content hash of ``bindings`` (called first when callable)."""
    if callable(bindings) and not isinstance(bindings, Ref):
        bindings = bindings()
    return hash(_freeze(bindings))


class Eval(Generic[T]):
    """State of one deferred attribute: idle, pending a hash, or ready."""

    def __init__(self, value: T, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.val: T = value
        self.fn: Callable[[], T] | None = None
        self.bindings: Any = None
        self.bindings_hash: int | None = None
        self.cache: dict[int, T] = {}
        self.loading = False
        self.loading_start = 0.0
        self.error: DeferredEvaluationError | None = None
        self._clock = clock

    @property
    def state(self) -> EvalState:
        if self.loading:
            return EvalState.PENDING
        if self.fn is None or self.bindings_hash is None:
            return EvalState.IDLE
        return EvalState.READY

    @property
    def is_dynamic(self) -> bool:
        return self.fn is not None

    def set(self, value: T | Deferred[T]) -> None:
        if isinstance(value, Deferred):
            self.fn = value.fn
            self.bindings = value.bindings
            self.bindings_hash = None
            self.cache.clear()
            return
        self.val = value
        self.fn = None
        self.bindings = None
        self.loading = False
        self.error = None

    def should_update(self) -> tuple[bool, int]:
        if self.fn is None:
            return False, 0
        current = binding_hash(self.bindings)
        return current != self.bindings_hash, current

    def load_from_cache(self) -> bool:
        if self.bindings_hash is None or self.bindings_hash not in self.cache:
            return False
        self.val = self.cache[self.bindings_hash]
        self.loading = False
        return True

    def refresh(self, field_id: int, attr: str) -> tuple[bool, Cmd | None]:
        """Re-check the bindings.

        Returns ``(changed, cmd)``: ``changed`` is True when the value was
        swapped in from the cache, ``cmd`` computes an uncached value.
        """
        should, current = self.should_update()
        if not should:
            return False, None
        self.bindings_hash = current
        self.error = None
        if self.load_from_cache():
            return True, None
        self.loading = True
        self.loading_start = self._clock()
        fn = self.fn
        assert fn is not None

        def _evaluate() -> DeferredResultMsg:
            try:
                value = fn()
            except Exception as exc:  # surfaced on the field, never raised
                return DeferredResultMsg(
                    field_id=field_id, attr=attr, hash=current, error=exc
                )
            return DeferredResultMsg(field_id=field_id, attr=attr, hash=current, value=value)

        return False, _evaluate

    def deliver(self, msg: DeferredResultMsg) -> bool:
        """Apply ``msg`` if it answers the current hash; True when applied."""
        if msg.hash != self.bindings_hash:
            logger.debug(
                "Dropping stale %s result for field %s", msg.attr, msg.field_id
            )
            return False
        self.loading = False
        if msg.error is not None:
            self.error = wrap_error(
                DeferredEvaluationError,
                f"Could not load {msg.attr}: {msg.error}",
                context={"field_id": msg.field_id, "attr": msg.attr},
                cause=msg.error,
            )
            logger.warning("Deferred evaluation failed: %s", error_to_payload(self.error))
            return True
        self.val = msg.value
        self.cache[msg.hash] = msg.value
        return True

    def loading_for(self) -> float:
        if not self.loading:
            return 0.0
        return self._clock() - self.loading_start
