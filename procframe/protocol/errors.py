"""
Errors that cross the process boundary.

A ``SerializableError`` is the tagged description of an exception raised in a
child: its category (type name), message, location and stack frames. The
original exception travels along in pickled form when possible, so the parent
gets the native exception back when its type exists there and a
``RemoteError`` otherwise.
"""

from __future__ import annotations

import builtins
import traceback
from dataclasses import dataclass, field
from typing import Any

import cloudpickle

from ..exceptions import RemoteError


def _category(exc: BaseException) -> str:
    cls = type(exc)
    if cls.__module__ == builtins.__name__:
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _pickle_native(exc: BaseException) -> bytes | None:
    try:
        return cloudpickle.dumps(exc)
    except Exception:
        # Unpicklable exceptions travel as tagged fields only
        return None


@dataclass
class SerializableError:
    """
    Process-independent description of an error.

    Attributes:
        category: Exception type name (qualified for non-builtin types)
        message: Exception message
        location: ``file:line`` where the error was raised, if known
        frames: Stack entries, outermost first, as ``file:line in function``
        native: Pickled original exception, if it could be pickled
    """

    category: str
    message: str
    location: str | None = None
    frames: list[str] = field(default_factory=list)
    native: bytes | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_exception(cls, exc: BaseException) -> SerializableError:
        """Describe an exception, including its traceback when it has one."""
        tb = traceback.extract_tb(exc.__traceback__)
        frames = [f"{f.filename}:{f.lineno} in {f.name}" for f in tb]
        location = f"{tb[-1].filename}:{tb[-1].lineno}" if tb else None
        return cls(
            category=_category(exc),
            message=str(exc),
            location=location,
            frames=frames,
            native=_pickle_native(exc),
        )

    def to_exception(self) -> BaseException:
        """
        Rebuild an exception from this description.

        Returns the original exception when it unpickles in this process,
        else a ``RemoteError`` carrying the tagged fields.
        """
        if self.native is not None:
            try:
                exc = cloudpickle.loads(self.native)
            except Exception:
                # Type not importable here: fall back to the tagged fields
                exc = None
            if isinstance(exc, BaseException):
                return exc
        return RemoteError(
            self.message,
            category=self.category,
            location=self.location,
            frames=self.frames,
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "message": self.message,
            "location": self.location,
            "frames": list(self.frames),
        }

    def __str__(self) -> str:
        text = f"{self.category}: {self.message}" if self.message else self.category
        if self.location:
            text += f" ({self.location})"
        return text


def is_error_value(value: Any) -> bool:
    """Whether a return value denotes an error."""
    return isinstance(value, (BaseException, SerializableError))
