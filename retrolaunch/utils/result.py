"""Tagged results (Ok/Err) handed to callers outside the pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeGuard, TypeVar, Union

from ..exceptions import BaseError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    error: BaseError

    @property
    def error_code(self) -> str:
        return self.error.error_code


Result = Union[Ok[T], Err]


def is_err(result: Result[T]) -> TypeGuard[Err]:
    return isinstance(result, Err)


def unwrap(result: Result[T]) -> T:
    """Return the Ok value or re-raise the captured error."""
    if isinstance(result, Err):
        raise result.error
    return result.value


def error_message(result: Result[T]) -> Optional[str]:
    if isinstance(result, Err):
        return str(result.error)
    return None


def capture(func: Callable[[], T]) -> Result[T]:
    """Run ``func`` and tag its outcome. Only project errors are captured."""
    try:
        return Ok(func())
    except BaseError as exc:
        return Err(exc)
