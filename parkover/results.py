"""Discriminated success/failure results returned by service operations."""

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from parkover.errors import ParkOverError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Operation completed; ``value`` holds its output."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Operation failed with a typed error; nothing was committed."""

    error: ParkOverError

    @property
    def ok(self) -> bool:
        return False

    @property
    def code(self) -> str:
        return self.error.code

    def unwrap(self) -> NoReturn:
        raise self.error


Result = Union[Success[T], Failure]
