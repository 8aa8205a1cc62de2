"""Late-bound service lookup for FastAPI dependencies.

Routers are imported before the database is reachable, so each feature
declares a slot whose getter ``main`` installs once services exist.
"""

from collections.abc import Callable
from typing import Generic, TypeVar


T = TypeVar("T")


class ServiceSlot(Generic[T]):
    def __init__(self, label: str):
        self.label = label
        self._getter: Callable[[], T] | None = None

    def set_getter(self, getter: Callable[[], T]) -> None:
        self._getter = getter

    def __call__(self) -> T:
        if self._getter is None:
            msg = f"{self.label} not configured"
            raise RuntimeError(msg)
        return self._getter()
