"""Structured fan-out/join for upstream sub-fetches."""

from __future__ import annotations

from concurrent.futures import FIRST_EXCEPTION, Executor, Future, wait
from typing import Any, Callable, Dict, List, Tuple


class TaskFailed(Exception):
    """Raised by `FetchGroup.join` with the first failing task's name and error."""

    def __init__(self, name: str, cause: BaseException) -> None:
        super().__init__(f"{name}: {cause}")
        self.name = name
        self.cause = cause


class FetchGroup:
    """Run named callables concurrently and join on all of them.

    ``join`` returns only once every task has succeeded, or as soon as one has
    failed. On failure, tasks still queued are cancelled; tasks already running
    finish on their own and their results are dropped.
    """

    def __init__(self, executor: Executor) -> None:
        self._executor = executor
        self._tasks: List[Tuple[str, Future]] = []

    def spawn(self, name: str, fn: Callable[[], Any]) -> None:
        if any(existing == name for existing, _ in self._tasks):
            raise ValueError(f"duplicate task name: {name}")
        self._tasks.append((name, self._executor.submit(fn)))

    def cancel_pending(self) -> int:
        return sum(1 for _, fut in self._tasks if fut.cancel())

    def join(self) -> Dict[str, Any]:
        if not self._tasks:
            return {}
        done, _ = wait([fut for _, fut in self._tasks], return_when=FIRST_EXCEPTION)
        # first failure in spawn order, so errors are reported deterministically
        for name, fut in self._tasks:
            if fut in done and not fut.cancelled() and fut.exception() is not None:
                self.cancel_pending()
                raise TaskFailed(name, fut.exception())
        return {name: fut.result() for name, fut in self._tasks}


__all__ = ["FetchGroup", "TaskFailed"]
