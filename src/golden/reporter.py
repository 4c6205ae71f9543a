"""Per-test-case reporting channel with named, independent sub-steps.

Every check the harness performs runs as a named step.  A failure is
recorded against the step that was running when it was reported, and
the next step still runs, so one broken assertion never hides the rest.
Callers inspect ``failures`` or call :meth:`CaseReporter.assert_ok` at
the end of the test.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from src.shared.errors import StepFailureError

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    """What the harness needs from a test-run handle."""

    def run(self, name: str, fn: Callable[[], None]) -> bool: ...

    def error(self, message: str) -> None: ...


@dataclass
class StepResult:
    """Outcome of one named sub-step."""
    name: str
    failures: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


class CaseReporter:
    """Collects failures for one test case, grouped by sub-step.

    Parameters
    ----------
    case_name:
        Identifier of the test case, used in log entries and in the
        message raised by :meth:`assert_ok`.
    """

    def __init__(self, case_name: str = "") -> None:
        self.case_name = case_name
        self.steps: list[StepResult] = []
        self._log: list[str] = []
        self._current: StepResult | None = None

    def run(self, name: str, fn: Callable[[], None]) -> bool:
        """Run *fn* as the sub-step *name* and return whether it passed.

        An ``AssertionError`` escaping *fn* is recorded as a failure of
        this step.  Any other exception propagates.
        """
        step = StepResult(name=name)
        self.steps.append(step)
        parent = self._current
        self._current = step
        try:
            fn()
        except AssertionError as exc:
            self.error(str(exc) or "assertion failed")
        finally:
            self._current = parent

        if step.passed:
            logger.debug("step %s passed", name)
        else:
            logger.debug("step %s failed with %d failure(s)", name, len(step.failures))
        return step.passed

    def error(self, message: str) -> None:
        """Record a failure against the running step (or the case)."""
        if self._current is not None:
            self._current.failures.append(message)
            self._log.append(f"{self._current.name}: {message}")
            logger.error("[%s] %s", self._current.name, message)
        else:
            self._log.append(message)
            logger.error("%s", message)

    @property
    def failures(self) -> list[str]:
        """All failures in the order reported, prefixed with their step."""
        return list(self._log)

    @property
    def failed(self) -> bool:
        return bool(self._log)

    def step(self, name: str) -> StepResult | None:
        """Return the most recent step called *name*, if any."""
        for step in reversed(self.steps):
            if step.name == name:
                return step
        return None

    def assert_ok(self) -> None:
        """Raise :class:`StepFailureError` if anything was reported."""
        if self.failed:
            raise StepFailureError(self.case_name, self.failures)
