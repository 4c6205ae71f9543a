"""Resolve logical fixture names to files under ``<cwd>/fixtures``."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from src.golden.reporter import Reporter
from src.shared.constants import FIXTURES_DIRNAME

logger = logging.getLogger(__name__)


def fixture_path(working_dir: str, filename: str) -> str:
    """Join *working_dir*, the fixtures directory and *filename*.

    Leading path separators on *filename* are stripped so that
    ``"/users.json"`` and ``"users.json"`` address the same file.
    """
    return (
        f"{working_dir}{os.sep}{FIXTURES_DIRNAME}{os.sep}"
        f"{filename.lstrip(os.sep)}"
    )


@dataclass(frozen=True)
class Fixture:
    """A golden data file, addressed relative to ``<cwd>/fixtures``."""
    filename: str
    reporter: Reporter | None = field(default=None, compare=False, repr=False)

    def filepath(self) -> str:
        """Absolute path of the fixture, recomputed from the working directory.

        If the working directory cannot be determined the failure is
        reported and an empty path is returned; the caller's subsequent
        file operation then fails with its own error.
        """
        try:
            working_dir = os.getcwd()
        except OSError as exc:
            message = (
                f"unable to get working directory for "
                f"filename='{self.filename}': {exc}"
            )
            if self.reporter is not None:
                self.reporter.error(message)
            else:
                logger.error("%s", message)
            return ""
        return fixture_path(working_dir, self.filename)
