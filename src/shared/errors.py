"""Custom exception classes for the golden-fixture harness."""
from __future__ import annotations


class HarnessError(Exception):
    """Base harness error."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class FixtureWriteError(HarnessError):
    """Writing a fixture file failed."""

    def __init__(self, path: str, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(detail=f"Failed to write fixture '{path}': {cause}")


class FixtureFormatError(HarnessError):
    """A stored fixture is missing or is not a valid envelope."""

    def __init__(self, detail: str = "Malformed fixture") -> None:
        super().__init__(detail=detail)


class SpliceError(HarnessError):
    """The body marker was not found in the serialized envelope."""

    def __init__(self, marker: str) -> None:
        self.marker = marker
        super().__init__(detail=f"Marker {marker!r} not found in envelope")


class BodyDecodeError(HarnessError):
    """A response body could not be decoded by a validator."""

    def __init__(self, detail: str = "Body is not valid JSON") -> None:
        super().__init__(detail=detail)


class StepFailureError(AssertionError):
    """Raised when a test case finishes with reported failures."""

    def __init__(self, case_name: str, failures: list[str]) -> None:
        self.case_name = case_name
        self.failures = list(failures)
        lines = [f"{len(self.failures)} failure(s) in {case_name or 'test case'}:"]
        lines.extend(f"  - {f}" for f in self.failures)
        super().__init__("\n".join(lines))
