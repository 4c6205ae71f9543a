"""Shared constants used across the harness."""
from __future__ import annotations

# Application version
VERSION: str = "1.0.0"

# Parent logger of every harness module
HARNESS_LOGGER: str = "src.golden"

# Fixture layout: <cwd>/fixtures/<filename>
FIXTURES_DIRNAME: str = "fixtures"

# Test context defaults
DEFAULT_TEST_URL: str = "http://localhost"
DEFAULT_STATUS_CODE: int = 200
DEFAULT_HTTP_TIMEOUT: float = 30.0

CONTENT_TYPE_HEADER: str = "Content-Type"

# Envelope is tab-indented; the embedded body is prefixed with three
# spaces and tab-indented so the two read differently in review.
ENVELOPE_PREFIX: str = ""
ENVELOPE_INDENT: str = "\t"
BODY_PREFIX: str = "   "
BODY_INDENT: str = "\t"

# Passed to open(2); the process umask narrows it.
FIXTURE_FILE_MODE: int = 0o777
