"""Golden-fixture HTTP response testing harness."""
from src.golden.client import HTTPClient
from src.golden.context import TestContext, TestContextArgs, new_test_context
from src.golden.fixture import Fixture
from src.golden.models import (
    DecodedBody,
    ExpectedResponse,
    MarkerBody,
    ProbeResult,
    RawBody,
    new_expected_response,
)
from src.golden.refresh import FixtureDocument, load_fixture
from src.golden.reporter import CaseReporter
from src.shared.constants import VERSION

__version__ = VERSION

__all__ = [
    "CaseReporter",
    "DecodedBody",
    "ExpectedResponse",
    "Fixture",
    "FixtureDocument",
    "HTTPClient",
    "MarkerBody",
    "ProbeResult",
    "RawBody",
    "TestContext",
    "TestContextArgs",
    "load_fixture",
    "new_expected_response",
    "new_test_context",
]
