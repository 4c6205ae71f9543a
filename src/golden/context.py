"""Per-test-case execution handle: HTTP probe, fixture refresh and compare.

A :class:`TestContext` owns one :class:`ExpectedResponse` and reports
every check through its reporter as a named sub-step.  Failures are
reported, never raised: the values returned by the probe only decide
whether later stages run.
"""

from __future__ import annotations

import difflib
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from src.golden.client import HTTPClient, is_connection_refused
from src.golden.fixture import Fixture
from src.golden.models import (
    DecodedBody,
    ExpectedResponse,
    MarkerBody,
    ProbeResult,
    RawBody,
    new_expected_response,
)
from src.golden.refresh import (
    FixtureDocument,
    load_fixture,
    marshal_body,
    marshal_envelope,
    new_marker,
    splice_marker,
    write_fixture,
)
from src.golden.reporter import CaseReporter, Reporter
from src.golden.validators import ValidateBodyFunc
from src.shared.config import HarnessConfig
from src.shared.constants import CONTENT_TYPE_HEADER, DEFAULT_STATUS_CODE
from src.shared.errors import (
    FixtureFormatError,
    FixtureWriteError,
    HarnessError,
    SpliceError,
)
from src.shared.logging import case_scope

logger = logging.getLogger(__name__)

_HTTP_OK = 200


@dataclass
class TestContextArgs:
    """Arguments for :func:`new_test_context`.

    An explicit ``expected_response`` wins over ``test_url`` and
    ``status_code``; an explicit ``fixture`` wins over ``filename``.
    """
    __test__ = False

    test_manager: Reporter | None = None
    expected_response: ExpectedResponse | None = None
    test_num: int = 0
    validate_body_func: ValidateBodyFunc | None = None
    test_url: str = ""
    status_code: int = 0
    fixture: Fixture | None = None
    filename: str = ""
    config: HarnessConfig | None = None


class TestContext:
    """One test case: a reporter, an expected response and a validator."""
    __test__ = False

    def __init__(
        self,
        reporter: Reporter,
        expected_response: ExpectedResponse,
        test_num: int = 0,
        validate_body_func: ValidateBodyFunc | None = None,
        config: HarnessConfig | None = None,
    ) -> None:
        self.reporter = reporter
        self.expected_response = expected_response
        self.test_num = test_num
        self.validate_body_func = validate_body_func
        self.config = config or HarnessConfig()

    @property
    def case_id(self) -> str:
        name = getattr(self.reporter, "case_name", "")
        return name or f"case-{self.test_num}"

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def run(self, name: str, fn: Callable[[], None]) -> bool:
        return self.reporter.run(name, fn)

    def error(self, message: str, err: BaseException | None = None) -> None:
        """Report a failure, naming the URL under test."""
        text = f"{message} from {self.expected_response.url}"
        if err is not None:
            text = f"{text}: {err}"
        self.reporter.error(text)

    # ------------------------------------------------------------------
    # Probe
    # ------------------------------------------------------------------

    def test_json_get(self, client: HTTPClient) -> ProbeResult:
        """GET the expected URL and check status, body, content type and JSON.

        Each check runs as its own named sub-step.  The response body is
        read once and the connection released on every path.
        """
        with case_scope(self.case_id):
            expected = self.expected_response
            test_url = expected.url
            http_response: httpx.Response | None = None

            def get_url() -> None:
                nonlocal http_response
                try:
                    http_response = client.get(test_url)
                except (httpx.HTTPError, httpx.InvalidURL) as exc:
                    if self._ignore_connection_refused(exc):
                        logger.info(
                            "Connection to %s refused with no status code "
                            "expected; skipping", test_url,
                        )
                        return
                    self.error("Failed to HTTP GET", exc)

            self.run(f"Get_URL_via_HTTP[{test_url}]", get_url)
            if http_response is None:
                return ProbeResult()

            try:
                return self._inspect_response(http_response)
            finally:
                http_response.close()

    def _inspect_response(self, hr: httpx.Response) -> ProbeResult:
        expected = self.expected_response
        test_url = expected.url
        probe_error: BaseException | None = None
        body = b""

        def check_status_code() -> None:
            if hr.status_code != expected.status_code:
                self.error(
                    f"Got status code {hr.status_code}, "
                    f"expected {expected.status_code}"
                )

        self.run(f"Check_StatusCode[{test_url}]", check_status_code)

        if hr.status_code != _HTTP_OK:
            return ProbeResult(response=expected)

        response = expected
        response.status_code = hr.status_code

        def read_body() -> None:
            nonlocal body, probe_error
            try:
                body = hr.read()
            except httpx.HTTPError as exc:
                probe_error = exc
                self.error("Failed to read body", exc)
            if not body:
                self.error("Failed due to empty body returned")
            response.body = RawBody(body.decode(hr.encoding or "utf-8", errors="replace"))

        self.run(f"Read_Body[{test_url}]", read_body)

        def check_content_type() -> None:
            values = hr.headers.get_list(CONTENT_TYPE_HEADER)
            if len(values) == 1:
                response.content_type = values[0]
            else:
                self.error(f"no/ambiguous '{CONTENT_TYPE_HEADER}' header")

        self.run(f"Check_ContentType[{test_url}]", check_content_type)

        def body_is_valid_json() -> None:
            nonlocal probe_error
            if self.validate_body_func is None:
                probe_error = HarnessError("no body validator configured")
                self.error("Cannot validate body", probe_error)
                return
            try:
                self.validate_body_func(body)
            except Exception as exc:
                probe_error = exc
                self.error("Failed to unmarshal JSON from body", exc)

        self.run(f"Body_Is_Valid_JSON[{test_url}]", body_is_valid_json)

        return ProbeResult(response=response, error=probe_error, body=body)

    def _ignore_connection_refused(self, exc: BaseException) -> bool:
        return self.expected_response.status_code == 0 and is_connection_refused(exc)

    def _decode_body(self, body: bytes) -> Any:
        if self.validate_body_func is None:
            raise HarnessError("no body validator configured")
        return self.validate_body_func(body)

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def refresh_json_fixture(self, client: HTTPClient | None = None) -> Path | None:
        """Re-fetch the URL and overwrite the bound fixture with live data.

        Returns the written path, or ``None`` when the refresh aborted
        (the reason has been reported).
        """
        if client is None:
            with HTTPClient.from_config(self.config) as owned:
                return self.refresh_json_fixture(owned)

        with case_scope(self.case_id):
            fixture = self.expected_response.fixture
            if fixture is None:
                self.error("No fixture bound, cannot refresh")
                return None

            result = self.test_json_get(client)
            if result.error is not None:
                logger.warning(
                    "Not refreshing %s: probe failed: %s",
                    fixture.filename, result.error,
                )
                return None
            response = result.response
            if response is None or response.raw_body is None:
                self.error("Failed to HTTP GET", HarnessError("no body captured"))
                return None

            try:
                return self._write_refreshed(response, result.body, fixture)
            finally:
                response.body = None

    def _write_refreshed(
        self,
        response: ExpectedResponse,
        body: bytes,
        fixture: Fixture,
    ) -> Path | None:
        marker = new_marker()
        response.body = MarkerBody(marker)
        try:
            envelope = marshal_envelope(response)
        except (TypeError, ValueError) as exc:
            self.error("Failed to marshal response JSON", exc)
            return None

        try:
            decoded = self._decode_body(body)
        except Exception as exc:
            self.error("Failed to unmarshal JSON from body", exc)
            return None
        response.body = DecodedBody(decoded)

        try:
            body_json = marshal_body(decoded)
        except (TypeError, ValueError) as exc:
            self.error("Failed to marshal body data JSON", exc)
            return None

        try:
            data = splice_marker(envelope, marker, body_json)
        except SpliceError as exc:
            self.error("Failed to splice body into envelope", exc)
            return None

        try:
            return write_fixture(response.filepath(), data)
        except FixtureWriteError as exc:
            self.error(f"Failed to write json to {fixture.filename}", exc.cause)
            return None

    # ------------------------------------------------------------------
    # Compare
    # ------------------------------------------------------------------

    def compare_json_fixture(self, client: HTTPClient | None = None) -> bool:
        """Probe the URL and check the live response against the fixture.

        Returns True when the probe and every comparison passed.
        """
        if client is None:
            with HTTPClient.from_config(self.config) as owned:
                return self.compare_json_fixture(owned)

        with case_scope(self.case_id):
            fixture = self.expected_response.fixture
            if fixture is None:
                self.error("No fixture bound, cannot compare")
                return False

            try:
                stored = load_fixture(self.expected_response.filepath())
            except FixtureFormatError as exc:
                self.error(f"Failed to load fixture {fixture.filename}", exc)
                return False

            result = self.test_json_get(client)
            if result.error is not None:
                return False
            response = result.response
            if response is None or response.raw_body is None:
                self.error(
                    f"Cannot compare with fixture {fixture.filename}",
                    HarnessError("no body captured"),
                )
                return False

            return self._compare(response, result.body, stored, fixture)

    def _compare(
        self,
        response: ExpectedResponse,
        body: bytes,
        stored: FixtureDocument,
        fixture: Fixture,
    ) -> bool:
        test_url = response.url
        passed = True

        def match_status_code() -> None:
            if response.status_code != stored.status_code:
                self.error(
                    f"Got status code {response.status_code}, "
                    f"fixture {fixture.filename} has {stored.status_code}"
                )

        def match_content_type() -> None:
            if response.content_type != stored.content_type:
                self.error(
                    f"Got content type {response.content_type!r}, "
                    f"fixture {fixture.filename} has {stored.content_type!r}"
                )

        def match_body() -> None:
            try:
                live = self._decode_body(body)
            except Exception as exc:
                self.error("Failed to unmarshal JSON from body", exc)
                return
            if live != stored.body:
                self.error(
                    f"Body differs from fixture {fixture.filename}:\n"
                    + _json_diff(stored.body, live)
                )

        passed &= self.run(f"Match_Fixture_StatusCode[{test_url}]", match_status_code)
        passed &= self.run(f"Match_Fixture_ContentType[{test_url}]", match_content_type)
        passed &= self.run(f"Match_Fixture_Body[{test_url}]", match_body)
        return passed

    def check_json_fixture(
        self,
        client: HTTPClient | None = None,
        refresh: bool | None = None,
    ) -> bool:
        """Refresh the fixture in refresh mode, otherwise compare against it."""
        if refresh is None:
            refresh = self.config.refresh_fixtures
        if refresh:
            return self.refresh_json_fixture(client) is not None
        return self.compare_json_fixture(client)


def _json_diff(expected: Any, actual: Any) -> str:
    """Unified diff of two JSON values, keys sorted."""
    before = json.dumps(expected, indent=2, sort_keys=True).splitlines()
    after = json.dumps(actual, indent=2, sort_keys=True).splitlines()
    return "\n".join(
        difflib.unified_diff(before, after, "fixture", "live", lineterm="")
    )


def new_test_context(args: TestContextArgs) -> TestContext:
    """Build a :class:`TestContext`, filling defaults from *args* and config."""
    config = args.config or HarnessConfig()
    reporter = args.test_manager or CaseReporter(f"case-{args.test_num}")

    test_url = args.test_url or config.test_url
    status_code = args.status_code or DEFAULT_STATUS_CODE

    expected = args.expected_response
    if expected is None:
        expected = new_expected_response(test_url, status_code)

    if args.fixture is not None:
        expected.fixture = args.fixture
    elif args.filename:
        expected.fixture = Fixture(args.filename, reporter=reporter)

    return TestContext(
        reporter=reporter,
        expected_response=expected,
        test_num=args.test_num,
        validate_body_func=args.validate_body_func,
        config=config,
    )
