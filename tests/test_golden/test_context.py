"""Tests for TestContext construction and reporting helpers."""
from __future__ import annotations

from pathlib import Path

import pytest

from src.golden.context import TestContext, TestContextArgs, new_test_context
from src.golden.fixture import Fixture
from src.golden.models import ExpectedResponse, new_expected_response
from src.golden.reporter import CaseReporter
from src.golden.validators import json_body
from src.shared.config import HarnessConfig


@pytest.fixture
def config(monkeypatch: pytest.MonkeyPatch) -> HarnessConfig:
    monkeypatch.delenv("GOLDEN_TEST_URL", raising=False)
    return HarnessConfig()


class TestNewTestContext:
    def test_defaults(self, config):
        tc = new_test_context(TestContextArgs(config=config))
        assert tc.expected_response.url == "http://localhost"
        assert tc.expected_response.status_code == 200
        assert tc.expected_response.fixture is None
        assert tc.validate_body_func is None
        assert isinstance(tc.reporter, CaseReporter)

    def test_url_and_status(self, config):
        tc = new_test_context(
            TestContextArgs(config=config, test_url="http://api.test/x", status_code=204)
        )
        assert tc.expected_response.url == "http://api.test/x"
        assert tc.expected_response.status_code == 204

    def test_config_supplies_default_url(self):
        tc = new_test_context(TestContextArgs(config=HarnessConfig(test_url="http://svc:9000")))
        assert tc.expected_response.url == "http://svc:9000"

    def test_expected_response_wins(self, config):
        expected = new_expected_response("http://given", 0)
        tc = new_test_context(
            TestContextArgs(
                config=config,
                expected_response=expected,
                test_url="http://ignored",
                status_code=500,
            )
        )
        assert tc.expected_response is expected
        assert tc.expected_response.url == "http://given"
        assert tc.expected_response.status_code == 0

    def test_fixture_wins_over_filename(self, config):
        fixture = Fixture("explicit.json")
        tc = new_test_context(
            TestContextArgs(config=config, fixture=fixture, filename="other.json")
        )
        assert tc.expected_response.fixture is fixture

    def test_filename_builds_fixture(self, config, fixtures_cwd: Path):
        reporter = CaseReporter("case")
        tc = new_test_context(
            TestContextArgs(config=config, test_manager=reporter, filename="/users.json")
        )
        fixture = tc.expected_response.fixture
        assert fixture == Fixture("/users.json")
        assert fixture.reporter is reporter
        assert tc.expected_response.filepath() == str(fixtures_cwd / "fixtures" / "users.json")

    def test_fixture_bound_onto_supplied_expected_response(self, config):
        expected = ExpectedResponse(url="http://given", status_code=200)
        tc = new_test_context(
            TestContextArgs(config=config, expected_response=expected, filename="a.json")
        )
        assert expected.fixture == Fixture("a.json")

    def test_passes_through_test_num_and_validator(self, config):
        tc = new_test_context(
            TestContextArgs(config=config, test_num=7, validate_body_func=json_body)
        )
        assert tc.test_num == 7
        assert tc.validate_body_func is json_body
        assert tc.reporter.case_name == "case-7"
        assert tc.case_id == "case-7"


class TestError:
    def _tc(self) -> TestContext:
        return TestContext(
            reporter=CaseReporter("errors"),
            expected_response=ExpectedResponse(url="http://api.test"),
        )

    def test_with_error(self):
        tc = self._tc()
        tc.error("Failed to read body", ValueError("short read"))
        assert tc.reporter.failures == ["Failed to read body from http://api.test: short read"]

    def test_without_error(self):
        tc = self._tc()
        tc.error("Got status code 404, expected 200")
        assert tc.reporter.failures == ["Got status code 404, expected 200 from http://api.test"]

    def test_inside_step(self):
        tc = self._tc()
        tc.run("Step[x]", lambda: tc.error("bad"))
        assert tc.reporter.failures == ["Step[x]: bad from http://api.test"]

    def test_case_id_falls_back_to_number(self):
        tc = TestContext(
            reporter=CaseReporter(),
            expected_response=ExpectedResponse(url="http://api.test"),
            test_num=3,
        )
        assert tc.case_id == "case-3"
