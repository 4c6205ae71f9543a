"""Harness configuration management using pydantic-settings."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from src.shared.constants import DEFAULT_HTTP_TIMEOUT, DEFAULT_TEST_URL


class HarnessConfig(BaseSettings):
    """Settings shared by every golden-fixture test case."""
    log_level: str = Field(default="info", validation_alias="LOG_LEVEL")
    test_url: str = Field(
        default=DEFAULT_TEST_URL, validation_alias="GOLDEN_TEST_URL"
    )
    http_timeout: float = Field(
        default=DEFAULT_HTTP_TIMEOUT, validation_alias="GOLDEN_HTTP_TIMEOUT"
    )
    follow_redirects: bool = Field(
        default=False, validation_alias="GOLDEN_FOLLOW_REDIRECTS"
    )
    refresh_fixtures: bool = Field(
        default=False, validation_alias="GOLDEN_REFRESH_FIXTURES"
    )

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }
