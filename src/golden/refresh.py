"""Fixture serialization: two-style rendering joined by a marker splice.

A fixture file is one JSON object.  The envelope (url, status code,
content type) is tab-indented; the body is written as a nested JSON
value with a three-space prefix on every line after the first, so the
payload reads differently from the wrapper around it.

``json.dumps`` can only apply one indentation style per call, so the
envelope is serialized with a unique marker string in place of the body,
the body is serialized on its own, and the quoted marker is then
replaced by the body text.  The marker is a fresh UUID, so nothing else
in the envelope can contain it.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from src.golden.models import ExpectedResponse
from src.shared.constants import (
    BODY_INDENT,
    BODY_PREFIX,
    ENVELOPE_INDENT,
    ENVELOPE_PREFIX,
    FIXTURE_FILE_MODE,
)
from src.shared.errors import FixtureFormatError, FixtureWriteError, SpliceError

logger = logging.getLogger(__name__)


class FixtureDocument(BaseModel):
    """A fixture file as stored on disk."""
    url: str
    status_code: int
    content_type: str = ""
    body: Any = None

    model_config = {"extra": "ignore"}


def new_marker() -> str:
    """Return a fresh token to stand in for the body."""
    return uuid.uuid4().hex


def marshal_indent(value: Any, prefix: str, indent: str) -> str:
    """Serialize *value* as indented JSON.

    Every line after the first starts with *prefix*.  The first line is
    left bare because it continues whatever line it is spliced into.
    """
    text = json.dumps(value, indent=indent, ensure_ascii=False, allow_nan=False)
    if not prefix:
        return text
    return text.replace("\n", "\n" + prefix)


def marshal_envelope(response: ExpectedResponse) -> str:
    """Serialize the envelope in the wrapper style."""
    return marshal_indent(response.envelope(), ENVELOPE_PREFIX, ENVELOPE_INDENT)


def marshal_body(value: Any) -> str:
    """Serialize a decoded body in the payload style."""
    return marshal_indent(value, BODY_PREFIX, BODY_INDENT)


def splice_marker(envelope: str, marker: str, body: str) -> str:
    """Replace the first quoted *marker* in *envelope* with raw *body* JSON."""
    quoted = json.dumps(marker)
    if quoted not in envelope:
        raise SpliceError(marker)
    return envelope.replace(quoted, body, 1)


def write_fixture(path: str | Path, data: str) -> Path:
    """Create or truncate *path* and write *data* to it as UTF-8."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FIXTURE_FILE_MODE)
        with os.fdopen(fd, "wb") as fh:
            fh.write(data.encode("utf-8"))
    except OSError as exc:
        raise FixtureWriteError(str(target), exc) from exc
    logger.info("Wrote fixture %s (%d bytes)", target, len(data))
    return target


def load_fixture(path: str | Path) -> FixtureDocument:
    """Read and parse a stored fixture."""
    target = Path(path)
    try:
        text = target.read_text(encoding="utf-8")
    except OSError as exc:
        raise FixtureFormatError(f"Cannot read fixture '{target}': {exc}") from exc
    try:
        return FixtureDocument.model_validate_json(text)
    except ValidationError as exc:
        raise FixtureFormatError(f"Invalid fixture '{target}': {exc}") from exc
