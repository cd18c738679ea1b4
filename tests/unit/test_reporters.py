"""Reporter combinator tests.

The redaction scenario mirrors the documented example: secrets are masked in
the printed output while an unredacted map keeps the real values.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass

import pytest

from lib_lookup_config import lookup
from lib_lookup_config.adapters.mapping.default import MapSource
from lib_lookup_config.domain.fields import tag
from lib_lookup_config.reporters import (
    DISCARD,
    FanOutReporter,
    FmtReporter,
    LoggingReporter,
    MapReporter,
    RedactingReporter,
    render_value,
)


@dataclass
class Secrets:
    any_secret: str = tag(lookup="ANY_SECRET", default="")
    secret_as_well: str = tag(lookup="SECRET_AS_WELL,optional", default="")
    public: str = tag(json="PUBLIC,omitempty", default="")
    on_the_record: str = tag(json="ON_THE_RECORD,omitempty", default="")


def test_fan_out_redaction_and_map() -> None:
    buffer = io.StringIO()
    collected = MapReporter()
    reporter = FanOutReporter(
        RedactingReporter(FmtReporter(buffer, prefix="- "), re.compile(r".*SECRET.*")),
        collected,
    )
    defaults = MapSource(
        {
            "ANY_SECRET": "007 identity",
            "PUBLIC": "Old news",
            "ON_THE_RECORD": "Everybody knows",
        }
    )
    data = Secrets()

    lookup(data, defaults, reporter=reporter)

    assert collected.mapping() == {
        "ANY_SECRET": "007 identity",
        "SECRET_AS_WELL": "",
        "PUBLIC": "Old news",
        "ON_THE_RECORD": "Everybody knows",
    }
    assert data == Secrets("007 identity", "", "Old news", "Everybody knows")
    assert buffer.getvalue() == (
        "- ANY_SECRET=(not empty)\n"
        "- SECRET_AS_WELL=(empty)\n"
        "- PUBLIC=Old news\n"
        "- ON_THE_RECORD=Everybody knows\n"
    )


def test_redacting_reporter_accepts_string_pattern_and_forwards_text() -> None:
    collected = MapReporter()
    reporter = RedactingReporter(collected, "TOKEN")
    reporter.report("API_TOKEN", None)
    reporter.report("RETRIES", 3)
    reporter.report("ENABLED", False)
    assert collected.mapping() == {"API_TOKEN": "(empty)", "RETRIES": "3", "ENABLED": "false"}


def test_fmt_reporter_without_prefix() -> None:
    buffer = io.StringIO()
    FmtReporter(buffer).report("PORT", 8080)
    assert buffer.getvalue() == "PORT=8080\n"


def test_map_reporter_snapshot_feeds_another_pass() -> None:
    collected = MapReporter()
    collected.report("PORT", 8080)
    source = collected.as_source()
    collected.report("PORT", 9090)
    assert source.lookup_key("PORT") == ("8080", True)
    assert collected.mapping() == {"PORT": "9090"}


def test_logging_reporter_emits_structured_record(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="lib_lookup_config")
    LoggingReporter(level=logging.WARNING).report("PORT", 8080)
    record = caplog.records[-1]
    assert record.levelno == logging.WARNING
    assert record.getMessage() == "field_reported"
    assert record.context["key"] == "PORT"
    assert record.context["value"] == "8080"


def test_discard_reporter_accepts_anything() -> None:
    assert DISCARD.report("ANY", object()) is None


@pytest.mark.parametrize(
    ("value", "text"),
    [
        (None, ""),
        ("", ""),
        (True, "true"),
        (False, "false"),
        (b"\x00\xff", "AP8"),
        (bytearray(b"hi"), "aGk"),
        (complex(3, 4), "3.0,4.0"),
        (-4, "-4"),
        (2.5, "2.5"),
    ],
)
def test_render_value(value: object, text: str) -> None:
    assert render_value(value) == text
