"""End-to-end resolution scenarios through :func:`lib_lookup_config.lookup`.

Each test builds a record, a source sequence, and a recording reporter, then
checks the populated fields together with the reports emitted on the way.
"""

from __future__ import annotations

import io
import json
from dataclasses import dataclass, field, make_dataclass
from pathlib import Path
from typing import Optional

import pytest

from lib_lookup_config import (
    ArgsSource,
    CallableSource,
    ConfigError,
    EnvSource,
    FileSource,
    Float32,
    FmtReporter,
    Int64,
    InvalidRecordArgument,
    JSONRequestSource,
    MapReporter,
    MapSource,
    MissingRequiredField,
    NotFound,
    SourceLookupFailed,
    TypeCoercionFailed,
    UInt8,
    lookup,
    tag,
)
from lib_lookup_config.domain.errors import SourceError


class Recorder:
    """Reporter double keeping the raw ``(key, value)`` pairs in order."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def report(self, key: str, value: object) -> None:
        self.calls.append((key, value))


class Broken:
    name = "broken"

    def lookup_key(self, key: str) -> tuple[str, bool]:
        raise SourceError("backend unavailable")


@dataclass
class Conf:
    a: bool = tag(lookup="A,optional", default=False)
    b: int = tag(lookup="B", default=0)
    c: Int64 = tag(json="C", default=0)
    d: str = tag(lookup="D", default="")


@dataclass
class Level:
    name: str

    @classmethod
    def scan_token(cls, text: str) -> tuple["Level", int]:
        word = text.split()[0] if text.split() else ""
        if word.lower() not in {"debug", "info", "warning", "error"}:
            raise ValueError(f"unknown level {word!r}")
        return cls(word.lower()), len(word)


@dataclass
class Rich:
    mask: UInt8 = tag(lookup="MASK", default=0)
    ratio: Float32 = tag(lookup="RATIO,optional", default=0.0)
    token: bytes = tag(json="TOKEN,omitempty", default=b"")
    level: Level = tag(lookup="LEVEL", default_factory=lambda: Level("info"))
    origin: complex = tag(lookup="ORIGIN,optional", default=0j)
    retries: Optional[int] = tag(lookup="RETRIES,optional", default=None)
    untagged: str = "keep me"
    hosts: list = field(default_factory=list)


def test_first_source_wins_and_every_field_is_reported() -> None:
    conf = Conf()
    recorder = Recorder()
    lookup(conf, EnvSource({"B": "2", "D": "something", "C": "-4"}), MapSource(C="99"), reporter=recorder)

    assert conf == Conf(a=False, b=2, c=-4, d="something")
    assert recorder.calls == [("A", ""), ("B", 2), ("C", -4), ("D", "something")]


def test_later_sources_fill_gaps() -> None:
    conf = Conf()
    recorder = Recorder()
    lookup(conf, EnvSource({"B": "2", "D": "something"}), MapSource(C="-4"), reporter=recorder)

    assert conf.c == -4
    assert recorder.calls == [("A", ""), ("B", 2), ("C", -4), ("D", "something")]


def test_invalid_value_aborts_before_reporting() -> None:
    conf = Conf()
    recorder = Recorder()
    with pytest.raises(TypeCoercionFailed) as excinfo:
        lookup(conf, EnvSource({"A": "maybe", "B": "2", "D": "x"}), MapSource(C="-4"), reporter=recorder)

    assert excinfo.value.field == "a"
    assert excinfo.value.value == "maybe"
    assert recorder.calls == []
    assert conf == Conf()


def test_fractional_default_for_integer_field_fails() -> None:
    with pytest.raises(TypeCoercionFailed) as excinfo:
        lookup(Conf(), MapSource(B="1", C="4.9", D="x"))
    assert excinfo.value.field == "c"
    assert "int64" in str(excinfo.value)


def test_missing_required_field() -> None:
    recorder = Recorder()
    with pytest.raises(MissingRequiredField) as excinfo:
        lookup(Conf(), MapSource(B="1", C="2"), reporter=recorder)

    assert excinfo.value.field == "d"
    assert excinfo.value.key == "D"
    assert recorder.calls == [("A", ""), ("B", 1), ("C", 2)]


def test_fields_set_before_a_failure_stay_set() -> None:
    conf = Conf()
    with pytest.raises(MissingRequiredField):
        lookup(conf, MapSource(A="true", B="7"))
    assert conf.a is True
    assert conf.b == 7


def test_lookup_is_idempotent() -> None:
    sources = (ArgsSource("-", ["-B=3"]), MapSource(C="1", D="x"))
    first, second = Conf(), Conf()
    lookup(first, *sources)
    lookup(second, *sources)
    lookup(second, *sources)
    assert first == second == Conf(b=3, c=1, d="x")


@pytest.mark.parametrize("record", [None, Conf, object(), {"B": "1"}], ids=["none", "class", "object", "dict"])
def test_non_record_arguments_are_rejected(record: object) -> None:
    with pytest.raises(InvalidRecordArgument):
        lookup(record, MapSource(B="1"))


def test_frozen_records_are_rejected() -> None:
    @dataclass(frozen=True)
    class Frozen:
        b: int = tag(lookup="B", default=0)

    with pytest.raises(InvalidRecordArgument, match="frozen"):
        lookup(Frozen(), MapSource(B="1"))


def test_invalid_record_argument_is_a_type_error() -> None:
    with pytest.raises(TypeError):
        lookup(None)


def test_last_source_failure_aborts() -> None:
    with pytest.raises(SourceLookupFailed) as excinfo:
        lookup(Conf(), MapSource(A="1"), Broken())
    assert excinfo.value.field == "b"
    assert excinfo.value.key == "B"
    assert isinstance(excinfo.value.__cause__, SourceError)


def test_earlier_source_failures_are_absorbed() -> None:
    conf = Conf()
    lookup(conf, Broken(), MapSource(B="1", C="2", D="x"))
    assert conf == Conf(b=1, c=2, d="x")


def test_missing_file_as_last_source(tmp_path: Path) -> None:
    with pytest.raises(SourceLookupFailed) as excinfo:
        lookup(Conf(), MapSource(A="1"), FileSource(tmp_path / "absent.json"))
    assert isinstance(excinfo.value.__cause__, NotFound)


def test_optional_field_with_no_source_is_untouched() -> None:
    conf = Conf(a=True)
    lookup(conf, MapSource(B="1", C="2", D="x"))
    assert conf.a is True


def test_every_failure_is_a_config_error() -> None:
    with pytest.raises(ConfigError):
        lookup(Conf())


def test_rich_kinds(tmp_path: Path) -> None:
    record = Rich()
    recorder = MapReporter()
    lookup(
        record,
        MapSource(MASK="0xff", RATIO="0.1", TOKEN="aGk", LEVEL=" WARNING ", ORIGIN="1.5,-2", RETRIES="0o17"),
        reporter=recorder,
    )

    assert record.mask == 255
    assert record.ratio == pytest.approx(0.1, rel=1e-7)
    assert record.ratio != 0.1
    assert record.token == b"hi"
    assert record.level == Level("warning")
    assert record.origin == complex(1.5, -2)
    assert record.retries == 15
    assert record.untagged == "keep me"
    assert record.hosts == []
    assert recorder.mapping()["TOKEN"] == "aGk"
    assert recorder.mapping()["ORIGIN"] == "1.5,-2.0"


def test_out_of_range_unsigned_value() -> None:
    with pytest.raises(TypeCoercionFailed) as excinfo:
        lookup(Rich(), MapSource(MASK="300", LEVEL="info"))
    assert str(excinfo.value) == "value '300' for field 'mask' is not uint8: value out of range"


def test_scanner_errors_become_coercion_failures() -> None:
    with pytest.raises(TypeCoercionFailed) as excinfo:
        lookup(Rich(), MapSource(MASK="1", LEVEL="loud"))
    assert excinfo.value.field == "level"


def test_mixed_sources_like_a_real_service(tmp_path: Path) -> None:
    """Arguments, a request body, a file, and defaults cooperate in one pass."""

    @dataclass
    class Service:
        e1: str = tag(lookup="E1", default="")
        e2: str = tag(json="E2,omitempty", default="unset")
        b: int = tag(lookup="B", default=0)
        port: UInt8 = tag(lookup="PORT", default=0)
        debug: bool = tag(lookup="DEBUG", default=False)

    document = tmp_path / "service.json"
    document.write_text(json.dumps({"E1": "from file", "B": 2, "PORT": 80}), encoding="utf-8")
    body = json.dumps({"E1": "lorem ipsum"}).encode()
    request = JSONRequestSource({"wsgi.input": io.BytesIO(body), "CONTENT_LENGTH": str(len(body))})
    stream = io.StringIO()

    service = Service()
    lookup(
        service,
        ArgsSource("-", ["-DEBUG", "serve"]),
        request,
        FileSource(document),
        MapSource(PORT="8"),
        reporter=FmtReporter(stream, prefix="- "),
    )

    assert service == Service(e1="lorem ipsum", e2="unset", b=2, port=80, debug=True)
    assert stream.getvalue() == "- E1=lorem ipsum\n- E2=\n- B=2\n- PORT=80\n- DEBUG=true\n"


def test_callable_source_backed_by_a_dictionary() -> None:
    secrets = {"D": "vault"}
    conf = Conf()
    lookup(conf, CallableSource(secrets.__getitem__), MapSource(B="1", C="2"))
    assert conf.d == "vault"


def test_reporter_output_can_seed_another_pass() -> None:
    recorder = MapReporter()
    lookup(Conf(), MapSource(A="true", B="5", C="6", D="x"), reporter=recorder)
    replay = Conf()
    lookup(replay, recorder.as_source())
    assert replay == Conf(a=True, b=5, c=6, d="x")


class Picky:
    @classmethod
    def scan_token(cls, text: str) -> tuple["Picky", int]:
        raise TypeError("picky refuses everything")


@dataclass
class WithPicky:
    thing: Picky = tag(lookup="THING", default=None)
    helper: NotDefinedAnywhere = None  # noqa: F821


def test_scanner_type_error_becomes_coercion_failure() -> None:
    with pytest.raises(TypeCoercionFailed) as excinfo:
        lookup(WithPicky(), MapSource(THING="x"))
    assert excinfo.value.field == "thing"
    assert "picky refuses everything" in excinfo.value.reason


def test_untagged_unresolvable_annotation_does_not_block_lookup() -> None:
    @dataclass
    class Partial:
        port: UInt8 = tag(lookup="PORT", default=0)
        cache: SomethingNotImported = None  # noqa: F821

    record = Partial()
    lookup(record, MapSource(PORT="8"))
    assert record.port == 8


def test_locally_defined_scanner_type_given_as_an_object() -> None:
    class Shade:
        def __init__(self, name: str) -> None:
            self.name = name

        @classmethod
        def scan_token(cls, text: str) -> tuple["Shade", int]:
            return cls(text), len(text)

    record_type = make_dataclass("Local", [("shade", Shade, tag(lookup="SHADE", default=None))])
    record = record_type()
    lookup(record, MapSource(SHADE="red"))
    assert record.shade.name == "red"


def test_unresolvable_tagged_annotation_fails_at_coercion() -> None:
    class Shade:
        @classmethod
        def scan_token(cls, text: str) -> tuple["Shade", int]:
            return cls(), len(text)

    @dataclass
    class Local:
        shade: Shade = tag(lookup="SHADE", default=None)

    with pytest.raises(TypeCoercionFailed, match="unresolved field type 'Shade'"):
        lookup(Local(), MapSource(SHADE="red"))


def test_failing_callable_source_falls_back_to_later_sources() -> None:
    def flaky(key: str) -> str:
        raise ConnectionError("secret store offline")

    conf = Conf()
    lookup(conf, CallableSource(flaky, name="vault"), MapSource(B="1", C="2", D="x"))
    assert conf == Conf(b=1, c=2, d="x")
