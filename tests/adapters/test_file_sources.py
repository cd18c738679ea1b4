"""File source tests across JSON, TOML, and YAML documents."""

from __future__ import annotations

import threading
import traceback
from pathlib import Path
from typing import Mapping

import pytest

from lib_lookup_config.adapters.file_loaders.source import FileSource
from lib_lookup_config.adapters.file_loaders.structured import loader_for
from lib_lookup_config.domain.errors import InvalidFormat, NotFound, SourceError

DOCUMENTS = {
    "conf.json": '{"E1": "lorem ipsum", "B": 2, "RATIO": 0.5, "ENABLED": true, "NOTHING": null}',
    "conf.toml": 'E1 = "lorem ipsum"\nB = 2\nRATIO = 0.5\nENABLED = true\n',
    "conf.yaml": "E1: lorem ipsum\nB: 2\nRATIO: 0.5\nENABLED: true\nNOTHING:\n",
}


@pytest.mark.parametrize("name", sorted(DOCUMENTS))
def test_file_source_formats_scalars(tmp_path: Path, name: str) -> None:
    path = tmp_path / name
    path.write_text(DOCUMENTS[name], encoding="utf-8")
    source = FileSource(path)
    assert source.lookup_key("E1") == ("lorem ipsum", True)
    assert source.lookup_key("B") == ("2", True)
    assert source.lookup_key("RATIO") == ("0.5", True)
    assert source.lookup_key("ENABLED") == ("true", True)
    assert source.lookup_key("NOTHING") == ("", False)
    assert source.lookup_key("E2") == ("", False)


def test_nested_values_are_rendered_as_json(tmp_path: Path) -> None:
    path = tmp_path / "conf.json"
    path.write_text('{"HOSTS": ["a", "b"], "DB": {"port": 5432}}', encoding="utf-8")
    source = FileSource(path)
    assert source.lookup_key("HOSTS") == ('["a","b"]', True)
    assert source.lookup_key("DB") == ('{"port":5432}', True)


def test_missing_file_raises_not_found(tmp_path: Path) -> None:
    source = FileSource(tmp_path / "absent.json")
    with pytest.raises(NotFound):
        source.lookup_key("A")


def test_missing_ok_answers_absent(tmp_path: Path) -> None:
    assert FileSource(tmp_path / "absent.json", missing_ok=True).lookup_key("A") == ("", False)


@pytest.mark.parametrize(
    ("name", "body"),
    [("bad.json", "{not json"), ("bad.toml", "= broken"), ("bad.yaml", "a: [1, 2"), ("list.json", "[1, 2]")],
)
def test_invalid_documents_raise_invalid_format(tmp_path: Path, name: str, body: str) -> None:
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    with pytest.raises(InvalidFormat):
        FileSource(path).lookup_key("A")


def test_unsupported_suffix(tmp_path: Path) -> None:
    with pytest.raises(InvalidFormat, match="Unsupported configuration file type"):
        FileSource(tmp_path / "conf.ini").lookup_key("A")


def test_failed_load_is_remembered(tmp_path: Path) -> None:
    path = tmp_path / "conf.json"
    source = FileSource(path)
    with pytest.raises(NotFound):
        source.lookup_key("A")
    path.write_text('{"A": "1"}', encoding="utf-8")
    with pytest.raises(NotFound):
        source.lookup_key("A")


def test_repeated_failures_do_not_grow_the_traceback(tmp_path: Path) -> None:
    source = FileSource(tmp_path / "absent.json")
    depths: list[int] = []
    for _ in range(5):
        with pytest.raises(NotFound) as excinfo:
            source.lookup_key("A")
        depths.append(len(traceback.extract_tb(excinfo.value.__traceback__)))
    assert len(set(depths[1:])) == 1


def test_file_is_parsed_once(tmp_path: Path) -> None:
    path = tmp_path / "conf.json"
    path.write_text('{"A": "1"}', encoding="utf-8")
    source = FileSource(path)
    assert source.lookup_key("A") == ("1", True)
    path.write_text('{"A": "2"}', encoding="utf-8")
    assert source.lookup_key("A") == ("1", True)


class CountingLoader:
    def __init__(self) -> None:
        self.calls = 0
        self.gate = threading.Event()

    def load(self, path: str) -> Mapping[str, object]:
        self.calls += 1
        self.gate.wait(timeout=1)
        return {"A": "1"}


def test_concurrent_first_lookups_converge_on_one_load() -> None:
    loader = CountingLoader()
    source = FileSource("ignored.json", loader=loader)
    results: list[tuple[str, bool]] = []

    def worker() -> None:
        results.append(source.lookup_key("A"))

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    loader.gate.set()
    for thread in threads:
        thread.join()

    assert loader.calls == 1
    assert results == [("1", True)] * 8


def test_loader_errors_are_source_errors() -> None:
    assert issubclass(NotFound, SourceError)
    assert issubclass(InvalidFormat, SourceError)
    assert type(loader_for("x.JSON")).__name__ == "JSONFileLoader"
