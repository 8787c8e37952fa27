"""Unit tests for the plugin contract and loader."""

import textwrap
from pathlib import Path

import pytest

from plugin import MagicPathPlugin, Plugin, load_plugin


def _hello(raw_request: bytes) -> bytes:
    return b"HTTP/1.1 200 OK\r\nContent-Length: 5\r\nConnection: close\r\n\r\nhello"


def test_magic_path_plugin_claims_registered_paths_only() -> None:
    plugin = MagicPathPlugin()
    plugin.add_path("/magic", _hello)

    assert isinstance(plugin, Plugin)
    assert plugin.claims_path("/magic") is True
    assert plugin.claims_path("/magic/") is False
    assert plugin.claims_path("/other") is False


def test_magic_path_plugin_passes_raw_request_to_builder() -> None:
    seen: list[bytes] = []

    def echo(raw_request: bytes) -> bytes:
        seen.append(raw_request)
        return b"HTTP/1.1 200 OK\r\n\r\n"

    plugin = MagicPathPlugin()
    plugin.add_path("/echo me", echo)
    raw = b"POST /echo%20me HTTP/1.1\r\nHost: x\r\n\r\n"

    assert plugin.process_request(raw) == b"HTTP/1.1 200 OK\r\n\r\n"
    assert seen == [raw]


def test_magic_path_plugin_rejects_relative_path() -> None:
    with pytest.raises(ValueError, match="must start with"):
        MagicPathPlugin().add_path("magic", _hello)


def test_magic_path_plugin_raises_for_unclaimed_request() -> None:
    with pytest.raises(LookupError):
        MagicPathPlugin().process_request(b"GET /nope HTTP/1.1\r\n\r\n")


def test_load_plugin_instantiates_class(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "sample_plugin.py").write_text(
        textwrap.dedent(
            """
            class Status:
                def claims_path(self, path):
                    return path == "/status"

                def process_request(self, raw_request):
                    return b"HTTP/1.1 200 OK\\r\\nContent-Length: 0\\r\\n\\r\\n"

            instance = Status()
            not_a_plugin = 42
            """
        )
    )
    monkeypatch.syspath_prepend(str(tmp_path))

    from_class = load_plugin("sample_plugin:Status")
    from_instance = load_plugin("sample_plugin:instance")

    assert from_class.claims_path("/status")
    assert from_instance.claims_path("/status")
    with pytest.raises(TypeError):
        load_plugin("sample_plugin:not_a_plugin")
    with pytest.raises(ValueError, match="no attribute"):
        load_plugin("sample_plugin:missing")


@pytest.mark.parametrize("reference", ["sample_plugin", ":Status", "sample_plugin:"])
def test_load_plugin_rejects_bad_reference(reference: str) -> None:
    with pytest.raises(ValueError, match="module:attribute"):
        load_plugin(reference)
