import builtins
import io

import pytest
import tomli

import combinatorial_strategy_engine.internal.util.toml as toml_mod

# --------------------------------------------------------------------------
# load_toml_file
# --------------------------------------------------------------------------


@pytest.mark.parametrize(
    "content, expected",
    [
        (b"a = 1\n", {"a": 1}),
        (b"[strategies.reporter]\nstrategy_name = \"no-op\"\n", {"strategies": {"reporter": {"strategy_name": "no-op"}}}),
    ],
)
def test_load_toml_file_success(tmp_path, content, expected):
    file_path = tmp_path / "test.toml"
    file_path.write_bytes(content)
    assert toml_mod.load_toml_file(file_path) == expected


@pytest.mark.parametrize("exception_type", [FileNotFoundError, PermissionError])
def test_load_toml_file_open_exceptions(monkeypatch, exception_type):
    def fake_open(path, mode="rb"):
        raise exception_type("mocked")

    monkeypatch.setattr(builtins, "open", fake_open)
    with pytest.raises(exception_type):
        toml_mod.load_toml_file("dummy.toml")


def test_load_toml_file_decode_error(monkeypatch):
    def fake_open(path, mode="rb"):
        return io.BytesIO(b"bad = ]")

    monkeypatch.setattr(builtins, "open", fake_open)
    with pytest.raises(tomli.TOMLDecodeError):
        toml_mod.load_toml_file("bad.toml")


def test_load_toml_file_decode_error_from_loader(monkeypatch):
    def fake_open(path, mode="rb"):
        return io.BytesIO(b"a = 1")

    def fake_load(f):
        raise tomli.TOMLDecodeError("bad", "bad", 0)

    monkeypatch.setattr(builtins, "open", fake_open)
    monkeypatch.setattr(tomli, "load", fake_load)
    with pytest.raises(tomli.TOMLDecodeError):
        toml_mod.load_toml_file("bad.toml")


# --------------------------------------------------------------------------
# load_toml_text
# --------------------------------------------------------------------------


def test_load_toml_text_success():
    assert toml_mod.load_toml_text("a = 1") == {"a": 1}


def test_load_toml_text_decode_error():
    with pytest.raises(tomli.TOMLDecodeError):
        toml_mod.load_toml_text("bad = ]")
