import secrets
import tempfile

import pytest

from linecover.tempdir import create_temp_dir


def test_creates_fresh_directory(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    first = create_temp_dir()
    second = create_temp_dir()
    assert first.is_dir() and second.is_dir()
    assert first.parent == tmp_path
    assert first != second


def test_name_is_lowercase_hex(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    monkeypatch.setattr(secrets, "randbits", lambda k: 0xABC)
    assert create_temp_dir().name == "abc"


def test_gives_up_after_max_tries(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    monkeypatch.setattr(secrets, "randbits", lambda k: 0xABC)
    (tmp_path / "abc").mkdir()
    with pytest.raises(RuntimeError):
        create_temp_dir(3)


def test_retries_until_free_name(tmp_path, monkeypatch):
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
    values = iter([0x1, 0x2])
    monkeypatch.setattr(secrets, "randbits", lambda k: next(values))
    (tmp_path / "1").mkdir()
    path = create_temp_dir(1)
    assert path == tmp_path / "2"
    assert path.is_dir()