import json
import os
import tempfile
import time

import pytest
from security import DomainAllowList, is_allowed
from store import JsonOptionStore, MemoryOptionStore


@pytest.fixture
def options_file():
    fd, path = tempfile.mkstemp(suffix=".json")
    with os.fdopen(fd, "w") as f:
        json.dump({"allowed_domains": "example.com\ntrusted.org"}, f)
    yield path
    if os.path.exists(path):
        os.remove(path)


def test_reads_option(options_file):
    store = JsonOptionStore(options_file)
    assert store.get_option("allowed_domains") == "example.com\ntrusted.org"
    assert store.get_option("missing") == ""
    assert store.get_option("missing", "fallback") == "fallback"


def test_set_option_persists(options_file):
    store = JsonOptionStore(options_file)
    store.set_option("allowed_domains", "new-client.com")

    with open(options_file) as f:
        assert json.load(f) == {"allowed_domains": "new-client.com"}

    assert JsonOptionStore(options_file).get_option("allowed_domains") == "new-client.com"


def test_set_option_keeps_other_keys(options_file):
    store = JsonOptionStore(options_file)
    store.set_option("other", "value")
    with open(options_file) as f:
        data = json.load(f)
    assert data["allowed_domains"] == "example.com\ntrusted.org"
    assert data["other"] == "value"


def test_hot_reload(options_file):
    store = JsonOptionStore(options_file)
    allow_list = DomainAllowList(store, "allowed_domains")
    assert is_allowed(allow_list.domains(), "new-client.com") is False

    time.sleep(0.1)  # Ensure mtime changes
    with open(options_file, "w") as f:
        json.dump({"allowed_domains": "new-client.com"}, f)
    os.utime(options_file, (time.time() + 5, time.time() + 5))

    assert is_allowed(allow_list.domains(), "new-client.com") is True


def test_missing_file_reads_as_unset(tmp_path):
    path = str(tmp_path / "options.json")
    store = JsonOptionStore(path)
    assert store.get_option("allowed_domains") == ""

    store.set_option("allowed_domains", "example.com")
    assert os.path.exists(path)
    assert store.get_option("allowed_domains") == "example.com"


@pytest.mark.parametrize("content", ["{not json", '["example.com"]', ""])
def test_corrupt_file_fails_closed(options_file, content):
    with open(options_file, "w") as f:
        f.write(content)
    os.utime(options_file, (time.time() + 5, time.time() + 5))

    store = JsonOptionStore(options_file)
    assert store.get_option("allowed_domains") == ""
    assert is_allowed(DomainAllowList(store, "allowed_domains").domains(), "example.com") is False


def test_corrupt_reload_drops_previous_domains(options_file):
    store = JsonOptionStore(options_file)
    assert store.get_option("allowed_domains") != ""

    with open(options_file, "w") as f:
        f.write("{broken")
    os.utime(options_file, (time.time() + 5, time.time() + 5))

    assert store.get_option("allowed_domains") == ""


def test_non_string_values_are_ignored(options_file):
    with open(options_file, "w") as f:
        json.dump({"allowed_domains": ["example.com"], "other": "x"}, f)
    os.utime(options_file, (time.time() + 5, time.time() + 5))

    store = JsonOptionStore(options_file)
    assert store.get_option("allowed_domains") == ""
    assert store.get_option("other") == "x"


def test_memory_store():
    store = MemoryOptionStore({"a": "1"})
    assert store.get_option("a") == "1"
    store.set_option("b", "2")
    assert store.get_option("b") == "2"
    assert store.get_option("c", "d") == "d"


def test_failed_write_leaves_no_temp_file(tmp_path, monkeypatch):
    path = tmp_path / "options.json"
    path.write_text(json.dumps({"allowed_domains": "example.com"}))
    store = JsonOptionStore(str(path))

    def fail_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(os, "replace", fail_replace)

    with pytest.raises(OSError):
        store.set_option("allowed_domains", "evil.test")

    assert [p.name for p in tmp_path.iterdir()] == ["options.json"]
    assert json.loads(path.read_text()) == {"allowed_domains": "example.com"}
    assert store.get_option("allowed_domains") == "example.com"
