import json

from haven_lib.bootstrap import build_storage_service
from haven_lib.config.config import StorageSettings
from haven_lib.storage import helpers
from haven_lib.storage.adapter import Scope
from haven_lib.storage.backup import export_data, import_data, read_backup, write_backup
from tests.helpers import FakeClock


def _settings(tmp_path, **overrides):
    return StorageSettings(data_dir=str(tmp_path / "storage"), **overrides)


def test_persistent_values_survive_restart(tmp_path):
    settings = _settings(tmp_path)
    first = build_storage_service(settings)
    helpers.set_user_preferences(first, {"theme": "dark"})
    helpers.set_form_data(first, "contact", {"name": "Ada"})

    second = build_storage_service(settings)
    assert helpers.get_user_preferences(second) == {"theme": "dark"}
    # session data does not outlive its service
    assert helpers.get_form_data(second, "contact") == {}


def test_stored_file_is_an_envelope(tmp_path):
    service = build_storage_service(_settings(tmp_path), clock=FakeClock())
    service.set_local("x", {"a": 1}, ttl=1)
    raw = (tmp_path / "storage" / "hwc_x.json").read_text(encoding="utf-8")
    assert json.loads(raw) == {
        "value": {"a": 1},
        "timestamp": 1700000000000,
        "expires": 1700000001000,
        "version": "1.0.0",
        "type": "object",
        "compressed": False,
    }


def test_expired_file_is_deleted_on_read(tmp_path):
    clock = FakeClock()
    service = build_storage_service(_settings(tmp_path), clock=clock)
    service.set_local("x", {"a": 1}, ttl=1)
    clock.advance(0.5)
    assert service.get_local("x") == {"a": 1}
    clock.advance(1.0)
    assert service.get_local("x", "d") == "d"
    assert not (tmp_path / "storage" / "hwc_x.json").exists()


def test_yaml_serializer_setting(tmp_path):
    service = build_storage_service(_settings(tmp_path, serializer="yaml"))
    service.set_local("k", ["a", "b"])
    raw = (tmp_path / "storage" / "hwc_k.json").read_text(encoding="utf-8")
    assert "value:" in raw
    assert service.get_local("k") == ["a", "b"]


def test_quota_setting_applies(tmp_path):
    service = build_storage_service(_settings(tmp_path, persistent_quota_bytes=200))
    assert service.set_local("small", "x") is True
    assert service.set_local("big", "y" * 500) is False


def test_backup_file_roundtrip(tmp_path):
    clock = FakeClock()
    service = build_storage_service(_settings(tmp_path), clock=clock)
    service.set_local("prefs", {"lang": "en"})
    helpers.add_recent_search(service, "grace")

    for name in ("backup.json", "backup.yaml"):
        path = write_backup(export_data(service), tmp_path / "out" / name)
        fresh = build_storage_service(_settings(tmp_path / name), clock=clock)
        assert import_data(fresh, read_backup(path), target=Scope.BOTH) is True
        assert fresh.get_local("prefs") == {"lang": "en"}
        assert helpers.get_recent_searches(fresh) == ["grace"]


def test_backup_format_override(tmp_path):
    path = write_backup({"persistent": {}}, tmp_path / "backup.txt", fmt="yaml")
    assert read_backup(path, fmt="yaml") == {"persistent": {}}


def _write_non_utf8(tmp_path):
    (tmp_path / "storage" / "hwc_bad.json").write_bytes(b"\xff\xfe")


def test_non_utf8_file_reads_as_default_and_is_evicted(tmp_path):
    service = build_storage_service(_settings(tmp_path), clock=FakeClock())
    _write_non_utf8(tmp_path)
    assert service.get_local("bad", "d") == "d"
    assert not (tmp_path / "storage" / "hwc_bad.json").exists()


def test_cleanup_and_clear_continue_past_non_utf8_file(tmp_path):
    service = build_storage_service(_settings(tmp_path), clock=FakeClock())
    names = list("abcdefgh")
    for name in names:
        service.set_local(name, name.upper())
    _write_non_utf8(tmp_path)

    assert sorted(export_data(service)["persistent"]) == names
    assert service.storage_info()["persistent"]["items"] == 9
    assert service.cleanup_expired(Scope.PERSISTENT) == 1
    assert all(service.get_local(name) == name.upper() for name in names)

    _write_non_utf8(tmp_path)
    assert service.clear(Scope.PERSISTENT) == 9
    assert list((tmp_path / "storage").iterdir()) == []
