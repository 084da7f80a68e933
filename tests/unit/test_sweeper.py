from haven_lib.storage.adapter import Scope, WriteStatus
from haven_lib.storage.memory_backend import MemoryStorage
from haven_lib.storage.sweeper import sweep
from tests.helpers import QuotaFailingStorage, make_service


def test_cleanup_removes_expired_and_corrupt(clock, service):
    service.set_local('keep', 1)
    service.set_local('old', 2, ttl=5)
    service.set_session('old_session', 3, ttl=5)
    service.persistent.backend.set_item('hwc_junk', 'garbage')
    service.persistent.backend.set_item('foreign', 'garbage')
    clock.advance(6)

    assert service.cleanup_expired(Scope.PERSISTENT) == 2
    assert sorted(service.persistent.backend.keys()) == ['foreign', 'hwc_keep']
    assert service.cleanup_expired() == 1
    assert service.session.backend.keys() == []


def test_sweep_nothing_to_do(service):
    service.set_local('a', 1, ttl=100)
    assert sweep(service.persistent) == 0
    assert service.get_local('a') == 1


def test_quota_error_triggers_sweep_and_retry(clock):
    backend = QuotaFailingStorage()
    s = make_service(clock, persistent=backend)
    s.set_local('stale', 'x', ttl=1)
    clock.advance(2)

    backend.quota_failures = 1
    assert s.persistent.write('fresh', 'y') is WriteStatus.RECOVERED
    assert s.get_local('fresh') == 'y'
    # the sweep ran between the two attempts
    assert 'hwc_stale' not in backend.keys()


def test_quota_recovery_reports_true(clock):
    backend = QuotaFailingStorage()
    s = make_service(clock, persistent=backend)
    backend.quota_failures = 1
    assert s.set_local('k', 'v') is True


def test_second_quota_failure_returns_false(clock):
    backend = QuotaFailingStorage()
    s = make_service(clock, persistent=backend)
    backend.quota_failures = 2
    before = backend.writes
    assert s.persistent.write('k', 'v') is WriteStatus.QUOTA_EXCEEDED
    # exactly one retry
    assert backend.writes - before == 2
    backend.quota_failures = 2
    assert s.set_local('k', 'v') is False


def test_real_quota_frees_space_by_sweeping(clock):
    session = MemoryStorage(quota_bytes=1000)
    s = make_service(clock, session=session)
    assert s.set_session('old', 'a' * 500, ttl=1) is True
    clock.advance(2)
    assert s.session.write('new', 'b' * 500) is WriteStatus.RECOVERED
    assert session.keys() == ['hwc_new']


def test_real_quota_exhausted(clock):
    session = MemoryStorage(quota_bytes=1000)
    s = make_service(clock, session=session)
    assert s.set_session('a', 'a' * 500) is True
    assert s.session.write('b', 'b' * 500) is WriteStatus.QUOTA_EXCEEDED
    assert s.get_session('a') == 'a' * 500
    assert s.get_session('b') is None


def test_cleanup_removes_non_finite_envelopes(clock, service):
    service.set_local('keep', 1)
    service.persistent.backend.set_item('hwc_nan', '{"value": 1, "timestamp": NaN}')
    service.persistent.backend.set_item('hwc_inf', '{"value": 1, "timestamp": 1, "expires": Infinity}')
    service.set_local('also_keep', 2)

    assert service.cleanup_expired(Scope.PERSISTENT) == 2
    assert sorted(service.persistent.backend.keys()) == ['hwc_also_keep', 'hwc_keep']


def test_quota_recovery_with_non_finite_entry(clock):
    backend = QuotaFailingStorage()
    s = make_service(clock, persistent=backend)
    backend.set_item('hwc_nan', '{"value": 1, "timestamp": NaN}')

    backend.quota_failures = 1
    assert s.set_local('k', 'v') is True
    assert s.get_local('k') == 'v'
    assert 'hwc_nan' not in backend.keys()


def test_quota_recovery_survives_failing_cleanup(clock, monkeypatch):
    backend = QuotaFailingStorage()
    s = make_service(clock, persistent=backend)

    def broken_entries():
        raise RuntimeError("scan failed")

    monkeypatch.setattr(s.persistent, 'entries', broken_entries)
    backend.quota_failures = 1
    assert s.persistent.write('k', 'v') is WriteStatus.RECOVERED
