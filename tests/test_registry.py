import pytest
import redis

from workflowconnect.helpers.registry import ConnectionRegistry, RedisConnectionRegistry


class FakePipeline:
    def __init__(self, store, conflict=False):
        self.store = store
        self.conflict = conflict
        self.queued = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def watch(self, key):
        pass

    def unwatch(self):
        pass

    def get(self, key):
        return self.store.get(key)

    def multi(self):
        pass

    def delete(self, key):
        self.queued.append(key)

    def execute(self):
        if self.conflict:
            raise redis.WatchError("watched key changed")
        for key in self.queued:
            self.store.pop(key, None)
        return [1] * len(self.queued)


class FakeRedis:
    """Just enough of redis.Redis (decode_responses=True) for the registry."""

    def __init__(self):
        self.store = {}
        self.expiry = {}
        self.conflict = False

    def set(self, key, value, ex=None):
        self.store[key] = value
        self.expiry[key] = ex

    def get(self, key):
        return self.store.get(key)

    def delete(self, key):
        return 1 if self.store.pop(key, None) is not None else 0

    def pipeline(self):
        return FakePipeline(self.store, conflict=self.conflict)


@pytest.fixture(params=["memory", "redis"])
def any_registry(request):
    if request.param == "memory":
        return ConnectionRegistry()
    return RedisConnectionRegistry(FakeRedis())


def test_lookup_unknown_user_returns_none(any_registry):
    assert any_registry.lookup(42) is None


def test_register_then_lookup(any_registry):
    any_registry.register(1, "sid-a")
    assert any_registry.lookup(1) == "sid-a"


def test_register_again_with_same_connection_is_idempotent(any_registry):
    any_registry.register(1, "sid-a")
    any_registry.register(1, "sid-a")
    assert any_registry.lookup(1) == "sid-a"


def test_latest_connection_wins(any_registry):
    any_registry.register(1, "sid-a")
    any_registry.register(1, "sid-b")
    assert any_registry.lookup(1) == "sid-b"


def test_unregister_removes_entry(any_registry):
    any_registry.register(1, "sid-a")
    assert any_registry.unregister(1) is True
    assert any_registry.lookup(1) is None


def test_unregister_missing_user_is_noop(any_registry):
    assert any_registry.unregister(7) is False
    assert any_registry.lookup(7) is None


def test_unregister_stale_connection_keeps_newer_one(any_registry):
    any_registry.register(1, "sid-a")
    any_registry.register(1, "sid-b")
    assert any_registry.unregister(1, "sid-a") is False
    assert any_registry.lookup(1) == "sid-b"


def test_unregister_matching_connection(any_registry):
    any_registry.register(1, "sid-a")
    assert any_registry.unregister(1, "sid-a") is True
    assert any_registry.lookup(1) is None


def test_users_are_independent(any_registry):
    any_registry.register(1, "sid-a")
    any_registry.register(2, "sid-b")
    any_registry.unregister(1)
    assert any_registry.lookup(2) == "sid-b"


def test_memory_registry_coerces_ids():
    registry = ConnectionRegistry()
    registry.register("5", "sid-a")
    assert registry.lookup(5) == "sid-a"
    assert len(registry) == 1


def test_redis_registry_entries_do_not_expire():
    client = FakeRedis()
    registry = RedisConnectionRegistry(client)
    registry.register(3, "sid-x")
    assert client.store == {"user:socket:3": "sid-x"}
    assert client.expiry["user:socket:3"] is None


def test_redis_registry_concurrent_change_is_not_evicted():
    client = FakeRedis()
    registry = RedisConnectionRegistry(client)
    registry.register(3, "sid-x")
    client.conflict = True
    assert registry.unregister(3, "sid-x") is False
    assert registry.lookup(3) == "sid-x"


def test_app_keeps_the_injected_registry_even_when_empty(app, registry):
    assert len(registry) == 0
    assert app.extensions["connection_registry"] is registry
