from bookingpass.core.replay import ConsumedPassStore


def test_consume_blocks_second_use() -> None:
    store = ConsumedPassStore()
    assert store.consume("sig-1", ttl_ms=60_000) is True
    assert store.consume("sig-1", ttl_ms=60_000) is False
    assert store.consume("sig-2", ttl_ms=60_000) is True
    assert len(store) == 2


def test_entries_expire_after_ttl(monkeypatch) -> None:
    clock = {"now": 100.0}
    monkeypatch.setattr("bookingpass.core.replay.monotonic", lambda: clock["now"])
    store = ConsumedPassStore()

    assert store.consume("sig-1", ttl_ms=1_000) is True
    assert store.is_consumed("sig-1") is True

    clock["now"] = 101.5
    assert store.is_consumed("sig-1") is False
    assert store.consume("sig-1", ttl_ms=1_000) is True


def test_clear_forgets_everything() -> None:
    store = ConsumedPassStore()
    store.consume("sig-1", ttl_ms=60_000)
    store.clear()
    assert len(store) == 0
    assert store.is_consumed("sig-1") is False
