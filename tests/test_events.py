from zoneforge.events import EventBus


def test_subscribe_emit_unsubscribe():
    bus = EventBus()
    seen = []
    unsubscribe = bus.on("zone.cleared", seen.append)
    bus.emit("zone.cleared", {"instance_id": "a"})
    unsubscribe()
    bus.emit("zone.cleared", {"instance_id": "b"})
    assert seen == [{"instance_id": "a"}]
    assert bus.handler_count("zone.cleared") == 0


def test_duplicate_subscription_ignored():
    bus = EventBus()
    seen = []
    bus.on("x", seen.append)
    bus.on("x", seen.append)
    bus.emit("x", 1)
    assert seen == [1]


def test_failing_handler_does_not_block_others(capsys):
    bus = EventBus()
    seen = []

    def boom(_data):
        raise RuntimeError("kaput")

    bus.on("x", boom)
    bus.on("x", seen.append)
    bus.emit("x", "payload")
    assert seen == ["payload"]
    assert "event_handler_failed" in capsys.readouterr().err


def test_any_handler_sees_every_type():
    bus = EventBus()
    seen = []
    stop = bus.on_any(lambda t, d: seen.append((t, d)))
    bus.emit("a", 1)
    bus.emit("b", 2)
    stop()
    bus.emit("c", 3)
    assert seen == [("a", 1), ("b", 2)]


def test_history_is_bounded_and_filterable():
    bus = EventBus(max_history=3)
    for i in range(5):
        bus.emit("tick" if i % 2 == 0 else "tock", i)
    history = bus.history()
    assert [e.data for e in history] == [2, 3, 4]
    assert [e.data for e in bus.history("tick")] == [2, 4]
    assert history[0].to_dict()["type"] == "tick"
    bus.clear_history()
    assert bus.history() == []


def test_default_history_keeps_last_hundred():
    bus = EventBus()
    for n in range(150):
        bus.emit("zone.monster.defeated", n)
    history = bus.history("zone.monster.defeated")
    assert len(history) == 100
    assert history[0].data == 50
    assert history[-1].data == 149
