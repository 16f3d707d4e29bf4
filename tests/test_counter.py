from core.counter import CounterStat, DeltaCounter


def test_monotonic_readings_give_consecutive_differences():
    c = DeltaCounter("pkg")
    readings = [100, 250, 250, 900]
    deltas = [c.update(0, r) for r in readings]
    assert deltas == [100, 150, 0, 650]
    assert c.delta(0) == 650


def test_decrease_is_treated_as_counter_restart():
    c = DeltaCounter("pkg")
    c.update("0", 1000)
    assert c.update("0", 50) == 50
    # next interval continues from the restarted value
    assert c.update("0", 80) == 30


def test_unknown_entity_has_zero_delta():
    c = DeltaCounter("sensor")
    assert c.delta("missing") == 0
    assert "missing" not in c
    assert len(c) == 0


def test_reset_keeps_history():
    c = DeltaCounter("core")
    c.update(0, 500)
    c.update(1, 300)
    c.reset()
    assert c.total() == 0
    assert c.delta(0) == 0
    assert len(c) == 2
    # delta still relative to the last raw reading
    assert c.update(0, 700) == 200


def test_total_sums_all_entities():
    c = DeltaCounter("pkg")
    c.update(0, 10)
    c.update(1, 20)
    c.update(2, 30)
    assert c.total() == 60
    assert sorted(c.entity_ids()) == [0, 1, 2]


def test_float_readings_are_truncated():
    stat = CounterStat("s1")
    assert stat.update(10.9) == 10
    assert stat.previous_raw == 10


def test_negative_reading_counts_as_zero():
    stat = CounterStat("s1")
    stat.update(100)
    assert stat.update(-5) == 0
    assert stat.previous_raw == 0


def test_non_finite_reading_is_absent():
    stat = CounterStat("s1")
    stat.update(100)
    for bad in (float("nan"), float("inf"), float("-inf")):
        assert stat.update(bad) == 0
        assert stat.current_delta == 0
        assert stat.previous_raw == 100
    # history intact, next good reading is relative to 100
    assert stat.update(160) == 60
