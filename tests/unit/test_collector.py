import csv
import io
import logging
from unittest.mock import MagicMock

import pytest

from soar_collector import (
    CollectorConfig,
    CounterSnapshot,
    CyclePeriod,
    DataCollector,
    ElapsedPeriod,
    SinkWriteError,
    SnapshotReadError,
    StaticSource,
)


class CountingStringIO(io.StringIO):
    def __init__(self):
        super().__init__()
        self.flushes = 0

    def flush(self):
        self.flushes += 1
        super().flush()


class FailingSource:
    def snapshot(self):
        raise RuntimeError("agent destroyed")


def _rows(sink):
    return list(csv.reader(io.StringIO(sink.getvalue())))


@pytest.fixture
def collector(fake_time):
    return DataCollector(CollectorConfig.by_cycles(10), time_source=fake_time)


def test_disabled_until_sink_bound(collector):
    """Test that nothing is collected before a sink is bound."""
    assert not collector.is_enabled
    assert not any(collector.on_update_event() for _ in range(25))
    assert collector.invocation_count == 25
    result = collector.collect(CounterSnapshot(decision_cycles=5))
    assert result.written is False
    assert result.ok


def test_cadence_survives_enable_toggle(collector):
    """Test that toggling the sink keeps the cycle cadence aligned."""
    sink = io.StringIO()
    results = []
    for i in range(1, 41):
        if i == 5:
            collector.set_output_stream(sink)
        if i == 15:
            collector.set_output_stream(None)
        if i == 25:
            collector.set_output_stream(sink)
        results.append(collector.on_update_event())
    triggered = [i for i, hit in enumerate(results, start=1) if hit]
    assert triggered == [10, 30, 40]


def test_run_writes_header_then_rows(collector, fake_time):
    """Test a full run writing the header and one row per sample."""
    sink = CountingStringIO()
    collector.set_output_stream(sink)
    collector.on_start()

    dc = 0
    for _ in range(30):
        dc += 1
        fake_time.advance(0.01)
        if collector.on_update_event():
            collector.collect(
                CounterSnapshot(
                    agent_name="soar",
                    decision_cycles=dc,
                    production_firings=dc * 2,
                    kernel_seconds=dc * 0.001,
                )
            )

    rows = _rows(sink)
    assert rows[0][0] == "agent"
    assert [row[2] for row in rows[1:]] == ["10", "20", "30"]
    assert rows[2][6] == "20"  # pf delta
    assert float(rows[2][4]) == pytest.approx(0.001)
    assert float(rows[3][1]) == pytest.approx(0.3)
    assert len(rows[1]) == 19
    assert len(rows[2]) == 18
    assert sink.flushes == 0


def test_collect_while_stopped_flushes(collector, fake_time):
    """Test that collecting while stopped flushes the sink."""
    sink = CountingStringIO()
    collector.set_output_stream(sink)
    collector.on_start()
    collector.collect(CounterSnapshot(decision_cycles=1))
    assert sink.flushes == 0

    collector.on_stop()
    assert sink.flushes == 1
    collector.collect(CounterSnapshot(decision_cycles=2))
    assert sink.flushes == 2

    collector.on_start()
    collector.collect(CounterSnapshot(decision_cycles=3))
    assert sink.flushes == 2


def test_wall_clock_excludes_stopped_time(collector, fake_time):
    """Test that stopped time is left out of the wall clock column."""
    sink = io.StringIO()
    collector.set_output_stream(sink)
    collector.on_start()
    fake_time.advance(2.0)
    collector.on_stop()
    fake_time.advance(30.0)
    collector.on_start()
    fake_time.advance(1.0)
    result = collector.collect(CounterSnapshot(decision_cycles=1))
    assert result.stats.wall_clock == pytest.approx(3.0)
    assert collector.wall_clock() == pytest.approx(3.0)


def test_read_failure_drops_sample(collector, caplog):
    """Test that a failing source drops the sample without raising."""
    sink = io.StringIO()
    collector.set_output_stream(sink)
    with caplog.at_level(logging.WARNING):
        result = collector.collect(FailingSource())

    assert not result.written
    assert isinstance(result.error, SnapshotReadError)
    assert sink.getvalue() == ""
    assert "agent destroyed" in caplog.text

    result = collector.collect(CounterSnapshot(agent_name="", decision_cycles=40))
    assert result.stats.delta_cycles == 40


def test_sink_failure_does_not_advance_deltas(collector):
    """Test that a failed write keeps the previous values."""
    sink = MagicMock()
    sink.write.side_effect = OSError("broken pipe")
    collector.set_output_stream(sink)

    first = collector.collect(CounterSnapshot(decision_cycles=100))
    assert isinstance(first.error, SinkWriteError)
    assert not first.written

    sink.write.side_effect = None
    second = collector.collect(CounterSnapshot(decision_cycles=150))
    assert second.ok
    assert second.stats.delta_cycles == 150
    assert sink.write.call_args.args[0].startswith(b"agent,")


def test_flush_failure_is_reported_not_raised(collector):
    """Test that flush failures are reported in the result."""
    sink = MagicMock()
    sink.flush.side_effect = OSError("gone")
    collector.set_output_stream(sink)
    collector.on_start()
    collector.on_stop()  # must not raise
    result = collector.collect(CounterSnapshot(decision_cycles=1))
    assert result.written
    assert isinstance(result.error, SinkWriteError)
    collector.flush()
    collector.reset()


def test_event_handlers_never_raise():
    """Test that event handlers contain a broken time source."""
    def broken_time():
        raise RuntimeError("clock broke")

    collector = DataCollector(CollectorConfig.by_millis(100), time_source=broken_time)
    collector.set_output_stream(io.StringIO())
    assert collector.on_update_event() is False
    collector.on_start()
    collector.on_stop()
    # the clock never started, so collecting does not need the time source
    result = collector.collect(CounterSnapshot(decision_cycles=1))
    assert result.written
    assert result.stats.wall_clock == 0.0


def test_unexpected_collect_errors_are_contained(collector, caplog):
    """Test that unexpected errors are logged and returned."""
    collector.set_output_stream(io.StringIO())
    collector.writer.write = MagicMock(side_effect=TypeError("bad row"))
    with caplog.at_level(logging.ERROR):
        result = collector.collect(CounterSnapshot(decision_cycles=1))
    assert not result.written
    assert isinstance(result.error, TypeError)
    assert "Unexpected error while collecting data" in caplog.text

    del collector.writer.write
    assert collector.collect(CounterSnapshot(decision_cycles=2)).stats.delta_cycles == 2


def test_reset_restarts_everything_but_header(collector, fake_time):
    """Test that reset restarts counters and deltas but keeps the header."""
    sink = io.StringIO()
    collector.set_output_stream(sink)
    collector.on_start()
    snapshot = CounterSnapshot(agent_name="soar", decision_cycles=500, production_firings=70)
    for _ in range(10):
        collector.on_update_event()
    fake_time.advance(5.0)
    collector.collect(snapshot)

    collector.reset()
    assert collector.invocation_count == 0
    assert collector.wall_clock() == 0.0

    result = collector.collect(snapshot)
    assert result.stats.delta_cycles == 500
    assert result.stats.production_firings == 70
    assert sink.getvalue().count("agent,wall clock") == 1


def test_agents_are_tracked_separately(collector):
    """Test that each agent keeps its own previous values."""
    collector.set_output_stream(io.StringIO())
    collector.collect(CounterSnapshot(agent_name="a", decision_cycles=100))
    collector.collect(CounterSnapshot(agent_name="b", decision_cycles=10))
    a = collector.collect(CounterSnapshot(agent_name="a", decision_cycles=130))
    b = collector.collect(CounterSnapshot(agent_name="b", decision_cycles=15))
    assert a.stats.delta_cycles == 30
    assert b.stats.delta_cycles == 5


def test_settings_once_per_binding(collector):
    """Test that the settings field is written once per bound sink."""
    first = io.StringIO()
    second = io.StringIO()
    collector.set_additional_settings("batch 7")
    collector.set_output_stream(first)
    source = StaticSource(CounterSnapshot(agent_name="soar", learning_enabled=True))
    collector.collect(source)
    collector.collect(source)
    collector.set_output_stream(first)
    collector.collect(source)

    rows = _rows(first)
    assert len(rows) == 4
    assert rows[1][-1].endswith("Learning is enabled,epmem learning off,smem learning off,batch 7")
    assert all(len(row) == 18 for row in rows[2:])

    collector.set_output_stream(second)
    collector.collect(source)
    rows = _rows(second)
    assert rows[0][-1] == "settings"
    assert rows[1][-1].endswith("batch 7")


def test_collect_accepts_mappings_and_agents(collector):
    """Test collecting from a mapping and from an agent object."""
    collector.set_output_stream(io.StringIO())
    assert collector.collect({"agent_name": "m", "decision_cycles": 3}).stats.decision_cycles == 3

    class Agent:
        name = "obj"
        decision_cycles = 8

    result = collector.collect(Agent())
    assert result.stats.agent_name == "obj"
    assert result.stats.decision_cycles == 8


def test_set_period_switches_mode(collector, fake_time):
    """Test switching between elapsed and cycle sampling."""
    collector.set_period_millis(500)
    assert collector.scheduler.period == ElapsedPeriod(500)
    assert collector.config.period_millis == 500

    collector.set_period_cycles(3)
    assert collector.scheduler.period == CyclePeriod(3)
    assert collector.config.period_millis is None


def test_open_output_owns_the_file(tmp_path, fake_time):
    """Test that a file opened by the collector is closed with it."""
    path = tmp_path / "stats.csv"
    with DataCollector(time_source=fake_time) as collector:
        sink = collector.open_output(path)
        collector.collect(CounterSnapshot(agent_name="soar", decision_cycles=1))
    assert sink.closed
    assert not collector.is_enabled
    assert path.read_text(encoding="utf-8").startswith("agent,wall clock")


def test_binding_another_sink_closes_owned_file(tmp_path):
    """Test that binding another sink closes the owned file."""
    collector = DataCollector()
    sink = collector.open_output(tmp_path / "a.csv")
    other = io.StringIO()
    collector.set_output_stream(other)
    assert sink.closed
    assert collector.writer.sink is other


def test_elapsed_schedule_skips_stopped_time(fake_time):
    """Test that a long stop does not cause a burst of samples."""
    collector = DataCollector(CollectorConfig.by_millis(125), time_source=fake_time)
    collector.set_output_stream(io.StringIO())
    collector.on_start()
    collector.on_update_event()
    fake_time.advance(0.125)
    assert collector.on_update_event() is True

    collector.on_stop()
    fake_time.advance(60.0)
    collector.on_start()
    triggers = 0
    for _ in range(50):
        fake_time.advance(0.001)
        triggers += collector.on_update_event()
    assert triggers <= 1


def test_reset_while_running_clock_keeps_growing(collector, fake_time):
    """Test that the wall clock keeps growing after a reset mid-run."""
    collector.set_output_stream(io.StringIO())
    collector.on_start()
    fake_time.advance(5.0)
    collector.reset()
    fake_time.advance(2.0)
    result = collector.collect(CounterSnapshot(decision_cycles=1))
    assert result.stats.wall_clock == pytest.approx(2.0)


def test_setters_leave_callers_config_alone(fake_time):
    """Test that setters do not change a config shared by collectors."""
    config = CollectorConfig.by_cycles(10)
    first = DataCollector(config, time_source=fake_time)
    second = DataCollector(config, time_source=fake_time)

    first.set_period_millis(250)
    first.set_additional_settings("batch 1")
    assert config.period_millis is None
    assert config.additional_settings is None
    assert second.config.period_millis is None
    assert second.scheduler.period == CyclePeriod(10)
