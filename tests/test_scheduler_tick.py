"""Tests for tick handling and threshold alerts."""
from datetime import timedelta

import pytest

from ark_timers.scheduler import TimerScheduler, TimerStatus, Urgency
from ark_timers.scheduler.service.timer import match_threshold

from conftest import T0, RecordingSink


def _run(scheduler, start, seconds, step=1.0):
    """Tick from ``start`` for ``seconds`` in ``step`` increments."""
    ticks = int(seconds / step) + 1
    for i in range(ticks):
        scheduler.tick(start + timedelta(seconds=i * step))


class TestThresholdAlerts:
    """Test alert firing"""

    def test_two_thresholds_fire_once_each_in_order(self, scheduler, sink):
        entry_id = scheduler.add_timer("Rex", T0 + timedelta(seconds=35))
        _run(scheduler, T0, 40)

        assert sink.alerts == [(entry_id, 0), (entry_id, 1)]

    def test_alert_fires_at_expected_remaining(self, scheduler):
        fired_at = []
        scheduler.on_event(
            lambda e: fired_at.append(e.payload["threshold_seconds"])
            if e.type == "timer.alert" else None
        )
        scheduler.add_timer("Rex", T0 + timedelta(seconds=35))

        for i in range(41):
            before = len(fired_at)
            scheduler.tick(T0 + timedelta(seconds=i))
            if len(fired_at) > before:
                assert abs((35 - i) - fired_at[-1]) <= 0.8

        assert fired_at == [30, 10]

    def test_offset_ticks_still_match_window(self, sink):
        s = TimerScheduler(thresholds=[30, 10])
        s.add_sink(sink)
        entry_id = s.add_timer("Rex", T0 + timedelta(seconds=35.4))
        _run(s, T0, 40)

        assert sink.alerts == [(entry_id, 0), (entry_id, 1)]

    def test_never_fires_after_expiry(self, scheduler, sink):
        scheduler.add_timer("late", T0 - timedelta(seconds=20))
        _run(scheduler, T0, 40)
        assert sink.alerts == []

    def test_zero_threshold_fires_at_expiry(self, sink):
        s = TimerScheduler(thresholds=[])
        s.add_sink(sink)
        entry_id = s.add_timer("Rex", T0 + timedelta(seconds=3))
        _run(s, T0, 6)
        assert sink.alerts == [(entry_id, 0)]

    def test_at_most_one_threshold_per_tick(self, sink):
        # Both thresholds lie within the window of the same tick
        s = TimerScheduler(thresholds=[5, 4], alert_window=0.8)
        s.add_sink(sink)
        entry_id = s.add_timer("Rex", T0 + timedelta(seconds=4.5))

        s.tick(T0)
        assert sink.alerts == [(entry_id, 0)]

        s.tick(T0 + timedelta(seconds=0.2))
        assert sink.alerts == [(entry_id, 0), (entry_id, 1)]

    def test_repeated_ticks_do_not_refire(self, scheduler, sink):
        scheduler.add_timer("Rex", T0 + timedelta(seconds=30))
        for _ in range(5):
            scheduler.tick(T0)
        assert len(sink.alerts) == 1

    def test_alert_payload_carries_sound_info(self, scheduler):
        events = []
        scheduler.on_event(events.append)
        scheduler.add_timer("Rex", T0 + timedelta(seconds=10), group="Wakeup", custom_sound="a.wav")
        scheduler.tick(T0)

        alert = [e for e in events if e.type == "timer.alert"][0]
        assert alert.payload["group"] == "Wakeup"
        assert alert.payload["custom_sound"] == "a.wav"
        assert alert.payload["threshold_index"] == 1
        assert alert.payload["threshold_seconds"] == 10


class TestExpiry:
    """Test the per-entry state machine"""

    def test_status_transitions(self, scheduler, sink):
        entry_id = scheduler.add_timer("Rex", T0 + timedelta(seconds=30))
        entry = scheduler.get(entry_id)

        scheduler.tick(T0 - timedelta(seconds=10))
        assert entry.status == TimerStatus.SCHEDULED

        scheduler.tick(T0)
        assert entry.status == TimerStatus.ALERTING

        scheduler.tick(T0 + timedelta(seconds=31))
        assert entry.status == TimerStatus.EXPIRED
        assert sink.expired == [entry_id]

        scheduler.tick(T0 + timedelta(seconds=40))
        assert sink.expired == [entry_id]

    def test_expired_does_not_return_to_scheduled(self, scheduler):
        entry_id = scheduler.add_timer("Rex", T0)
        scheduler.tick(T0 + timedelta(seconds=1))
        scheduler.adjust_all_by_offset(timedelta(hours=1))
        scheduler.tick(T0 + timedelta(seconds=2))

        assert scheduler.get(entry_id).status == TimerStatus.EXPIRED

    def test_expiry_without_optional_hook(self, scheduler):
        class MinimalSink:
            def __init__(self):
                self.changes = 0

            def on_collection_changed(self):
                self.changes += 1

            def on_alert_fired(self, entry, threshold_index):
                pass

        minimal = MinimalSink()
        scheduler.add_sink(minimal)
        scheduler.add_timer("Rex", T0)
        scheduler.tick(T0 + timedelta(seconds=5))

        assert minimal.changes == 1


class TestDisplay:
    """Test display values produced by tick"""

    def test_display_per_entry(self, scheduler):
        soon = scheduler.add_timer("soon", T0 + timedelta(seconds=45))
        done = scheduler.add_timer("done", T0 - timedelta(seconds=1))
        far = scheduler.add_timer("far", T0 + timedelta(days=1, hours=2, minutes=3, seconds=4))

        displays = {d.entry_id: d for d in scheduler.tick(T0)}

        assert displays[soon].remaining_text == "0:00:00:45"
        assert displays[soon].urgency == Urgency.SOON
        assert displays[done].remaining_text == "Finished"
        assert displays[done].urgency == Urgency.FINISHED
        assert displays[far].remaining_text == "1:02:03:04"
        assert displays[far].urgency == Urgency.NORMAL
        assert displays[soon].to_dict()["urgency"] == "soon"

    def test_display_order_follows_collection(self, scheduler):
        ids = [scheduler.add_timer(str(i), T0 + timedelta(seconds=s)) for i, s in enumerate((9, 3, 6))]
        displays = scheduler.tick(T0)
        assert [d.entry_id for d in displays] == [ids[1], ids[2], ids[0]]


class TestThresholdReconfiguration:
    """Test threshold changes at runtime"""

    def test_set_thresholds_sanitizes(self, scheduler):
        assert scheduler.set_thresholds([]).values == (0,)
        assert scheduler.set_thresholds([-5, 10, 10]).values == (10,)
        assert scheduler.set_thresholds([10, 60, 0]).values == (60, 10, 0)

    def test_change_keeps_fired_marks_by_seconds(self, scheduler):
        entry = scheduler.get(scheduler.add_timer("Rex", T0 + timedelta(seconds=30)))
        scheduler.tick(T0)
        assert entry.fired_thresholds == {0}

        scheduler.set_thresholds([30, 10])
        assert entry.fired_thresholds == {0}

        scheduler.set_thresholds([60, 30])
        assert entry.fired_thresholds == {1}

        scheduler.set_thresholds([60, 10])
        assert entry.fired_thresholds == set()

    def test_fired_threshold_does_not_refire_after_change(self, scheduler, sink):
        entry_id = scheduler.add_timer("Rex", T0 + timedelta(seconds=30))
        scheduler.tick(T0 + timedelta(seconds=0.4))
        assert sink.alerts == [(entry_id, 0)]

        scheduler.set_thresholds([30, 10, 5])
        scheduler.tick(T0 + timedelta(seconds=0.7))

        assert sink.alerts == [(entry_id, 0)]
        assert scheduler.get(entry_id).fired_thresholds == {0}

    def test_new_threshold_fires_after_change(self, scheduler, sink):
        entry_id = scheduler.add_timer("Rex", T0 + timedelta(seconds=30))
        scheduler.tick(T0)
        scheduler.set_thresholds([30, 10, 5])
        _run(scheduler, T0 + timedelta(seconds=1), 30)

        assert sink.alerts == [(entry_id, 0), (entry_id, 1), (entry_id, 2)]

    def test_csv(self, scheduler):
        scheduler.set_thresholds_csv("5, 60, x, -1")
        assert scheduler.thresholds_csv == "60,5"

        scheduler.set_thresholds_csv("garbage")
        assert scheduler.thresholds_csv == "60,5"

        scheduler.set_thresholds_csv("")
        assert scheduler.thresholds_csv == "60,5"


class TestMatchThreshold:
    """Test the window matching helper"""

    def test_window_bounds(self):
        s = TimerScheduler(thresholds=[30])
        entry = s.get(s.add_timer("Rex", T0))
        thresholds = s.thresholds

        assert match_threshold(entry, 30.7, thresholds, 0.8) == 0
        assert match_threshold(entry, 29.3, thresholds, 0.8) == 0
        assert match_threshold(entry, 30.9, thresholds, 0.8) is None
        assert match_threshold(entry, -0.1, thresholds, 0.8) is None

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            TimerScheduler(alert_window=0)

    def test_sink_can_remove_during_alert(self, scheduler):
        class RemovingSink(RecordingSink):
            def on_alert_fired(self, entry, threshold_index):
                super().on_alert_fired(entry, threshold_index)
                scheduler.remove_timer(entry.id)

        remover = RemovingSink()
        scheduler.add_sink(remover)
        scheduler.add_timer("a", T0 + timedelta(seconds=30))
        scheduler.add_timer("b", T0 + timedelta(seconds=30))

        displays = scheduler.tick(T0)

        assert len(displays) == 2
        assert len(remover.alerts) == 2
        assert len(scheduler) == 0
