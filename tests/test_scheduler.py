"""
Tests for RefreshScheduler (lifecycle management of both controllers).

Run with: pytest -q
"""
from dataclasses import replace

import pytest

from collector.scheduler_event import EventKind
from config.loader import RuntimeConfig


@pytest.fixture
def config():
    return RuntimeConfig(auto_refresh=True, refresh_interval=10, auto_sync=True, sync_interval=30)


class TestRefreshScheduler:

    # ==================== APPLY ====================

    def test_apply_arms_both_controllers(self, scheduler, config, invoker, timers):
        scheduler.apply(config)

        assert len(invoker.refresh_calls) == 1
        assert len(invoker.sync_calls) == 1
        assert sorted(t.interval for t in timers.active()) == [30, 60]

    def test_apply_is_idempotent(self, scheduler, config, invoker, timers):
        scheduler.apply(config)
        scheduler.apply(config)
        scheduler.apply(replace(config))

        assert len(invoker.refresh_calls) == 1
        assert len(invoker.sync_calls) == 1
        assert len(timers.created) == 2
        assert len(timers.active()) == 2

    def test_absent_config_disarms_both(self, scheduler, config, invoker, timers):
        scheduler.apply(config)
        scheduler.apply(None)

        assert timers.active() == []
        timers.advance(minutes=30)
        assert len(invoker.refresh_calls) == 1
        assert len(invoker.sync_calls) == 1

    def test_absent_config_at_startup_does_nothing(self, scheduler, invoker, timers):
        scheduler.apply(None)
        assert invoker.refresh_calls == []
        assert timers.created == []

    def test_config_returning_after_absence_rearms_without_refiring(self, scheduler, config, invoker, timers):
        scheduler.apply(config)
        scheduler.apply(None)
        scheduler.apply(config)

        assert len(invoker.refresh_calls) == 1
        assert len(invoker.sync_calls) == 1
        assert len(timers.active()) == 2

    def test_toggle_refresh_off_and_on_fires_again(self, scheduler, config, invoker):
        scheduler.apply(config)
        scheduler.apply(replace(config, auto_refresh=False))
        scheduler.apply(config)

        assert len(invoker.refresh_calls) == 2
        assert len(invoker.sync_calls) == 1

    def test_refresh_interval_change_only_restarts_refresh(self, scheduler, config, timers):
        scheduler.apply(config)
        sync_timer = scheduler.sync_controller._timer
        refresh_timer = scheduler.refresh_controller._timer

        scheduler.apply(replace(config, refresh_interval=20))

        assert sync_timer.active
        assert refresh_timer.cancelled
        assert scheduler.refresh_controller.interval == 20
        assert len(timers.active()) == 2

    def test_sync_interval_change_only_restarts_sync(self, scheduler, config, timers):
        scheduler.apply(config)
        refresh_timer = scheduler.refresh_controller._timer

        scheduler.apply(replace(config, sync_interval=0))

        assert refresh_timer.active
        assert scheduler.sync_controller.armed
        assert not scheduler.sync_controller.has_timer
        assert len(timers.active()) == 1

    def test_degenerate_sync_interval(self, scheduler, config, invoker, timers):
        scheduler.apply(replace(config, auto_refresh=False, sync_interval=0))
        timers.advance(minutes=60)

        assert len(invoker.sync_calls) == 1
        assert invoker.refresh_calls == []

    def test_periodic_invocations_flow_through_dispatcher(self, scheduler, config, invoker, timers):
        scheduler.apply(config)
        timers.advance(minutes=10)

        # sync every 30s, refresh once more when 10 minutes have elapsed
        assert len(invoker.sync_calls) == 1 + 20
        assert len(invoker.refresh_calls) == 2

    # ==================== STOP ====================

    def test_stop_leaves_no_active_timers(self, scheduler, config, invoker, timers):
        scheduler.apply(config)
        scheduler.stop()

        assert timers.active() == []
        timers.advance(minutes=120)
        assert len(invoker.refresh_calls) == 1
        assert len(invoker.sync_calls) == 1
        assert scheduler.get_status()['running'] is False

    def test_apply_after_stop_rearms(self, scheduler, config, timers):
        scheduler.apply(config)
        scheduler.stop()
        scheduler.apply(config)
        assert len(timers.active()) == 2

    def test_trigger_after_executor_closed_records_failure(self, scheduler, config, invoker, events, timers):
        scheduler.apply(config)
        scheduler.shutdown()
        scheduler.dispatcher.executor.shutdown()
        scheduler.trigger_refresh()

        assert timers.active() == []
        assert len(invoker.refresh_calls) == 1
        assert events[-1].kind == EventKind.FAILED

    # ==================== FAILURES ====================

    def test_action_failure_is_recorded_and_ticking_continues(self, scheduler, config, invoker, timers, events):
        invoker.sync_error = RuntimeError("sync failed")
        scheduler.apply(config)
        timers.advance(seconds=60)

        assert len(invoker.sync_calls) == 3
        failures = [e for e in events if e.kind == EventKind.FAILED]
        assert len(failures) == 3
        assert all(e.controller == 'fixed_sync' for e in failures)

    def test_refresh_timer_failure_still_arms_sync(self, scheduler, config, invoker, timers):
        timers.fail_next = RuntimeError("can't start new thread")

        with pytest.raises(RuntimeError):
            scheduler.apply(config)

        assert not scheduler.refresh_controller.armed
        assert scheduler.sync_controller.armed
        assert len(invoker.sync_calls) == 1
        assert [t.interval for t in timers.active()] == [30]

        timers.advance(seconds=30)
        assert len(invoker.sync_calls) == 2

    def test_disabling_refresh_records_disabled_reason(self, scheduler, config, events):
        scheduler.apply(config)
        scheduler.apply(replace(config, auto_refresh=False))

        disarmed = [e for e in events if e.kind == EventKind.DISARMED]
        assert [(e.controller, e.reason) for e in disarmed] == [('adaptive_refresh', 'disabled')]

    def test_timer_failure_surfaces_and_next_apply_retries(self, scheduler, config, timers):
        timers.fail_next = RuntimeError("can't start new thread")

        with pytest.raises(RuntimeError):
            scheduler.apply(config)
        assert not scheduler.refresh_controller.armed

        scheduler.apply(config)
        assert scheduler.refresh_controller.armed
        assert scheduler.sync_controller.armed
        assert len(timers.active()) == 2

    # ==================== MANUAL TRIGGER / STATUS ====================

    def test_manual_trigger(self, scheduler, invoker, events):
        scheduler.trigger_refresh()
        scheduler.trigger_sync()

        assert len(invoker.refresh_calls) == 1
        assert len(invoker.sync_calls) == 1
        assert [e.reason for e in events] == ['manual', 'manual']
        assert not scheduler.refresh_controller.armed

    def test_get_status(self, scheduler, config):
        scheduler.apply(config)
        status = scheduler.get_status()

        assert status['running'] is True
        assert status['adaptive_refresh']['refresh_interval'] == 10
        assert status['fixed_sync']['sync_interval'] == 30
