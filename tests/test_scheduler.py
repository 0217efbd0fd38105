import pytest

from hieramanet.simulation.scheduler import SchedulerStatus, TickScheduler


def test_ten_seconds_at_tenth_second_gives_one_hundred_ticks():
    scheduler = TickScheduler()
    times = []
    scheduler.start(0.1, times.append)

    executed = scheduler.run_until(10.0)

    assert executed == 100
    assert scheduler.tick_count == 100
    assert times[0] == pytest.approx(0.1)
    assert times[-1] == pytest.approx(10.0)
    assert scheduler.now == pytest.approx(10.0)


def test_tick_times_are_integer_multiples_of_interval():
    scheduler = TickScheduler()
    times = []
    scheduler.start(0.1, times.append)
    scheduler.run_until(1000.0)

    assert len(times) == 10000
    for k, t in enumerate(times, start=1):
        assert t == k * 0.1


def test_run_until_does_not_stop_and_is_cumulative():
    scheduler = TickScheduler()
    scheduler.start(1.0, lambda t: None)

    assert scheduler.run_until(2.5) == 2
    assert scheduler.status == SchedulerStatus.RUNNING
    assert scheduler.now == 2.5
    assert scheduler.run_until(5.0) == 3
    assert scheduler.tick_count == 5


def test_stop_clears_queue_and_is_idempotent():
    scheduler = TickScheduler()
    scheduler.start(0.5, lambda t: None)
    scheduler.run_until(1.0)

    scheduler.stop()
    scheduler.stop()

    assert scheduler.status == SchedulerStatus.STOPPED
    assert scheduler.pending_events == 0
    assert scheduler.run_until(10.0) == 0
    assert scheduler.tick_count == 2


def test_stop_inside_tick_prevents_further_ticks():
    scheduler = TickScheduler()

    def tick(t):
        if scheduler.tick_count == 2:
            scheduler.stop()

    scheduler.start(1.0, tick)
    scheduler.run_until(10.0)
    assert scheduler.tick_count == 3
    assert scheduler.pending_events == 0


def test_start_outside_idle_raises():
    scheduler = TickScheduler()
    scheduler.start(1.0, lambda t: None)
    with pytest.raises(RuntimeError):
        scheduler.start(1.0, lambda t: None)

    scheduler.stop()
    with pytest.raises(RuntimeError):
        scheduler.start(1.0, lambda t: None)


def test_start_rejects_non_positive_interval():
    with pytest.raises(ValueError):
        TickScheduler().start(0.0, lambda t: None)


def test_one_shot_events_run_in_time_then_insertion_order():
    scheduler = TickScheduler()
    order = []
    scheduler.schedule(2.0, lambda t: order.append(("late", t)))
    scheduler.schedule(1.0, lambda t: order.append(("first", t)))
    scheduler.schedule(1.0, lambda t: order.append(("second", t)))

    assert scheduler.run_until(3.0) == 3
    assert order == [("first", 1.0), ("second", 1.0), ("late", 2.0)]
    assert scheduler.tick_count == 0


def test_schedule_rejects_negative_delay_and_stopped_scheduler():
    scheduler = TickScheduler()
    with pytest.raises(ValueError):
        scheduler.schedule(-1.0, lambda t: None)
    scheduler.stop()
    with pytest.raises(RuntimeError):
        scheduler.schedule(1.0, lambda t: None)


def test_reentrant_run_until_raises():
    scheduler = TickScheduler()
    errors = []

    def tick(t):
        try:
            scheduler.run_until(t + 1.0)
        except RuntimeError as e:
            errors.append(e)

    scheduler.start(1.0, tick)
    scheduler.run_until(1.0)
    assert len(errors) == 1


def test_horizon_before_now_raises():
    scheduler = TickScheduler()
    scheduler.start(1.0, lambda t: None)
    scheduler.run_until(3.0)
    with pytest.raises(ValueError):
        scheduler.run_until(2.0)


def test_one_shot_scheduled_before_start_runs_between_ticks():
    scheduler = TickScheduler()
    order = []
    scheduler.schedule(0.05, lambda t: order.append(("event", t)))
    scheduler.start(0.1, lambda t: order.append(("tick", t)))

    assert scheduler.run_until(0.2) == 3
    assert order == [("event", 0.05), ("tick", 0.1), ("tick", 0.2)]
    assert scheduler.tick_count == 2


def test_idle_run_until_moves_clock_to_horizon():
    scheduler = TickScheduler()
    fired = []
    scheduler.schedule(1.0, fired.append)

    assert scheduler.run_until(4.0) == 1
    assert fired == [1.0]
    assert scheduler.now == 4.0
    assert scheduler.status == SchedulerStatus.IDLE
