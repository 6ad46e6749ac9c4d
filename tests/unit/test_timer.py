import threading

from interview import CountdownTimer


def test_ticks_down_and_fires_once():
    fired = []
    ticks = []
    timer = CountdownTimer(3, lambda: fired.append(True), on_tick=ticks.append)
    for _ in range(5):
        timer.tick()
    assert ticks == [2, 1, 0]
    assert fired == [True]
    assert timer.expired
    assert timer.remaining == 0


def test_cancel_stops_callbacks():
    fired = []
    timer = CountdownTimer(2, lambda: fired.append(True))
    timer.tick()
    timer.cancel()
    timer.cancel()
    timer.tick()
    assert fired == []
    assert timer.remaining == 1
    assert timer.cancelled


def test_background_thread_expires():
    done = threading.Event()
    timer = CountdownTimer(2, done.set, interval=0.01).start()
    assert done.wait(2.0)
    assert timer.expired
