from puzzlefighter.utils.input_throttle import InputThrottle


class _FakeClock:
    def __init__(self) -> None:
        self.value = 0.0

    def advance(self, amount: float) -> None:
        self.value += amount

    def __call__(self) -> float:
        return self.value


def test_throttle_allows_until_blocked():
    clock = _FakeClock()
    throttle = InputThrottle(clock=clock)

    assert throttle.allow(0, "left")
    throttle.block(0, "left", 0.2)
    assert not throttle.allow(0, "left")
    clock.advance(0.1)
    assert not throttle.allow(0, "left")
    clock.advance(0.1)
    assert throttle.allow(0, "left")


def test_throttle_tracks_board_and_action_separately():
    clock = _FakeClock()
    throttle = InputThrottle(clock=clock)

    throttle.block(0, "left", 0.2)
    assert throttle.allow(0, "rotate_cw")
    assert throttle.allow(1, "left")


def test_throttle_ignores_non_positive_durations():
    clock = _FakeClock()
    throttle = InputThrottle(clock=clock)

    throttle.block(0, "left", 0.0)
    throttle.block(0, "left", -1.0)
    assert throttle.allow(0, "left")
    assert throttle.remaining(0, "left") == 0.0


def test_throttle_keeps_longest_window():
    clock = _FakeClock()
    throttle = InputThrottle(clock=clock)

    throttle.block(0, "left", 0.5)
    throttle.block(0, "left", 0.1)
    assert throttle.remaining(0, "left") == 0.5


def test_throttle_reset_per_board():
    clock = _FakeClock()
    throttle = InputThrottle(clock=clock)

    throttle.block(0, "left", 1.0)
    throttle.block(1, "left", 1.0)
    throttle.reset(0)
    assert throttle.allow(0, "left")
    assert not throttle.allow(1, "left")
    throttle.reset()
    assert throttle.allow(1, "left")
