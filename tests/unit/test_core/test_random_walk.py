import random

import pytest
from core.random_walk import fluctuate, fluctuate_float, round_half_up


@pytest.mark.parametrize("magnitude", [0.0, 0.5, 3, 50, 1000])
@pytest.mark.parametrize("start", [-20, 0, 42.5, 100, 250])
def test_fluctuate_stays_in_bounds(start, magnitude):
    """Every output is clamped, even when one step could cross the whole range."""
    rng = random.Random(1234)
    value = start
    for _ in range(500):
        value = fluctuate(value, magnitude, 0, 100, rng=rng)
        assert 0 <= value <= 100


@pytest.mark.parametrize("magnitude", [0.01, 0.2, 5])
def test_fluctuate_float_stays_in_bounds(magnitude):
    rng = random.Random(99)
    value = 0.5
    for _ in range(500):
        value = fluctuate_float(value, magnitude, rng=rng)
        assert 0 <= value <= 1


def test_fluctuate_float_custom_bounds():
    rng = random.Random(7)
    value = 0.8
    for _ in range(200):
        value = fluctuate_float(value, 0.5, 0.5, 0.99, rng=rng)
        assert 0.5 <= value <= 0.99


def test_fluctuate_float_rounds_to_two_decimals():
    rng = random.Random(3)
    for _ in range(100):
        value = fluctuate_float(0.5, 0.1, rng=rng)
        assert round(value, 2) == value


def test_fluctuate_step_is_bounded_by_magnitude():
    rng = random.Random(5)
    for _ in range(200):
        assert abs(fluctuate(50, 2, rng=rng) - 50) <= 2


def test_zero_magnitude_is_identity_inside_bounds():
    assert fluctuate(37.5, 0, 0, 100) == 37.5
    assert fluctuate(150, 0, 0, 100) == 100


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(2.49) == 2
    assert round_half_up(3.25, 1) == 3.3
