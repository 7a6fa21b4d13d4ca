import math
import random

import pytest

from crowd.collisions import OverlapSettings, resolve_overlaps, separate_pair
from tests.conftest import make_body


def _gap(a, b):
    return math.hypot(a.position[0] - b.position[0], a.position[1] - b.position[1])


def test_pair_is_pushed_to_exact_contact(settings):
    a = make_body(position=(100.0, 100.0))
    b = make_body(position=(110.0, 100.0))
    assert separate_pair(a, b, settings, random.Random(0))
    assert a.position == pytest.approx((89.0, 100.0))
    assert b.position == pytest.approx((121.0, 100.0))
    assert _gap(a, b) == pytest.approx(32.0)


def test_separated_pair_is_left_alone(settings):
    a = make_body(position=(100.0, 100.0))
    b = make_body(position=(140.0, 100.0))
    assert not separate_pair(a, b, settings, random.Random(0))
    assert a.position == (100.0, 100.0)


def test_velocities_are_not_touched(settings):
    a = make_body(position=(100.0, 100.0), velocity=(1.0, 2.0))
    b = make_body(position=(110.0, 100.0), velocity=(-3.0, 0.5))
    resolve_overlaps(a, [a, b], settings, random.Random(0))
    assert a.velocity == (1.0, 2.0)
    assert b.velocity == (-3.0, 0.5)


def test_coincident_pair_ends_at_contact(settings):
    a = make_body(position=(400.0, 300.0))
    b = make_body(position=(400.0, 300.0))
    assert separate_pair(a, b, settings, random.Random(5))
    assert _gap(a, b) == pytest.approx(32.0)


def test_cornered_pair_converges_monotonically(settings):
    a = make_body(position=(20.0, 20.0))
    b = make_body(position=(25.0, 22.0))
    target = 32.0
    last = _gap(a, b)
    for _ in range(60):
        resolve_overlaps(a, [a, b], settings, random.Random(1), OverlapSettings(passes=2))
        gap = _gap(a, b)
        assert gap >= last - 1e-9
        last = gap
        if gap >= target - 1e-6:
            break
    assert last >= target - 1e-6
    for body in (a, b):
        assert body.position[0] >= body.radius and body.position[1] >= body.radius


def test_exploding_bodies_neither_move_nor_are_moved(settings):
    a = make_body(position=(100.0, 100.0))
    b = make_body(position=(110.0, 100.0))
    b.start_exploding(0.0)
    assert resolve_overlaps(a, [a, b], settings, random.Random(0)) == 0
    assert resolve_overlaps(b, [a, b], settings, random.Random(0)) == 0
    assert a.position == (100.0, 100.0)
    assert b.position == (110.0, 100.0)


def test_unready_bodies_are_skipped(settings):
    a = make_body(position=(100.0, 100.0))
    b = make_body(position=(110.0, 100.0), ready=False)
    assert resolve_overlaps(a, [a, b], settings, random.Random(0)) == 0


def test_overlap_settings_follow_tuning(settings):
    assert OverlapSettings.from_crowd(settings).passes == 2
    classic = settings.with_tuning(overlap_passes=1)
    assert OverlapSettings.from_crowd(classic).passes == 1
    assert OverlapSettings(passes=0).passes == 1
