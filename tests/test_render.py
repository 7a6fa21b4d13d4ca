import pytest

from crowd.render import DeformationTracker, Ripple, TrackingRenderSink, morph_scale, outline_width
from tests.conftest import make_body


def test_morph_scale_range():
    assert morph_scale(0.0) == (1.0, 1.0)
    assert morph_scale(1.0) == pytest.approx((0.85, 1.25))
    assert morph_scale(10.0) == pytest.approx((0.7, 1.5))


def test_deformation_reverts_after_interval():
    tracker = DeformationTracker(150)
    tracker.trigger(1, 1.0, now=0.0)
    assert tracker.scale(1, 100.0) == pytest.approx((0.85, 1.25))
    assert tracker.scale(1, 150.0) == (1.0, 1.0)
    assert tracker.current(1, 150.0) is None


def test_retrigger_extends_deformation():
    tracker = DeformationTracker(150)
    tracker.trigger(1, 1.0, now=0.0)
    tracker.trigger(1, 2.0, now=100.0)
    assert tracker.scale(1, 200.0) != (1.0, 1.0)
    assert tracker.scale(1, 250.0) == (1.0, 1.0)


@pytest.mark.parametrize("started, now, width", [
    (None, 0.0, 2),
    (0.0, 3000.0, 2),
    (0.0, 3999.0, 2),
    (0.0, 4000.0, 3),
    (1000.0, 6500.0, 4),
    (0.0, 1e6, 20),
])
def test_outline_width(started, now, width):
    assert outline_width(started, now) == width


def test_ripple_expands_and_fades():
    ripple = Ripple((10.0, 10.0))
    for _ in range(15):
        ripple.advance()
    assert ripple.alive
    assert ripple.radius == pytest.approx(5.0 + 15 * 4.0)
    ripple.advance()
    ripple.advance()
    assert not ripple.alive


def test_tracking_sink_follows_body_lifecycle():
    sink = TrackingRenderSink(revert_after_ms=150)
    body = make_body()
    sink.spawn(body)
    assert body.body_id in sink.visible

    sink.update(body, collided=False, intensity=0.0, deform=(0.0, 0.0), now=0.0)
    assert sink.deformations.current(body.body_id, 0.0) is None
    sink.update(body, collided=True, intensity=0.5, deform=(0.1, 0.0), now=0.0)
    assert sink.deformations.current(body.body_id, 10.0) is not None

    sink.remove(body)
    assert body.body_id not in sink.visible
    assert sink.deformations.current(body.body_id, 10.0) is None


def test_tracking_sink_drops_dead_ripples():
    sink = TrackingRenderSink()
    sink.add_ripple((0.0, 0.0))
    for _ in range(20):
        sink.advance_ripples()
    assert sink.ripples == []
