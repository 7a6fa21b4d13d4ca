import random

import pytest

from crowd.config import CLASSIC_TUNING, CrowdSettings
from crowd.controller import CrowdController, CrowdError
from crowd.glyphs import GlyphShapeCache
from tests.conftest import FakeProvider

FRAME_MS = 16.67


@pytest.fixture
def crowd(clock, sink):
    return CrowdController(rng=random.Random(5), clock=clock, render_sink=sink)


def test_start_spawns_gathering_bodies_that_settle(crowd):
    assert crowd.start_text("hello あいう", now=0.0) == 3
    assert sorted(b.glyph for b in crowd.bodies) == ["あ", "い", "う"]
    assert all(b.is_gathering for b in crowd.bodies)

    crowd.step(now=1499.0)
    assert all(b.is_gathering for b in crowd.bodies)
    crowd.step(now=1500.0)
    assert all(b.is_normal for b in crowd.bodies)


def test_start_rejects_text_without_hiragana(crowd):
    with pytest.raises(CrowdError, match="hiragana"):
        crowd.start_text("abc カタカナ", now=0.0)
    assert crowd.bodies == []


def test_start_caps_the_crowd(clock):
    crowd = CrowdController(rng=random.Random(5), clock=clock, max_glyphs=3)
    assert crowd.start_text("あいうえお", now=0.0) == 3
    assert len(crowd.bodies) == 3


def test_restart_scatters_then_replaces(crowd):
    crowd.start_text("あいう", now=0.0)
    assert crowd.start_text("かき", now=100.0) == 2
    assert all(b.is_exploding for b in crowd.bodies)

    crowd.step(now=500.0)
    assert all(b.is_exploding for b in crowd.bodies)
    assert not any(b.glyph in "かき" for b in crowd.bodies)

    crowd.step(now=900.0)
    assert sorted(b.glyph for b in crowd.bodies) == ["か", "き"]
    assert all(b.is_gathering for b in crowd.bodies)

    crowd.step(now=2399.0)
    assert all(b.is_gathering for b in crowd.bodies)
    crowd.step(now=2400.0)
    assert all(b.is_normal for b in crowd.bodies)


def test_newer_start_cancels_pending_restart(crowd):
    crowd.start_text("あいう", now=0.0)
    crowd.start_text("かき", now=100.0)
    crowd.start_text("さ", now=200.0)

    crowd.step(now=900.0)
    assert not any(b.glyph in "かき" for b in crowd.bodies)
    crowd.step(now=1000.0)
    assert [b.glyph for b in crowd.bodies] == ["さ"]


def test_add_respects_the_glyph_cap(clock):
    crowd = CrowdController(rng=random.Random(5), clock=clock, max_glyphs=5)
    assert crowd.add_text("あいうえおかき", now=0.0) == 5
    assert len(crowd.bodies) == 5
    assert "5" in crowd.last_message

    with pytest.raises(CrowdError):
        crowd.add_text("さ", now=10.0)
    with pytest.raises(CrowdError):
        crowd.add_text("xyz", now=10.0)
    assert len(crowd.bodies) == 5


def test_add_keeps_existing_bodies(crowd):
    crowd.start_text("あ", now=0.0)
    first = crowd.bodies[0]
    crowd.add_text("い", now=50.0)
    assert crowd.bodies[0] is first
    assert [b.glyph for b in crowd.bodies] == ["あ", "い"]


def test_clear_blows_everything_away(crowd, sink):
    crowd.start_text("あいう", now=0.0)
    crowd.step(now=1500.0)
    assert crowd.clear(now=1500.0) == 3
    assert all(b.is_exploding for b in crowd.bodies)

    for frame in range(1, 201):
        crowd.step(now=1500.0 + frame * FRAME_MS)
    assert crowd.bodies == []
    assert sorted(sink.removed) == sorted(sink.spawned)


def test_clear_on_empty_crowd_is_a_no_op(crowd):
    assert crowd.clear(now=0.0) == 0


def test_spawn_returns_a_gathering_handle(crowd):
    body = crowd.spawn("ま", (0.0, 300.0), (500.0, 300.0), now=0.0)
    assert body.is_gathering
    assert body.velocity[0] > 0
    assert len(crowd.simulation.tasks.pending_for(body.body_id)) == 1

    assert crowd.remove(body)
    assert not crowd.remove(body)
    assert crowd.simulation.tasks.pending_for(body.body_id) == []


def test_glyphs_without_shapes_stay_unready(clock):
    provider = FakeProvider(fail_on={"あ"})
    shapes = GlyphShapeCache(provider).open()
    crowd = CrowdController(rng=random.Random(5), clock=clock, shapes=shapes)
    crowd.start_text("あい", now=0.0)

    unready = [b for b in crowd.bodies if not b.ready]
    assert [b.glyph for b in unready] == ["あ"]
    before = unready[0].position
    crowd.step(now=16.0)
    assert unready[0].position == before


def test_character_size_change_reacquires_shapes(clock):
    provider = FakeProvider()
    shapes = GlyphShapeCache(provider).open()
    crowd = CrowdController(rng=random.Random(5), clock=clock, shapes=shapes)
    crowd.start_text("あ", now=0.0)
    body = crowd.bodies[0]

    crowd.set_character_size(120)
    assert body.radius == pytest.approx(120 * body.size_variation * 0.6)
    assert provider.calls[-1] == ("あ", int(round(body.size)))


def test_apply_settings_reaches_planner_and_physics(crowd):
    settings = CrowdSettings(repulsion_force=250, tuning=CLASSIC_TUNING)
    crowd.apply_settings(settings)
    assert crowd.settings is settings
    assert crowd.planner.settings is settings
    assert crowd.simulation.forces.settings is settings


def test_intervene_pushes_nearby_glyphs(crowd):
    body = crowd.spawn("ま", (600.0, 300.0), (600.0, 300.0), now=0.0)
    body.velocity = (0.0, 0.0)
    touched = crowd.intervene((500.0, 300.0))
    assert [b for b, _ in touched] == [body]
    assert body.velocity[0] > 0


def test_snapshot_is_a_copy(crowd):
    crowd.start_text("あい", now=0.0)
    snap = crowd.snapshot()
    snap.clear()
    assert len(crowd.bodies) == 2


def test_clear_removes_glyphs_that_never_got_a_shape(clock):
    shapes = GlyphShapeCache(FakeProvider(fail_on={"あ"})).open()
    crowd = CrowdController(rng=random.Random(5), clock=clock, shapes=shapes, max_glyphs=2)
    crowd.start_text("あい", now=0.0)
    crowd.step(now=1500.0)
    crowd.clear(now=1500.0)

    for frame in range(1, 201):
        crowd.step(now=1500.0 + frame * FRAME_MS)
    assert crowd.bodies == []
    assert crowd.add_text("うえ", now=5000.0) == 2


def test_character_size_change_updates_readiness(clock):
    shapes = GlyphShapeCache(FakeProvider(max_size=100)).open()
    crowd = CrowdController(rng=random.Random(5), clock=clock, shapes=shapes)
    crowd.start_text("あ", now=0.0)
    body = crowd.bodies[0]
    assert body.ready

    crowd.set_character_size(240)
    assert not body.ready
    before = body.position
    crowd.step(now=16.0)
    assert body.position == before

    crowd.set_character_size(60)
    assert body.ready


def test_paused_crowd_does_not_age(clock):
    crowd = CrowdController(rng=random.Random(5), clock=clock)
    crowd.start_text("あ")
    body = crowd.bodies[0]

    crowd.set_playing(False)
    clock.advance(5000.0)
    assert crowd.now() == 0.0
    crowd.set_playing(True)
    assert crowd.playing

    crowd.step()
    assert body.is_gathering
    clock.advance(1500.0)
    crowd.step()
    assert body.is_normal
