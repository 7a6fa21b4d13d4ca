import random

import pytest

from crowd.boundary import apply_boundary, near_edge
from crowd.simulation import Simulation
from tests.conftest import make_body


def test_normal_body_is_clamped_and_reflected(settings):
    body = make_body(position=(5.0, 300.0), velocity=(-4.0, 0.0))
    apply_boundary(body, settings)
    assert body.position == (20.0, 300.0)
    assert body.velocity == pytest.approx((1.2, 0.0))

    body = make_body(position=(990.0, 300.0), velocity=(3.0, 0.0))
    apply_boundary(body, settings)
    assert body.position == (980.0, 300.0)
    assert body.velocity == pytest.approx((-0.9, 0.0))


def test_inward_velocity_is_not_flipped(settings):
    body = make_body(position=(500.0, 700.0), velocity=(0.0, -2.0))
    apply_boundary(body, settings)
    assert body.position == (500.0, 580.0)
    assert body.velocity == (0.0, -2.0)


def test_exploding_body_bounces_off_ceiling_only(settings):
    body = make_body(position=(300.0, -10.0), velocity=(4.0, -10.0))
    body.start_exploding(0.0)
    apply_boundary(body, settings)
    assert body.position == (300.0, 20.0)
    assert body.velocity == pytest.approx((4.0, 6.0))


def test_exploding_body_passes_side_walls_and_floor(settings):
    body = make_body(position=(1100.0, 300.0), velocity=(20.0, 0.0))
    body.start_exploding(0.0)
    apply_boundary(body, settings)
    assert body.position == (1100.0, 300.0)
    assert body.velocity == (20.0, 0.0)

    body = make_body(position=(500.0, 650.0), velocity=(0.0, 8.0))
    body.start_exploding(0.0)
    apply_boundary(body, settings)
    assert body.position == (500.0, 650.0)


def test_gathering_body_near_edge_is_kicked_toward_focal(settings):
    body = make_body(position=(30.0, 300.0))
    body.start_gathering(0.0)
    assert near_edge(body, settings)
    apply_boundary(body, settings)
    assert body.velocity == pytest.approx((2.0, 0.0))


def test_normal_body_near_edge_gets_no_kick(settings):
    body = make_body(position=(30.0, 300.0))
    apply_boundary(body, settings)
    assert body.velocity == (0.0, 0.0)


@pytest.mark.parametrize("gathering", [False, True])
def test_stepped_bodies_stay_inside_the_arena(settings, gathering):
    rng = random.Random(42)
    sim = Simulation(settings, rng, clock=lambda: 0.0)
    for _ in range(12):
        body = make_body(
            position=(rng.uniform(0, 1000), rng.uniform(0, 600)),
            velocity=(rng.uniform(-40, 40), rng.uniform(-40, 40)),
            radius=rng.uniform(15, 40),
        )
        if gathering:
            body.start_gathering(0.0)
        sim.add(body)

    for frame in range(30):
        sim.step(now=frame * 16.0)
        for body in sim.bodies:
            x, y = body.position
            assert body.radius - 1e-9 <= x <= settings.width - body.radius + 1e-9
            assert body.radius - 1e-9 <= y <= settings.height - body.radius + 1e-9
