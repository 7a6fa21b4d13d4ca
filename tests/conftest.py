import random

import pytest

from crowd.config import CrowdSettings
from crowd.data_models import Body


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start=0.0):
        self.t = float(start)

    def __call__(self):
        return self.t

    def advance(self, ms):
        self.t += ms
        return self.t


class RecordingSink:
    def __init__(self):
        self.spawned = []
        self.updates = []
        self.removed = []

    def spawn(self, body):
        self.spawned.append(body.body_id)

    def update(self, body, collided, intensity, deform, now):
        self.updates.append((body.body_id, collided, intensity))

    def remove(self, body):
        self.removed.append(body.body_id)


class RecordingHook:
    def __init__(self):
        self.calls = []

    def __call__(self, glyph):
        self.calls.append(glyph)


def make_body(position=(500.0, 300.0), radius=20.0, mass=1.0, glyph="あ", **kwargs):
    kwargs.setdefault("velocity", (0.0, 0.0))
    return Body(glyph=glyph, position=position, mass=mass, radius=radius, **kwargs)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return CrowdSettings()


@pytest.fixture
def still_settings():
    """Default settings without the centripetal pull."""
    return CrowdSettings().with_tuning(center_pull=0.0)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def hook():
    return RecordingHook()


class FakeProvider:
    """Shape provider returning strings; raises for glyphs in fail_on or sizes above max_size."""

    def __init__(self, fail_on=(), max_size=None):
        self.fail_on = set(fail_on)
        self.max_size = max_size
        self.calls = []
        self.opened = 0
        self.closed = 0

    def open(self):
        self.opened += 1

    def close(self):
        self.closed += 1

    def shape(self, glyph, size):
        self.calls.append((glyph, size))
        if glyph in self.fail_on:
            raise RuntimeError("no outline for " + glyph)
        if self.max_size is not None and size > self.max_size:
            raise RuntimeError(f"no outline for {glyph} at {size}px")
        return f"{glyph}@{size}"
