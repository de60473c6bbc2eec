import numpy as np
import pytest

from gentle_night.particles import Particle, ParticleField, limit
from gentle_night.sampler import SamplePoint


W, H = 800, 600


def make(x=100.0, y=100.0, velocity=(0.0, 0.0)):
    return Particle(x, y, 6.0, (1, 2, 3, 255), velocity=velocity)


def test_initial_state_from_sample():
    rng = np.random.default_rng(3)
    point = SamplePoint(x=40, y=60, color=(10, 20, 30, 255), radius=6.5)

    particle = Particle.from_sample(point, rng=rng)

    assert tuple(particle.position) == (40.0, 60.0)
    assert np.all(np.abs(particle.velocity) <= 1.0)
    assert tuple(particle.acceleration) == (0.0, 0.0)
    assert particle.radius == 6.5
    assert particle.color == (10, 20, 30, 255)


def test_limit_preserves_direction():
    v = limit(np.array([30.0, 40.0]), 10.0)
    assert np.linalg.norm(v) == pytest.approx(10.0)
    assert v == pytest.approx([6.0, 8.0])

    small = limit(np.array([1.0, 1.0]), 10.0)
    assert small == pytest.approx([1.0, 1.0])


def test_update_order_position_then_velocity():
    p = make(velocity=(2.0, -1.0))
    p.acceleration = np.array([1.0, 1.0])

    p.update(False, W, H)

    # position moves by the old velocity, velocity picks up the old acceleration
    assert p.position == pytest.approx([102.0, 99.0])
    assert p.velocity == pytest.approx([3.0, 0.0])


def test_no_grip_zeroes_acceleration():
    p = make(velocity=(1.0, 1.0))
    p.acceleration = np.array([0.5, -0.5])

    p.update(False, W, H)

    assert tuple(p.acceleration) == (0.0, 0.0)
    assert p.velocity == pytest.approx([1.5, 0.5])


def test_grip_pulls_toward_center():
    p = make(x=100.0, y=150.0)

    p.update(True, W, H)

    expected = (np.array([W / 2, H / 2]) - np.array([100.0, 150.0])) / 300
    assert p.acceleration == pytest.approx(expected)

    p.update(True, W, H)
    assert p.velocity == pytest.approx(expected)


def test_grip_pull_is_capped_far_from_center():
    p = make(x=-5000.0, y=300.0)
    p.update(True, 800, 600)
    assert np.linalg.norm(p.acceleration) == pytest.approx(Particle.MAX_PULL)


def test_speed_is_capped():
    p = make(x=400.0, y=300.0, velocity=(9.0, 0.0))
    p.acceleration = np.array([3.0, 4.0])

    p.update(False, W, H)

    assert p.speed == pytest.approx(10.0)
    direction = np.array([12.0, 4.0]) / np.linalg.norm([12.0, 4.0])
    assert p.velocity / p.speed == pytest.approx(direction)


def test_speed_never_exceeds_cap():
    field = ParticleField(seed=1)
    field.regenerate([SamplePoint(x, y, (0, 0, 0, 255), 5.0)
                      for x in range(0, W, 80) for y in range(0, H, 80)])

    for _ in range(200):
        field.update(True, W, H)
        assert max(p.speed for p in field) <= 10.0 + 1e-9


@pytest.mark.parametrize("x,vx", [(1.0, -2.0), (W - 1.0, 2.0)])
def test_reflects_off_vertical_edges(x, vx):
    p = make(x=x, y=300.0, velocity=(vx, 0.5))

    p.update(False, W, H)

    assert p.velocity[0] == pytest.approx(-vx)
    assert p.velocity[1] == pytest.approx(0.5)
    # position is not clamped back inside
    assert p.position[0] == pytest.approx(x + vx)


@pytest.mark.parametrize("y,vy", [(0.5, -1.0), (H - 0.5, 1.0)])
def test_reflects_off_horizontal_edges(y, vy):
    p = make(x=400.0, y=y, velocity=(0.0, vy))
    p.update(False, W, H)
    assert p.velocity[1] == pytest.approx(-vy)


def test_edges_are_inclusive():
    p = make(x=W - 1.0, y=300.0, velocity=(1.0, 0.0))
    p.update(False, W, H)
    assert p.position[0] == W
    assert p.velocity[0] == 1.0


def test_regenerate_replaces_everything():
    field = ParticleField(seed=0)
    field.regenerate([SamplePoint(0, 0, (0, 0, 0, 255), 5.0)] * 10)
    old = list(field)

    new_points = [SamplePoint(x, 0, (255, 0, 0, 255), 7.0) for x in range(0, 100, 20)]
    field.regenerate(new_points)

    assert len(field) == 5
    assert not any(p in old for p in field)
    assert [tuple(p.position) for p in field] == [(x, 0.0) for x in range(0, 100, 20)]
    assert all(p.color == (255, 0, 0, 255) for p in field)


def test_seeded_fields_are_reproducible():
    points = [SamplePoint(0, 0, (0, 0, 0, 255), 5.0)] * 3
    a, b = ParticleField(seed=42), ParticleField(seed=42)
    a.regenerate(points)
    b.regenerate(points)
    assert [tuple(p.velocity) for p in a] == [tuple(p.velocity) for p in b]


def test_clear():
    field = ParticleField()
    field.regenerate([SamplePoint(0, 0, (0, 0, 0, 255), 5.0)])
    field.clear()
    assert len(field) == 0
