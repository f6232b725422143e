"""
Tests for the network background: layout, particles, pulses and rendering.
"""

import math

import numpy as np
import pytest

from neuroflag.core.network import (
    NetworkBackground,
    NetworkParams,
    Particle,
    build_layout,
    expected_connections,
)


def quiet_params(**kw):
    """Params with spawning switched off so tests control the particles."""
    return NetworkParams(spawn_probability=0.0, **kw)


class TestLayout:
    """Node grid and connection list."""

    def test_default_architecture_has_84_connections(self):
        layout = build_layout(1280, 720, (4, 6, 6, 4))
        assert layout.num_connections == 84
        assert expected_connections((4, 6, 6, 4)) == 4 * 6 + 6 * 6 + 6 * 4

    def test_node_coordinates(self):
        w, h = 1000, 700
        arch = (4, 6, 6, 4)
        layout = build_layout(w, h, arch)

        k = 0
        for l, n in enumerate(arch):
            for i in range(n):
                x, y = layout.nodes[k]
                assert x == w / (len(arch) + 1) * (l + 1)
                assert y == h / (n + 1) * (i + 1)
                assert layout.layer[k] == l
                assert layout.index[k] == i
                k += 1
        assert k == len(layout.nodes) == 20

    def test_edges_connect_adjacent_layers_only(self):
        layout = build_layout(800, 600, (4, 6, 6, 4))
        src_layer = layout.layer[layout.edges[:, 0]]
        dst_layer = layout.layer[layout.edges[:, 1]]
        assert np.all(dst_layer == src_layer + 1)
        assert tuple(layout.edges[0]) == (0, 4)
        assert tuple(layout.edges[-1]) == (15, 19)

    def test_custom_architecture(self):
        layout = build_layout(300, 300, (2, 3))
        assert layout.num_connections == 6

    def test_single_layer_has_no_connections(self):
        layout = build_layout(300, 300, (5,))
        assert layout.num_connections == 0
        assert layout.edges.shape == (0, 2)


class TestResize:
    """Resizing rebuilds everything."""

    def test_connection_count_survives_resize(self):
        net = NetworkBackground(640, 480, seed=0)
        for w, h in [(1920, 1080), (320, 200), (1, 1)]:
            net.resize(w, h)
            assert net.layout.num_connections == 84
            assert len(net.particles) == 84

    def test_resize_moves_nodes_and_drops_particles(self):
        net = NetworkBackground(500, 400, quiet_params())
        net.particles[3].append(Particle(progress=0.2, speed=0.01))
        net.resize(1000, 400)
        assert net.particle_count == 0
        assert net.layout.nodes[0, 0] == 1000 / 5


class TestParticles:
    """Spawn, advance, expire."""

    def test_no_spawn_when_probability_zero(self):
        net = NetworkBackground(400, 300, quiet_params(), seed=1)
        for _ in range(200):
            net.tick()
        assert net.particle_count == 0

    def test_one_spawn_per_tick_at_probability_one(self):
        net = NetworkBackground(400, 300, NetworkParams(spawn_probability=1.0), seed=7)
        for _ in range(10):
            net.tick()
        # slowest possible expiry is far beyond 10 frames
        assert net.particle_count == 10
        speeds = [p.speed for plist in net.particles for p in plist]
        assert all(0.005 <= s <= 0.015 for s in speeds)

    def test_spawn_is_seeded(self):
        a = NetworkBackground(400, 300, NetworkParams(spawn_probability=0.5), seed=42)
        b = NetworkBackground(400, 300, NetworkParams(spawn_probability=0.5), seed=42)
        picks_a = [a.spawn_particle() for _ in range(50)]
        picks_b = [b.spawn_particle() for _ in range(50)]
        assert picks_a == picks_b

    def test_particle_removed_when_progress_reaches_one(self):
        net = NetworkBackground(400, 300, quiet_params())
        net.particles[0].append(Particle(progress=0.0, speed=0.25))

        for expected in (0.25, 0.5, 0.75):
            frame = net.tick()
            assert len(frame.particles) == 1
            assert net.particles[0][0].progress == pytest.approx(expected)

        frame = net.tick()
        assert frame.particles == []
        assert net.particle_count == 0

    def test_particle_position_is_linear_interpolation(self):
        net = NetworkBackground(400, 300, quiet_params())
        conn = 10
        net.particles[conn].append(Particle(progress=0.0, speed=0.25))
        net.tick()
        net.tick()

        frame = net.tick()
        (c, x, y), = frame.particles
        a, b = net.layout.edges[conn]
        (fx, fy), (tx, ty) = net.layout.nodes[a], net.layout.nodes[b]
        assert c == conn
        assert x == pytest.approx(fx + (tx - fx) * 0.75)
        assert y == pytest.approx(fy + (ty - fy) * 0.75)


class TestPulse:
    """Node opacity pulse."""

    def test_pulse_formula(self):
        net = NetworkBackground(400, 300, quiet_params())
        frame = net.tick()
        assert frame.time == pytest.approx(0.01)
        for k in range(len(frame.nodes)):
            l, i = net.layout.layer[k], net.layout.index[k]
            assert frame.pulses[k] == pytest.approx(math.sin(frame.time * 2 + l + i) * 0.3 + 0.7)

    def test_pulse_range(self):
        net = NetworkBackground(400, 300, quiet_params())
        for _ in range(400):
            frame = net.tick()
            assert np.all(frame.pulses >= 0.4 - 1e-9)
            assert np.all(frame.pulses <= 1.0 + 1e-9)


class TestRender:
    """Rasterised overlay."""

    def test_overlay_shape_and_colour(self):
        net = NetworkBackground(200, 150, quiet_params())
        overlay = net.render(net.tick())
        assert overlay.shape == (150, 200, 4)
        assert np.all(overlay[..., :3] == 1.0)
        assert overlay[..., 3].max() <= 1.0

    def test_nodes_visible_corners_empty(self):
        net = NetworkBackground(400, 300, quiet_params())
        overlay = net.render(net.tick())
        x, y = net.layout.nodes[0]
        assert overlay[int(y), int(x), 3] > 0.3
        assert overlay[0, 0, 3] == 0.0

    def test_particle_adds_glow(self):
        net = NetworkBackground(400, 300, quiet_params())
        net.particles[0].append(Particle(progress=0.0, speed=0.5))
        frame = net.tick()
        (_, x, y), = frame.particles
        with_glow = net.render(frame)[int(y), int(x), 3]

        frame.particles = []
        without = net.render(frame)[int(y), int(x), 3]
        assert with_glow > without


class TestNodeAlpha:
    """Node fill and outline follow the pulse."""

    def test_single_node_fill_and_ring(self):
        # one node, no edges, centred on pixel (50, 50)
        net = NetworkBackground(101, 101, quiet_params(architecture=(1,)))
        frame = net.tick()
        (x, y), = frame.nodes
        assert (x, y) == (50.5, 50.5)
        pulse = frame.pulses[0]
        assert pulse == pytest.approx(math.sin(0.02) * 0.3 + 0.7)

        alpha = net.render(frame)[..., 3]
        assert alpha[50, 50] == pytest.approx(pulse * 0.5, rel=1e-5)

        # 15px out: on the ring, where the disc edge is half covered
        fill = 0.5 * pulse * 0.5
        ring = pulse * 0.3
        assert alpha[50, 65] == pytest.approx(ring + fill * (1 - ring), rel=1e-5)
        # just past the disc, only the outer half of the 2px ring
        assert alpha[50, 66] == pytest.approx(0.5 * ring, rel=1e-5)
        assert alpha[50, 68] == 0.0

    def test_alpha_tracks_pulse_over_time(self):
        net = NetworkBackground(101, 101, quiet_params(architecture=(1,)))
        for _ in range(60):
            frame = net.tick()
            alpha = net.render(frame)[50, 50, 3]
            assert alpha == pytest.approx(frame.pulses[0] * 0.5, rel=1e-5)


class TestSpawnRate:

    def test_default_rate_is_about_two_percent(self):
        net = NetworkBackground(400, 300, NetworkParams(), seed=2024)
        trials = 20000
        spawned = sum(net.spawn_particle() is not None for _ in range(trials))
        assert net.particle_count == spawned
        # binomial sd is ~20 around 400
        assert 300 < spawned < 500

    def test_picks_every_connection(self):
        net = NetworkBackground(400, 300, NetworkParams(spawn_probability=1.0), seed=3)
        picks = {net.spawn_particle() for _ in range(2000)}
        assert picks == set(range(84))
