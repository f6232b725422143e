from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from . import overlays


@dataclass
class NetworkParams:
    architecture: Tuple[int, ...] = (4, 6, 6, 4)
    spawn_probability: float = 0.02
    speed_min: float = 0.005
    speed_max: float = 0.015
    time_step: float = 0.01
    node_radius: float = 15.0
    node_line_width: float = 2.0
    node_fill_alpha: float = 0.5
    node_stroke_alpha: float = 0.3
    edge_width: float = 5.0
    edge_alpha: float = 0.1
    particle_radius: float = 4.0
    particle_alpha: float = 0.8


@dataclass
class NetworkLayout:
    """Nodes and connections as flat arrays.

    nodes: (N, 2) float positions, layer-major.
    layer / index: (N,) layer number and position within that layer.
    edges: (E, 2) node indices, one row per connection.
    """

    nodes: np.ndarray
    layer: np.ndarray
    index: np.ndarray
    edges: np.ndarray

    @property
    def num_connections(self) -> int:
        return int(self.edges.shape[0])


@dataclass
class Particle:
    progress: float
    speed: float


@dataclass
class NetworkFrame:
    time: float
    nodes: np.ndarray
    pulses: np.ndarray
    segments: np.ndarray
    particles: List[Tuple[int, float, float]] = field(default_factory=list)


def expected_connections(architecture: Sequence[int]) -> int:
    return sum(a * b for a, b in zip(architecture[:-1], architecture[1:]))


def build_layout(width: float, height: float, architecture: Sequence[int]) -> NetworkLayout:
    num_layers = len(architecture)
    layer_spacing = width / (num_layers + 1)

    xs, ys, layer, index = [], [], [], []
    starts = []
    for l, num_nodes in enumerate(architecture):
        node_spacing = height / (num_nodes + 1)
        x = layer_spacing * (l + 1)
        starts.append(len(xs))
        for n in range(num_nodes):
            xs.append(x)
            ys.append(node_spacing * (n + 1))
            layer.append(l)
            index.append(n)

    edges = []
    for l in range(num_layers - 1):
        a0, b0 = starts[l], starts[l + 1]
        for i in range(architecture[l]):
            for j in range(architecture[l + 1]):
                edges.append((a0 + i, b0 + j))

    nodes = np.column_stack([np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)])
    return NetworkLayout(
        nodes=nodes.reshape(-1, 2),
        layer=np.asarray(layer, dtype=np.int64),
        index=np.asarray(index, dtype=np.int64),
        edges=np.asarray(edges, dtype=np.int64).reshape(-1, 2),
    )


class NetworkBackground:
    def __init__(self, width: int, height: int, params: Optional[NetworkParams] = None, seed: Optional[int] = None):
        self.params = params or NetworkParams()
        self.rng = np.random.default_rng(seed)
        self.time = 0.0
        self.width = 0
        self.height = 0
        self.layout: NetworkLayout
        self.particles: List[List[Particle]] = []
        self.resize(width, height)

    def resize(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        self.build_network()

    def build_network(self) -> None:
        # full rebuild: live particles go with the old connections
        self.layout = build_layout(self.width, self.height, self.params.architecture)
        self.particles = [[] for _ in range(self.layout.num_connections)]

    def spawn_particle(self) -> Optional[int]:
        p = self.params
        if not self.particles:
            return None
        if self.rng.random() > 1.0 - p.spawn_probability:
            conn = int(self.rng.integers(len(self.particles)))
            speed = p.speed_min + self.rng.random() * (p.speed_max - p.speed_min)
            self.particles[conn].append(Particle(progress=0.0, speed=float(speed)))
            return conn
        return None

    def advance(self) -> NetworkFrame:
        self.time += self.params.time_step
        nodes = self.layout.nodes
        edges = self.layout.edges

        positions = []
        for conn, plist in enumerate(self.particles):
            if not plist:
                continue
            (fx, fy), (tx, ty) = nodes[edges[conn, 0]], nodes[edges[conn, 1]]
            alive = []
            for particle in plist:
                particle.progress += particle.speed
                if particle.progress >= 1:
                    continue
                x = fx + (tx - fx) * particle.progress
                y = fy + (ty - fy) * particle.progress
                positions.append((conn, float(x), float(y)))
                alive.append(particle)
            self.particles[conn] = alive

        return NetworkFrame(
            time=self.time,
            nodes=nodes.copy(),
            pulses=self.pulses(),
            segments=nodes[edges],
            particles=positions,
        )

    def pulses(self) -> np.ndarray:
        phase = self.time * 2 + self.layout.layer + self.layout.index
        return np.sin(phase) * 0.3 + 0.7

    def tick(self) -> NetworkFrame:
        self.spawn_particle()
        return self.advance()

    @property
    def particle_count(self) -> int:
        return sum(len(p) for p in self.particles)

    def render(self, frame: NetworkFrame) -> np.ndarray:
        p = self.params
        plane = overlays.new_overlay(self.width, self.height)

        by_conn = {}
        for conn, x, y in frame.particles:
            by_conn.setdefault(conn, []).append((x, y))

        for conn, seg in enumerate(frame.segments):
            overlays.stroke_segment(plane, seg[0], seg[1], p.edge_width, p.edge_alpha)
            for x, y in by_conn.get(conn, ()):
                overlays.fill_glow(plane, x, y, p.particle_radius, p.particle_alpha)

        for (x, y), pulse in zip(frame.nodes, frame.pulses):
            overlays.fill_disc(plane, x, y, p.node_radius, pulse * p.node_fill_alpha)
            overlays.stroke_circle(plane, x, y, p.node_radius, p.node_line_width, pulse * p.node_stroke_alpha)

        return overlays.to_rgba(plane)
