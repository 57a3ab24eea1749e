"""Sparse probabilistic occupancy map with log-odds cells."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

PROB_HIT = 0.7
PROB_MISS = 0.4
OCCUPANCY_THRESHOLD = 0.5
CLAMPING_THRESHOLD_MIN = -2.0
CLAMPING_THRESHOLD_MAX = 3.5

_KEY_MIN = -32768
_KEY_MAX = 32767
_MAGIC = "# occupancy map binary file"
_FORMAT_ID = "OccupancyMap"
_RECORD = struct.Struct("<hhhd")

Key = tuple[int, int, int]
Point3 = Sequence[float]


def logodds(probability: float) -> float:
    """Return the log-odds of a probability in [0, 1]."""
    if not 0.0 <= probability <= 1.0:
        raise ValueError(f"probability out of range: {probability}")
    if probability == 0.0:
        return -math.inf
    if probability == 1.0:
        return math.inf
    return math.log(probability / (1.0 - probability))


def probability(log_odds: float) -> float:
    """Return the probability that corresponds to a log-odds value."""
    if log_odds == math.inf:
        return 1.0
    if log_odds == -math.inf:
        return 0.0
    return 1.0 - 1.0 / (1.0 + math.exp(log_odds))


def _clamp(value: float) -> float:
    return min(max(value, CLAMPING_THRESHOLD_MIN), CLAMPING_THRESHOLD_MAX)


@dataclass(slots=True)
class OccupancyNode:
    """A single map cell holding its occupancy as log-odds."""

    log_odds: float = 0.0

    def occupancy(self) -> float:
        """Probability that the cell is occupied."""
        return probability(self.log_odds)


class OccupancyMap:
    """Occupancy cells of a fixed edge length, stored sparsely by key."""

    def __init__(self, resolution: float) -> None:
        if not resolution > 0:
            raise ValueError(f"resolution must be positive, got {resolution}")
        self.resolution = float(resolution)
        self._nodes: dict[Key, OccupancyNode] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def _key_coord(self, coordinate: float) -> int | None:
        key = math.floor(coordinate / self.resolution)
        if _KEY_MIN <= key <= _KEY_MAX:
            return key
        return None

    def _key(self, x: float, y: float, z: float) -> Key | None:
        keys = (self._key_coord(x), self._key_coord(y), self._key_coord(z))
        if None in keys:
            return None
        return keys  # type: ignore[return-value]

    def _checked_key(self, x: float, y: float, z: float) -> Key:
        key = self._key(x, y, z)
        if key is None:
            raise ValueError(f"point ({x}, {y}, {z}) is outside the map's key range")
        return key

    def _key_center(self, key: int) -> float:
        return (key + 0.5) * self.resolution

    def search(self, x: float, y: float, z: float) -> OccupancyNode | None:
        """Return the node that contains the point, or None if the cell is unknown."""
        key = self._key(x, y, z)
        if key is None:
            return None
        return self._nodes.get(key)

    def set_node_value(self, x: float, y: float, z: float, log_odds: float) -> OccupancyNode:
        """Set the log-odds of the cell at the point, clamped to the thresholds."""
        key = self._checked_key(x, y, z)
        node = self._nodes.setdefault(key, OccupancyNode())
        node.log_odds = _clamp(log_odds)
        return node

    def _update_key(self, key: Key, delta: float) -> OccupancyNode:
        node = self._nodes.setdefault(key, OccupancyNode())
        node.log_odds = _clamp(node.log_odds + delta)
        return node

    def update_node(self, x: float, y: float, z: float, occupied: bool) -> OccupancyNode:
        """Integrate one hit or miss observation into the cell at the point."""
        delta = logodds(PROB_HIT) if occupied else logodds(PROB_MISS)
        return self._update_key(self._checked_key(x, y, z), delta)

    def delete_node(self, x: float, y: float, z: float) -> bool:
        """Remove the cell at the point; return whether a cell was removed."""
        key = self._key(x, y, z)
        if key is None:
            return False
        return self._nodes.pop(key, None) is not None

    def is_node_occupied(self, node: OccupancyNode) -> bool:
        """Whether the node's log-odds reach the occupancy threshold."""
        return node.log_odds >= logodds(OCCUPANCY_THRESHOLD)

    def _ray_keys(self, origin: Point3, end: Point3) -> list[Key]:
        key_origin = self._checked_key(*origin)
        key_end = self._key(*end)
        if key_end is None or key_origin == key_end:
            return []
        delta = [e - o for o, e in zip(origin, end)]
        length = math.sqrt(sum(d * d for d in delta))
        direction = [d / length for d in delta]

        steps: list[int] = []
        t_max: list[float] = []
        t_delta: list[float] = []
        for axis, d in enumerate(direction):
            if d == 0.0:
                steps.append(0)
                t_max.append(math.inf)
                t_delta.append(math.inf)
                continue
            step = 1 if d > 0 else -1
            border = self._key_center(key_origin[axis]) + step * self.resolution / 2
            steps.append(step)
            t_max.append((border - origin[axis]) / d)
            t_delta.append(self.resolution / abs(d))

        current = list(key_origin)
        keys: list[Key] = [key_origin]
        while True:
            axis = min(range(3), key=t_max.__getitem__)
            current[axis] += steps[axis]
            t_max[axis] += t_delta[axis]
            if tuple(current) == key_end:
                break
            if min(t_max) > length:
                break
            keys.append((current[0], current[1], current[2]))
        return keys

    def insert_point_cloud(self, points: Iterable[Point3], origin: Point3) -> None:
        """Cast rays from the origin: endpoints become hits, cells passed through misses."""
        free: set[Key] = set()
        occupied: set[Key] = set()
        for point in points:
            end_key = self._key(*point)
            if end_key is None:
                continue
            occupied.add(end_key)
            free.update(self._ray_keys(origin, point))
        miss = logodds(PROB_MISS)
        hit = logodds(PROB_HIT)
        for key in free - occupied:
            self._update_key(key, miss)
        for key in occupied:
            self._update_key(key, hit)

    def write_binary(self, path: str | Path) -> None:
        """Write the map to a file."""
        header = (
            f"{_MAGIC}\nid {_FORMAT_ID}\nsize {len(self._nodes)}\n"
            f"res {self.resolution!r}\ndata\n"
        )
        with open(path, "wb") as stream:
            stream.write(header.encode("ascii"))
            for (kx, ky, kz), node in sorted(self._nodes.items()):
                stream.write(_RECORD.pack(kx, ky, kz, node.log_odds))

    @classmethod
    def read_binary(cls, path: str | Path) -> OccupancyMap:
        """Read a map written by write_binary."""
        raw = Path(path).read_bytes()
        marker = b"\ndata\n"
        end = raw.find(marker)
        if end < 0:
            raise ValueError(f"{path}: missing data section")
        lines = raw[:end].decode("ascii", errors="replace").splitlines()
        if not lines or lines[0] != _MAGIC:
            raise ValueError(f"{path}: not an occupancy map file")
        fields: dict[str, str] = {}
        for line in lines[1:]:
            name, _, value = line.partition(" ")
            fields[name] = value
        if fields.get("id") != _FORMAT_ID:
            raise ValueError(f"{path}: unsupported map id {fields.get('id')!r}")
        try:
            size = int(fields["size"])
            resolution = float(fields["res"])
        except (KeyError, ValueError) as exc:
            raise ValueError(f"{path}: malformed header") from exc
        data = raw[end + len(marker):]
        if len(data) != size * _RECORD.size:
            raise ValueError(f"{path}: expected {size} cells, data is truncated or too long")
        occupancy_map = cls(resolution)
        for kx, ky, kz, value in _RECORD.iter_unpack(data):
            occupancy_map._nodes[(kx, ky, kz)] = OccupancyNode(value)
        return occupancy_map