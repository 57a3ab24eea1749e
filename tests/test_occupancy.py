import math

import pytest

from voxelnav import occupancy
from voxelnav.occupancy import OccupancyMap, OccupancyNode, logodds, probability


def test_logodds_of_even_probability_is_zero():
    assert logodds(0.5) == 0.0
    assert probability(0.0) == 0.5


@pytest.mark.parametrize("p", [0.1, 0.3, 0.7, 0.97])
def test_logodds_probability_round_trip(p):
    assert probability(logodds(p)) == pytest.approx(p)


def test_logodds_extremes_and_errors():
    assert logodds(1.0) == math.inf
    assert logodds(0.0) == -math.inf
    assert probability(math.inf) == 1.0
    with pytest.raises(ValueError):
        logodds(1.5)


def test_node_occupancy_matches_probability():
    node = OccupancyNode(logodds(occupancy.PROB_HIT))
    assert node.occupancy() == pytest.approx(occupancy.PROB_HIT)


def test_invalid_resolution():
    with pytest.raises(ValueError):
        OccupancyMap(0)


def test_search_unknown_returns_none():
    tree = OccupancyMap(0.1)
    assert tree.search(1.0, 1.0, 1.0) is None
    assert len(tree) == 0


def test_set_node_value_clamps():
    tree = OccupancyMap(0.1)
    node = tree.set_node_value(0.05, 0.05, 0.05, 100.0)
    assert node.log_odds == occupancy.CLAMPING_THRESHOLD_MAX
    node = tree.set_node_value(0.05, 0.05, 0.05, -100.0)
    assert node.log_odds == occupancy.CLAMPING_THRESHOLD_MIN
    assert len(tree) == 1


def test_points_in_same_cell_share_node():
    tree = OccupancyMap(0.5)
    tree.set_node_value(0.1, 0.1, 0.1, 1.0)
    assert tree.search(0.4, 0.2, 0.3) is tree.search(0.1, 0.1, 0.1)
    assert tree.search(0.6, 0.1, 0.1) is None


def test_set_node_value_out_of_key_range():
    tree = OccupancyMap(0.1)
    with pytest.raises(ValueError):
        tree.set_node_value(1e9, 0.0, 0.0, 1.0)
    assert tree.search(1e9, 0.0, 0.0) is None


def test_update_node_accumulates_hits():
    tree = OccupancyMap(0.1)
    first = tree.update_node(0.0, 0.0, 0.0, True).log_odds
    second = tree.update_node(0.0, 0.0, 0.0, True).log_odds
    assert first == pytest.approx(logodds(occupancy.PROB_HIT))
    assert second > first
    assert second <= occupancy.CLAMPING_THRESHOLD_MAX


def test_update_node_miss_is_free():
    tree = OccupancyMap(0.1)
    node = tree.update_node(0.0, 0.0, 0.0, False)
    assert not tree.is_node_occupied(node)


def test_threshold_is_inclusive():
    tree = OccupancyMap(0.1)
    assert tree.is_node_occupied(OccupancyNode(logodds(occupancy.OCCUPANCY_THRESHOLD)))


def test_delete_node():
    tree = OccupancyMap(0.1)
    tree.set_node_value(0.0, 0.0, 0.0, 1.0)
    assert tree.delete_node(0.0, 0.0, 0.0) is True
    assert tree.search(0.0, 0.0, 0.0) is None
    assert tree.delete_node(0.0, 0.0, 0.0) is False


def test_insert_point_cloud_marks_ray():
    tree = OccupancyMap(0.1)
    tree.insert_point_cloud([(0.55, 0.05, 0.05)], (0.05, 0.05, 0.05))
    end = tree.search(0.55, 0.05, 0.05)
    assert end is not None and tree.is_node_occupied(end)
    for x in (0.05, 0.15, 0.25, 0.35, 0.45):
        node = tree.search(x, 0.05, 0.05)
        assert node is not None
        assert not tree.is_node_occupied(node)
    assert tree.search(0.05, 0.15, 0.05) is None


def test_insert_point_cloud_hit_wins_over_miss():
    tree = OccupancyMap(0.1)
    points = [(0.35, 0.05, 0.05), (0.75, 0.05, 0.05)]
    tree.insert_point_cloud(points, (0.05, 0.05, 0.05))
    node = tree.search(0.35, 0.05, 0.05)
    assert tree.is_node_occupied(node)


def test_binary_round_trip(tmp_path):
    tree = OccupancyMap(0.25)
    tree.set_node_value(1.0, 2.0, 3.0, 1.25)
    tree.update_node(-1.0, -2.0, 0.5, False)
    path = tmp_path / "map.bt"
    tree.write_binary(path)
    loaded = OccupancyMap.read_binary(path)
    assert loaded.resolution == tree.resolution
    assert len(loaded) == len(tree)
    assert loaded.search(1.0, 2.0, 3.0).log_odds == tree.search(1.0, 2.0, 3.0).log_odds
    assert loaded.search(-1.0, -2.0, 0.5).log_odds == tree.search(-1.0, -2.0, 0.5).log_odds


def test_read_binary_rejects_garbage(tmp_path):
    path = tmp_path / "bad.bt"
    path.write_bytes(b"not a map at all")
    with pytest.raises(ValueError):
        OccupancyMap.read_binary(path)


def test_read_binary_rejects_truncated(tmp_path):
    tree = OccupancyMap(0.1)
    tree.set_node_value(0.0, 0.0, 0.0, 1.0)
    path = tmp_path / "map.bt"
    tree.write_binary(path)
    path.write_bytes(path.read_bytes()[:-3])
    with pytest.raises(ValueError):
        OccupancyMap.read_binary(path)