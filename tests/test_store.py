"""Tests for SpatialStore."""

import math

import pytest

from hyperpaint.engine import SpatialStore, StoreStats, distance_4d
from hyperpaint.model import Category, Point4D, StrokeFrozenError
from hyperpaint.projection import ProjectionMode


@pytest.fixture
def store() -> SpatialStore:
    """A store with three nodes at w = -1.5, 0 and 2."""
    s = SpatialStore()
    s.add_node(Point4D(0, 0, 0, -1.5), "human")
    s.add_node(Point4D(1, 0, 0, 0), "ai")
    s.add_node(Point4D(0, 1, 0, 2), "kernel")
    return s


class TestAddNode:
    """Tests for node insertion."""

    def test_assigns_unique_ids(self, store):
        ids = [node.id for node in store.nodes]
        assert len(set(ids)) == 3
        assert ids == ["node-1", "node-2", "node-3"]

    def test_merges_defaults(self):
        store = SpatialStore()
        node = store.add_node(Point4D(), Category.HYBRID, {"intensity": 3.0})
        assert node.properties["intensity"] == 3.0
        assert node.properties["coherence"] == 0.7
        assert node.category is Category.HYBRID

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            SpatialStore().add_node(Point4D(), "alien")

    def test_updates_stats(self, store):
        assert store.stats.total_nodes == 3

    def test_deferred_stats(self):
        store = SpatialStore()
        store.add_node(Point4D(), "ai", recompute=False)
        assert store.stats.total_nodes == 0
        store.recompute_stats()
        assert store.stats.total_nodes == 1


class TestSlices:
    """Tests for nodes_in_slice and activeNodes."""

    def test_active_nodes_default_tolerance(self, store):
        assert store.stats.active_nodes == 3
        assert len(store.nodes_in_slice(0.0)) == 3

    def test_narrow_tolerance(self, store):
        assert [n.category for n in store.nodes_in_slice(0.0, 0.4)] == [Category.AI]

    def test_subset_and_monotonic_in_tolerance(self, store):
        for w in (-3.0, -1.0, 0.0, 1.7, 4.0):
            previous = set()
            for tol in (0.0, 0.5, 1.0, 2.0, 5.0):
                current = {n.id for n in store.nodes_in_slice(w, tol)}
                assert current <= {n.id for n in store.nodes}
                assert previous <= current
                previous = current

    def test_moving_slice_updates_active_nodes(self, store):
        store.w_slice = 4.0
        assert store.stats.active_nodes == 1
        store.w_slice = 10.0
        assert store.stats.active_nodes == 0
        assert store.stats.total_nodes == 3


class TestStats:
    """Tests for stats recomputation."""

    def test_empty_store(self):
        assert SpatialStore().stats == StoreStats()

    def test_average_kernel_coupling(self):
        store = SpatialStore()
        store.add_node(Point4D(), "ai", {"kernelCoupling": 1.0})
        store.add_node(Point4D(), "ai", {"kernelCoupling": 3.0})
        assert store.stats.average_kernel_coupling == pytest.approx(2.0)

    def test_missing_coupling_counts_as_zero(self):
        store = SpatialStore()
        store.add_node(Point4D(), "ai", {"kernelCoupling": None})
        store.add_node(Point4D(), "ai", {"kernelCoupling": 4.0})
        assert store.stats.average_kernel_coupling == pytest.approx(2.0)

    def test_non_numeric_coupling_counts_as_zero(self):
        store = SpatialStore()
        store.add_node(Point4D(), "ai", {"kernelCoupling": "high"})
        store.add_node(Point4D(), "ai", {"kernelCoupling": True})
        store.add_node(Point4D(), "ai", {"kernelCoupling": 3.0})
        assert store.stats.total_nodes == 3
        assert store.stats.average_kernel_coupling == pytest.approx(1.0)

    def test_recompute_is_idempotent(self, store):
        first = store.recompute_stats()
        assert store.recompute_stats() == first

    def test_to_dict_uses_wire_keys(self, store):
        assert store.stats.to_dict() == {
            "totalNodes": 3,
            "activeNodes": 3,
            "strokeCount": 0,
            "averageKernelCoupling": 1.0,
        }


class TestStrokes:
    """Tests for stroke creation and storage."""

    def test_add_stroke_freezes_and_counts(self, store):
        stroke = store.create_stroke("4DBrush", "ai")
        stroke.add_point(Point4D(0, 0, 0, 0))
        store.add_stroke(stroke)

        assert store.stats.stroke_count == 1
        assert stroke.frozen
        with pytest.raises(StrokeFrozenError):
            stroke.add_point(Point4D())

    def test_created_stroke_is_not_stored(self, store):
        stroke = store.create_stroke("4DFlow", "human")
        assert stroke.id == "stroke-1"
        assert store.strokes == []


class TestGeneration:
    """Tests for the generation counter."""

    def test_bumped_by_projection_inputs(self):
        store = SpatialStore()
        store.w_slice = 1.0
        store.projection_mode = "perspective"
        store.clear()
        assert store.generation == 3

    def test_mode_parsing(self):
        store = SpatialStore()
        store.projection_mode = "warp"
        assert store.projection_mode is ProjectionMode.SLICE
        store.projection_mode = ProjectionMode.STEREOGRAPHIC
        assert store.projection_mode is ProjectionMode.STEREOGRAPHIC


class TestClear:
    """Tests for clear()."""

    def test_resets_everything(self, store):
        store.w_slice = 3.0
        store.projection_mode = "orthogonal"
        store.add_stroke(store.create_stroke("4DBrush", "ai"))
        store.clear()

        assert store.nodes == []
        assert store.strokes == []
        assert store.w_slice == 0.0
        assert store.projection_mode is ProjectionMode.SLICE
        assert store.stats == StoreStats()
        assert store.add_node(Point4D(), "ai").id == "node-1"


class TestDistance:
    """Tests for 4D distance."""

    def test_distance(self):
        assert distance_4d(Point4D(0, 0, 0, 0), Point4D(1, 1, 1, 1)) == pytest.approx(2.0)

    def test_method_matches_function(self, store):
        a, b = Point4D(1, 2, 3, 4), Point4D(-1, 0, 2, 4)
        assert store.distance_4d(a, b) == pytest.approx(math.sqrt(9))


class TestSerialize:
    """Tests for serialize()."""

    def test_shape(self, store):
        stroke = store.create_stroke("4DBrush", "ai")
        stroke.add_point(Point4D(1, 2, 3, 4), {"size": 2.0})
        store.add_stroke(stroke)

        data = store.serialize()
        assert data["projection"] == "slice"
        assert data["w_slice"] == 0.0
        assert data["stats"]["strokeCount"] == 1
        assert data["nodes"][0] == {
            "id": "node-1",
            "position4D": {"x": 0, "y": 0, "z": 0, "w": -1.5},
            "type": "human",
            "properties": {"intensity": 1.0, "coherence": 0.7, "kernelCoupling": 1.0, "age": 0},
        }
        assert data["strokes"][0]["consciousnessType"] == "ai"
        assert data["strokes"][0]["type"] == "4DBrush"
        assert data["strokes"][0]["points4D"] == [
            {"position4D": {"x": 1, "y": 2, "z": 3, "w": 4}, "properties": {"size": 2.0}}
        ]
