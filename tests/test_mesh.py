"""
Test Suite: Grid Topology
=========================
Unit tests for the square grid builder.

Tests:
- Row-major addressing and seed positions
- Exact spring counts per kind
- Pinning policies
"""

import numpy as np
import pytest

from mesh3d import Mesh3D, Pinning
from spring3d import SpringKind


@pytest.fixture
def mesh():
    return Mesh3D.build_square(3.0, 4)


class TestAddressing:
    def test_node_count(self, mesh):
        assert mesh.n_vertices == 25
        assert mesh.nodes_per_side == 5
        assert mesh.spacing == pytest.approx(0.75)

    def test_index_is_row_major(self, mesh):
        assert mesh.index(0, 0) == 0
        assert mesh.index(4, 0) == 4
        assert mesh.index(2, 3) == 17
        assert mesh.coords(17) == (2, 3)

    def test_seed_positions(self, mesh):
        """x grows to the right, y grows downwards from the top edge"""
        np.testing.assert_allclose(mesh.positions[mesh.index(0, 0)], [-1.5, 1.5, 0.0])
        np.testing.assert_allclose(mesh.positions[mesh.index(4, 4)], [1.5, -1.5, 0.0])
        np.testing.assert_allclose(mesh.positions[mesh.index(1, 2)], [-0.75, 0.0, 0.0])

    @pytest.mark.parametrize("coord", [(-1, 0), (5, 0), (0, 5)])
    def test_index_out_of_range(self, mesh, coord):
        with pytest.raises(IndexError):
            mesh.index(*coord)

    def test_coords_out_of_range(self, mesh):
        with pytest.raises(IndexError):
            mesh.coords(25)

    def test_faces_cover_every_cell(self, mesh):
        assert len(mesh.faces) == 2 * 4 * 4
        assert mesh.faces[0] == (0, 1, 5)


class TestSpringTopology:
    @pytest.mark.parametrize("d", [1, 2, 3, 4, 7])
    @pytest.mark.parametrize("flexion", [True, False])
    def test_exact_spring_counts(self, d, flexion):
        mesh = Mesh3D.build_square(1.0, d, flexion=flexion)
        expected = Mesh3D.expected_spring_count(d, flexion=flexion)

        for kind in SpringKind:
            assert len(mesh.edges_of_kind(kind)) == expected[kind]
        assert len(mesh.edges) == sum(expected.values())

    def test_count_formula_for_four_subdivisions(self):
        counts = Mesh3D.expected_spring_count(4)
        assert counts[SpringKind.STRUCTURAL] == 40
        assert counts[SpringKind.SHEAR] == 32
        assert counts[SpringKind.FLEXION] == 30

    def test_edges_are_unique_and_distinct(self, mesh):
        pairs = set()
        for i, j, _ in mesh.edges:
            assert i != j
            assert 0 <= i < mesh.n_vertices and 0 <= j < mesh.n_vertices
            pairs.add(frozenset((i, j)))
        assert len(pairs) == len(mesh.edges)

    def test_edge_lengths_match_kind(self, mesh):
        for i, j, kind in mesh.edges:
            length = np.linalg.norm(mesh.positions[j] - mesh.positions[i])
            assert length == pytest.approx(kind.rest_length(mesh.spacing))

    def test_shear_connects_both_diagonals(self, mesh):
        shear = mesh.edges_of_kind(SpringKind.SHEAR)
        assert (mesh.index(0, 0), mesh.index(1, 1)) in shear
        assert (mesh.index(0, 1), mesh.index(1, 0)) in shear


class TestPinning:
    def test_top_row(self, mesh):
        assert np.flatnonzero(mesh.fixed).tolist() == [0, 1, 2, 3, 4]

    def test_top_corners(self):
        mesh = Mesh3D.build_square(3.0, 4, pinning=Pinning.TOP_CORNERS)
        assert np.flatnonzero(mesh.fixed).tolist() == [0, 4]

    def test_policy_from_string(self):
        mesh = Mesh3D.build_square(3.0, 4, pinning="top-corners")
        assert mesh.fixed.sum() == 2

    def test_no_pinning(self):
        mesh = Mesh3D.build_square(3.0, 4, pinning=Pinning.NONE)
        assert not mesh.fixed.any()


class TestValidation:
    @pytest.mark.parametrize(
        "size, subdivisions",
        [(0.0, 4), (-1.0, 4), (1.0, 0), (1.0, 2.5), (float("inf"), 4), (float("nan"), 4)],
    )
    def test_invalid_grid(self, size, subdivisions):
        with pytest.raises(ValueError):
            Mesh3D.build_square(size, subdivisions)
