"""
Tests for Smith normal form and homology
"""

import pytest
import numpy as np

from smallcat.categorical import Edge, Quiver
from smallcat.errors import LawViolationError
from smallcat.homology import (
    ChainComplex,
    SEdge,
    SSet02,
    STriangle,
    certify_snf,
    compute_homology01,
    egcd,
    homology_from_sset,
    int_det,
    inv_unimodular,
    invariant_factors,
    pretty_chain,
    pretty_group,
    rank_over_q,
    rank_over_z,
    rp2_complex,
    smith_normal_form,
    torus_complex,
    torus_sset,
)


class TestIntegerLinearAlgebra:
    def test_egcd(self):
        g, x, y = egcd(240, 46)
        assert g == 2
        assert 240 * x + 46 * y == 2
        g, x, y = egcd(-4, 6)
        assert g == 2
        assert -4 * x + 6 * y == 2

    def test_int_det(self):
        assert int_det([[2, 1], [1, 1]]) == 1
        assert int_det([[0, 1], [1, 0]]) == -1
        assert int_det([[1, 2], [2, 4]]) == 0
        assert int_det([[2, 0, 0], [0, 3, 0], [0, 0, 4]]) == 24

    def test_ranks(self):
        assert rank_over_q([[2, 4], [1, 2]]) == 1
        assert rank_over_z([[2, 4], [1, 2]]) == 1
        assert rank_over_z([]) == 0
        assert rank_over_q([]) == 0

    def test_rank_is_exact_for_large_entries(self):
        big = 10 ** 20
        # determinant -1, but the rows agree to double precision
        assert rank_over_q([[big, big + 1], [big + 1, big + 2]]) == 2


class TestSmithNormalForm:
    def test_classic_example(self):
        A = [[2, 4, 4], [-6, 6, 12], [10, -4, -16]]
        snf = smith_normal_form(A)
        assert invariant_factors(snf.D) == [2, 6, 12]
        assert certify_snf(A, snf).ok

    def test_rectangular(self):
        A = [[4, 6, 2], [2, 4, 8]]
        snf = smith_normal_form(A)
        cert = certify_snf(A, snf)
        assert cert.ok
        assert cert.diagonal and cert.divisibility and cert.unimodular
        assert invariant_factors(snf.D) == [2, 2]

    def test_zero_matrix(self):
        snf = smith_normal_form([[0, 0], [0, 0]])
        assert invariant_factors(snf.D) == []
        assert certify_snf([[0, 0], [0, 0]], snf).ok

    def test_inverse(self):
        inverse = inv_unimodular([[2, 1], [1, 1]])
        assert np.array_equal(inverse, np.array([[1, -1], [-1, 2]], dtype=object))

    def test_inverse_of_non_unimodular(self):
        with pytest.raises(LawViolationError):
            inv_unimodular([[2, 0], [0, 1]])


class TestQuiverHomology:
    def test_four_cycle(self):
        quiver = Quiver(objects=["A", "B", "C", "D"],
                        edges=[Edge("A", "B", "f"), Edge("B", "C", "g"),
                               Edge("C", "D", "h"), Edge("D", "A", "k")])
        result = compute_homology01(quiver)
        assert result.betti0 == 1
        assert result.betti1 == 1

    def test_tree(self):
        quiver = Quiver(objects=["A", "B", "C"], edges=[Edge("A", "B", "f"), Edge("A", "C", "g")])
        result = compute_homology01(quiver)
        assert (result.betti0, result.betti1) == (1, 0)

    def test_components(self):
        quiver = Quiver(objects=["A", "B", "C"], edges=[Edge("A", "B", "f")])
        result = compute_homology01(quiver)
        assert result.betti0 == 2
        assert len(result.components) == 2

    def test_parallel_pair(self):
        quiver = Quiver(objects=["X", "Y"], edges=[Edge("X", "Y", "f"), Edge("X", "Y", "g")])
        assert compute_homology01(quiver).betti1 == 1


class TestChainComplexes:
    def test_torus_sset(self):
        result = homology_from_sset(torus_sset())
        assert result.betti() == [1, 2, 1]
        assert result.H1.torsion == ()

    def test_torus_cellular(self):
        assert torus_complex().betti() == [1, 2, 1]

    def test_rp2(self):
        rp2 = rp2_complex()
        assert rp2.homology(0).rank == 1
        h1 = rp2.homology(1)
        assert (h1.rank, h1.torsion) == (0, (2,))
        assert rp2.homology(2).rank == 0
        assert str(h1) == "Z/2"

    def test_d_squared_must_vanish(self):
        with pytest.raises(LawViolationError):
            ChainComplex(dims=[1, 1, 1], boundaries={1: [[1]], 2: [[1]]})

    def test_boundary_shape(self):
        with pytest.raises(LawViolationError):
            ChainComplex(dims=[1, 1], boundaries={1: [[1, 2]]})

    def test_filled_triangle(self):
        sset = SSet02(vertices=["0", "1", "2"],
                      edges=[SEdge("a", "0", "1"), SEdge("b", "1", "2"), SEdge("c", "0", "2")],
                      triangles=[STriangle("t", ("b", "c", "a"))])
        assert homology_from_sset(sset).betti() == [1, 0, 0]

    def test_hollow_triangle(self):
        sset = SSet02(vertices=["0", "1", "2"],
                      edges=[SEdge("a", "0", "1"), SEdge("b", "1", "2"), SEdge("c", "0", "2")])
        assert homology_from_sset(sset).betti() == [1, 1, 0]


class TestPrettyPrinting:
    def test_pretty_group(self):
        assert pretty_group(2, (2,)) == "Z^2 ⊕ Z/2"
        assert pretty_group(1) == "Z"
        assert pretty_group(0) == "0"

    def test_pretty_chain(self):
        assert pretty_chain({"a": 1, "b": 1, "c": -2}) == "a + b - 2·c"
        assert pretty_chain({"a": -1, "b": 0}) == "-a"
        assert pretty_chain({}) == "0"
