"""
Tests for finite groups, canonical keys and automorphisms
"""

import pytest
import numpy as np

from smallcat.errors import LawViolationError, SearchLimitError
from smallcat.groups import (
    GroupHom,
    aut_group_table,
    automorphism_group,
    automorphisms,
    canonical_key,
    cayley_table,
    compose_perm,
    cyclic_group,
    dihedral_group,
    direct_product,
    find_isomorphism,
    first_isomorphism_witness,
    group_from_table,
    id_perm,
    image,
    invert_perm,
    is_bijection,
    is_homomorphism,
    is_isomorphic,
    is_latin_square,
    is_normal_subgroup,
    kernel,
    klein_four,
    permutations,
    quaternion_group,
    quotient_group,
    relabel,
    same_iso_class,
    subgroup,
    symmetric_group,
    tag_canonical_type,
)
from smallcat.sets import freeze


class TestConstruction:
    @pytest.mark.parametrize("group", [
        cyclic_group(5), klein_four(), dihedral_group(4), symmetric_group(3), quaternion_group(),
    ])
    def test_validate(self, group):
        assert group.validate() is group
        assert is_latin_square(cayley_table(group))

    def test_group_from_table(self):
        group = group_from_table([[0, 1], [1, 0]], name="Z2")
        assert group.order() == 2
        assert group.inverse(1) == 1

    def test_group_from_non_latin_table(self):
        with pytest.raises(LawViolationError):
            group_from_table([[0, 1], [1, 1]])

    def test_subgroup_closure(self):
        assert subgroup(cyclic_group(4), [0, 2]).order() == 2
        with pytest.raises(LawViolationError):
            subgroup(cyclic_group(4), [0, 1])

    def test_direct_product(self):
        group = direct_product(cyclic_group(2), cyclic_group(3))
        assert group.name == "C2×C3"
        assert group.order() == 6
        group.validate()


class TestCanonicalKeys:
    def test_relabel_identity(self):
        table = cayley_table(cyclic_group(4))
        assert np.array_equal(relabel(table, id_perm(4)), table)

    def test_key_is_relabelling_invariant(self):
        table = cayley_table(dihedral_group(3))
        shuffled = relabel(table, (3, 1, 5, 0, 2, 4))
        assert canonical_key(table) == canonical_key(shuffled)

    def test_key_separates_order_four(self):
        assert canonical_key(cayley_table(cyclic_group(4))) != canonical_key(cayley_table(klein_four()))

    def test_key_of_cyclic_group_starts_with_identity_row(self):
        key = canonical_key(cayley_table(cyclic_group(3)))
        assert key.split("|")[0] == "0,1,2"

    def test_isomorphic_groups(self):
        assert is_isomorphic(dihedral_group(3), symmetric_group(3))
        assert same_iso_class(direct_product(cyclic_group(2), cyclic_group(3)), cyclic_group(6))
        assert not is_isomorphic(dihedral_group(4), quaternion_group())

    def test_find_isomorphism_is_a_homomorphism(self):
        g = direct_product(cyclic_group(2), cyclic_group(3))
        h = cyclic_group(6)
        iso = find_isomorphism(g, h)
        assert iso is not None
        phi = GroupHom(g, h, lambda x: iso[freeze(x)])
        assert is_homomorphism(phi)
        assert is_bijection(phi)

    def test_find_isomorphism_none(self):
        assert find_isomorphism(cyclic_group(4), klein_four()) is None

    def test_permutation_limit(self):
        with pytest.raises(SearchLimitError):
            permutations(9)

    def test_searches_on_nine_points_refuse(self):
        table = cayley_table(cyclic_group(9))
        with pytest.raises(SearchLimitError):
            canonical_key(table)
        with pytest.raises(SearchLimitError):
            automorphisms(table)
        with pytest.raises(SearchLimitError):
            find_isomorphism(cyclic_group(9), cyclic_group(9))

    def test_searches_on_eight_points_run(self):
        assert len(automorphisms(cayley_table(cyclic_group(8)))) == 4


class TestAutomorphisms:
    def test_perm_helpers(self):
        p = (2, 0, 1)
        assert invert_perm(p) == (1, 2, 0)
        assert compose_perm(p, invert_perm(p)) == id_perm(3)

    def test_aut_v4(self):
        assert len(automorphisms(cayley_table(klein_four()))) == 6
        aut = automorphism_group(klein_four())
        assert aut.order() == 6
        assert tag_canonical_type(aut) == "S3"

    def test_aut_cyclic(self):
        assert automorphism_group(cyclic_group(4)).order() == 2
        assert automorphism_group(cyclic_group(5)).order() == 4

    def test_aut_table_requires_closure(self):
        with pytest.raises(LawViolationError):
            aut_group_table([(1, 0, 2)])


class TestHomomorphisms:
    def test_parity_map(self):
        h = GroupHom(cyclic_group(4), cyclic_group(2), lambda x: x % 2)
        assert is_homomorphism(h)
        assert kernel(h) == [0, 2]
        assert image(h) == [0, 1]
        witness = first_isomorphism_witness(h)
        assert witness.ok
        assert witness.quotient.order() == 2

    def test_not_a_homomorphism(self):
        h = GroupHom(cyclic_group(3), cyclic_group(2), lambda x: 1 if x else 0)
        assert not is_homomorphism(h)
        with pytest.raises(LawViolationError):
            first_isomorphism_witness(h)

    def test_normal_subgroups(self):
        s3 = dihedral_group(3)
        rotations = [(0, 0), (1, 0), (2, 0)]
        assert is_normal_subgroup(s3, rotations)
        assert not is_normal_subgroup(s3, [(0, 0), (0, 1)])

    def test_quotient(self):
        s3 = dihedral_group(3)
        quotient = quotient_group(s3, [(0, 0), (1, 0), (2, 0)])
        assert quotient.order() == 2
        quotient.validate()
        assert tag_canonical_type(quotient) == "C2"

    def test_quotient_by_non_normal(self):
        with pytest.raises(LawViolationError):
            quotient_group(dihedral_group(3), [(0, 0), (0, 1)])


class TestTagging:
    @pytest.mark.parametrize("group,expected", [
        (cyclic_group(1), "C1"),
        (direct_product(cyclic_group(2), cyclic_group(2)), "V4"),
        (symmetric_group(3), "S3"),
        (dihedral_group(4), "D4"),
        (quaternion_group(), "Q8"),
        (direct_product(cyclic_group(4), cyclic_group(2)), "C2×C4"),
    ])
    def test_known_classes(self, group, expected):
        assert tag_canonical_type(group) == expected

    def test_too_large(self):
        with pytest.raises(SearchLimitError):
            tag_canonical_type(cyclic_group(9))
