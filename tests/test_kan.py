"""
Tests for Kan extensions, limits and colimits
"""

import pytest

from smallcat.categorical import (
    Edge,
    Functor,
    Quiver,
    arrow_category,
    discrete_category,
    terminal_category,
    constant_functor,
)
from smallcat.errors import CarrierMismatchError, SearchLimitError
from smallcat.kan import (
    QuiverMorphism,
    UnionFind,
    coequalizer_quiver,
    colimit,
    lan_identity_iso,
    left_kan,
    limit,
    merge_schemas,
    pushout_quiver,
    rename_vertices,
    right_kan,
)
from smallcat.sets import SetFunctor, check_set_nat_iso


def collapse_functor():
    """On X → Y: {0, 1} → {a}."""
    return SetFunctor.from_tables(
        "H", arrow_category(),
        {"X": [0, 1], "Y": ["a"]},
        {"u": {0: "a", 1: "a"}},
    )


def inclusion_setup():
    """The inclusion of the object X into X → Y, with H(X) = {0, 1}."""
    disc = discrete_category(["X"], name="X")
    arrow = arrow_category()
    inc = Functor.from_functions("inc", disc, arrow, lambda c: c, lambda m: m)
    H = SetFunctor.from_tables("H", disc, {"X": [0, 1]}, {})
    return inc, H


class TestUnionFind:
    def test_union_and_find(self):
        uf = UnionFind(["a", "b", "c", "d"])
        assert uf.union("a", "b")
        assert not uf.union("b", "a")
        uf.union("c", "d")
        assert uf.find("a") == uf.find("b")
        assert uf.find("a") != uf.find("c")
        assert sorted(len(members) for members in uf.classes().values()) == [2, 2]

    def test_add(self):
        uf = UnionFind()
        uf.add("x")
        assert "x" in uf
        assert uf.find("x") == "x"


class TestKanAlongTerminal:
    def test_left_kan_is_colimit(self):
        H = collapse_functor()
        to_point = constant_functor(H.category, terminal_category(), "*")
        lan = left_kan(to_point, H)
        assert lan.obj("*").size() == 1

    def test_right_kan_is_limit(self):
        H = collapse_functor()
        to_point = constant_functor(H.category, terminal_category(), "*")
        ran = right_kan(to_point, H)
        assert ran.obj("*").size() == 2

    def test_colimit_limit_helpers(self):
        H = collapse_functor()
        assert colimit(H).size() == 1
        assert limit(H).size() == 2

    def test_discrete_colimit_is_coproduct(self):
        disc = discrete_category(["a", "b"])
        H = SetFunctor.from_tables("H", disc, {"a": [1, 2], "b": [3]}, {})
        assert colimit(H).size() == 3
        assert limit(H).size() == 2

    def test_family_limit(self):
        H = collapse_functor()
        to_point = constant_functor(H.category, terminal_category(), "*")
        with pytest.raises(SearchLimitError):
            right_kan(to_point, H, max_families=1).obj("*")

    def test_diagram_on_other_category(self):
        H = collapse_functor()
        other = arrow_category()
        to_point = constant_functor(other, terminal_category(), "*")
        with pytest.raises(CarrierMismatchError):
            left_kan(to_point, H)


class TestKanAlongInclusion:
    def test_left_kan_values(self):
        inc, H = inclusion_setup()
        lan = left_kan(inc, H)
        assert lan.obj("X").size() == 2
        assert lan.obj("Y").size() == 2

    def test_right_kan_values(self):
        inc, H = inclusion_setup()
        ran = right_kan(inc, H)
        assert ran.obj("X").size() == 2
        assert ran.obj("Y").size() == 1

    def test_extensions_are_functors(self):
        inc, H = inclusion_setup()
        assert left_kan(inc, H).as_set_functor().check_laws().holds
        assert right_kan(inc, H).as_set_functor().check_laws().holds

    def test_left_kan_restricts_back(self):
        inc, H = inclusion_setup()
        lan = left_kan(inc, H)
        u = inc.target_category.morphism("u")
        classes = lan.obj("X").elems
        images = {lan.map(u)(cls) for cls in classes}
        assert len(images) == 2


class TestLanIdentity:
    def test_unit_is_natural_iso(self):
        H = collapse_functor()
        iso = lan_identity_iso(H)
        report = check_set_nat_iso(H.category, iso)
        assert report.holds, report.failures


class TestPushoutQuiver:
    def test_glue_along_shared_vertex(self):
        q0 = Quiver(objects=["B"])
        q1 = Quiver(objects=["A", "B"], edges=[Edge("A", "B", "f")])
        q2 = Quiver(objects=["B", "C"], edges=[Edge("B", "C", "g")])
        same = QuiverMorphism(q0, q1, lambda v: v, lambda e: e)
        other = QuiverMorphism(q0, q2, lambda v: v, lambda e: e)
        glued = pushout_quiver(same, other)
        assert sorted(glued.objects) == ["A", "B", "C"]
        assert {e.label for e in glued.edges} == {"f", "g"}

    def test_glue_renames_vertices(self):
        q0 = Quiver(objects=["v"])
        q1 = Quiver(objects=["A", "B"], edges=[Edge("A", "B", "f")])
        q2 = Quiver(objects=["B2", "C"], edges=[Edge("B2", "C", "g")])
        left = QuiverMorphism(q0, q1, lambda v: "B", lambda e: e)
        right = QuiverMorphism(q0, q2, lambda v: "B2", lambda e: e)
        glued = pushout_quiver(left, right)
        assert len(glued.objects) == 3
        assert Edge("B", "C", "g") in glued.edges

    def test_span_must_share_source(self):
        q1 = Quiver(objects=["A"])
        q2 = Quiver(objects=["B"])
        with pytest.raises(CarrierMismatchError):
            pushout_quiver(QuiverMorphism(Quiver(), q1, lambda v: v, lambda e: e),
                           QuiverMorphism(Quiver(), q2, lambda v: v, lambda e: e))


class TestQuiverQuotients:
    def test_coequalizer_merges_images(self):
        q0 = Quiver(objects=["v"])
        q = Quiver(objects=["P", "U", "A"],
                   edges=[Edge("P", "A", "home"), Edge("U", "A", "home")])
        r0 = QuiverMorphism(q0, q, lambda v: "P", lambda e: e)
        r1 = QuiverMorphism(q0, q, lambda v: "U", lambda e: e)
        quotient = coequalizer_quiver(r0, r1)
        assert quotient.objects == ["P", "A"]
        assert quotient.edges == [Edge("P", "A", "home")]

    def test_coequalizer_needs_parallel_maps(self):
        q0 = Quiver(objects=["v"])
        q = Quiver(objects=["A"])
        other = Quiver(objects=["A"])
        with pytest.raises(CarrierMismatchError):
            coequalizer_quiver(QuiverMorphism(q0, q, lambda v: "A", lambda e: e),
                               QuiverMorphism(q0, other, lambda v: "A", lambda e: e))

    def test_rename_vertices(self):
        q = Quiver(objects=["Person", "User", "Address"],
                   edges=[Edge("Person", "Address", "home"), Edge("User", "Address", "address")])
        renamed = rename_vertices(q, {"Person": "Entity", "User": "Entity"})
        assert renamed.objects == ["Entity", "Address"]
        assert {e.label for e in renamed.edges} == {"home", "address"}
        assert all(e.source == "Entity" for e in renamed.edges)

    def test_merge_schemas(self):
        users = Quiver(objects=["Person", "Address", "Account"],
                       edges=[Edge("Person", "Address", "lives_at"),
                              Edge("Person", "Account", "has_account")])
        customers = Quiver(objects=["Person", "Address", "Order"],
                           edges=[Edge("Person", "Address", "lives_at"),
                                  Edge("Person", "Order", "placed")])
        merged = merge_schemas(users, customers)
        assert sorted(merged.objects) == ["Account", "Address", "Order", "Person"]
        assert sorted(e.label for e in merged.edges) == ["has_account", "lives_at", "placed"]
