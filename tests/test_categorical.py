"""
Tests for the Categorical Framework
"""

import pytest

from smallcat.categorical import (
    Edge,
    Functor,
    Morphism,
    NaturalTransformation,
    Quiver,
    SmallCategory,
    arrow_category,
    check_category_laws,
    check_functor_laws,
    constant_functor,
    discrete_category,
    free_category,
    from_composition_table,
    identity_functor,
    poset_category,
    terminal_category,
)
from smallcat.errors import CompositionError, LawViolationError


def chain_category():
    """A → B → C with the composite named h."""
    return from_composition_table(
        "Chain",
        ["A", "B", "C"],
        [("f", "A", "B"), ("g", "B", "C"), ("h", "A", "C")],
        {("g", "f"): "h"},
    )


class TestSmallCategory:
    def test_create_category(self):
        cat = SmallCategory(name="test_category")
        assert cat.name == "test_category"
        assert len(cat.objects) == 0
        assert len(cat.morphisms) == 0

    def test_add_object(self):
        cat = SmallCategory(name="test")
        cat.add_object("A")
        assert "A" in cat.objects
        # Should have identity morphism
        id_morphisms = [m for m in cat.morphisms if m.source == "A" and m.target == "A"]
        assert len(id_morphisms) == 1
        assert id_morphisms[0].is_identity

    def test_add_morphism(self):
        cat = SmallCategory(name="test")
        morph = Morphism(source="A", target="B", name="f")
        cat.add_morphism(morph)

        assert "A" in cat.objects
        assert "B" in cat.objects
        assert morph in cat.morphisms

    def test_morphism_name_clash(self):
        cat = SmallCategory(name="test")
        cat.add_morphism(Morphism("A", "B", "f"))
        with pytest.raises(LawViolationError):
            cat.add_morphism(Morphism("B", "A", "f"))

    def test_compose_morphisms(self):
        cat = chain_category()
        composed = cat.compose(cat.morphism("g"), cat.morphism("f"))
        assert composed.name == "h"
        assert composed.source == "A"
        assert composed.target == "C"

    def test_compose_with_identity(self):
        cat = chain_category()
        f = cat.morphism("f")
        assert cat.compose(cat.id("B"), f) == f
        assert cat.compose(f, cat.id("A")) == f

    def test_compose_invalid(self):
        cat = chain_category()
        with pytest.raises(CompositionError):
            cat.compose(cat.morphism("f"), cat.morphism("g"))

    def test_compose_missing_composite(self):
        cat = SmallCategory(name="broken")
        cat.add_morphism(Morphism("A", "B", "f"))
        cat.add_morphism(Morphism("B", "C", "g"))
        with pytest.raises(LawViolationError):
            cat.compose(cat.morphism("g"), cat.morphism("f"))

    def test_hom(self):
        cat = chain_category()
        assert [m.name for m in cat.hom("A", "C")] == ["h"]
        assert cat.hom("C", "A") == []

    def test_opposite(self):
        op = chain_category().opposite()
        f, g = op.morphism("f"), op.morphism("g")
        assert (f.source, f.target) == ("B", "A")
        assert op.compose(f, g).name == "h"
        assert check_category_laws(op).holds


class TestConstructors:
    def test_discrete_and_terminal(self):
        disc = discrete_category(["a", "b"])
        assert len(disc.morphisms) == 2
        term = terminal_category()
        assert term.objects == ["*"]
        assert check_category_laws(term).holds

    def test_arrow_category(self):
        cat = arrow_category()
        assert cat.objects == ["X", "Y"]
        assert [m.name for m in cat.non_identity_morphisms()] == ["u"]

    def test_one_object_group(self):
        z2 = from_composition_table("Z2", ["*"], [("t", "*", "*")], {("t", "t"): "id_*"})
        t = z2.morphism("t")
        assert z2.compose(t, t).is_identity
        assert check_category_laws(z2).holds

    def test_poset_category(self):
        cat = poset_category([1, 2, 4], lambda x, y: y % x == 0, name="Div")
        assert len(cat.morphisms) == 6
        assert cat.compose(cat.morphism("2≤4"), cat.morphism("1≤2")).name == "1≤4"
        assert check_category_laws(cat).holds

    def test_poset_rejects_non_transitive(self):
        with pytest.raises(LawViolationError):
            poset_category(["a", "b", "c"], lambda x, y: (x, y) in {("a", "b"), ("b", "c")})

    def test_free_category_paths(self):
        quiver = Quiver(objects=["A", "B", "C"],
                        edges=[Edge("A", "B", "f"), Edge("B", "C", "g")])
        cat = free_category(quiver)
        assert len(cat.morphisms) == 6
        composite = cat.compose(cat.morphism("g"), cat.morphism("f"))
        assert composite.name == "f;g"
        assert composite.data == ("f", "g")
        assert check_category_laws(cat).holds

    def test_free_category_cycle_raises(self):
        quiver = Quiver(objects=["A"], edges=[Edge("A", "A", "loop")])
        with pytest.raises(LawViolationError):
            free_category(quiver)

    def test_free_category_cycle_raises_with_bound(self):
        quiver = Quiver(objects=["A", "B"],
                        edges=[Edge("A", "B", "f"), Edge("B", "A", "g")])
        with pytest.raises(LawViolationError):
            free_category(quiver, max_length=3)

    def test_free_category_bound_below_longest_path(self):
        quiver = Quiver(objects=["A", "B", "C"],
                        edges=[Edge("A", "B", "f"), Edge("B", "C", "g")])
        with pytest.raises(LawViolationError):
            free_category(quiver, max_length=1)

    def test_laws_report_missing_composite(self):
        cat = SmallCategory(name="broken")
        cat.add_morphism(Morphism("A", "A", "e"))
        report = check_category_laws(cat)
        assert not report.holds
        assert report.checks["closure"] is False
        assert report.failures


class TestFunctor:
    def test_create_functor(self):
        source = SmallCategory(name="C")
        target = SmallCategory(name="D")
        functor = Functor(name="F", source_category=source, target_category=target)

        assert functor.name == "F"
        assert functor.source_category == source
        assert functor.target_category == target

    def test_object_mapping(self):
        source = SmallCategory(name="C")
        target = SmallCategory(name="D")
        source.add_object("A")
        target.add_object("A'")

        functor = Functor(name="F", source_category=source, target_category=target)
        functor.add_object_mapping("A", "A'")

        assert functor.map_object("A") == "A'"
        assert functor.map_object("B") is None

    def test_object_mapping_outside_category(self):
        source = SmallCategory(name="C", objects=["A"])
        target = SmallCategory(name="D", objects=["A'"])
        functor = Functor(name="F", source_category=source, target_category=target)
        with pytest.raises(ValueError):
            functor.add_object_mapping("A", "Z")

    def test_morphism_mapping(self):
        source = SmallCategory(name="C")
        f = Morphism(source="A", target="B", name="f")
        source.add_morphism(f)

        target = SmallCategory(name="D")
        target.add_morphism(Morphism("A'", "B'", "f'"))

        functor = Functor(name="F", source_category=source, target_category=target)
        functor.add_object_mapping("A", "A'")
        functor.add_object_mapping("B", "B'")
        functor.add_morphism_mapping("f", "f'")

        mapped = functor.map_morphism(f)
        assert mapped is not None
        assert mapped.source == "A'"
        assert mapped.target == "B'"
        assert functor.map_morphism(source.id("A")) == target.id("A'")
        assert check_functor_laws(functor).holds

    def test_identity_and_composite_functors(self):
        cat = chain_category()
        identity = identity_functor(cat)
        assert check_functor_laws(identity).holds
        collapse = constant_functor(cat, terminal_category(), "*")
        composite = identity.then(collapse)
        assert composite.fobj("B") == "*"
        assert composite.fmor(cat.morphism("h")).is_identity
        assert check_functor_laws(composite).holds

    def test_missing_target_composite_is_reported(self):
        source = chain_category()
        target = SmallCategory(name="D")
        target.add_morphism(Morphism("A", "B", "f"))
        target.add_morphism(Morphism("B", "C", "g"))
        target.add_morphism(Morphism("A", "C", "h"))
        functor = Functor(name="F", source_category=source, target_category=target)
        for obj in source.objects:
            functor.add_object_mapping(obj, obj)
        for name in ("f", "g", "h"):
            functor.add_morphism_mapping(name, name)

        report = check_functor_laws(functor)
        assert not report.holds
        assert report.checks["composition"] is False
        assert any("not defined in D" in detail for detail in report.failures)

    def test_partial_functor_fails_totality(self):
        cat = chain_category()
        functor = Functor(name="partial", source_category=cat, target_category=cat)
        functor.add_object_mapping("A", "A")
        report = check_functor_laws(functor)
        assert not report.holds
        assert report.checks["total_on_objects"] is False
        with pytest.raises(LawViolationError):
            functor.fobj("B")


class TestNaturalTransformation:
    def test_create_natural_transformation(self):
        source_cat = SmallCategory(name="C")
        target_cat = SmallCategory(name="D")

        F = Functor(name="F", source_category=source_cat, target_category=target_cat)
        G = Functor(name="G", source_category=source_cat, target_category=target_cat)

        eta = NaturalTransformation(name="eta", source_functor=F, target_functor=G)
        assert eta.name == "eta"

    def test_invalid_natural_transformation(self):
        cat1 = SmallCategory(name="C1")
        cat2 = SmallCategory(name="C2")
        cat3 = SmallCategory(name="D")

        F = Functor(name="F", source_category=cat1, target_category=cat3)
        G = Functor(name="G", source_category=cat2, target_category=cat3)

        with pytest.raises(ValueError):
            NaturalTransformation(name="eta", source_functor=F, target_functor=G)

    def test_identity_transformation_is_natural(self):
        cat = arrow_category()
        F = identity_functor(cat)
        eta = NaturalTransformation(name="id", source_functor=F, target_functor=F)
        for obj in cat.objects:
            eta.add_component(obj, cat.id(obj))
        assert eta.is_natural()

    def test_missing_component_is_not_natural(self):
        cat = arrow_category()
        F = identity_functor(cat)
        eta = NaturalTransformation(name="id", source_functor=F, target_functor=F)
        eta.add_component("X", cat.id("X"))
        assert not eta.is_natural()
        assert "u" in eta.naturality_failures()

    def test_square_without_composite_is_not_natural(self):
        source = arrow_category()
        target = SmallCategory(name="D")
        target.add_morphism(Morphism("X", "Y", "u"))
        target.add_morphism(Morphism("Y", "Y", "e"))
        F = Functor.from_functions("inc", source, target, lambda c: c,
                                   lambda m: target.morphism(m.name))
        eta = NaturalTransformation(name="eta", source_functor=F, target_functor=F)
        eta.add_component("X", target.id("X"))
        eta.add_component("Y", target.morphism("e"))
        assert not eta.is_natural()
        assert eta.naturality_failures() == ["u"]

    def test_component_with_wrong_endpoints(self):
        cat = arrow_category()
        F = identity_functor(cat)
        eta = NaturalTransformation(name="bad", source_functor=F, target_functor=F)
        with pytest.raises(ValueError):
            eta.add_component("X", cat.morphism("u"))
