"""
Tests for profunctor optics
"""

import pytest

from smallcat.errors import CompositionError
from smallcat.optics import (
    LIST_APPLICATIVE,
    NONE,
    Optic,
    Left,
    Right,
    Some,
    check_lens_laws,
    check_prism_laws,
    check_traversal_laws,
    compose_optics,
    each_traversal,
    fst_lens,
    index_lens,
    iso,
    key_lens,
    lens,
    number_string_prism,
    over,
    preview,
    review,
    right_prism,
    set_,
    to_list_of,
    traverse_of,
    values_traversal,
    view,
)

swap = iso(lambda t: (t[1], t[0]), lambda t: (t[1], t[0]), "swap")


class TestLens:
    def test_view_over_set(self):
        assert view(fst_lens, (1, 2)) == 1
        assert over(fst_lens, lambda x: x + 10, (1, 2)) == (11, 2)
        assert set_(key_lens("a"), 5, {"a": 1, "b": 2}) == {"a": 5, "b": 2}

    def test_index_lens_keeps_container_type(self):
        assert set_(index_lens(1), "z", ["a", "b"]) == ["a", "z"]
        assert set_(index_lens(0), "z", ("a", "b")) == ("z", "b")

    def test_composition(self):
        nested = key_lens("p").then(fst_lens)
        assert nested.kind == "lens"
        assert view(nested, {"p": (3, 4)}) == 3
        assert set_(nested, 0, {"p": (3, 4)}) == {"p": (0, 4)}
        deep = compose_optics(key_lens("a"), key_lens("b"))
        assert view(deep, {"a": {"b": 7}}) == 7

    def test_laws(self):
        assert check_lens_laws(fst_lens, [(1, 2), (3, 4)], [0, 9]).holds
        assert check_lens_laws(key_lens("k"), [{"k": 1}], ["a", "b"]).holds

    def test_unlawful_lens(self):
        bad = lens(lambda s: s[0], lambda s, b: (b + 1,) + tuple(s[1:]), "bad")
        report = check_lens_laws(bad, [(1, 2)], [0])
        assert not report.holds
        assert report.checks["set_get"] is False


class TestIso:
    def test_view_review(self):
        assert view(swap, (1, 2)) == (2, 1)
        assert review(swap, (2, 1)) == (1, 2)

    def test_iso_then_lens(self):
        second = swap.then(fst_lens)
        assert second.kind == "lens"
        assert view(second, (1, 2)) == 2
        assert over(second, lambda x: x * 10, (1, 2)) == (1, 20)

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            Optic("getter", lambda P, p: p)


class TestPrism:
    def test_right_prism(self):
        assert preview(right_prism, Right(3)) == Some(3)
        assert preview(right_prism, Left(1)) == NONE
        assert review(right_prism, 3) == Right(3)

    def test_number_string(self):
        assert preview(number_string_prism, "42") == Some(42)
        assert preview(number_string_prism, "042") == NONE
        assert over(number_string_prism, lambda n: n + 1, "41") == "42"
        assert over(number_string_prism, lambda n: n + 1, "x") == "x"
        assert review(number_string_prism, 7) == "7"

    def test_laws(self):
        report = check_prism_laws(number_string_prism, ["1", "x", "-3"], [0, 5],
                                  f=lambda n: n + 1, g=lambda n: n * 2)
        assert report.holds

    def test_view_needs_lens(self):
        with pytest.raises(CompositionError):
            view(right_prism, Right(1))
        with pytest.raises(CompositionError):
            review(fst_lens, 1)


class TestTraversal:
    def test_to_list_and_over(self):
        assert to_list_of(each_traversal, [1, 2, 3]) == [1, 2, 3]
        assert over(each_traversal, lambda x: x * 2, (1, 2)) == (2, 4)
        assert over(values_traversal, str, {"a": 1, "b": 2}) == {"a": "1", "b": "2"}

    def test_preview_first(self):
        assert preview(each_traversal, [5, 6]) == Some(5)
        assert preview(each_traversal, []) == NONE

    def test_traverse_with_list_applicative(self):
        result = traverse_of(each_traversal, LIST_APPLICATIVE, lambda x: [x, -x], [1, 2])
        assert result == [[1, 2], [1, -2], [-1, 2], [-1, -2]]

    def test_lens_then_traversal(self):
        items = key_lens("xs").then(each_traversal)
        assert items.kind == "traversal"
        assert to_list_of(items, {"xs": [1, 2]}) == [1, 2]
        assert over(items, lambda x: -x, {"xs": [1, 2]}) == {"xs": [-1, -2]}
        with pytest.raises(CompositionError):
            view(items, {"xs": [1]})

    def test_laws(self):
        report = check_traversal_laws(each_traversal, [[1, 2], []],
                                      lambda x: x + 1, lambda x: x * 3)
        assert report.holds
