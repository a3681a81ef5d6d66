"""
Example: Profunctor Optics

Lenses, prisms and traversals built as profunctor transformers, run
through the view/over/preview/review interpreters and their law checkers.
"""

import logging

from smallcat.constants import LOG_FORMAT
from smallcat.optics import (
    LIST_APPLICATIVE,
    Right,
    check_lens_laws,
    check_prism_laws,
    check_traversal_laws,
    each_traversal,
    fst_lens,
    key_lens,
    number_string_prism,
    over,
    preview,
    review,
    right_prism,
    set_,
    to_list_of,
    traverse_of,
    view,
)


def print_section(title):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def show_report(report):
    print(f"\n  {report.name}: {'✓' if report.holds else '✗'}")
    for law, ok in report.checks.items():
        print(f"    {law:15s} {'✓' if ok else '✗'}")
    return report.holds


def lenses():
    print_section("Lenses")
    person = {"name": "ada", "pos": (1, 2)}
    x = key_lens("pos").then(fst_lens)
    print(f"\n  view  {x.name} = {view(x, person)}")
    print(f"  set   {x.name} := 9 → {set_(x, 9, person)}")
    print(f"  over  {x.name} += 1 → {over(x, lambda v: v + 1, person)}")
    return show_report(check_lens_laws(fst_lens, [(1, 2), ("a", "b")], [0, 7]))


def prisms():
    print_section("Prisms")
    print(f"\n  preview right (Right 3) = {preview(right_prism, Right(3))}")
    print(f"  preview number '42'     = {preview(number_string_prism, '42')}")
    print(f"  preview number 'forty'  = {preview(number_string_prism, 'forty')}")
    print(f"  review number 7         = {review(number_string_prism, 7)!r}")
    return show_report(check_prism_laws(number_string_prism, ["1", "x", "-3"], [0, 5],
                                         f=lambda n: n + 1, g=lambda n: n * 2))


def traversals():
    print_section("Traversals")
    print(f"\n  to_list_of each [1, 2, 3]     = {to_list_of(each_traversal, [1, 2, 3])}")
    print(f"  over each (*10) (1, 2, 3)     = {over(each_traversal, lambda v: v * 10, (1, 2, 3))}")
    choices = traverse_of(each_traversal, LIST_APPLICATIVE, lambda v: [v, -v], [1, 2])
    print(f"  traverse each ±v over lists   = {choices}")
    return show_report(check_traversal_laws(each_traversal, [[1, 2], []],
                                            lambda v: v + 1, lambda v: v * 3))


def main():
    results = [lenses(), prisms(), traversals()]
    print("\n" + ("✓" if all(results) else "✗") + " Optics checks complete\n")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    main()
