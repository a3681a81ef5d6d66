"""
Example: Kan Extensions on Finite Categories

Collapses the walking arrow X → Y into the terminal category and prints
the coend (Lan) and end (Ran) along that functor, then extends a diagram
on the object X along its inclusion into X → Y. Finishes by merging two
quiver schemas with a pushout.
"""

import logging

from smallcat.categorical import (
    Edge,
    Functor,
    Quiver,
    arrow_category,
    constant_functor,
    discrete_category,
    terminal_category,
)
from smallcat.constants import LOG_FORMAT
from smallcat.kan import (
    colimit,
    lan_identity_iso,
    left_kan,
    limit,
    merge_schemas,
    rename_vertices,
    right_kan,
)
from smallcat.sets import SetFunctor, check_set_nat_iso


def print_section(title):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def collapse_example():
    print_section("Lan and Ran into the terminal category")
    arrow = arrow_category()
    H = SetFunctor.from_tables("H", arrow,
                               {"X": [0, 1], "Y": ["a"]},
                               {"u": {0: "a", 1: "a"}})
    to_point = constant_functor(arrow, terminal_category(), "*")

    lan = left_kan(to_point, H).obj("*")
    print(f"\n|Lan(*)| = {lan.size()}  (expected 1)")
    for cls in lan:
        print(f"  class {cls}")

    ran = right_kan(to_point, H).obj("*")
    print(f"\n|Ran(*)| = {ran.size()}  (expected 2)")
    for family in ran:
        print(f"  family {family}")

    print(f"\ncolim H has {colimit(H).size()} element(s), lim H has {limit(H).size()}")
    return lan.size() == 1 and ran.size() == 2


def inclusion_example():
    print_section("Extending along the inclusion X → (X → Y)")
    point = discrete_category(["X"], name="X")
    arrow = arrow_category()
    inc = Functor.from_functions("inc", point, arrow, lambda c: c, lambda m: m)
    H = SetFunctor.from_tables("H", point, {"X": ["p", "q"]}, {})

    lan, ran = left_kan(inc, H), right_kan(inc, H)
    for d in arrow.objects:
        print(f"  Lan({d}) has {lan.obj(d).size()} element(s), Ran({d}) has {ran.obj(d).size()}")
    print(f"\n  Lan is a functor: {lan.as_set_functor().check_laws().holds}")
    print(f"  Ran is a functor: {ran.as_set_functor().check_laws().holds}")


def identity_example():
    print_section("Lan along the identity")
    arrow = arrow_category()
    H = SetFunctor.from_tables("H", arrow,
                               {"X": [0, 1, 2], "Y": ["a", "b"]},
                               {"u": {0: "a", 1: "b", 2: "b"}})
    report = check_set_nat_iso(arrow, lan_identity_iso(H))
    print(f"\n  H ≅ Lan_Id H: {report.holds}")
    for law, ok in report.checks.items():
        print(f"    {law:15s} {'✓' if ok else '✗'}")


def schema_example():
    print_section("Merging quivers by pushout")
    users = Quiver(objects=["Person", "Address", "Account"],
                   edges=[Edge("Person", "Address", "lives_at"),
                          Edge("Person", "Account", "has_account")])
    customers = Quiver(objects=["Person", "Address", "Order"],
                       edges=[Edge("Person", "Address", "lives_at"),
                              Edge("Person", "Order", "placed")])
    merged = merge_schemas(users, customers)
    print(f"\n  vertices: {merged.objects}")
    for e in merged.edges:
        print(f"    {e.source} --{e.label}--> {e.target}")

    unified = rename_vertices(merged, {"Account": "Record", "Order": "Record"})
    print(f"\n  after renaming: {unified.objects}")


def main():
    ok = collapse_example()
    inclusion_example()
    identity_example()
    schema_example()
    print("\n" + ("✓" if ok else "✗") + " Kan extension checks complete\n")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    main()
