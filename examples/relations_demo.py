"""
Example: The Allegory of Finite Relations

Equipment laws for the graph of a function, the allegory axioms,
predicate transformers and relational Hoare triples.
"""

import logging

from smallcat.constants import LOG_FORMAT
from smallcat.relations import (
    Finite,
    Rel,
    Subset,
    check_allegory_laws,
    check_galois_connections,
    counit_holds,
    graph,
    hoare_witness,
    left_residual,
    sp,
    unit_holds,
    wp,
)


def print_section(title):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


STATES = Finite([0, 1, 2, 3], name="State")
PARITY = Finite(["even", "odd"], name="Parity")


def parity(n):
    return "even" if n % 2 == 0 else "odd"


def equipment():
    print_section("Companions and conjoints")
    g = graph(STATES, PARITY, parity)
    print(f"\n  graph(parity) = {g.to_pairs()}")
    print(f"  unit   id ⊆ G;G†  : {unit_holds(STATES, PARITY, parity)}")
    print(f"  counit G†;G ⊆ id  : {counit_holds(STATES, PARITY, parity)}")
    print(f"  ∃ ⊣ f* ⊣ ∀        : {check_galois_connections(STATES, PARITY, parity).holds}")


def allegory():
    print_section("Allegory laws")
    R = Rel.from_pairs(STATES, STATES, [(0, 1), (1, 2), (2, 3), (2, 0)])
    S = graph(STATES, PARITY, parity)
    T = Rel.from_pairs(STATES, PARITY, [(0, "odd"), (1, "even"), (3, "odd")])
    report = check_allegory_laws(R, S, T)
    for law, ok in report.checks.items():
        print(f"    {law:28s} {'✓' if ok else '✗'}")
    print(f"\n  R \\ T = {left_residual(R, T).to_pairs()}")
    return report.holds


def hoare():
    print_section("Predicate transformers and Hoare triples")
    step = Rel.from_pairs(STATES, STATES, [(0, 1), (1, 2), (2, 3), (2, 0)])
    small = Subset.of(STATES, [0, 1])
    nonzero = Subset.by(STATES, lambda n: n != 0)
    print(f"\n  sp({small}, step) = {sp(small, step)}")
    print(f"  wp(step, {nonzero}) = {wp(step, nonzero)}")
    for kind in ("demonic", "angelic"):
        pre = Subset.all(STATES)
        witness = hoare_witness(kind, pre, step, nonzero)
        print(f"  {kind:8s} {pre} step {nonzero}: ok={witness.ok}, "
              f"counterexamples={witness.counterexamples}")


def main():
    equipment()
    ok = allegory()
    hoare()
    print("\n" + ("✓" if ok else "✗") + " Relation checks complete\n")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    main()
