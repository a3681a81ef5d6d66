"""
Example: Finite Groups up to Isomorphism

Canonical keys of Cayley tables, tagging groups with their iso class,
automorphism groups and the first isomorphism theorem.
"""

import logging

from smallcat.constants import LOG_FORMAT
from smallcat.groups import (
    GroupHom,
    automorphism_group,
    canonical_key,
    cayley_table,
    cyclic_group,
    dihedral_group,
    direct_product,
    first_isomorphism_witness,
    is_isomorphic,
    klein_four,
    quaternion_group,
    symmetric_group,
    tag_canonical_type,
)


def print_section(title):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def canonical_keys():
    print_section("Canonical keys of order 4")
    for group in (cyclic_group(4), klein_four(), direct_product(cyclic_group(2), cyclic_group(2))):
        print(f"  {group.name:8s} {canonical_key(cayley_table(group))}")


def iso_classes():
    print_section("Iso class tagging")
    groups = [
        cyclic_group(6),
        direct_product(cyclic_group(2), cyclic_group(3)),
        symmetric_group(3),
        dihedral_group(4),
        quaternion_group(),
        direct_product(cyclic_group(2), cyclic_group(4)),
    ]
    for group in groups:
        print(f"  {group.name:10s} order {group.order()}  →  {tag_canonical_type(group)}")
    print(f"\n  S3 ≅ D3: {is_isomorphic(symmetric_group(3), dihedral_group(3))}")
    print(f"  D4 ≅ Q8: {is_isomorphic(dihedral_group(4), quaternion_group())}")


def automorphisms():
    print_section("Automorphism groups")
    aut = automorphism_group(klein_four())
    print(f"\n  |Aut(V4)| = {aut.order()}  (expected 6), class {tag_canonical_type(aut)}")
    for n in (4, 5, 6):
        print(f"  |Aut(C{n})| = {automorphism_group(cyclic_group(n)).order()}")
    return aut.order() == 6


def first_isomorphism():
    print_section("First isomorphism theorem")
    sign = GroupHom(dihedral_group(4), cyclic_group(2), lambda g: g[1], name="sign")
    witness = first_isomorphism_witness(sign)
    print(f"\n  ker sign = {witness.kernel}")
    print(f"  im sign  = {witness.image}")
    print(f"  |D4 / ker| = {witness.quotient.order()}, induced map is an iso: {witness.ok}")


def main():
    canonical_keys()
    iso_classes()
    ok = automorphisms()
    first_isomorphism()
    print("\n" + ("✓" if ok else "✗") + " Group checks complete\n")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    main()
