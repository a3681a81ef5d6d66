"""
Comprehensive Demonstration of smallcat

Runs every worked example in turn:
1. Kan extensions, limits and colimits
2. Finite groups up to isomorphism
3. Homology through Smith normal form
4. Profunctor optics and their laws
5. Free monads and cofree comonads
6. The allegory of relations
"""

import logging

import free_demo
import groups_demo
import homology_demo
import kan_demo
import optics_demo
import relations_demo
from smallcat.constants import LOG_FORMAT


def main():
    """Run the complete demonstration."""
    print("\n" + "=" * 70)
    print("  SMALLCAT - COMPREHENSIVE DEMONSTRATION")
    print("  Finite Category Theory, Computed")
    print("=" * 70)

    for demo in (kan_demo, groups_demo, homology_demo, optics_demo, free_demo, relations_demo):
        demo.main()

    print("=" * 70 + "\n")


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)
    main()
