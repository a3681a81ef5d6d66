"""
Nerves of small categories.

An n-simplex of N(C) is a composable chain x0 → x1 → ... → xn; faces
compose or drop arrows and degeneracies insert identities. The truncated
nerve can be handed to smallcat.homology to compute the homology of a
category.
"""

import itertools
import logging
from typing import Hashable, List, Tuple
from dataclasses import dataclass

from .categorical import Functor, LawReport, Morphism, SmallCategory
from .errors import CompositionError
from .homology import SEdge, SSet02, STriangle

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NSimplex:
    """A chain of composable morphisms starting at head; dimension len(chain)."""
    head: Hashable
    chain: Tuple[Morphism, ...] = ()

    def __str__(self):
        if not self.chain:
            return f"⟨{self.head}⟩"
        return f"⟨{self.head}; {', '.join(m.name for m in self.chain)}⟩"


class Nerve:
    """The nerve N(C) as a simplicial set with explicit faces and degeneracies."""

    def __init__(self, category: SmallCategory):
        self.category = category

    def vertex(self, obj: Hashable) -> NSimplex:
        if obj not in self.category.objects:
            raise CompositionError(f"{obj!r} is not an object of {self.category.name}")
        return NSimplex(obj)

    def simplex(self, head: Hashable, chain: Tuple[Morphism, ...] = ()) -> NSimplex:
        """
        Build a simplex, checking the chain starts at head and is composable.

        Raises:
            CompositionError: on a mismatch
        """
        chain = tuple(chain)
        if not chain:
            return self.vertex(head)
        if chain[0].source != head:
            raise CompositionError(f"simplex: head {head!r} is not the source of {chain[0].name}")
        for prev, nxt in zip(chain, chain[1:]):
            if prev.target != nxt.source:
                raise CompositionError(f"simplex: {prev.name} and {nxt.name} are not composable")
        return NSimplex(head, chain)

    @staticmethod
    def dim(s: NSimplex) -> int:
        return len(s.chain)

    @staticmethod
    def objects_of(s: NSimplex) -> List[Hashable]:
        return [s.head] + [m.target for m in s.chain]

    def d(self, i: int, s: NSimplex) -> NSimplex:
        """Face d_i: drop x_i (composing the arrows around it when inner)."""
        n = self.dim(s)
        if n == 0:
            raise ValueError("a 0-simplex has no faces")
        if not 0 <= i <= n:
            raise ValueError(f"face index {i} out of range 0..{n}")
        if i == 0:
            return NSimplex(s.chain[0].target, s.chain[1:])
        if i == n:
            return NSimplex(s.head, s.chain[:-1])
        mid = self.category.compose(s.chain[i], s.chain[i - 1])
        return NSimplex(s.head, s.chain[:i - 1] + (mid,) + s.chain[i + 1:])

    def s(self, i: int, s: NSimplex) -> NSimplex:
        """Degeneracy s_i: repeat x_i by inserting its identity."""
        n = self.dim(s)
        if not 0 <= i <= n:
            raise ValueError(f"degeneracy index {i} out of range 0..{n}")
        identity = self.category.id(self.objects_of(s)[i])
        return NSimplex(s.head, s.chain[:i] + (identity,) + s.chain[i:])

    def simplices(self, n: int) -> List[NSimplex]:
        """Every n-simplex, degenerate ones included."""
        if n == 0:
            return [NSimplex(obj) for obj in self.category.objects]
        chains = [(m,) for m in self.category.morphisms]
        for _ in range(n - 1):
            chains = [c + (m,) for c in chains for m in self.category.morphisms_from(c[-1].target)]
        _logger.debug("N(%s)_%d has %d simplices", self.category.name, n, len(chains))
        return [NSimplex(c[0].source, c) for c in chains]

    @staticmethod
    def is_degenerate(s: NSimplex) -> bool:
        return any(m.is_identity for m in s.chain)


def check_simplicial_identities(nerve: Nerve, n: int) -> LawReport:
    """Face-face, face-degeneracy and degeneracy-degeneracy identities on N_n."""
    report = LawReport(name=f"simplicial identities of N({nerve.category.name}) in degree {n}")
    d, s = nerve.d, nerve.s
    for x in nerve.simplices(n):
        for i, j in itertools.combinations(range(n + 1), 2):
            if n >= 2:
                report.record("face_face", d(i, d(j, x)) == d(j - 1, d(i, x)),
                              f"d{i} d{j} ≠ d{j - 1} d{i} at {x}")
        for j in range(n + 1):
            y = s(j, x)
            for i in range(n + 2):
                if i < j:
                    expected = s(j - 1, d(i, x))
                elif i in (j, j + 1):
                    expected = x
                else:
                    expected = s(j, d(i - 1, x))
                report.record("face_degeneracy", d(i, y) == expected, f"d{i} s{j} at {x}")
        for i in range(n + 1):
            for j in range(i, n + 1):
                report.record("degeneracy_degeneracy", s(i, s(j, x)) == s(j + 1, s(i, x)),
                              f"s{i} s{j} ≠ s{j + 1} s{i} at {x}")
    for law in ("face_face", "face_degeneracy", "degeneracy_degeneracy"):
        report.checks.setdefault(law, True)
    return report


def map_nerve(functor: Functor, s: NSimplex) -> NSimplex:
    """N(F) applied to a simplex of N(C)."""
    target = Nerve(functor.target_category)
    return target.simplex(functor.fobj(s.head), tuple(functor.fmor(m) for m in s.chain))


@dataclass(frozen=True)
class InnerHorn2:
    """Λ²₁: the faces d0 (x1 → x2) and d2 (x0 → x1) of a missing 2-simplex."""
    d0: NSimplex
    d2: NSimplex


def make_inner_horn2(nerve: Nerve, f: Morphism, g: Morphism) -> InnerHorn2:
    """The horn with d2 = f: x0 → x1 and d0 = g: x1 → x2."""
    horn = InnerHorn2(d0=nerve.simplex(g.source, (g,)), d2=nerve.simplex(f.source, (f,)))
    if not validate_inner_horn2(horn):
        raise CompositionError(f"horn: {f.name} and {g.name} are not composable")
    return horn


def validate_inner_horn2(horn: InnerHorn2) -> bool:
    if len(horn.d0.chain) != 1 or len(horn.d2.chain) != 1:
        return False
    return horn.d2.chain[0].target == horn.d0.chain[0].source


def fill_inner_horn2(nerve: Nerve, horn: InnerHorn2) -> NSimplex:
    """The unique filler ⟨x0; f, g⟩, whose d1 face is g ∘ f."""
    if not validate_inner_horn2(horn):
        raise CompositionError("fill_inner_horn2: ill-formed horn")
    f, g = horn.d2.chain[0], horn.d0.chain[0]
    return nerve.simplex(f.source, (f, g))


def nerve_to_sset02(category: SmallCategory) -> SSet02:
    """
    Non-degenerate part of N(C) up to dimension 2.

    Edges are the non-identity morphisms; triangles are composable pairs of
    non-identity morphisms, with a composite that is an identity recorded as
    a degenerate face.
    """
    vertices = [str(obj) for obj in category.objects]
    arrows = category.non_identity_morphisms()
    edges = [SEdge(m.name, str(m.source), str(m.target)) for m in arrows]
    triangles = []
    for f in arrows:
        for g in arrows:
            if f.target != g.source:
                continue
            gf = category.compose(g, f)
            middle = None if gf.is_identity else gf.name
            triangles.append(STriangle(f"{f.name}|{g.name}", (g.name, middle, f.name)))
    _logger.debug("truncated nerve of %s: %d vertices, %d edges, %d triangles",
                  category.name, len(vertices), len(edges), len(triangles))
    return SSet02(vertices=vertices, edges=edges, triangles=triangles)
