"""
Finite Groups Module

Finite groups given by explicit carriers, their Cayley tables, and
classification up to isomorphism by brute-force canonicalisation:

1. Cayley tables: index tables as numpy integer arrays
2. Canonical keys: lexicographically least relabelling of a table
3. Automorphisms: permutations fixing a table, and the group they form
4. Homomorphisms: kernel, image, quotient, first isomorphism theorem
5. Iso classes: registry of named small groups (C1..C8, V4, S3, D4, Q8)
"""

import functools
import itertools
import logging
from typing import Any, Callable, Dict, Hashable, Iterator, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

import numpy as np

from .constants import MAX_PERMUTATION_SIZE
from .errors import LawViolationError, SearchLimitError
from .sets import freeze

_logger = logging.getLogger(__name__)

Perm = Tuple[int, ...]


@dataclass(eq=False)
class FiniteGroup:
    """
    A finite group on an explicit carrier.

    Attributes:
        name: Display name
        elems: Carrier, in a fixed order (indices are positions in this list)
        op: Group operation
        identity: Neutral element
        inverse: Inverse map
        eq: Optional equality predicate; defaults to comparing freeze() keys
    """
    name: str
    elems: List[Any]
    op: Callable[[Any, Any], Any]
    identity: Any
    inverse: Callable[[Any], Any]
    eq: Optional[Callable[[Any, Any], bool]] = None
    _index: Dict[Hashable, int] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.elems = list(self.elems)
        if self.eq is None:
            self._index = {freeze(x): i for i, x in enumerate(self.elems)}

    def order(self) -> int:
        return len(self.elems)

    def index_of(self, x: Any) -> int:
        if self.eq is None:
            return self._index.get(freeze(x), -1)
        for i, y in enumerate(self.elems):
            if self.eq(x, y):
                return i
        return -1

    def contains(self, x: Any) -> bool:
        return self.index_of(x) >= 0

    def same(self, x: Any, y: Any) -> bool:
        if self.eq is not None:
            return self.eq(x, y)
        return freeze(x) == freeze(y)

    def validate(self) -> "FiniteGroup":
        """
        Check closure, identity, inverses and associativity.

        Raises:
            LawViolationError: naming the first law that fails
        """
        table = cayley_table(self)
        n = self.order()
        e = self.index_of(self.identity)
        if e < 0:
            raise LawViolationError(f"{self.name}: identity is not in the carrier")
        if not (np.array_equal(table[e], np.arange(n)) and np.array_equal(table[:, e], np.arange(n))):
            raise LawViolationError(f"{self.name}: identity law fails")
        for i, x in enumerate(self.elems):
            j = self.index_of(self.inverse(x))
            if j < 0 or table[i, j] != e or table[j, i] != e:
                raise LawViolationError(f"{self.name}: {x!r} has no two-sided inverse")
        left = table[table]
        right = table[np.arange(n)[:, None, None], table[None, :, :]]
        if not np.array_equal(left, right):
            raise LawViolationError(f"{self.name}: operation is not associative")
        return self


# ============================================================================
# CONSTRUCTORS
# ============================================================================

def cyclic_group(n: int) -> FiniteGroup:
    return FiniteGroup(f"C{n}", list(range(n)),
                       lambda a, b: (a + b) % n, 0, lambda a: (-a) % n)


def klein_four() -> FiniteGroup:
    elems = [(0, 0), (1, 0), (0, 1), (1, 1)]
    return FiniteGroup("V4", elems,
                       lambda a, b: (a[0] ^ b[0], a[1] ^ b[1]), (0, 0), lambda a: a)


def dihedral_group(n: int) -> FiniteGroup:
    """Symmetries of the n-gon as (rotation, reflection) pairs; order 2n."""
    def op(a, b):
        r1, s1 = a
        r2, s2 = b
        return ((r1 + (-r2 if s1 else r2)) % n, s1 ^ s2)

    def inverse(a):
        r, s = a
        return a if s else ((-r) % n, 0)

    elems = [(r, s) for s in (0, 1) for r in range(n)]
    return FiniteGroup(f"D{n}", elems, op, (0, 0), inverse)


def symmetric_group(n: int) -> FiniteGroup:
    """Permutations of range(n) under composition (a ∘ b)(i) = a[b[i]]."""
    elems = list(itertools.permutations(range(n)))
    return FiniteGroup(f"S{n}", elems, compose_perm, id_perm(n), invert_perm)


def quaternion_group() -> FiniteGroup:
    """Q8 as the unit quaternions ±1, ±i, ±j, ±k (Hamilton product on 4-tuples)."""
    def hamilton(p, q):
        a1, b1, c1, d1 = p
        a2, b2, c2, d2 = q
        return (a1 * a2 - b1 * b2 - c1 * c2 - d1 * d2,
                a1 * b2 + b1 * a2 + c1 * d2 - d1 * c2,
                a1 * c2 - b1 * d2 + c1 * a2 + d1 * b2,
                a1 * d2 + b1 * c2 - c1 * b2 + d1 * a2)

    units = [(1, 0, 0, 0), (0, 1, 0, 0), (0, 0, 1, 0), (0, 0, 0, 1)]
    elems = units + [tuple(-x for x in u) for u in units]
    return FiniteGroup("Q8", elems, hamilton, (1, 0, 0, 0),
                       lambda q: (q[0], -q[1], -q[2], -q[3]))


def direct_product(g: FiniteGroup, h: FiniteGroup) -> FiniteGroup:
    elems = [(a, b) for a in g.elems for b in h.elems]
    return FiniteGroup(f"{g.name}×{h.name}", elems,
                       lambda x, y: (g.op(x[0], y[0]), h.op(x[1], y[1])),
                       (g.identity, h.identity),
                       lambda x: (g.inverse(x[0]), h.inverse(x[1])))


def group_from_table(table: Sequence[Sequence[int]], name: str = "G") -> FiniteGroup:
    """
    Group on range(n) with table[a][b] = a·b.

    Raises:
        LawViolationError: if the table is not a group table
    """
    t = np.asarray(table, dtype=int)
    n = t.shape[0]
    if t.shape != (n, n) or not is_latin_square(t):
        raise LawViolationError(f"{name}: not a Latin square")
    e = _identity_index(t)
    if e is None:
        raise LawViolationError(f"{name}: table has no identity")

    def inverse(a):
        return int(np.flatnonzero(t[a] == e)[0])

    group = FiniteGroup(name, list(range(n)), lambda a, b: int(t[a, b]), e, inverse)
    return group.validate()


# ============================================================================
# CAYLEY TABLES AND CANONICAL KEYS
# ============================================================================

def cayley_table(group: FiniteGroup) -> np.ndarray:
    """Index table T with elems[T[i, j]] = elems[i] · elems[j]."""
    n = group.order()
    table = np.empty((n, n), dtype=int)
    for i, a in enumerate(group.elems):
        for j, b in enumerate(group.elems):
            k = group.index_of(group.op(a, b))
            if k < 0:
                raise LawViolationError(f"{group.name}: closure fails at {a!r}·{b!r}")
            table[i, j] = k
    return table


def is_latin_square(table: np.ndarray) -> bool:
    """Every row and every column is a permutation of range(n)."""
    t = np.asarray(table)
    if t.ndim != 2 or t.shape[0] != t.shape[1]:
        return False
    target = np.arange(t.shape[0])
    return (all(np.array_equal(np.sort(row), target) for row in t) and
            all(np.array_equal(np.sort(col), target) for col in t.T))


def relabel(table: np.ndarray, p: Sequence[int]) -> np.ndarray:
    """Apply the relabelling p: old index -> new index."""
    t = np.asarray(table)
    p = np.asarray(p, dtype=int)
    out = np.empty_like(t)
    out[np.ix_(p, p)] = p[t]
    return out


def permutations(n: int) -> Iterator[Perm]:
    """
    All permutations of range(n).

    Raises:
        SearchLimitError: if n exceeds MAX_PERMUTATION_SIZE
    """
    if n > MAX_PERMUTATION_SIZE:
        raise SearchLimitError(f"refusing to enumerate {n}! permutations (limit n={MAX_PERMUTATION_SIZE})")
    return itertools.permutations(range(n))


def _identity_index(table: np.ndarray) -> Optional[int]:
    n = table.shape[0]
    for i in range(n):
        if np.array_equal(table[i], np.arange(n)) and np.array_equal(table[:, i], np.arange(n)):
            return i
    return None


def _pinned_permutations(n: int, fixed: Optional[int], image: int = 0) -> Iterator[Perm]:
    """
    Permutations with p[fixed] = image (all of them when fixed is None).

    Raises:
        SearchLimitError: if n exceeds MAX_PERMUTATION_SIZE
    """
    if n > MAX_PERMUTATION_SIZE:
        raise SearchLimitError(f"refusing to search relabellings of {n} points (limit n={MAX_PERMUTATION_SIZE})")
    if fixed is None:
        yield from permutations(n)
        return
    rest = [i for i in range(n) if i != image]
    for tail in permutations(n - 1):
        p = [0] * n
        others = [i for i in range(n) if i != fixed]
        for src, k in zip(others, tail):
            p[src] = rest[k]
        p[fixed] = image
        yield tuple(p)


def serialize(table: np.ndarray) -> str:
    return "|".join(",".join(str(int(x)) for x in row) for row in table)


def canonical_key(table: np.ndarray) -> str:
    """
    Serialisation of the lexicographically least relabelling of table.

    For a group table the least relabelling sends the identity to 0 (its
    row is then 0, 1, ..., n-1), so only those relabellings are searched.
    """
    t = np.asarray(table, dtype=int)
    n = t.shape[0]
    if n == 0:
        return ""
    e = _identity_index(t)
    best = None
    count = 0
    for p in _pinned_permutations(n, e):
        candidate = tuple(relabel(t, p).ravel())
        count += 1
        if best is None or candidate < best:
            best = candidate
    _logger.debug("canonical key of order %d table: %d relabellings", n, count)
    return serialize(np.asarray(best).reshape(n, n))


def find_isomorphism(g: FiniteGroup, h: FiniteGroup) -> Optional[Dict[Hashable, Any]]:
    """An isomorphism g → h as {freeze(x): φ(x)}, or None."""
    if g.order() != h.order():
        return None
    tg, th = cayley_table(g), cayley_table(h)
    eg, eh = g.index_of(g.identity), h.index_of(h.identity)
    for p in _pinned_permutations(g.order(), eg, eh):
        if np.array_equal(relabel(tg, p), th):
            return {freeze(x): h.elems[p[i]] for i, x in enumerate(g.elems)}
    return None


def is_isomorphic(g: FiniteGroup, h: FiniteGroup) -> bool:
    if g.order() != h.order():
        return False
    return canonical_key(cayley_table(g)) == canonical_key(cayley_table(h))


# ============================================================================
# AUTOMORPHISMS
# ============================================================================

def compose_perm(p: Perm, q: Perm) -> Perm:
    """(p ∘ q)(i) = p[q[i]]."""
    return tuple(p[i] for i in q)


def id_perm(n: int) -> Perm:
    return tuple(range(n))


def invert_perm(p: Perm) -> Perm:
    out = [0] * len(p)
    for i, pi in enumerate(p):
        out[pi] = i
    return tuple(out)


def automorphisms(table: np.ndarray) -> List[Perm]:
    """All relabellings p with relabel(table, p) == table."""
    t = np.asarray(table, dtype=int)
    e = _identity_index(t)
    autos = [p for p in _pinned_permutations(t.shape[0], e, e if e is not None else 0)
             if np.array_equal(relabel(t, p), t)]
    _logger.debug("order %d table has %d automorphisms", t.shape[0], len(autos))
    return autos


def aut_group_table(autos: List[Perm]) -> np.ndarray:
    """
    Cayley table of a list of permutations under composition.

    Raises:
        LawViolationError: if the list is not closed under composition
    """
    index = {p: i for i, p in enumerate(autos)}
    m = len(autos)
    table = np.zeros((m, m), dtype=int)
    for i, p in enumerate(autos):
        for j, q in enumerate(autos):
            k = index.get(compose_perm(p, q))
            if k is None:
                raise LawViolationError("closure failed: not a subgroup?")
            table[i, j] = k
    return table


def automorphism_group(group: FiniteGroup) -> FiniteGroup:
    autos = automorphisms(cayley_table(group))
    aut_group_table(autos)
    return FiniteGroup(f"Aut({group.name})", autos, compose_perm,
                       id_perm(group.order()), invert_perm)


# ============================================================================
# HOMOMORPHISMS
# ============================================================================

@dataclass(eq=False)
class GroupHom:
    """A function between the carriers of two finite groups."""
    source: FiniteGroup
    target: FiniteGroup
    fn: Callable[[Any], Any]
    name: str = "φ"

    def __call__(self, x: Any) -> Any:
        return self.fn(x)


def is_homomorphism(h: GroupHom) -> bool:
    G, H = h.source, h.target
    for a, b in itertools.product(G.elems, repeat=2):
        if not H.same(h(G.op(a, b)), H.op(h(a), h(b))):
            return False
    return all(H.contains(h(a)) for a in G.elems)


def is_bijection(h: GroupHom) -> bool:
    images = {h.target.index_of(h(a)) for a in h.source.elems}
    return -1 not in images and len(images) == h.source.order() == h.target.order()


def kernel(h: GroupHom) -> List[Any]:
    return [a for a in h.source.elems if h.target.same(h(a), h.target.identity)]


def image(h: GroupHom) -> List[Any]:
    out, seen = [], set()
    for a in h.source.elems:
        b = h(a)
        i = h.target.index_of(b)
        if i not in seen:
            seen.add(i)
            out.append(h.target.elems[i] if i >= 0 else b)
    return out


def subgroup(group: FiniteGroup, elems: Sequence[Any], name: Optional[str] = None) -> FiniteGroup:
    """
    The subset elems with the restricted operation.

    Raises:
        LawViolationError: if elems is not a subgroup
    """
    sub = FiniteGroup(name or f"⟨{len(elems)}⟩≤{group.name}", list(elems),
                      group.op, group.identity, group.inverse, group.eq)
    return sub.validate()


def is_normal_subgroup(group: FiniteGroup, elems: Sequence[Any]) -> bool:
    members = {group.index_of(x) for x in elems}
    if -1 in members:
        return False
    try:
        subgroup(group, elems)
    except LawViolationError:
        return False
    for g in group.elems:
        g_inv = group.inverse(g)
        for n in elems:
            if group.index_of(group.op(group.op(g, n), g_inv)) not in members:
                return False
    return True


def quotient_group(group: FiniteGroup, normal: Sequence[Any], name: Optional[str] = None) -> FiniteGroup:
    """
    G/N with cosets gN as sorted tuples of element indices.

    Raises:
        LawViolationError: if normal is not a normal subgroup
    """
    if not is_normal_subgroup(group, normal):
        raise LawViolationError(f"{group.name}: subset is not a normal subgroup")

    def coset(g):
        return tuple(sorted(group.index_of(group.op(g, n)) for n in normal))

    cosets = []
    for g in group.elems:
        c = coset(g)
        if c not in cosets:
            cosets.append(c)

    def rep(c):
        return group.elems[c[0]]

    return FiniteGroup(name or f"{group.name}/N", cosets,
                       lambda a, b: coset(group.op(rep(a), rep(b))),
                       coset(group.identity),
                       lambda a: coset(group.inverse(rep(a))))


@dataclass
class FirstIsoWitness:
    """G/ker h ≅ im h, with the induced map on cosets."""
    kernel: List[Any]
    image: List[Any]
    quotient: FiniteGroup
    induced: Dict[Tuple[int, ...], Any]
    ok: bool


def first_isomorphism_witness(h: GroupHom) -> FirstIsoWitness:
    """Build the induced map G/ker h → im h and check it is an isomorphism."""
    if not is_homomorphism(h):
        raise LawViolationError(f"{h.name} is not a homomorphism")
    G = h.source
    ker, img = kernel(h), image(h)
    quotient = quotient_group(G, ker, name=f"{G.name}/ker {h.name}")
    induced = {c: h(G.elems[c[0]]) for c in quotient.elems}
    im_group = subgroup(h.target, img, name=f"im {h.name}")
    bar = GroupHom(quotient, im_group, lambda c: induced[c], name=f"{h.name}~")
    ok = is_homomorphism(bar) and is_bijection(bar)
    _logger.info("first isomorphism theorem for %s: |G/K| = %d, |im| = %d, ok=%s",
                 h.name, quotient.order(), len(img), ok)
    return FirstIsoWitness(ker, img, quotient, induced, ok)


# ============================================================================
# ISOMORPHISM CLASSES
# ============================================================================

@dataclass
class IsoClass:
    representative: FiniteGroup
    canonical_name: str
    key: str = ""

    def __post_init__(self):
        if not self.key:
            self.key = canonical_key(cayley_table(self.representative))

    def contains(self, group: FiniteGroup) -> bool:
        return (group.order() == self.representative.order() and
                canonical_key(cayley_table(group)) == self.key)


def same_iso_class(g: FiniteGroup, h: FiniteGroup) -> bool:
    return is_isomorphic(g, h)


CANONICAL_REPRESENTATIVES: Dict[str, Callable[[], FiniteGroup]] = {
    "C1": lambda: cyclic_group(1),
    "C2": lambda: cyclic_group(2),
    "C3": lambda: cyclic_group(3),
    "C4": lambda: cyclic_group(4),
    "V4": klein_four,
    "C5": lambda: cyclic_group(5),
    "C6": lambda: cyclic_group(6),
    "S3": lambda: dihedral_group(3),
    "C7": lambda: cyclic_group(7),
    "C8": lambda: cyclic_group(8),
    "C2×C4": lambda: direct_product(cyclic_group(2), cyclic_group(4)),
    "C2×C2×C2": lambda: direct_product(klein_four(), cyclic_group(2)),
    "D4": lambda: dihedral_group(4),
    "Q8": quaternion_group,
}


@functools.lru_cache(maxsize=None)
def _registry() -> Tuple[IsoClass, ...]:
    return tuple(IsoClass(make(), name) for name, make in CANONICAL_REPRESENTATIVES.items())


def tag_canonical_type(group: FiniteGroup) -> Optional[str]:
    """Name of the registered iso class containing group, or None."""
    n = group.order()
    if n > MAX_PERMUTATION_SIZE:
        raise SearchLimitError(f"{group.name}: order {n} too large to classify")
    key = canonical_key(cayley_table(group))
    for iso_class in _registry():
        if iso_class.representative.order() == n and iso_class.key == key:
            return iso_class.canonical_name
    return None
