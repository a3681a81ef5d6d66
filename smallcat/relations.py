"""
Relations between finite sets, as boolean matrices.

Rel(A, B) is an |A| x |B| numpy bool matrix. On top of the plain
algebra (converse, meet, join, composition) this module provides:

1. The equipment structure: companions and conjoints of functions with
   their unit and counit inclusions
2. The allegory laws (dagger involution, modular law)
3. Residuals, the right adjoints to composition
4. Predicate transformers and the Galois chain ∃_f ⊣ f* ⊣ ∀_f
5. Relational Hoare triples with counterexamples

Composition is written diagrammatically: r.compose(s) is "r then s".
"""

import logging
from typing import Any, Callable, Iterable, List, Sequence, Tuple
from dataclasses import dataclass, field

import numpy as np

from .categorical import LawReport
from .constants import MAX_FUNCTION_SPACE
from .errors import CarrierMismatchError, LawViolationError, SearchLimitError
from .sets import SetObj, freeze

_logger = logging.getLogger(__name__)


class Finite(SetObj):
    """A SetObj with duplicates (under eq) removed on construction."""

    def __init__(self, elems: Iterable[Any], eq: Callable[[Any, Any], bool] = None, name: str = "X"):
        unique = []
        seen = set()
        for x in elems:
            if eq is None:
                k = freeze(x)
                if k in seen:
                    continue
                seen.add(k)
            elif any(eq(x, y) for y in unique):
                continue
            unique.append(x)
        super().__init__(name, unique, eq)


def _same_carrier(x: SetObj, y: SetObj) -> bool:
    if x is y:
        return True
    return len(x) == len(y) and all(x.same(a, b) for a, b in zip(x.elems, y.elems))


def _require_carrier(x: SetObj, y: SetObj, what: str):
    if not _same_carrier(x, y):
        raise CarrierMismatchError(f"{what}: carrier mismatch ({x.id} vs {y.id})")


# ============================================================================
# SUBSETS
# ============================================================================

@dataclass(eq=False)
class Subset:
    """A subset of universe, stored as a boolean mask."""
    universe: Finite
    mask: np.ndarray

    @classmethod
    def empty(cls, universe: Finite) -> "Subset":
        return cls(universe, np.zeros(len(universe), dtype=bool))

    @classmethod
    def all(cls, universe: Finite) -> "Subset":
        return cls(universe, np.ones(len(universe), dtype=bool))

    @classmethod
    def of(cls, universe: Finite, xs: Iterable[Any]) -> "Subset":
        """Elements of xs outside the universe are ignored."""
        mask = np.zeros(len(universe), dtype=bool)
        for x in xs:
            i = universe.index_of(x)
            if i >= 0:
                mask[i] = True
        return cls(universe, mask)

    @classmethod
    def by(cls, universe: Finite, pred: Callable[[Any], bool]) -> "Subset":
        return cls(universe, np.array([bool(pred(x)) for x in universe.elems], dtype=bool))

    def contains(self, x: Any) -> bool:
        i = self.universe.index_of(x)
        return i >= 0 and bool(self.mask[i])

    def to_list(self) -> List[Any]:
        return [x for x, keep in zip(self.universe.elems, self.mask) if keep]

    def leq(self, other: "Subset") -> bool:
        _require_carrier(self.universe, other.universe, "subset leq")
        return bool(np.all(~self.mask | other.mask))

    def meet(self, other: "Subset") -> "Subset":
        _require_carrier(self.universe, other.universe, "subset meet")
        return Subset(self.universe, self.mask & other.mask)

    def join(self, other: "Subset") -> "Subset":
        _require_carrier(self.universe, other.universe, "subset join")
        return Subset(self.universe, self.mask | other.mask)

    def complement(self) -> "Subset":
        return Subset(self.universe, ~self.mask)

    def __eq__(self, other):
        if not isinstance(other, Subset):
            return NotImplemented
        return _same_carrier(self.universe, other.universe) and bool(np.array_equal(self.mask, other.mask))

    def __repr__(self):
        return "{" + ", ".join(repr(x) for x in self.to_list()) + "}"


def all_subsets(universe: Finite) -> List[Subset]:
    """Every subset of universe, 2^n of them."""
    n = len(universe)
    if 2 ** n > MAX_FUNCTION_SPACE:
        raise SearchLimitError(f"2^{n} subsets exceed the limit {MAX_FUNCTION_SPACE}")
    bits = (np.arange(2 ** n)[:, None] >> np.arange(n)[None, :]) & 1
    return [Subset(universe, row.astype(bool)) for row in bits]


# ============================================================================
# RELATIONS
# ============================================================================

@dataclass(eq=False)
class Rel:
    """A relation from A to B; matrix[i, j] says A.elems[i] is related to B.elems[j]."""
    A: Finite
    B: Finite
    matrix: np.ndarray = field(repr=False)

    def __post_init__(self):
        self.matrix = np.asarray(self.matrix, dtype=bool)
        if self.matrix.shape != (len(self.A), len(self.B)):
            raise LawViolationError(
                f"relation matrix has shape {self.matrix.shape}, expected {(len(self.A), len(self.B))}")

    @classmethod
    def empty(cls, A: Finite, B: Finite) -> "Rel":
        return cls(A, B, np.zeros((len(A), len(B)), dtype=bool))

    @classmethod
    def from_pairs(cls, A: Finite, B: Finite, pairs: Iterable[Tuple[Any, Any]]) -> "Rel":
        """
        Build a relation from (a, b) pairs.

        Raises:
            CarrierMismatchError: if a pair leaves A x B
        """
        matrix = np.zeros((len(A), len(B)), dtype=bool)
        for a, b in pairs:
            i, j = A.index_of(a), B.index_of(b)
            if i < 0 or j < 0:
                raise CarrierMismatchError(f"pair ({a!r}, {b!r}) is not in {A.id} x {B.id}")
            matrix[i, j] = True
        return cls(A, B, matrix)

    @classmethod
    def identity(cls, A: Finite) -> "Rel":
        return cls(A, A, np.eye(len(A), dtype=bool))

    def has(self, a: Any, b: Any) -> bool:
        i, j = self.A.index_of(a), self.B.index_of(b)
        return i >= 0 and j >= 0 and bool(self.matrix[i, j])

    def converse(self) -> "Rel":
        return Rel(self.B, self.A, self.matrix.T.copy())

    dagger = converse

    def leq(self, other: "Rel") -> bool:
        self._check_parallel(other, "leq")
        return bool(np.all(~self.matrix | other.matrix))

    def meet(self, other: "Rel") -> "Rel":
        self._check_parallel(other, "meet")
        return Rel(self.A, self.B, self.matrix & other.matrix)

    def join(self, other: "Rel") -> "Rel":
        self._check_parallel(other, "join")
        return Rel(self.A, self.B, self.matrix | other.matrix)

    def compose(self, other: "Rel") -> "Rel":
        """self ; other, i.e. a (self;other) c iff a self b and b other c for some b."""
        _require_carrier(self.B, other.A, "compose")
        product = self.matrix.astype(np.int64) @ other.matrix.astype(np.int64)
        return Rel(self.A, other.B, product > 0)

    def image(self, xs: Iterable[Any]) -> List[Any]:
        rows = Subset.of(self.A, xs).mask
        hit = np.any(self.matrix[rows], axis=0)
        return [b for b, keep in zip(self.B.elems, hit) if keep]

    def pre_image(self, ys: Iterable[Any]) -> List[Any]:
        cols = Subset.of(self.B, ys).mask
        hit = np.any(self.matrix[:, cols], axis=1)
        return [a for a, keep in zip(self.A.elems, hit) if keep]

    def to_pairs(self) -> List[Tuple[Any, Any]]:
        return [(self.A.elems[i], self.B.elems[j]) for i, j in zip(*np.nonzero(self.matrix))]

    def domain(self) -> Subset:
        return Subset(self.A, np.any(self.matrix, axis=1))

    def range(self) -> Subset:
        return Subset(self.B, np.any(self.matrix, axis=0))

    def is_functional(self) -> bool:
        return bool(np.all(self.matrix.sum(axis=1) <= 1))

    def is_total(self) -> bool:
        return bool(np.all(self.matrix.any(axis=1)))

    def is_map(self) -> bool:
        return self.is_functional() and self.is_total()

    def _check_parallel(self, other: "Rel", what: str):
        _require_carrier(self.A, other.A, what)
        _require_carrier(self.B, other.B, what)

    def __eq__(self, other):
        if not isinstance(other, Rel):
            return NotImplemented
        return (_same_carrier(self.A, other.A) and _same_carrier(self.B, other.B)
                and bool(np.array_equal(self.matrix, other.matrix)))

    def __repr__(self):
        return f"Rel({self.A.id}→{self.B.id}, {self.to_pairs()!r})"


# ============================================================================
# EQUIPMENT
# ============================================================================

def graph(A: Finite, B: Finite, f: Callable[[Any], Any]) -> Rel:
    """
    The graph {(a, f(a))} of a function.

    Raises:
        LawViolationError: if f sends some a outside B
    """
    matrix = np.zeros((len(A), len(B)), dtype=bool)
    for i, a in enumerate(A.elems):
        j = B.index_of(f(a))
        if j < 0:
            raise LawViolationError(f"graph: f({a!r}) = {f(a)!r} is not in {B.id}")
        matrix[i, j] = True
    return Rel(A, B, matrix)


def companion(A: Finite, B: Finite, f: Callable[[Any], Any]) -> Rel:
    return graph(A, B, f)


def conjoint(A: Finite, B: Finite, f: Callable[[Any], Any]) -> Rel:
    return graph(A, B, f).dagger()


def unit_holds(A: Finite, B: Finite, f: Callable[[Any], Any]) -> bool:
    """id_A ⊆ f_* ; f^* (totality of f)."""
    g = graph(A, B, f)
    return Rel.identity(A).leq(g.compose(g.dagger()))


def counit_holds(A: Finite, B: Finite, f: Callable[[Any], Any]) -> bool:
    """f^* ; f_* ⊆ id_B (functionality of f)."""
    g = graph(A, B, f)
    return g.dagger().compose(g).leq(Rel.identity(B))


def square_holds(f: Callable[[Any], Any], R: Rel, g: Callable[[Any], Any], R1: Rel) -> bool:
    """The square with vertical maps f, g commutes laxly: a R b implies f(a) R1 g(b)."""
    return all(R1.has(f(a), g(b)) for a, b in R.to_pairs())


# ============================================================================
# ALLEGORY LAWS
# ============================================================================

def dagger_involutive(R: Rel) -> bool:
    return R.dagger().dagger() == R


def modular_law(R: Rel, S: Rel, T: Rel) -> bool:
    """R;S ∩ T ⊆ (R ∩ T;S†);S for R: A→B, S: B→C, T: A→C."""
    lhs = R.compose(S).meet(T)
    rhs = R.meet(T.compose(S.dagger())).compose(S)
    return lhs.leq(rhs)


def modular_left(R: Rel, S: Rel, T: Rel) -> bool:
    """R;(S ∩ T) ⊆ R;S ∩ R;T for R: A→B and S, T: B→C."""
    return R.compose(S.meet(T)).leq(R.compose(S).meet(R.compose(T)))


def check_allegory_laws(R: Rel, S: Rel, T: Rel) -> LawReport:
    """Allegory axioms on R: A→B, S: B→C, T: A→C."""
    report = LawReport(name="allegory laws")
    for label, rel in (("R", R), ("S", S), ("T", T)):
        report.record("dagger_involutive", dagger_involutive(rel), label)
    report.record("dagger_reverses_composition",
                  R.compose(S).dagger() == S.dagger().compose(R.dagger()))
    report.record("dagger_monotone",
                  R.compose(S).meet(T).dagger().leq(T.dagger()))
    report.record("identity",
                  Rel.identity(R.A).compose(R) == R and R.compose(Rel.identity(R.B)) == R)
    report.record("modular", modular_law(R, S, T))
    report.record("modular_left", modular_left(R, S, R.dagger().compose(T)))
    return report


# ============================================================================
# RESIDUALS
# ============================================================================

def left_residual(R: Rel, S: Rel) -> Rel:
    """
    R \\ S: B→C for R: A→B and S: A→C.

    The largest X with R;X ⊆ S: b X c iff every a with a R b has a S c.
    """
    _require_carrier(R.A, S.A, "left_residual")
    bad = R.matrix.T.astype(np.int64) @ (~S.matrix).astype(np.int64)
    return Rel(R.B, S.B, bad == 0)


def right_residual(S: Rel, X: Rel) -> Rel:
    """
    S / X: A→B for S: A→C and X: B→C.

    The largest R with R;X ⊆ S: a R b iff every c with b X c has a S c.
    """
    _require_carrier(S.B, X.B, "right_residual")
    bad = (~S.matrix).astype(np.int64) @ X.matrix.T.astype(np.int64)
    return Rel(S.A, X.A, bad == 0)


def left_residual_adjunction(R: Rel, X: Rel, S: Rel) -> bool:
    """R;X ⊆ S iff X ⊆ R \\ S."""
    return R.compose(X).leq(S) == X.leq(left_residual(R, S))


def right_residual_adjunction(R: Rel, X: Rel, S: Rel) -> bool:
    """R;X ⊆ S iff R ⊆ S / X."""
    return R.compose(X).leq(S) == R.leq(right_residual(S, X))


# ============================================================================
# PREDICATE TRANSFORMERS
# ============================================================================

def wp(program: Rel, post: Subset) -> Subset:
    """Weakest (demonic) precondition: states all of whose successors satisfy post."""
    _require_carrier(program.B, post.universe, "wp")
    escapes = np.any(program.matrix & ~post.mask[None, :], axis=1)
    return Subset(program.A, ~escapes)


def sp(pre: Subset, program: Rel) -> Subset:
    """Strongest postcondition: the image of pre."""
    _require_carrier(pre.universe, program.A, "sp")
    return Subset(program.B, np.any(program.matrix[pre.mask], axis=0))


def exists_along(A: Finite, B: Finite, f: Callable[[Any], Any], P: Subset) -> Subset:
    """∃_f P = f[P]."""
    return sp(P, graph(A, B, f))


def inverse_image(A: Finite, B: Finite, f: Callable[[Any], Any], Q: Subset) -> Subset:
    """f* Q = {a | f(a) ∈ Q}."""
    return Subset.by(A, lambda a: Q.contains(f(a)))


def forall_along(A: Finite, B: Finite, f: Callable[[Any], Any], P: Subset) -> Subset:
    """∀_f P = {b | every a with f(a) = b is in P}."""
    return wp(graph(A, B, f).dagger(), P)


def check_galois_connections(A: Finite, B: Finite, f: Callable[[Any], Any]) -> LawReport:
    """∃_f ⊣ f* ⊣ ∀_f, checked over all pairs of subsets."""
    report = LawReport(name="galois connections ∃_f ⊣ f* ⊣ ∀_f")
    subsets_a, subsets_b = all_subsets(A), all_subsets(B)
    for P in subsets_a:
        exists_p = exists_along(A, B, f, P)
        forall_p = forall_along(A, B, f, P)
        for Q in subsets_b:
            pull_q = inverse_image(A, B, f, Q)
            report.record("exists_inverse", exists_p.leq(Q) == P.leq(pull_q), f"P={P!r}, Q={Q!r}")
            report.record("inverse_forall", pull_q.leq(P) == Q.leq(forall_p), f"P={P!r}, Q={Q!r}")
    _logger.debug("%s: %d x %d subsets", report.name, len(subsets_a), len(subsets_b))
    return report


# ============================================================================
# HOARE TRIPLES
# ============================================================================

HOARE_KINDS = ("demonic", "angelic")


@dataclass
class HoareWitness:
    """
    Outcome of {P} R {Q}.

    Demonic counterexamples are (a, b) pairs with a in P, a R b and b not
    in Q. Angelic counterexamples are the a in P with no successor in Q.
    """
    kind: str
    ok: bool
    counterexamples: List[Any] = field(default_factory=list)


def hoare_witness(kind: str, P: Subset, R: Rel, Q: Subset) -> HoareWitness:
    if kind not in HOARE_KINDS:
        raise ValueError(f"unknown Hoare triple kind {kind!r}, expected one of {HOARE_KINDS}")
    _require_carrier(P.universe, R.A, "hoare")
    _require_carrier(Q.universe, R.B, "hoare")
    bad: List[Any] = []
    for i in np.flatnonzero(P.mask):
        a = R.A.elems[i]
        successors = np.flatnonzero(R.matrix[i])
        if kind == "demonic":
            bad.extend((a, R.B.elems[j]) for j in successors if not Q.mask[j])
        elif not any(Q.mask[j] for j in successors):
            bad.append(a)
    return HoareWitness(kind, not bad, bad)


def hoare_holds(P: Subset, R: Rel, Q: Subset) -> bool:
    """Demonic partial correctness: P ⊆ wp(R, Q)."""
    return P.leq(wp(R, Q))


def refines(R: Rel, S: Rel) -> bool:
    """R refines S when it is at least as defined and no less deterministic."""
    return S.domain().leq(R.domain()) and R.meet(
        Rel(R.A, R.B, S.domain().mask[:, None] & np.ones_like(R.matrix))).leq(S)


def lift_pairs(pairs: Sequence[Tuple[Any, Any]]) -> Tuple[Finite, Finite, Rel]:
    """Carriers and relation spanned by a list of pairs."""
    A = Finite((a for a, _ in pairs), name="A")
    B = Finite((b for _, b in pairs), name="B")
    return A, B, Rel.from_pairs(A, B, pairs)
