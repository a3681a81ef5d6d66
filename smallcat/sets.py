"""
Finite sets, Set-valued functors and size universes.

A SetObj is a finite carrier together with an equality predicate. A
SetFunctor assigns a SetObj to every object of a small category and a
function to every morphism; it is the input and output type of the Kan
extension machinery in smallcat.kan.
"""

import itertools
import logging
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, List, Optional, Sequence
from dataclasses import dataclass, field

from .categorical import Functor, LawReport, Morphism, SmallCategory
from .constants import MAX_FUNCTION_SPACE
from .errors import CarrierMismatchError, CompositionError, LawViolationError, SearchLimitError

_logger = logging.getLogger(__name__)


def freeze(value: Any) -> Hashable:
    """Canonical hashable key for values built from lists, dicts and sets."""
    if isinstance(value, dict):
        return ("dict", frozenset((freeze(k), freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, (set, frozenset)):
        return ("set", frozenset(freeze(v) for v in value))
    return value


@dataclass(eq=False)
class SetObj:
    """
    A finite carrier with an equality predicate.

    Without eq, elements are compared through freeze(); with eq, lookups
    are linear scans.
    """
    id: str
    elems: List[Any]
    eq: Optional[Callable[[Any, Any], bool]] = None
    _index: Dict[Hashable, int] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        self.elems = list(self.elems)
        if self.eq is None:
            for i, x in enumerate(self.elems):
                self._index.setdefault(freeze(x), i)

    def index_of(self, x: Any) -> int:
        """Position of x in the carrier, or -1."""
        if self.eq is None:
            return self._index.get(freeze(x), -1)
        for i, y in enumerate(self.elems):
            if self.eq(x, y):
                return i
        return -1

    def contains(self, x: Any) -> bool:
        return self.index_of(x) >= 0

    def size(self) -> int:
        return len(self.elems)

    def key(self, x: Any) -> Hashable:
        """Hashable key that agrees with eq on carrier elements."""
        i = self.index_of(x)
        if i < 0:
            return ("∉", freeze(x))
        return freeze(self.elems[i])

    def same(self, x: Any, y: Any) -> bool:
        if self.eq is not None:
            return self.eq(x, y)
        return freeze(x) == freeze(y)

    def __iter__(self):
        return iter(self.elems)

    def __len__(self):
        return len(self.elems)


def table_function(table: Dict[Any, Any], label: str = "function") -> Callable[[Any], Any]:
    """Turn a finite lookup table into a function on frozen keys."""
    lookup = {freeze(k): v for k, v in table.items()}

    def apply(x):
        try:
            return lookup[freeze(x)]
        except KeyError:
            raise LawViolationError(f"{label} is undefined at {x!r}") from None

    return apply


@dataclass(eq=False)
class SetFunctor:
    """
    A Set-valued functor out of a small category.

    Attributes:
        name: Name of the functor
        category: Source category
        obj_fn: Object -> SetObj
        map_fn: Morphism -> function between the carriers
    """
    name: str
    category: SmallCategory
    obj_fn: Callable[[Hashable], SetObj]
    map_fn: Callable[[Morphism], Callable[[Any], Any]]

    @classmethod
    def from_tables(cls, name: str,
                    category: SmallCategory,
                    sets: Dict[Hashable, Sequence[Any]],
                    maps: Dict[str, Dict[Any, Any]]) -> "SetFunctor":
        """Build a functor from carrier lists and per-morphism tables; identities may be omitted."""
        objs = {c: SetObj(f"{name}({c})", list(elems)) for c, elems in sets.items()}
        fns = {m: table_function(t, f"{name}({m})") for m, t in maps.items()}

        def obj_fn(c):
            return objs[c]

        def map_fn(m):
            if m.name in fns:
                return fns[m.name]
            if m.is_identity:
                return lambda x: x
            raise LawViolationError(f"{name} has no table for {m.name}")

        return cls(name=name, category=category, obj_fn=obj_fn, map_fn=map_fn)

    def obj(self, c: Hashable) -> SetObj:
        return self.obj_fn(c)

    def map(self, m: Morphism) -> Callable[[Any], Any]:
        return self.map_fn(m)

    def check_laws(self) -> LawReport:
        """Well-typedness, identity and composition, checked element by element."""
        C = self.category
        report = LawReport(name=f"Set functor laws of {self.name}")

        def safe_apply(law, m, x):
            try:
                return True, self.map(m)(x)
            except (CompositionError, LawViolationError) as exc:
                report.record(law, False, str(exc))
                return False, None

        for m in C.morphisms:
            src, dst = self.obj(m.source), self.obj(m.target)
            for x in src:
                ok, y = safe_apply("well_typed", m, x)
                if not ok:
                    continue
                report.record("well_typed", dst.contains(y),
                              f"{m.name}({x!r}) = {y!r} not in {dst.id}")
                if m.is_identity:
                    report.record("identity", dst.same(y, x), f"{m.name}({x!r}) = {y!r}")
        for f, g in C.composable_pairs():
            try:
                gf = C.compose(g, f)
            except (CompositionError, LawViolationError) as exc:
                report.record("composition", False, str(exc))
                continue
            dst = self.obj(g.target)
            for x in self.obj(f.source):
                ok_gf, lhs = safe_apply("composition", gf, x)
                ok_f, fx = safe_apply("composition", f, x)
                if not (ok_gf and ok_f):
                    continue
                ok_g, rhs = safe_apply("composition", g, fx)
                if ok_g:
                    report.record("composition", dst.same(lhs, rhs),
                                  f"({g.name} ∘ {f.name})({x!r})")
        for law in ("well_typed", "identity", "composition"):
            report.checks.setdefault(law, True)
        return report


def all_functions(domain: Sequence[Any],
                  codomain: Sequence[Any],
                  limit: int = MAX_FUNCTION_SPACE) -> Iterator[Dict[Hashable, Any]]:
    """
    Enumerate every function domain -> codomain as a dict keyed by freeze(x).

    Raises:
        SearchLimitError: if |codomain| ** |domain| exceeds limit
    """
    domain, codomain = list(domain), list(codomain)
    count = len(codomain) ** len(domain)
    if count > limit:
        raise SearchLimitError(f"function space of size {count} exceeds limit {limit}")
    _logger.debug("enumerating %d functions (%d -> %d)", count, len(domain), len(codomain))
    keys = [freeze(x) for x in domain]
    for values in itertools.product(codomain, repeat=len(domain)):
        yield dict(zip(keys, values))


def precompose(functor: Functor, set_functor: SetFunctor) -> SetFunctor:
    """Restrict a Set functor on D along F: C -> D, giving H ∘ F on C."""
    if functor.target_category is not set_functor.category:
        raise CarrierMismatchError(f"{functor.name} does not land in {set_functor.category.name}")
    return SetFunctor(
        name=f"{set_functor.name}∘{functor.name}",
        category=functor.source_category,
        obj_fn=lambda c: set_functor.obj(functor.fobj(c)),
        map_fn=lambda m: set_functor.map(functor.fmor(m)),
    )


@dataclass(eq=False)
class SetNatIso:
    """Candidate natural isomorphism F ≅ G between Set functors."""
    source: SetFunctor
    target: SetFunctor
    at: Callable[[Hashable], Callable[[Any], Any]]
    inv_at: Callable[[Hashable], Callable[[Any], Any]]


def check_set_nat_iso(category: SmallCategory, nat: SetNatIso) -> LawReport:
    """Pointwise bijectivity (both round trips) and naturality of nat.at."""
    F, G = nat.source, nat.target
    report = LawReport(name=f"natural iso {F.name} ≅ {G.name}")
    for c in category.objects:
        Fc, Gc = F.obj(c), G.obj(c)
        fwd, bwd = nat.at(c), nat.inv_at(c)
        for x in Fc:
            y = fwd(x)
            report.record("well_typed", Gc.contains(y), f"at({c})({x!r}) = {y!r}")
            report.record("left_inverse", Fc.same(bwd(y), x), f"at {c}, element {x!r}")
        for y in Gc:
            report.record("right_inverse", Gc.same(fwd(bwd(y)), y), f"at {c}, element {y!r}")
    for u in category.morphisms:
        fwd_src, fwd_dst = nat.at(u.source), nat.at(u.target)
        Fu, Gu = F.map(u), G.map(u)
        Gd = G.obj(u.target)
        for x in F.obj(u.source):
            report.record("naturality", Gd.same(fwd_dst(Fu(x)), Gu(fwd_src(x))),
                          f"square for {u.name} at {x!r}")
    for law in ("well_typed", "left_inverse", "right_inverse", "naturality"):
        report.checks.setdefault(law, True)
    return report


# ============================================================================
# UNIVERSES
# ============================================================================

@dataclass(frozen=True)
class Universe:
    """
    A named size universe. enlarge() builds U' with U ⊂ U'.
    """
    name: str
    smaller: Optional["Universe"] = None

    def enlarge(self, name: str) -> "Universe":
        return Universe(name=name, smaller=self)

    def includes(self, other: "Universe") -> bool:
        """Whether other ⊆ self."""
        u = self
        while u is not None:
            if u == other:
                return True
            u = u.smaller
        return False


@dataclass(frozen=True)
class Small:
    """A value tagged as small relative to a universe."""
    universe: Universe
    value: Any


@dataclass(frozen=True)
class UniverseOps:
    """Constructors for small values that refuse to mix universes."""
    universe: Universe

    def to_small(self, value: Any) -> Small:
        return Small(self.universe, value)

    def from_small(self, small: Small) -> Any:
        if not self.universe.includes(small.universe):
            raise CarrierMismatchError(
                f"value from universe {small.universe.name} is not small in {self.universe.name}"
            )
        return small.value

    def pair(self, a: Small, b: Small) -> Small:
        return self.to_small((self.from_small(a), self.from_small(b)))

    def inl(self, a: Small) -> Small:
        return self.to_small(("inl", self.from_small(a)))

    def inr(self, b: Small) -> Small:
        return self.to_small(("inr", self.from_small(b)))

    def list(self, items: Iterable[Small]) -> Small:
        return self.to_small(tuple(self.from_small(x) for x in items))

    def func(self, domain: Iterable[Small], fn: Callable[[Any], Any]) -> Small:
        """Tabulate fn on a small domain."""
        values = [self.from_small(x) for x in domain]
        return self.to_small({freeze(v): fn(v) for v in values})
