"""
Profunctor Optics Module

Optics are functions that transform a profunctor value p a b into p s t,
for every profunctor supporting the structure the optic needs:

1. Iso: any profunctor (dimap)
2. Lens: Strong profunctors (first)
3. Prism: Choice profunctors (right)
4. Traversal: Wander profunctors (wander)

Interpreters pick a concrete profunctor: functions for over/set, Forget for
view/preview/to_list_of, Tagged for review, Star for traverse_of.
"""

import logging
from functools import reduce
from typing import Any, Callable, Iterable, List, Sequence
from dataclasses import dataclass

from .categorical import LawReport
from .errors import CompositionError

_logger = logging.getLogger(__name__)


# ============================================================================
# SUM TYPES
# ============================================================================

@dataclass(frozen=True)
class Left:
    value: Any


@dataclass(frozen=True)
class Right:
    value: Any


@dataclass(frozen=True)
class Some:
    value: Any


@dataclass(frozen=True)
class Nothing:
    def __repr__(self):
        return "NONE"


NONE = Nothing()


# ============================================================================
# MONOIDS AND APPLICATIVES
# ============================================================================

@dataclass(frozen=True)
class Monoid:
    name: str
    empty: Any
    combine: Callable[[Any, Any], Any]

    def concat(self, values: Iterable[Any]) -> Any:
        return reduce(self.combine, values, self.empty)


LIST_MONOID = Monoid("List", (), lambda a, b: tuple(a) + tuple(b))
SUM_MONOID = Monoid("Sum", 0, lambda a, b: a + b)
FIRST_MONOID = Monoid("First", NONE, lambda a, b: a if isinstance(a, Some) else b)


class IdentityApplicative:
    """Values are unwrapped."""

    def pure(self, x):
        return x

    def map(self, f, fa):
        return f(fa)

    def lift2(self, f, fa, fb):
        return f(fa, fb)


class ConstApplicative:
    """Values are monoid elements; mapping ignores the function."""

    def __init__(self, monoid: Monoid):
        self.monoid = monoid

    def pure(self, x):
        return self.monoid.empty

    def map(self, f, fa):
        return fa

    def lift2(self, f, fa, fb):
        return self.monoid.combine(fa, fb)


class ListApplicative:
    """Nondeterminism: every combination of choices."""

    def pure(self, x):
        return [x]

    def map(self, f, fa):
        return [f(a) for a in fa]

    def lift2(self, f, fa, fb):
        return [f(a, b) for a in fa for b in fb]


IDENTITY = IdentityApplicative()
LIST_APPLICATIVE = ListApplicative()


# ============================================================================
# PROFUNCTORS
# ============================================================================

class FunctionProfunctor:
    """p a b = a -> b. Strong, Choice and Wander."""

    def dimap(self, f, g, h):
        return lambda s: g(h(f(s)))

    def first(self, h):
        return lambda ac: (h(ac[0]), ac[1])

    def right(self, h):
        return lambda e: Right(h(e.value)) if isinstance(e, Right) else e

    def wander(self, walk, h):
        return lambda s: walk(IDENTITY, h, s)


class Forget:
    """p a b = a -> r for a fixed monoid r. Strong, Choice and Wander."""

    def __init__(self, monoid: Monoid):
        self.monoid = monoid

    def dimap(self, f, g, h):
        return lambda s: h(f(s))

    def first(self, h):
        return lambda ac: h(ac[0])

    def right(self, h):
        return lambda e: h(e.value) if isinstance(e, Right) else self.monoid.empty

    def wander(self, walk, h):
        return lambda s: walk(ConstApplicative(self.monoid), h, s)


class Tagged:
    """p a b = b. Choice only."""

    def dimap(self, f, g, b):
        return g(b)

    def right(self, b):
        return Right(b)


class Star:
    """p a b = a -> F b for an applicative F. Strong, Choice and Wander."""

    def __init__(self, app):
        self.app = app

    def dimap(self, f, g, h):
        return lambda s: self.app.map(g, h(f(s)))

    def first(self, h):
        return lambda ac: self.app.map(lambda b: (b, ac[1]), h(ac[0]))

    def right(self, h):
        return lambda e: self.app.map(Right, h(e.value)) if isinstance(e, Right) else self.app.pure(e)

    def wander(self, walk, h):
        return lambda s: walk(self.app, h, s)


FUNCTION = FunctionProfunctor()
TAGGED = Tagged()


# ============================================================================
# OPTICS
# ============================================================================

KINDS = ("iso", "lens", "prism", "traversal")


def _join_kind(a: str, b: str) -> str:
    if a == b or b == "iso":
        return a
    if a == "iso":
        return b
    return "traversal"


@dataclass(frozen=True)
class Optic:
    """kind is one of KINDS; transform(P, p) turns p a b into p s t."""
    kind: str
    transform: Callable[[Any, Any], Any]
    name: str = "optic"

    def __post_init__(self):
        if self.kind not in KINDS:
            raise ValueError(f"unknown optic kind {self.kind!r}, expected one of {KINDS}")

    def then(self, inner: "Optic") -> "Optic":
        """Focus through self, then through inner."""
        return Optic(_join_kind(self.kind, inner.kind),
                     lambda P, p: self.transform(P, inner.transform(P, p)),
                     f"{self.name}.{inner.name}")


def compose_optics(*optics: Optic) -> Optic:
    return reduce(lambda outer, inner: outer.then(inner), optics)


def iso(get: Callable, back: Callable, name: str = "iso") -> Optic:
    return Optic("iso", lambda P, p: P.dimap(get, back, p), name)


def lens(get: Callable[[Any], Any], put: Callable[[Any, Any], Any], name: str = "lens") -> Optic:
    """put(s, b) returns s with its focus replaced by b."""
    return Optic("lens",
                 lambda P, p: P.dimap(lambda s: (get(s), s),
                                      lambda bs: put(bs[1], bs[0]),
                                      P.first(p)),
                 name)


def prism(match: Callable[[Any], Any], build: Callable[[Any], Any], name: str = "prism") -> Optic:
    """match(s) is Right(focus) on a hit and Left(t) on a miss."""
    return Optic("prism",
                 lambda P, p: P.dimap(match,
                                      lambda e: build(e.value) if isinstance(e, Right) else e.value,
                                      P.right(p)),
                 name)


def traversal(walk: Callable[[Any, Callable, Any], Any], name: str = "traversal") -> Optic:
    """walk(app, f, s) visits every focus of s with f inside the applicative app."""
    return Optic("traversal", lambda P, p: P.wander(walk, p), name)


# ---------------------------------------------------------------------------
# Stock optics
# ---------------------------------------------------------------------------

fst_lens = lens(lambda s: s[0], lambda s, b: (b,) + tuple(s[1:]), "fst")


def key_lens(key: Any) -> Optic:
    return lens(lambda s: s[key], lambda s, b: {**s, key: b}, f"[{key!r}]")


def index_lens(i: int) -> Optic:
    def put(s, b):
        items = list(s)
        items[i] = b
        return tuple(items) if isinstance(s, tuple) else items

    return lens(lambda s: s[i], put, f"[{i}]")


right_prism = prism(lambda e: e if isinstance(e, Right) else Left(e), Right, "right")


def _parse_int(s):
    if isinstance(s, str):
        try:
            n = int(s)
        except ValueError:
            return Left(s)
        if str(n) == s:
            return Right(n)
    return Left(s)


number_string_prism = prism(_parse_int, str, "number")


def _walk_sequence(app, f, xs):
    acc = app.pure([])
    for x in xs:
        acc = app.lift2(lambda ys, y: ys + [y], acc, f(x))
    rebuild = tuple if isinstance(xs, tuple) else list
    return app.map(rebuild, acc)


def _walk_values(app, f, d):
    keys = list(d)
    return app.map(lambda ys: dict(zip(keys, ys)), _walk_sequence(app, f, [d[k] for k in keys]))


each_traversal = traversal(_walk_sequence, "each")
values_traversal = traversal(_walk_values, "values")


# ============================================================================
# INTERPRETERS
# ============================================================================

def view(optic: Optic, s: Any) -> Any:
    if optic.kind not in ("iso", "lens"):
        raise CompositionError(f"view needs an iso or lens, got a {optic.kind}")
    return optic.transform(Forget(FIRST_MONOID), lambda a: a)(s)


def over(optic: Optic, f: Callable[[Any], Any], s: Any) -> Any:
    return optic.transform(FUNCTION, f)(s)


def set_(optic: Optic, b: Any, s: Any) -> Any:
    return over(optic, lambda _: b, s)


def preview(optic: Optic, s: Any) -> Any:
    """Some(first focus) or NONE."""
    return optic.transform(Forget(FIRST_MONOID), Some)(s)


def review(optic: Optic, b: Any) -> Any:
    if optic.kind not in ("iso", "prism"):
        raise CompositionError(f"review needs an iso or prism, got a {optic.kind}")
    return optic.transform(TAGGED, b)


def to_list_of(optic: Optic, s: Any) -> List[Any]:
    return list(optic.transform(Forget(LIST_MONOID), lambda a: (a,))(s))


def traverse_of(optic: Optic, app, f: Callable[[Any], Any], s: Any) -> Any:
    return optic.transform(Star(app), f)(s)


# ============================================================================
# LAW CHECKS
# ============================================================================

def check_lens_laws(optic: Optic, sources: Sequence[Any], foci: Sequence[Any]) -> LawReport:
    """get-set, set-get and set-set on every sample."""
    report = LawReport(name=f"lens laws of {optic.name}")
    for s in sources:
        report.record("get_set", set_(optic, view(optic, s), s) == s, f"s={s!r}")
        for b in foci:
            report.record("set_get", view(optic, set_(optic, b, s)) == b, f"s={s!r}, b={b!r}")
            for b2 in foci:
                report.record("set_set", set_(optic, b2, set_(optic, b, s)) == set_(optic, b2, s),
                              f"s={s!r}, b={b!r}, b'={b2!r}")
    _logger.debug("%s: %d checks", report.name, len(report.checks))
    return report


def check_prism_laws(optic: Optic,
                     sources: Sequence[Any],
                     foci: Sequence[Any],
                     f: Callable[[Any], Any] = lambda a: a,
                     g: Callable[[Any], Any] = lambda a: a) -> LawReport:
    """build-match, preview-review, miss-no-op and over fusion."""
    report = LawReport(name=f"prism laws of {optic.name}")
    for b in foci:
        report.record("build_match", preview(optic, review(optic, b)) == Some(b), f"b={b!r}")
    for s in sources:
        hit = preview(optic, s)
        if isinstance(hit, Some):
            report.record("preview_review", review(optic, hit.value) == s, f"s={s!r}")
        else:
            report.record("miss_no_op", all(set_(optic, b, s) == s for b in foci), f"s={s!r}")
        report.record("fusion",
                      over(optic, f, over(optic, g, s)) == over(optic, lambda a: f(g(a)), s),
                      f"s={s!r}")
    for law in ("build_match", "preview_review", "miss_no_op", "fusion"):
        report.checks.setdefault(law, True)
    return report


def check_traversal_laws(optic: Optic,
                         sources: Sequence[Any],
                         f: Callable[[Any], Any],
                         g: Callable[[Any], Any]) -> LawReport:
    """Identity (traverse with pure is pure) and fusion of over."""
    report = LawReport(name=f"traversal laws of {optic.name}")
    for s in sources:
        report.record("identity", traverse_of(optic, IDENTITY, lambda a: a, s) == s, f"s={s!r}")
        report.record("pure", traverse_of(optic, LIST_APPLICATIVE, lambda a: [a], s) == [s],
                      f"s={s!r}")
        report.record("fusion",
                      over(optic, f, over(optic, g, s)) == over(optic, lambda a: f(g(a)), s),
                      f"s={s!r}")
    return report
