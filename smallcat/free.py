"""
Free monads, cofree comonads and the free monoid adjunction.

A functor is passed around as a FunctorDict carrying its fmap. Free
programs are trees of Pure/Suspend nodes; cofree values are lazily
unfolded trees whose tails are produced on demand.
"""

import logging
from typing import Any, Callable, List, Sequence
from dataclasses import dataclass, field

from .categorical import LawReport
from .errors import SmallCatError
from .optics import Monoid

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FunctorDict:
    """fmap(f, fa) maps f over one layer."""
    name: str
    fmap: Callable[[Callable[[Any], Any], Any], Any]


IDENTITY_FUNCTOR = FunctorDict("Identity", lambda f, x: f(x))
LIST_FUNCTOR = FunctorDict("List", lambda f, xs: [f(x) for x in xs])


# ============================================================================
# FREE MONAD
# ============================================================================

@dataclass(frozen=True)
class Pure:
    value: Any


@dataclass(frozen=True)
class Suspend:
    layer: Any


@dataclass(frozen=True)
class FreeMonad:
    """Monad operations on Free over functor."""
    functor: FunctorDict

    def pure(self, value: Any) -> Pure:
        return Pure(value)

    def lift_f(self, layer: Any) -> Suspend:
        return Suspend(self.functor.fmap(Pure, layer))

    def bind(self, program, k: Callable[[Any], Any]):
        if isinstance(program, Pure):
            return k(program.value)
        return Suspend(self.functor.fmap(lambda inner: self.bind(inner, k), program.layer))

    def fmap(self, f: Callable[[Any], Any], program):
        return self.bind(program, lambda a: Pure(f(a)))

    def then(self, first, second):
        return self.bind(first, lambda _: second)

    def sequence(self, programs: Sequence[Any]):
        """Run programs left to right, collecting their results."""
        result = Pure([])
        for program in programs:
            result = self.bind(result, lambda acc, p=program: self.fmap(lambda a: acc + [a], p))
        return result

    def fold_free(self, algebra: Callable[[Any], Any], program) -> Any:
        """
        Interpret a program one layer at a time.

        algebra takes a layer whose holes are programs and returns the
        program to continue with; runs without recursion.
        """
        steps = 0
        while isinstance(program, Suspend):
            program = algebra(program.layer)
            steps += 1
        _logger.debug("%s program finished after %d steps", self.functor.name, steps)
        return program.value


# ---------------------------------------------------------------------------
# Console DSL
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Print:
    text: str
    next: Any


@dataclass(frozen=True)
class Read:
    k: Callable[[str], Any]


def _console_fmap(f, layer):
    if isinstance(layer, Print):
        return Print(layer.text, f(layer.next))
    return Read(lambda line: f(layer.k(line)))


CONSOLE_FUNCTOR = FunctorDict("Console", _console_fmap)
CONSOLE = FreeMonad(CONSOLE_FUNCTOR)


def print_line(text: str):
    return CONSOLE.lift_f(Print(text, None))


def read_line():
    return CONSOLE.lift_f(Read(lambda line: line))


@dataclass
class ScriptedConsole:
    """Feeds inputs to Read and records every Print."""
    inputs: List[str] = field(default_factory=list)
    output: List[str] = field(default_factory=list)

    def step(self, layer):
        if isinstance(layer, Print):
            self.output.append(layer.text)
            return layer.next
        if not self.inputs:
            raise SmallCatError("console script exhausted")
        return layer.k(self.inputs.pop(0))

    def run(self, program) -> Any:
        return CONSOLE.fold_free(self.step, program)


def check_free_monad_laws(monad: FreeMonad,
                          values: Sequence[Any],
                          programs: Sequence[Any],
                          k: Callable[[Any], Any],
                          h: Callable[[Any], Any],
                          observe: Callable[[Any], Any]) -> LawReport:
    """
    Monad laws, compared through observe (e.g. running a scripted interpreter).

    k and h are continuations value -> program.
    """
    report = LawReport(name=f"free monad laws over {monad.functor.name}")
    for a in values:
        report.record("left_identity", observe(monad.bind(monad.pure(a), k)) == observe(k(a)),
                      f"a={a!r}")
    for m in programs:
        report.record("right_identity", observe(monad.bind(m, monad.pure)) == observe(m))
        lhs = monad.bind(monad.bind(m, k), h)
        rhs = monad.bind(m, lambda a: monad.bind(k(a), h))
        report.record("associativity", observe(lhs) == observe(rhs))
    return report


# ============================================================================
# COFREE COMONAD
# ============================================================================

class Cofree:
    """head plus a lazily computed layer of further Cofree values."""

    def __init__(self, functor: FunctorDict, head: Any, tail_thunk: Callable[[], Any]):
        self.functor = functor
        self.head = head
        self._tail_thunk = tail_thunk
        self._tail = None
        self._forced = False

    @property
    def tail(self) -> Any:
        if not self._forced:
            self._tail = self._tail_thunk()
            self._forced = True
        return self._tail

    def extract(self) -> Any:
        return self.head

    def extend(self, f: Callable[["Cofree"], Any]) -> "Cofree":
        return Cofree(self.functor, f(self),
                      lambda: self.functor.fmap(lambda w: w.extend(f), self.tail))

    def duplicate(self) -> "Cofree":
        return self.extend(lambda w: w)

    def fmap(self, f: Callable[[Any], Any]) -> "Cofree":
        return Cofree(self.functor, f(self.head),
                      lambda: self.functor.fmap(lambda w: w.fmap(f), self.tail))

    @classmethod
    def unfold(cls, functor: FunctorDict, seed: Any, step: Callable[[Any], Any]) -> "Cofree":
        """step(seed) = (head, layer of next seeds)."""
        head, seeds = step(seed)
        return cls(functor, head, lambda: functor.fmap(lambda s: cls.unfold(functor, s, step), seeds))


def take(stream: Cofree, n: int) -> List[Any]:
    """First n heads of a stream (a Cofree over the identity functor)."""
    out = []
    for _ in range(n):
        out.append(stream.head)
        stream = stream.tail
    return out


def to_tree(tree: Cofree, depth: int) -> Any:
    """(head, [subtrees]) of a rose tree (Cofree over the list functor), cut at depth."""
    if depth == 0:
        return (tree.head, [])
    return (tree.head, [to_tree(child, depth - 1) for child in tree.tail])


def check_stream_comonad_laws(stream: Cofree,
                              f: Callable[[Cofree], Any],
                              g: Callable[[Cofree], Any],
                              n: int = 8) -> LawReport:
    """Comonad laws on the first n positions of a stream."""
    report = LawReport(name="cofree comonad laws (stream)")
    report.record("extract_extend", stream.extend(f).extract() == f(stream))
    report.record("extend_extract", take(stream.extend(lambda w: w.extract()), n) == take(stream, n))
    lhs = stream.extend(g).extend(f)
    rhs = stream.extend(lambda w: f(w.extend(g)))
    report.record("extend_extend", take(lhs, n) == take(rhs, n))
    return report


# ============================================================================
# FREE MONOID ADJUNCTION
# ============================================================================

def free_monoid_unit(x: Any) -> tuple:
    return (x,)


def fold_map(monoid: Monoid, f: Callable[[Any], Any], xs: Sequence[Any]) -> Any:
    """The unique monoid map (xs) -> monoid extending f."""
    return monoid.concat(f(x) for x in xs)


def check_free_monoid_universal(monoid: Monoid,
                                f: Callable[[Any], Any],
                                words: Sequence[Sequence[Any]]) -> LawReport:
    """fold_map f ∘ unit = f, and fold_map f preserves unit and concatenation."""
    report = LawReport(name=f"free monoid universal property into {monoid.name}")
    report.record("preserves_empty", fold_map(monoid, f, ()) == monoid.empty)
    for word in words:
        for x in word:
            report.record("triangle", fold_map(monoid, f, free_monoid_unit(x)) == f(x), f"x={x!r}")
        for other in words:
            lhs = fold_map(monoid, f, tuple(word) + tuple(other))
            rhs = monoid.combine(fold_map(monoid, f, word), fold_map(monoid, f, other))
            report.record("homomorphism", lhs == rhs, f"{word!r} ++ {other!r}")
    return report
