"""
Tests for free monads, cofree comonads and free monoids
"""

import pytest

from smallcat.errors import SmallCatError
from smallcat.free import (
    CONSOLE,
    IDENTITY_FUNCTOR,
    LIST_FUNCTOR,
    Cofree,
    FreeMonad,
    ScriptedConsole,
    check_free_monad_laws,
    check_free_monoid_universal,
    check_stream_comonad_laws,
    fold_map,
    free_monoid_unit,
    print_line,
    read_line,
    take,
    to_tree,
)
from smallcat.optics import LIST_MONOID, SUM_MONOID


def greeter():
    return CONSOLE.bind(
        print_line("name?"),
        lambda _: CONSOLE.bind(
            read_line(),
            lambda name: CONSOLE.then(print_line(f"hi {name}"), CONSOLE.pure(name)),
        ),
    )


def observe(program):
    console = ScriptedConsole(inputs=["a", "b", "c"])
    return console.run(program), tuple(console.output)


def naturals():
    return Cofree.unfold(IDENTITY_FUNCTOR, 0, lambda n: (n, n + 1))


class TestFreeMonad:
    def test_console_program(self):
        console = ScriptedConsole(inputs=["bob"])
        assert console.run(greeter()) == "bob"
        assert console.output == ["name?", "hi bob"]

    def test_script_exhausted(self):
        with pytest.raises(SmallCatError):
            ScriptedConsole().run(read_line())

    def test_sequence_and_fmap(self):
        assert ScriptedConsole(inputs=["a", "b"]).run(CONSOLE.sequence([read_line(), read_line()])) == ["a", "b"]
        assert ScriptedConsole(inputs=["x"]).run(CONSOLE.fmap(str.upper, read_line())) == "X"

    def test_identity_functor(self):
        monad = FreeMonad(IDENTITY_FUNCTOR)
        program = monad.bind(monad.lift_f(5), lambda x: monad.lift_f(x * 2))
        assert monad.fold_free(lambda layer: layer, program) == 10

    def test_long_program_is_not_recursive(self):
        program = CONSOLE.pure(0)
        for i in range(2000):
            program = CONSOLE.then(print_line(str(i)), program)
        console = ScriptedConsole()
        assert console.run(program) == 0
        assert len(console.output) == 2000

    def test_laws(self):
        report = check_free_monad_laws(
            CONSOLE,
            values=[1, "v"],
            programs=[read_line(), print_line("p"), greeter()],
            k=lambda a: CONSOLE.then(print_line(f"k{a}"), CONSOLE.pure(a)),
            h=lambda a: CONSOLE.bind(read_line(), lambda x: CONSOLE.pure((a, x))),
            observe=observe,
        )
        assert report.holds, report.failures


class TestCofree:
    def test_stream(self):
        assert take(naturals(), 5) == [0, 1, 2, 3, 4]
        assert take(naturals().fmap(lambda x: x * x), 4) == [0, 1, 4, 9]

    def test_extend(self):
        pairs = naturals().extend(lambda w: w.head + w.tail.head)
        assert take(pairs, 3) == [1, 3, 5]

    def test_duplicate(self):
        nats = naturals()
        dup = nats.duplicate()
        assert dup.extract() is nats
        assert take(dup.tail.head, 2) == [1, 2]

    def test_tail_is_memoized(self):
        nats = naturals()
        assert nats.tail is nats.tail

    def test_laws(self):
        report = check_stream_comonad_laws(naturals(),
                                           lambda w: w.head * 2,
                                           lambda w: w.head + w.tail.head)
        assert report.holds

    def test_rose_tree(self):
        tree = Cofree.unfold(LIST_FUNCTOR, 1, lambda n: (n, [2 * n, 2 * n + 1] if n < 4 else []))
        assert to_tree(tree, 2) == (1, [(2, [(4, []), (5, [])]), (3, [(6, []), (7, [])])])


class TestFreeMonoid:
    def test_unit_and_fold(self):
        assert free_monoid_unit(3) == (3,)
        assert fold_map(SUM_MONOID, len, ["ab", "c"]) == 3
        assert fold_map(LIST_MONOID, lambda x: (x, x), [1, 2]) == (1, 1, 2, 2)

    def test_universal_property(self):
        assert check_free_monoid_universal(SUM_MONOID, lambda x: x, [(1, 2), (3,), ()]).holds
        assert check_free_monoid_universal(LIST_MONOID, lambda x: (x, x), [("a",), ("b", "c")]).holds
