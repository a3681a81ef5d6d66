"""
Example: Free Monads and Cofree Comonads

A console program interpreted against a script, the stream comonad of
natural numbers, and the free monoid's universal property.
"""

import logging

from smallcat.constants import LOG_FORMAT
from smallcat.free import (
    CONSOLE,
    IDENTITY_FUNCTOR,
    Cofree,
    ScriptedConsole,
    check_free_monoid_universal,
    check_stream_comonad_laws,
    fold_map,
    print_line,
    read_line,
    take,
)
from smallcat.optics import SUM_MONOID


def print_section(title):
    """Print a formatted section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def console_program():
    print_section("Console program")
    program = CONSOLE.bind(
        print_line("what is your name?"),
        lambda _: CONSOLE.bind(
            read_line(),
            lambda name: CONSOLE.then(print_line(f"hello, {name}"), CONSOLE.pure(len(name))),
        ),
    )
    console = ScriptedConsole(inputs=["grothendieck"])
    result = console.run(program)
    for line in console.output:
        print(f"  > {line}")
    print(f"\n  result: {result}")


def streams():
    print_section("Streams")
    nats = Cofree.unfold(IDENTITY_FUNCTOR, 0, lambda n: (n, n + 1))
    window = nats.extend(lambda w: sum(take(w, 3)))
    print(f"\n  naturals        {take(nats, 8)}")
    print(f"  sliding sum(3)  {take(window, 8)}")
    report = check_stream_comonad_laws(nats, lambda w: w.head * 2, lambda w: w.head + w.tail.head)
    print(f"  comonad laws    {'✓' if report.holds else '✗'}")
    return report.holds


def free_monoid():
    print_section("Free monoid")
    words = [("ab", "c"), ("de",), ()]
    for word in words:
        print(f"  fold_map len {word!r} = {fold_map(SUM_MONOID, len, word)}")
    report = check_free_monoid_universal(SUM_MONOID, len, words)
    print(f"  universal property {'✓' if report.holds else '✗'}")
    return report.holds


def main():
    console_program()
    ok = streams() and free_monoid()
    print("\n" + ("✓" if ok else "✗") + " Free structure checks complete\n")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    main()
