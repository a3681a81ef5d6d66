"""
Categorical Framework Module

Implements finite (small) categories, functors and natural transformations.
Objects and morphisms are enumerated explicitly, composition is given by a
table, and every law is checked by brute force over the enumeration.
"""

import itertools
import logging
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, List, Optional, Tuple
from dataclasses import dataclass, field

from .errors import CompositionError, LawViolationError

_logger = logging.getLogger(__name__)


def identity_name(obj: Hashable) -> str:
    """Name given to the identity morphism of an object."""
    return f"id_{obj}"


@dataclass
class LawReport:
    """
    Outcome of a law check.

    Attributes:
        name: What was checked (e.g. "category laws of C")
        checks: Law name -> whether it held on every sample
        failures: Human-readable description of each counterexample
    """
    name: str
    checks: Dict[str, bool] = field(default_factory=dict)
    failures: List[str] = field(default_factory=list)

    @property
    def holds(self) -> bool:
        return all(self.checks.values())

    def record(self, check: str, ok: bool, detail: str = "") -> bool:
        """Fold one sample into the named check."""
        self.checks[check] = self.checks.get(check, True) and ok
        if not ok and detail:
            self.failures.append(f"{check}: {detail}")
        return ok

    def summary(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "holds": self.holds,
            "checks": dict(self.checks),
            "failures": list(self.failures),
        }


@dataclass
class Morphism:
    """Represents a morphism (arrow) in a category."""
    source: Hashable
    target: Hashable
    name: str
    data: Optional[Any] = None

    def __hash__(self):
        return hash((self.source, self.target, self.name))

    def __eq__(self, other):
        if not isinstance(other, Morphism):
            return False
        return (self.source == other.source and
                self.target == other.target and
                self.name == other.name)

    def __repr__(self):
        return f"{self.name}: {self.source}→{self.target}"

    @property
    def is_identity(self) -> bool:
        return self.source == self.target and self.name == identity_name(self.source)


@dataclass(frozen=True)
class Edge:
    """A labelled directed edge of a quiver."""
    source: Hashable
    target: Hashable
    label: str


@dataclass
class Quiver:
    """Objects plus directed edges; generates a free category."""
    objects: List[Hashable] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)


@dataclass(eq=False)
class SmallCategory:
    """
    A finite category with explicitly enumerated objects and morphisms.

    Attributes:
        name: Name of the category
        objects: Objects, in insertion order
        morphisms: Morphisms (identities included), in insertion order
        composition: (g.name, f.name) -> name of g ∘ f for non-identity pairs

    Composites with an identity are resolved without consulting the table.
    """
    name: str
    objects: List[Hashable] = field(default_factory=list)
    morphisms: List[Morphism] = field(default_factory=list)
    composition: Dict[Tuple[str, str], str] = field(default_factory=dict, repr=False)
    _by_name: Dict[str, Morphism] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        objects, morphisms = list(self.objects), list(self.morphisms)
        self.objects, self.morphisms = [], []
        for obj in objects:
            self.add_object(obj)
        for morphism in morphisms:
            self.add_morphism(morphism)

    def add_object(self, obj: Hashable) -> None:
        """Add an object to the category together with its identity."""
        if obj in self.objects:
            return
        self.objects.append(obj)
        identity = Morphism(obj, obj, identity_name(obj))
        self.morphisms.append(identity)
        self._by_name[identity.name] = identity

    def add_morphism(self, morphism: Morphism) -> None:
        """Add a morphism to the category."""
        existing = self._by_name.get(morphism.name)
        if existing is not None:
            if existing != morphism:
                raise LawViolationError(
                    f"morphism name {morphism.name!r} already used for {existing!r}"
                )
            return
        if morphism.source not in self.objects:
            self.add_object(morphism.source)
        if morphism.target not in self.objects:
            self.add_object(morphism.target)
        self.morphisms.append(morphism)
        self._by_name[morphism.name] = morphism

    def set_composite(self, g: str, f: str, h: str) -> None:
        """Declare g ∘ f = h (all given by name)."""
        mg, mf, mh = self.morphism(g), self.morphism(f), self.morphism(h)
        if mf.target != mg.source:
            raise CompositionError(f"cannot compose {g} ∘ {f}: {mf.target} != {mg.source}")
        if mh.source != mf.source or mh.target != mg.target:
            raise LawViolationError(f"{h} cannot be the composite {g} ∘ {f}")
        self.composition[(g, f)] = h

    def morphism(self, name: str) -> Morphism:
        try:
            return self._by_name[name]
        except KeyError:
            raise LawViolationError(f"no morphism named {name!r} in {self.name}") from None

    def id(self, obj: Hashable) -> Morphism:
        if obj not in self.objects:
            raise LawViolationError(f"object {obj!r} not in {self.name}")
        return self._by_name[identity_name(obj)]

    def src(self, morphism: Morphism) -> Hashable:
        return morphism.source

    def dst(self, morphism: Morphism) -> Hashable:
        return morphism.target

    def compose(self, g: Morphism, f: Morphism) -> Morphism:
        """
        Compose two morphisms (g ∘ f).

        Args:
            g: Second morphism (B → C)
            f: First morphism (A → B)

        Returns:
            Composed morphism (A → C)

        Raises:
            CompositionError: if dst(f) != src(g)
            LawViolationError: if the composite is missing from the table
        """
        if f.target != g.source:
            raise CompositionError(
                f"cannot compose {g.name} ∘ {f.name}: {f.target} != {g.source}"
            )
        if f.is_identity:
            return g
        if g.is_identity:
            return f
        key = (g.name, f.name)
        if key not in self.composition:
            raise LawViolationError(f"composite {g.name} ∘ {f.name} not defined in {self.name}")
        return self._by_name[self.composition[key]]

    def hom(self, x: Hashable, y: Hashable) -> List[Morphism]:
        """All morphisms x → y."""
        return [m for m in self.morphisms if m.source == x and m.target == y]

    def morphisms_from(self, obj: Hashable) -> List[Morphism]:
        """Get all morphisms with the given object as source."""
        return [m for m in self.morphisms if m.source == obj]

    def morphisms_to(self, obj: Hashable) -> List[Morphism]:
        """Get all morphisms with the given object as target."""
        return [m for m in self.morphisms if m.target == obj]

    def non_identity_morphisms(self) -> List[Morphism]:
        return [m for m in self.morphisms if not m.is_identity]

    def composable_pairs(self) -> Iterator[Tuple[Morphism, Morphism]]:
        """Yield (f, g) with dst(f) = src(g)."""
        for f in self.morphisms:
            for g in self.morphisms_from(f.target):
                yield f, g

    def opposite(self) -> "SmallCategory":
        """The opposite category: same names, reversed arrows."""
        op = SmallCategory(name=f"{self.name}^op", objects=list(self.objects))
        for m in self.non_identity_morphisms():
            op.add_morphism(Morphism(m.target, m.source, m.name, m.data))
        for (g, f), h in self.composition.items():
            op.composition[(f, g)] = h
        return op


# ============================================================================
# CONSTRUCTORS
# ============================================================================

def discrete_category(objects: Iterable[Hashable], name: str = "Disc") -> SmallCategory:
    """Only identities."""
    return SmallCategory(name=name, objects=list(objects))


def terminal_category(name: str = "1") -> SmallCategory:
    """One object "*" and its identity."""
    return discrete_category(["*"], name=name)


def arrow_category(name: str = "2") -> SmallCategory:
    """Two objects and a single arrow u: X → Y."""
    return SmallCategory(name=name, objects=["X", "Y"], morphisms=[Morphism("X", "Y", "u")])


def from_composition_table(name: str,
                           objects: Iterable[Hashable],
                           arrows: Iterable[Tuple[str, Hashable, Hashable]],
                           table: Dict[Tuple[str, str], str]) -> SmallCategory:
    """
    Build a category from named arrows and a composition table.

    Args:
        name: Category name
        objects: Objects
        arrows: (name, source, target) for each non-identity arrow
        table: (g, f) -> g ∘ f for composable non-identity pairs; values may
               be identity names (see identity_name)
    """
    category = SmallCategory(name=name, objects=list(objects))
    for arrow_name, source, target in arrows:
        category.add_morphism(Morphism(source, target, arrow_name))
    for (g, f), h in table.items():
        category.set_composite(g, f, h)
    return category


def poset_category(elements: Iterable[Hashable],
                   leq: Callable[[Any, Any], bool],
                   name: str = "Poset") -> SmallCategory:
    """Thin category with an arrow x → y whenever leq(x, y)."""
    elements = list(elements)
    category = SmallCategory(name=name, objects=elements)
    arrow = {}
    for x, y in itertools.product(elements, repeat=2):
        if x != y and leq(x, y):
            arrow[(x, y)] = f"{x}≤{y}"
            category.add_morphism(Morphism(x, y, arrow[(x, y)]))
    for (x, y), f in arrow.items():
        for (y2, z), g in arrow.items():
            if y2 != y:
                continue
            composite = identity_name(x) if x == z else arrow.get((x, z))
            if composite is None:
                raise LawViolationError(f"{name}: leq is not transitive at {x} ≤ {y} ≤ {z}")
            category.composition[(g, f)] = composite
    return category


def free_category(quiver: Quiver,
                  max_length: Optional[int] = None,
                  name: str = "Free") -> SmallCategory:
    """
    Free category on a quiver: morphisms are edge paths.

    A path is named by its labels in traversal order joined with ";", and
    keeps the labels as a tuple in Morphism.data. The quiver must be
    acyclic: a cycle yields paths of every length, so it is rejected
    whatever max_length is. max_length (default: the edge count) only
    caps the longest path allowed.

    Raises:
        LawViolationError: if some path is longer than the bound, which
            always happens for a cyclic quiver
    """
    bound = len(quiver.edges) if max_length is None else max_length
    category = SmallCategory(name=name, objects=list(quiver.objects))
    frontier = [((e.label,), e.source, e.target) for e in quiver.edges]
    paths = []
    length = 1
    while frontier:
        if length > bound:
            raise LawViolationError(f"{name}: quiver has paths longer than {bound}")
        paths.extend(frontier)
        frontier = [
            (labels + (e.label,), source, e.target)
            for labels, source, target in frontier
            for e in quiver.edges
            if e.source == target
        ]
        length += 1

    by_labels = {}
    for labels, source, target in paths:
        morphism = Morphism(source, target, ";".join(labels), data=labels)
        category.add_morphism(morphism)
        by_labels[labels] = morphism
    for first, second in itertools.product(by_labels.values(), repeat=2):
        if first.target == second.source:
            composite = by_labels[first.data + second.data]
            category.composition[(second.name, first.name)] = composite.name
    _logger.debug("free category %s: %d paths", name, len(paths))
    return category


# ============================================================================
# LAW CHECKS
# ============================================================================

def check_category_laws(category: SmallCategory) -> LawReport:
    """Closure, identity and associativity over every composable pair/triple."""
    report = LawReport(name=f"category laws of {category.name}")

    def safe_compose(g, f):
        try:
            return category.compose(g, f)
        except (CompositionError, LawViolationError) as exc:
            report.record("closure", False, str(exc))
            return None

    for f, g in category.composable_pairs():
        gf = safe_compose(g, f)
        if gf is not None:
            report.record("closure", gf.source == f.source and gf.target == g.target,
                          f"{g.name} ∘ {f.name} has wrong endpoints")
    report.checks.setdefault("closure", True)

    for f in category.morphisms:
        left = safe_compose(category.id(f.target), f)
        right = safe_compose(f, category.id(f.source))
        report.record("identity", left == f and right == f, f"identity law fails at {f.name}")

    for f, g in category.composable_pairs():
        for h in category.morphisms_from(g.target):
            gf, hg = safe_compose(g, f), safe_compose(h, g)
            if gf is None or hg is None:
                continue
            lhs, rhs = safe_compose(h, gf), safe_compose(hg, f)
            report.record("associativity", lhs == rhs,
                          f"({h.name} ∘ {g.name}) ∘ {f.name} != {h.name} ∘ ({g.name} ∘ {f.name})")
    report.checks.setdefault("associativity", True)
    return report


@dataclass(eq=False)
class Functor:
    """
    Represents a functor between two categories.

    A functor F: C → D maps objects and morphisms from category C to category D
    while preserving composition and identities. Identities need not be listed
    in morphism_map; they follow the object map.
    """
    name: str
    source_category: SmallCategory
    target_category: SmallCategory
    object_map: Dict[Hashable, Hashable] = field(default_factory=dict)
    morphism_map: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_functions(cls, name: str,
                       source: SmallCategory,
                       target: SmallCategory,
                       fobj: Callable[[Hashable], Hashable],
                       fmor: Callable[[Morphism], Morphism]) -> "Functor":
        functor = cls(name=name, source_category=source, target_category=target)
        for obj in source.objects:
            functor.add_object_mapping(obj, fobj(obj))
        for morphism in source.non_identity_morphisms():
            functor.add_morphism_mapping(morphism.name, fmor(morphism).name)
        return functor

    def map_object(self, obj: Hashable) -> Optional[Hashable]:
        """Map an object from source to target category."""
        return self.object_map.get(obj)

    def map_morphism(self, morphism: Morphism) -> Optional[Morphism]:
        """Map a morphism from source to target category."""
        if morphism.name in self.morphism_map:
            return self.target_category.morphism(self.morphism_map[morphism.name])
        if morphism.is_identity and morphism.source in self.object_map:
            return self.target_category.id(self.object_map[morphism.source])
        return None

    def fobj(self, obj: Hashable) -> Hashable:
        """Strict object map."""
        image = self.map_object(obj)
        if image is None:
            raise LawViolationError(f"{self.name} does not map object {obj!r}")
        return image

    def fmor(self, morphism: Morphism) -> Morphism:
        """Strict morphism map."""
        image = self.map_morphism(morphism)
        if image is None:
            raise LawViolationError(f"{self.name} does not map morphism {morphism.name!r}")
        return image

    def add_object_mapping(self, source_obj: Hashable, target_obj: Hashable) -> None:
        """Add an object mapping to the functor."""
        if source_obj not in self.source_category.objects:
            raise ValueError(f"Object {source_obj} not in source category")
        if target_obj not in self.target_category.objects:
            raise ValueError(f"Object {target_obj} not in target category")
        self.object_map[source_obj] = target_obj

    def add_morphism_mapping(self, source_morph_name: str, target_morph_name: str) -> None:
        """Add a morphism mapping to the functor."""
        self.source_category.morphism(source_morph_name)
        self.target_category.morphism(target_morph_name)
        self.morphism_map[source_morph_name] = target_morph_name

    def then(self, other: "Functor") -> "Functor":
        """The composite other ∘ self."""
        if self.target_category is not other.source_category:
            raise CompositionError(f"cannot compose {other.name} ∘ {self.name}")
        return Functor.from_functions(
            f"{other.name}∘{self.name}",
            self.source_category,
            other.target_category,
            lambda obj: other.fobj(self.fobj(obj)),
            lambda m: other.fmor(self.fmor(m)),
        )


def identity_functor(category: SmallCategory) -> Functor:
    return Functor.from_functions(f"Id_{category.name}", category, category,
                                  lambda obj: obj, lambda m: m)


def constant_functor(source: SmallCategory, target: SmallCategory, obj: Hashable) -> Functor:
    """Sends everything to obj and its identity."""
    return Functor.from_functions(f"Δ_{obj}", source, target,
                                  lambda _: obj, lambda _: target.id(obj))


def check_functor_laws(functor: Functor) -> LawReport:
    """Totality, endpoint, identity and composition preservation."""
    C, D = functor.source_category, functor.target_category
    report = LawReport(name=f"functor laws of {functor.name}")

    for obj in C.objects:
        report.record("total_on_objects", functor.map_object(obj) is not None,
                      f"object {obj!r} unmapped")
    for m in C.morphisms:
        image = functor.map_morphism(m)
        if not report.record("total_on_morphisms", image is not None, f"{m.name} unmapped"):
            continue
        report.record("endpoints",
                      image.source == functor.map_object(m.source) and
                      image.target == functor.map_object(m.target),
                      f"{m.name} ↦ {image!r} has wrong endpoints")
        if m.is_identity:
            report.record("identity", image.is_identity, f"{m.name} ↦ {image.name}")
    if not report.holds:
        return report

    for f, g in C.composable_pairs():
        try:
            lhs = functor.fmor(C.compose(g, f))
            rhs = D.compose(functor.fmor(g), functor.fmor(f))
        except (CompositionError, LawViolationError) as exc:
            report.record("composition", False, str(exc))
            continue
        report.record("composition", lhs == rhs,
                      f"F({g.name} ∘ {f.name}) = {lhs.name} but F{g.name} ∘ F{f.name} = {rhs.name}")
    report.checks.setdefault("composition", True)
    return report


@dataclass
class NaturalTransformation:
    """
    Represents a natural transformation between two functors.

    A natural transformation η: F ⇒ G assigns to each object X in C
    a morphism η_X: F(X) → G(X) in D such that naturality squares commute.
    """
    name: str
    source_functor: Functor
    target_functor: Functor
    components: Dict[Hashable, Morphism] = field(default_factory=dict)

    def __post_init__(self):
        """Validate that functors have the same source and target categories."""
        if self.source_functor.source_category is not self.target_functor.source_category:
            raise ValueError("Functors must have the same source category")
        if self.source_functor.target_category is not self.target_functor.target_category:
            raise ValueError("Functors must have the same target category")

    def add_component(self, obj: Hashable, morphism: Morphism) -> None:
        """
        Add a component morphism for an object.

        Args:
            obj: Object in the source category
            morphism: Morphism F(obj) → G(obj) in the target category
        """
        source_obj = self.source_functor.map_object(obj)
        target_obj = self.target_functor.map_object(obj)

        if morphism.source != source_obj or morphism.target != target_obj:
            raise ValueError("Component morphism has incorrect source or target")

        self.components[obj] = morphism

    def is_natural(self) -> bool:
        """Check if the naturality condition holds for all morphisms."""
        return not self.naturality_failures()

    def naturality_failures(self) -> List[str]:
        """Names of morphisms whose naturality square does not commute."""
        source_cat = self.source_functor.source_category
        return [f.name for f in source_cat.morphisms if not self._check_naturality_square(f)]

    def _check_naturality_square(self, f: Morphism) -> bool:
        """G(f) ∘ η_X = η_Y ∘ F(f)."""
        eta_x = self.components.get(f.source)
        eta_y = self.components.get(f.target)
        if eta_x is None or eta_y is None:
            return False

        D = self.source_functor.target_category
        try:
            f_f = self.source_functor.fmor(f)
            g_f = self.target_functor.fmor(f)
            return D.compose(g_f, eta_x) == D.compose(eta_y, f_f)
        except (CompositionError, LawViolationError) as exc:
            _logger.debug("%s: naturality square at %s fails: %s", self.name, f.name, exc)
            return False
