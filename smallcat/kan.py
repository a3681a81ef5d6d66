"""
Pointwise Kan extensions of Set-valued functors.

For F: C → D and H: C → Set, both between finite categories:

    (Lan_F H)(d) = ∫^c D(Fc, d) × H(c)     coend, computed as a quotient
    (Ran_F H)(d) = ∫_c H(c)^D(d, Fc)        end, computed as a filtered product

The coend quotient is built with a union-find over triples (c, f, x); the
end is built by enumerating families of functions and keeping the
dinatural ones.
"""

import itertools
import logging
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple
from dataclasses import dataclass, field

from .categorical import (Edge, Functor, Morphism, Quiver, SmallCategory, constant_functor,
                          terminal_category)
from .constants import MAX_FUNCTION_SPACE
from .errors import CarrierMismatchError, SearchLimitError
from .sets import SetFunctor, SetNatIso, SetObj, all_functions, freeze

_logger = logging.getLogger(__name__)


class UnionFind:
    """Disjoint sets over hashable keys with path compression."""

    def __init__(self, keys: Iterable[Hashable] = ()):
        self._parent: Dict[Hashable, Hashable] = {k: k for k in keys}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._parent

    def add(self, key: Hashable) -> None:
        self._parent.setdefault(key, key)

    def find(self, key: Hashable) -> Hashable:
        root = key
        while self._parent[root] != root:
            root = self._parent[root]
        while self._parent[key] != root:
            self._parent[key], key = root, self._parent[key]
        return root

    def union(self, a: Hashable, b: Hashable) -> bool:
        """Merge the classes of a and b; False if they were already merged."""
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        self._parent[ra] = rb
        return True

    def classes(self) -> Dict[Hashable, List[Hashable]]:
        out: Dict[Hashable, List[Hashable]] = {}
        for key in self._parent:
            out.setdefault(self.find(key), []).append(key)
        return out


@dataclass(frozen=True)
class CoendNode:
    """A triple (c, f: Fc → d, x ∈ H(c))."""
    c: Hashable
    f: Morphism
    x: Any


@dataclass(frozen=True)
class CoendClass:
    """An element of (Lan_F H)(d): an equivalence class of coend nodes."""
    key: Hashable
    rep: CoendNode = field(compare=False)

    def __repr__(self):
        return f"[{self.rep.c}, {self.rep.f.name}, {self.rep.x!r}]"


@dataclass(eq=False)
class EndFamily:
    """An element of (Ran_F H)(d): components α_c as {g: α_c(g)} for g: d → Fc."""
    components: Dict[Hashable, Dict[Hashable, Any]]

    def __call__(self, c: Hashable, g: Morphism) -> Any:
        return self.components[c][g]

    @property
    def key(self) -> Hashable:
        return freeze(self.components)

    def __eq__(self, other):
        return isinstance(other, EndFamily) and self.key == other.key

    def __hash__(self):
        return hash(self.key)

    def __repr__(self):
        parts = []
        for c, comp in self.components.items():
            inner = ", ".join(f"{g.name}↦{v!r}" for g, v in comp.items())
            parts.append(f"{c}: {{{inner}}}")
        return "⟨" + "; ".join(parts) + "⟩"


@dataclass(eq=False)
class KanExtension:
    """
    A Kan extension evaluated lazily per object of D.

    Attributes:
        name: Display name
        functor: F: C → D
        diagram: H: C → Set
        obj_fn: d -> SetObj
        map_fn: v -> function (Ext)(src v) → (Ext)(dst v)
    """
    name: str
    functor: Functor
    diagram: SetFunctor
    obj_fn: Callable[[Hashable], SetObj]
    map_fn: Callable[[Morphism], Callable[[Any], Any]]

    def obj(self, d: Hashable) -> SetObj:
        return self.obj_fn(d)

    def map(self, v: Morphism) -> Callable[[Any], Any]:
        return self.map_fn(v)

    def as_set_functor(self) -> SetFunctor:
        return SetFunctor(name=self.name, category=self.functor.target_category,
                          obj_fn=self.obj_fn, map_fn=self.map_fn)


def _check_diagram(functor: Functor, diagram: SetFunctor) -> Tuple[SmallCategory, SmallCategory]:
    if diagram.category is not functor.source_category:
        raise CarrierMismatchError(
            f"{diagram.name} is not a functor on {functor.source_category.name}"
        )
    return functor.source_category, functor.target_category


def left_kan(functor: Functor, diagram: SetFunctor, name: Optional[str] = None) -> KanExtension:
    """
    Left Kan extension Lan_F H as a coend quotient.

    Nodes (c, f: Fc → d, x ∈ H(c)) are identified by
    (c, h ∘ F(u), x) ~ (c', h, H(u)(x)) for every u: c → c' and h: Fc' → d.
    """
    C, D = _check_diagram(functor, diagram)
    name = name or f"Lan_{functor.name} {diagram.name}"
    cache: Dict[Hashable, Tuple[SetObj, Callable[[Hashable, Morphism, Any], CoendClass]]] = {}

    def node_key(c, f, x):
        return (c, f, diagram.obj(c).key(x))

    def build(d):
        if d in cache:
            return cache[d]
        nodes: Dict[Hashable, CoendNode] = {}
        for c in C.objects:
            for f in D.hom(functor.fobj(c), d):
                for x in diagram.obj(c):
                    nodes[node_key(c, f, x)] = CoendNode(c, f, x)
        uf = UnionFind(nodes)

        for u in C.morphisms:
            Hu, Fu = diagram.map(u), functor.fmor(u)
            for h in D.hom(functor.fobj(u.target), d):
                f1 = D.compose(h, Fu)
                for x in diagram.obj(u.source):
                    left = node_key(u.source, f1, x)
                    right = node_key(u.target, h, Hu(x))
                    if left in uf and right in uf:
                        uf.union(left, right)

        classes: Dict[Hashable, CoendClass] = {}
        for key, node in nodes.items():
            root = uf.find(key)
            if root not in classes:
                classes[root] = CoendClass(key=root, rep=node)
        _logger.debug("%s(%s): %d coend nodes, %d classes", name, d, len(nodes), len(classes))

        def normalize(c, f, x):
            return classes[uf.find(node_key(c, f, x))]

        cache[d] = (SetObj(f"{name}({d})", list(classes.values())), normalize)
        return cache[d]

    def obj_fn(d):
        return build(d)[0]

    def map_fn(v):
        _, normalize = build(v.target)

        def apply(cls):
            rep = cls.rep
            return normalize(rep.c, D.compose(v, rep.f), rep.x)

        return apply

    return KanExtension(name=name, functor=functor, diagram=diagram, obj_fn=obj_fn, map_fn=map_fn)


def right_kan(functor: Functor,
              diagram: SetFunctor,
              name: Optional[str] = None,
              max_families: int = MAX_FUNCTION_SPACE) -> KanExtension:
    """
    Right Kan extension Ran_F H as an end.

    Elements at d are families α_c: D(d, Fc) → H(c) with
    H(u)(α_c(g)) = α_c'(F(u) ∘ g) for every u: c → c' and g: d → Fc.

    Raises:
        SearchLimitError: if the candidate product exceeds max_families
    """
    C, D = _check_diagram(functor, diagram)
    name = name or f"Ran_{functor.name} {diagram.name}"
    cache: Dict[Hashable, SetObj] = {}

    def is_dinatural(family, d):
        for u in C.morphisms:
            Hu, Fu = diagram.map(u), functor.fmor(u)
            target = diagram.obj(u.target)
            for g in D.hom(d, functor.fobj(u.source)):
                if not target.same(Hu(family(u.source, g)), family(u.target, D.compose(Fu, g))):
                    return False
        return True

    def obj_fn(d):
        if d in cache:
            return cache[d]
        homs = {c: D.hom(d, functor.fobj(c)) for c in C.objects}
        total = 1
        for c in C.objects:
            total *= diagram.obj(c).size() ** len(homs[c])
        if total > max_families:
            raise SearchLimitError(f"{name}({d}): {total} candidate families exceed limit {max_families}")
        spaces = [list(all_functions(homs[c], diagram.obj(c).elems, max_families)) for c in C.objects]
        families = []
        for choice in itertools.product(*spaces):
            family = EndFamily(dict(zip(C.objects, choice)))
            if is_dinatural(family, d):
                families.append(family)
        _logger.debug("%s(%s): %d candidates, %d dinatural", name, d, total, len(families))
        cache[d] = SetObj(f"{name}({d})", families)
        return cache[d]

    def map_fn(v):
        def apply(family):
            components = {
                c: {g: family(c, D.compose(g, v)) for g in D.hom(v.target, functor.fobj(c))}
                for c in C.objects
            }
            return EndFamily(components)

        return apply

    return KanExtension(name=name, functor=functor, diagram=diagram, obj_fn=obj_fn, map_fn=map_fn)


def _to_terminal(category: SmallCategory) -> Functor:
    return constant_functor(category, terminal_category(), "*")


def colimit(diagram: SetFunctor) -> SetObj:
    """colim H as Lan along C → 1: connected components of the category of elements."""
    result = left_kan(_to_terminal(diagram.category), diagram, name=f"colim {diagram.name}").obj("*")
    _logger.info("colim %s has %d elements", diagram.name, result.size())
    return result


def limit(diagram: SetFunctor) -> SetObj:
    """lim H as Ran along C → 1: compatible families."""
    result = right_kan(_to_terminal(diagram.category), diagram, name=f"lim {diagram.name}").obj("*")
    _logger.info("lim %s has %d elements", diagram.name, result.size())
    return result


def lan_identity_iso(diagram: SetFunctor) -> SetNatIso:
    """
    The comparison H ≅ Lan_Id H.

    Forward sends x ∈ H(c) to the class of (c, id_c, x); backward sends the
    class of (c', f, x) to H(f)(x).
    """
    C = diagram.category
    lan = left_kan(Functor.from_functions(f"Id_{C.name}", C, C, lambda c: c, lambda m: m), diagram)

    def at(c):
        classes = lan.obj(c)
        lookup = {}
        for cls in classes:
            rep = cls.rep
            lookup[diagram.obj(c).key(diagram.map(rep.f)(rep.x))] = cls

        def forward(x):
            return lookup[diagram.obj(c).key(x)]

        return forward

    def inv_at(c):
        def backward(cls):
            return diagram.map(cls.rep.f)(cls.rep.x)

        return backward

    return SetNatIso(source=diagram, target=lan.as_set_functor(), at=at, inv_at=inv_at)


# ============================================================================
# QUIVER PUSHOUTS
# ============================================================================

@dataclass
class QuiverMorphism:
    """Vertex and edge maps Q → Q' (endpoints are expected to be preserved)."""
    source: Quiver
    target: Quiver
    on_object: Callable[[Hashable], Hashable]
    on_edge: Callable[[Edge], Edge]


def _glue(vertices: List[Hashable],
          edges: List[Edge],
          identify: Iterable[Tuple[Hashable, Hashable]]) -> Quiver:
    """Quotient of a quiver by the vertex identifications in identify."""
    uf = UnionFind(vertices)
    for a, b in identify:
        uf.union(a, b)

    chosen: Dict[Hashable, Hashable] = {}
    for v in vertices:
        chosen.setdefault(uf.find(v), v)

    glued: Dict[Edge, None] = {}
    for e in edges:
        glued.setdefault(Edge(chosen[uf.find(e.source)], chosen[uf.find(e.target)], e.label), None)
    return Quiver(objects=list(chosen.values()), edges=list(glued))


def pushout_quiver(f: QuiverMorphism, g: QuiverMorphism) -> Quiver:
    """
    Glue f.target and g.target along the span f, g out of a common quiver.

    Vertices f(v) and g(v) are merged; edges are remapped onto the merged
    vertices and deduplicated by (source, target, label).
    """
    if f.source is not g.source:
        raise CarrierMismatchError("pushout_quiver: the two maps must share their source quiver")
    vertices = list(f.target.objects) + list(g.target.objects)
    edges = list(f.target.edges) + list(g.target.edges)
    for e in f.source.edges:
        edges += [f.on_edge(e), g.on_edge(e)]
    result = _glue(vertices, edges, [(f.on_object(v), g.on_object(v)) for v in f.source.objects])
    _logger.debug("pushout: %d vertices, %d edges", len(result.objects), len(result.edges))
    return result


def coequalizer_quiver(r0: QuiverMorphism, r1: QuiverMorphism) -> Quiver:
    """Quotient of the common target identifying r0(v) with r1(v) for every v."""
    if r0.source is not r1.source or r0.target is not r1.target:
        raise CarrierMismatchError("coequalizer_quiver: the two maps must be parallel")
    Q = r0.target
    return _glue(list(Q.objects), list(Q.edges),
                 [(r0.on_object(v), r1.on_object(v)) for v in r0.source.objects])


def rename_vertices(quiver: Quiver, renaming: Dict[Hashable, Hashable]) -> Quiver:
    """Send each vertex v to renaming.get(v, v); vertices with a common name merge."""
    def rename(v):
        return renaming.get(v, v)

    objects = list(dict.fromkeys(rename(v) for v in quiver.objects))
    edges = [Edge(rename(e.source), rename(e.target), e.label) for e in quiver.edges]
    return Quiver(objects=objects, edges=list(dict.fromkeys(edges)))


def merge_schemas(q1: Quiver, q2: Quiver) -> Quiver:
    """Pushout of q1 ← shared → q2 where shared holds the common vertices and edges."""
    shared = Quiver(objects=[v for v in q1.objects if v in q2.objects],
                    edges=[e for e in q1.edges if e in q2.edges])
    left = QuiverMorphism(shared, q1, lambda v: v, lambda e: e)
    right = QuiverMorphism(shared, q2, lambda v: v, lambda e: e)
    _logger.info("merging quivers over %d shared vertices", len(shared.objects))
    return pushout_quiver(left, right)
