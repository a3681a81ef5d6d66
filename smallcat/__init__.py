"""
smallcat - Finite Category Theory, Computed

Small categories, functors and natural transformations with executable
constructions on top: Kan extensions, group canonicalization, integral
homology, nerves, profunctor optics, free/cofree structures and the
allegory of relations.
"""

__version__ = "0.1.0"

from .errors import (
    CarrierMismatchError,
    CompositionError,
    LawViolationError,
    SearchLimitError,
    SmallCatError,
)
from .categorical import (
    Edge,
    Functor,
    LawReport,
    Morphism,
    NaturalTransformation,
    Quiver,
    SmallCategory,
    free_category,
)
from .sets import SetFunctor, SetObj
from .kan import left_kan, right_kan, colimit, limit, pushout_quiver, merge_schemas
from .groups import FiniteGroup, canonical_key, automorphism_group, tag_canonical_type
from .homology import ChainComplex, smith_normal_form, compute_homology01, homology_from_sset
from .nerve import Nerve, nerve_to_sset02
from .optics import Optic, lens, prism, traversal, view, over, preview, review
from .free import FreeMonad, Cofree
from .relations import Finite, Rel, Subset

__all__ = [
    "SmallCatError",
    "CompositionError",
    "LawViolationError",
    "SearchLimitError",
    "CarrierMismatchError",
    "Edge",
    "Functor",
    "LawReport",
    "Morphism",
    "NaturalTransformation",
    "Quiver",
    "SmallCategory",
    "free_category",
    "SetFunctor",
    "SetObj",
    "left_kan",
    "right_kan",
    "colimit",
    "limit",
    "pushout_quiver",
    "merge_schemas",
    "FiniteGroup",
    "canonical_key",
    "automorphism_group",
    "tag_canonical_type",
    "ChainComplex",
    "smith_normal_form",
    "compute_homology01",
    "homology_from_sset",
    "Nerve",
    "nerve_to_sset02",
    "Optic",
    "lens",
    "prism",
    "traversal",
    "view",
    "over",
    "preview",
    "review",
    "FreeMonad",
    "Cofree",
    "Finite",
    "Rel",
    "Subset",
]
