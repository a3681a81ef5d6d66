"""
Homology Module

Integer homology of small chain complexes:

1. Smith normal form over ℤ with unimodular U, V and a certificate U·A·V = D
2. Quiver homology H0/H1 from the nerve of the path category (ranks over ℚ)
3. Simplicial sets up to dimension 2 and chain complexes over ℤ with torsion

Matrices are numpy arrays of dtype=object holding Python ints, so arithmetic
is exact.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field

import numpy as np

from .categorical import Quiver
from .constants import DEFAULT_MAX_PATH_LEN
from .errors import LawViolationError

_logger = logging.getLogger(__name__)


# ============================================================================
# INTEGER MATRICES
# ============================================================================

def int_matrix(matrix, shape: Optional[Tuple[int, int]] = None) -> np.ndarray:
    """Copy into a 2-D object array of Python ints; empty input takes shape."""
    out = np.array(matrix, dtype=object)
    if out.size == 0:
        if out.ndim == 2:
            return np.zeros(out.shape, dtype=object)
        return np.zeros(shape or (0, 0), dtype=object)
    if out.ndim != 2:
        raise LawViolationError(f"expected a 2-D integer matrix, got shape {out.shape}")
    return np.vectorize(int, otypes=[object])(out)


def identity_matrix(n: int) -> np.ndarray:
    out = np.zeros((n, n), dtype=object)
    for i in range(n):
        out[i, i] = 1
    return out


def egcd(a: int, b: int) -> Tuple[int, int, int]:
    """(g, x, y) with a·x + b·y = g = gcd(a, b) ≥ 0."""
    old_r, r = a, b
    old_s, s = 1, 0
    old_t, t = 0, 1
    while r != 0:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_s, s = s, old_s - q * s
        old_t, t = t, old_t - q * t
    if old_r < 0:
        return -old_r, -old_s, -old_t
    return old_r, old_s, old_t


def int_det(matrix) -> int:
    """Exact determinant by fraction-free (Bareiss) elimination."""
    A = int_matrix(matrix).copy()
    n = A.shape[0]
    if n == 0:
        return 1
    sign, prev = 1, 1
    for k in range(n - 1):
        if A[k, k] == 0:
            swap = next((i for i in range(k + 1, n) if A[i, k] != 0), None)
            if swap is None:
                return 0
            A[[k, swap]] = A[[swap, k]]
            sign = -sign
        for i in range(k + 1, n):
            for j in range(k + 1, n):
                A[i, j] = (A[i, j] * A[k, k] - A[i, k] * A[k, j]) // prev
        prev = A[k, k]
    return sign * A[n - 1, n - 1]


# ============================================================================
# SMITH NORMAL FORM
# ============================================================================

@dataclass
class SNFResult:
    """U·A·V = D with U, V unimodular and D diagonal, d1 | d2 | ..."""
    U: np.ndarray
    D: np.ndarray
    V: np.ndarray


@dataclass
class SNFCertificate:
    ok: bool
    diff: np.ndarray
    diagonal: bool = True
    divisibility: bool = True
    unimodular: bool = True


def _combine(M: np.ndarray, t: int, r: int, coeffs: Tuple[int, int, int, int], axis: int) -> None:
    """Replace lines (t, r) of M by (x·t + y·r, u·t + v·r); axis 0 = rows, 1 = columns."""
    x, y, u, v = coeffs
    if axis == 0:
        lt, lr = M[t].copy(), M[r].copy()
        M[t] = x * lt + y * lr
        M[r] = u * lt + v * lr
    else:
        lt, lr = M[:, t].copy(), M[:, r].copy()
        M[:, t] = x * lt + y * lr
        M[:, r] = u * lt + v * lr


def _eliminate(D: np.ndarray, W: np.ndarray, t: int, axis: int) -> None:
    """Zero the pivot column (axis 0) or pivot row (axis 1) beyond t."""
    length = D.shape[axis]
    for r in range(t + 1, length):
        a = D[t, t]
        b = D[r, t] if axis == 0 else D[t, r]
        if b == 0:
            continue
        if b % a == 0:
            coeffs = (1, 0, -(b // a), 1)
        else:
            g, x, y = egcd(a, b)
            coeffs = (x, y, -(b // g), a // g)
        _combine(D, t, r, coeffs, axis)
        _combine(W, t, r, coeffs, axis)


def _smallest_nonzero(D: np.ndarray, t: int) -> Optional[Tuple[int, int]]:
    best = None
    for i in range(t, D.shape[0]):
        for j in range(t, D.shape[1]):
            if D[i, j] != 0 and (best is None or abs(D[i, j]) < abs(D[best])):
                best = (i, j)
    return best


def _non_divisible_row(D: np.ndarray, t: int) -> Optional[int]:
    pivot = D[t, t]
    for i in range(t + 1, D.shape[0]):
        for j in range(t + 1, D.shape[1]):
            if D[i, j] % pivot != 0:
                return i
    return None


def smith_normal_form(matrix) -> SNFResult:
    """
    Smith normal form over ℤ.

    Returns U, D, V with U·A·V = D. Bezout row and column operations are
    used only when the pivot does not divide the entry being cleared.
    """
    D = int_matrix(matrix)
    m, n = D.shape
    U, V = identity_matrix(m), identity_matrix(n)
    for t in range(min(m, n)):
        pivot = _smallest_nonzero(D, t)
        if pivot is None:
            break
        i, j = pivot
        if i != t:
            D[[t, i]] = D[[i, t]]
            U[[t, i]] = U[[i, t]]
        if j != t:
            D[:, [t, j]] = D[:, [j, t]]
            V[:, [t, j]] = V[:, [j, t]]
        while True:
            _eliminate(D, U, t, axis=0)
            _eliminate(D, V, t, axis=1)
            if any(D[r, t] != 0 for r in range(t + 1, m)):
                continue
            bad = _non_divisible_row(D, t)
            if bad is None:
                break
            D[t] = D[t] + D[bad]
            U[t] = U[t] + U[bad]
        if D[t, t] < 0:
            D[t] = -D[t]
            U[t] = -U[t]
    return SNFResult(U, D, V)


def invariant_factors(D: np.ndarray) -> List[int]:
    """Nonzero diagonal entries of a Smith form, as positive ints."""
    D = int_matrix(D)
    return [abs(int(D[k, k])) for k in range(min(D.shape)) if D[k, k] != 0]


def certify_snf(matrix, snf: SNFResult) -> SNFCertificate:
    """Check U·A·V = D exactly, plus diagonality, divisibility and unimodularity."""
    A = int_matrix(matrix)
    diff = snf.U.dot(A).dot(snf.V) - snf.D if A.size else np.zeros(snf.D.shape, dtype=object)
    diagonal = all(snf.D[i, j] == 0
                   for i in range(snf.D.shape[0]) for j in range(snf.D.shape[1]) if i != j)
    factors = [abs(int(snf.D[k, k])) for k in range(min(snf.D.shape))]
    divisibility = all(b % a == 0 if a else b == 0 for a, b in zip(factors, factors[1:]))
    unimodular = abs(int_det(snf.U)) == 1 and abs(int_det(snf.V)) == 1
    ok = not np.any(diff != 0) and diagonal and divisibility and unimodular
    return SNFCertificate(ok=bool(ok), diff=diff, diagonal=diagonal,
                          divisibility=divisibility, unimodular=unimodular)


def inv_unimodular(matrix) -> np.ndarray:
    """
    Exact inverse of a unimodular integer matrix.

    Raises:
        LawViolationError: if the matrix is not square with determinant ±1
    """
    M = int_matrix(matrix)
    if M.shape[0] != M.shape[1]:
        raise LawViolationError(f"inv_unimodular: matrix of shape {M.shape} is not square")
    snf = smith_normal_form(M)
    if any(snf.D[k, k] != 1 for k in range(M.shape[0])):
        raise LawViolationError(
            f"inv_unimodular: not unimodular (invariant factors {invariant_factors(snf.D)})"
        )
    return snf.V.dot(snf.U)


def rank_over_q(matrix) -> int:
    """Exact: an integer matrix has the same rank over ℚ and over ℤ."""
    return rank_over_z(matrix)


def rank_over_z(matrix) -> int:
    """Number of invariant factors; equals the rank over ℚ."""
    A = int_matrix(matrix)
    if A.size == 0:
        return 0
    return len(invariant_factors(smith_normal_form(A).D))


# ============================================================================
# QUIVER HOMOLOGY
# ============================================================================

@dataclass(frozen=True)
class HomologyPath:
    source: str
    target: str
    labels: Tuple[str, ...]

    def __str__(self):
        return f"{self.source} -[{' ; '.join(self.labels)}]-> {self.target}"


@dataclass(frozen=True)
class TwoSimplex:
    """A composable pair (f, g) together with its composite."""
    f: HomologyPath
    g: HomologyPath
    comp: HomologyPath

    def __str__(self):
        return f"({self.f} , {self.g})  with comp = {self.comp}"


@dataclass
class HomologyResult:
    betti0: int
    betti1: int
    components: List[List[str]]
    rank_d1: int = 0
    rank_d2: int = 0


def build_paths(quiver: Quiver, max_len: int = DEFAULT_MAX_PATH_LEN) -> List[HomologyPath]:
    """All edge paths of length 1..max_len, shortest first."""
    edges = [HomologyPath(e.source, e.target, (e.label,)) for e in quiver.edges]
    out = list(dict.fromkeys(edges))
    frontier = edges
    for _ in range(2, max_len + 1):
        frontier = [HomologyPath(p.source, e.target, p.labels + e.labels)
                    for p in frontier for e in edges if p.target == e.source]
        out.extend(p for p in frontier if p not in out)
    return out


def basis_c0(quiver: Quiver) -> List[str]:
    return list(quiver.objects)


def basis_c1(quiver: Quiver, max_len: int = DEFAULT_MAX_PATH_LEN) -> List[HomologyPath]:
    return build_paths(quiver, max_len)


def basis_c2(quiver: Quiver, max_len: int = DEFAULT_MAX_PATH_LEN) -> List[TwoSimplex]:
    paths = build_paths(quiver, max_len)
    out = []
    for f in paths:
        for g in paths:
            if f.target == g.source and len(f.labels) + len(g.labels) <= max_len:
                out.append(TwoSimplex(f, g, HomologyPath(f.source, g.target, f.labels + g.labels)))
    return list(dict.fromkeys(out))


def boundary1(quiver: Quiver, max_len: int = DEFAULT_MAX_PATH_LEN) -> np.ndarray:
    """∂[p] = [target] − [source]."""
    rows, cols = basis_c0(quiver), basis_c1(quiver, max_len)
    index = {o: i for i, o in enumerate(rows)}
    mat = np.zeros((len(rows), len(cols)), dtype=object)
    for j, p in enumerate(cols):
        mat[index[p.target], j] += 1
        mat[index[p.source], j] -= 1
    return mat


def boundary2(quiver: Quiver, max_len: int = DEFAULT_MAX_PATH_LEN) -> np.ndarray:
    """∂(f, g) = g − g∘f + f."""
    rows, cols = basis_c1(quiver, max_len), basis_c2(quiver, max_len)
    index = {p: i for i, p in enumerate(rows)}
    mat = np.zeros((len(rows), len(cols)), dtype=object)
    for j, s in enumerate(cols):
        mat[index[s.g], j] += 1
        mat[index[s.comp], j] -= 1
        mat[index[s.f], j] += 1
    return mat


def connected_components(quiver: Quiver) -> List[List[str]]:
    adjacent = {o: set() for o in quiver.objects}
    for e in quiver.edges:
        adjacent[e.source].add(e.target)
        adjacent[e.target].add(e.source)
    seen, components = set(), []
    for start in quiver.objects:
        if start in seen:
            continue
        seen.add(start)
        stack, component = [start], []
        while stack:
            u = stack.pop()
            component.append(u)
            for v in adjacent[u]:
                if v not in seen:
                    seen.add(v)
                    stack.append(v)
        components.append(component)
    return components


def compute_homology01(quiver: Quiver, max_len: int = DEFAULT_MAX_PATH_LEN) -> HomologyResult:
    """β0 and β1 over ℚ of the truncated nerve of the path category."""
    c0, c1 = basis_c0(quiver), basis_c1(quiver, max_len)
    r1 = rank_over_q(boundary1(quiver, max_len))
    r2 = rank_over_q(boundary2(quiver, max_len))
    result = HomologyResult(betti0=len(c0) - r1, betti1=len(c1) - r1 - r2,
                            components=connected_components(quiver), rank_d1=r1, rank_d2=r2)
    _logger.info("quiver homology: β0=%d β1=%d (|C1|=%d)", result.betti0, result.betti1, len(c1))
    return result


# ============================================================================
# CHAIN COMPLEXES AND SIMPLICIAL SETS
# ============================================================================

@dataclass(frozen=True)
class AbelianGroup:
    """ℤ^rank ⊕ ⊕ ℤ/t."""
    rank: int
    torsion: Tuple[int, ...] = ()

    def __str__(self):
        return pretty_group(self.rank, self.torsion)


@dataclass
class ChainComplex:
    """
    Chain complex of free abelian groups of ranks dims[0], dims[1], ...

    boundaries[n] is d_n: C_n → C_{n-1} as a dims[n-1] × dims[n] matrix;
    missing boundaries are zero.
    """
    dims: List[int]
    boundaries: Dict[int, np.ndarray] = field(default_factory=dict)

    def __post_init__(self):
        for n in list(self.boundaries):
            if not 1 <= n < len(self.dims):
                raise LawViolationError(f"no boundary d_{n} in a complex of length {len(self.dims)}")
            shape = (self.dims[n - 1], self.dims[n])
            d = int_matrix(self.boundaries[n], shape)
            if d.shape != shape:
                raise LawViolationError(f"d_{n} has shape {d.shape}, expected {shape}")
            self.boundaries[n] = d
        for n in range(2, len(self.dims)):
            product = self.boundary(n - 1).dot(self.boundary(n))
            if product.size and np.any(product != 0):
                raise LawViolationError(f"d_{n - 1} ∘ d_{n} ≠ 0")

    def boundary(self, n: int) -> np.ndarray:
        rows = self.dims[n - 1] if 1 <= n <= len(self.dims) else 0
        cols = self.dims[n] if 0 <= n < len(self.dims) else 0
        if n in self.boundaries:
            return self.boundaries[n]
        return np.zeros((rows, cols), dtype=object)

    def homology(self, n: int) -> AbelianGroup:
        """H_n over ℤ: free rank dim C_n − rk d_n − rk d_{n+1}, torsion from SNF(d_{n+1})."""
        dim = self.dims[n] if 0 <= n < len(self.dims) else 0
        out_rank = rank_over_z(self.boundary(n))
        incoming = self.boundary(n + 1)
        factors = invariant_factors(smith_normal_form(incoming).D) if incoming.size else []
        rank = dim - out_rank - len(factors)
        return AbelianGroup(rank=rank, torsion=tuple(t for t in factors if t > 1))

    def betti(self) -> List[int]:
        return [self.homology(n).rank for n in range(len(self.dims))]


@dataclass(frozen=True)
class SEdge:
    """A 1-simplex with faces (d1, d0) = (source, target)."""
    key: str
    source: str
    target: str


@dataclass(frozen=True)
class STriangle:
    """
    A 2-simplex with faces (d0, d1, d2) given by edge keys.

    A face of None is degenerate and contributes nothing to the boundary.
    """
    key: str
    faces: Tuple[Optional[str], Optional[str], Optional[str]]
    signs: Tuple[int, int, int] = (1, -1, 1)


@dataclass
class SSet02:
    vertices: List[str] = field(default_factory=list)
    edges: List[SEdge] = field(default_factory=list)
    triangles: List[STriangle] = field(default_factory=list)

    def chain_complex(self) -> ChainComplex:
        d1, d2 = boundary_from_sset(self)
        return ChainComplex(dims=[len(self.vertices), len(self.edges), len(self.triangles)],
                            boundaries={1: d1, 2: d2})


@dataclass
class SSetHomology:
    H0: AbelianGroup
    H1: AbelianGroup
    H2: AbelianGroup

    def betti(self) -> List[int]:
        return [self.H0.rank, self.H1.rank, self.H2.rank]


def boundary_from_sset(s: SSet02) -> Tuple[np.ndarray, np.ndarray]:
    """Matrices of d1: C1 → C0 and d2: C2 → C1."""
    v_index = {v: i for i, v in enumerate(s.vertices)}
    e_index = {e.key: i for i, e in enumerate(s.edges)}
    d1 = np.zeros((len(s.vertices), len(s.edges)), dtype=object)
    for j, e in enumerate(s.edges):
        d1[v_index[e.target], j] += 1
        d1[v_index[e.source], j] -= 1
    d2 = np.zeros((len(s.edges), len(s.triangles)), dtype=object)
    for k, t in enumerate(s.triangles):
        for face, sign in zip(t.faces, t.signs):
            if face is not None:
                d2[e_index[face], k] += sign
    return d1, d2


def homology_from_sset(s: SSet02) -> SSetHomology:
    """H0, H1, H2 over ℤ of a simplicial set truncated at dimension 2."""
    complex_ = s.chain_complex()
    result = SSetHomology(*(complex_.homology(n) for n in range(3)))
    _logger.info("sset homology: H0=%s H1=%s H2=%s", result.H0, result.H1, result.H2)
    return result


def torus_sset() -> SSet02:
    """Δ-complex torus: one vertex, edges a, b, c, two triangles both bounding a + b − c."""
    edges = [SEdge(k, "v", "v") for k in ("a", "b", "c")]
    triangles = [STriangle("U", ("a", "c", "b")), STriangle("L", ("b", "c", "a"))]
    return SSet02(vertices=["v"], edges=edges, triangles=triangles)


def torus_complex() -> ChainComplex:
    """Cellular torus: one cell in each dimension 0 and 2, two 1-cells, zero boundaries."""
    return ChainComplex(dims=[1, 2, 1])


def rp2_complex() -> ChainComplex:
    """Cellular RP²: the 2-cell is attached along twice the 1-cell."""
    return ChainComplex(dims=[1, 1, 1], boundaries={1: [[0]], 2: [[2]]})


# ============================================================================
# PRETTY PRINTING
# ============================================================================

def pretty_group(rank: int, torsion: Sequence[int] = ()) -> str:
    parts = []
    if rank == 1:
        parts.append("Z")
    elif rank > 1:
        parts.append(f"Z^{rank}")
    parts.extend(f"Z/{t}" for t in torsion)
    return " ⊕ ".join(parts) if parts else "0"


def pretty_chain(coeffs: Dict[str, int]) -> str:
    """Render a chain {generator: coefficient} as e.g. "a + b - 2·c"."""
    out = ""
    for name, c in coeffs.items():
        if c == 0:
            continue
        magnitude = "" if abs(c) == 1 else f"{abs(c)}·"
        if not out:
            out = f"{'-' if c < 0 else ''}{magnitude}{name}"
        else:
            out += f" {'-' if c < 0 else '+'} {magnitude}{name}"
    return out or "0"
