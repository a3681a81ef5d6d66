# smallcat/constants.py
"""
smallcat Constants

Limits and defaults shared by the enumeration-based algorithms:

SEARCH LIMITS (exhaustive search over finite carriers)
- MAX_PERMUTATION_SIZE: largest carrier searched permutation by permutation
  (canonical keys, automorphisms, isomorphism witnesses)
- MAX_FUNCTION_SPACE: largest function space / family product enumerated
  when computing ends

HOMOLOGY
- DEFAULT_MAX_PATH_LEN: longest path kept when the nerve of a quiver is
  truncated to build chain groups

DEMOS
- LOG_FORMAT: logging format used by the example scripts
"""


# =============================================================================
# SEARCH LIMITS
# =============================================================================

MAX_PERMUTATION_SIZE = 8      # 8! = 40320 relabelings
MAX_FUNCTION_SPACE = 4096     # |cod| ** |dom| and products of such spaces

assert MAX_PERMUTATION_SIZE >= 1, "permutation search needs at least one point"
assert MAX_FUNCTION_SPACE >= 1, "function space limit must be positive"


# =============================================================================
# HOMOLOGY
# =============================================================================

DEFAULT_MAX_PATH_LEN = 2

assert DEFAULT_MAX_PATH_LEN >= 1, "paths of length 1 (edges) are always kept"


# =============================================================================
# DEMOS
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
