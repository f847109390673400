"""
Capability string constants for PyLQ operators.

This module is the SINGLE SOURCE OF TRUTH for capability strings.
Import from here, never use raw strings.

Usage:
    from pylq.core.capabilities import CAPABILITY_LEFT_APPLY

    if Q.supports(CAPABILITY_LEFT_APPLY):
        Q.lmul(B)
"""

# Shape queries: shape, size(), size(dim)
CAPABILITY_SIZE = 'size'

# Single element access: Q[i, j]
CAPABILITY_ELEMENT = 'element'

# In-place application from the left: lmul(B)
CAPABILITY_LEFT_APPLY = 'left_apply'

# In-place application from the right: rmul(A)
CAPABILITY_RIGHT_APPLY = 'right_apply'

# Dense form on request: to_dense(), np.asarray()
CAPABILITY_MATERIALIZE = 'materialize'

# All capabilities as a frozenset for validation
ALL_CAPABILITIES = frozenset({
    CAPABILITY_SIZE,
    CAPABILITY_ELEMENT,
    CAPABILITY_LEFT_APPLY,
    CAPABILITY_RIGHT_APPLY,
    CAPABILITY_MATERIALIZE,
})

__all__ = [
    'CAPABILITY_SIZE',
    'CAPABILITY_ELEMENT',
    'CAPABILITY_LEFT_APPLY',
    'CAPABILITY_RIGHT_APPLY',
    'CAPABILITY_MATERIALIZE',
    'ALL_CAPABILITIES',
]
