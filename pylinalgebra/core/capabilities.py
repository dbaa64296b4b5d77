"""
Capability string constants for pylinalgebra storage backends.

This module is the SINGLE SOURCE OF TRUTH for capability strings.
Import from here, never use raw strings.

Usage:
    from pylinalgebra.core.capabilities import CAPABILITY_PERMUTE_ROWS

    if matrix.storage.supports(CAPABILITY_PERMUTE_ROWS):
        matrix.permute_rows(p)
"""

# Any element may hold any value (no structural zeros)
CAPABILITY_FULLY_MUTABLE = 'fully_mutable'

# Rows can be reordered in place (permute, sort by column, shuffle)
CAPABILITY_PERMUTE_ROWS = 'permute_rows'

# Columns can be reordered in place (permute, sort by row, shuffle)
CAPABILITY_PERMUTE_COLUMNS = 'permute_columns'

# A single row can be removed while keeping the family's invariants
CAPABILITY_REMOVE_ROW = 'remove_row'

# A single column can be removed while keeping the family's invariants
CAPABILITY_REMOVE_COLUMN = 'remove_column'

# Only explicitly stored entries need visiting (zeros are implicit)
CAPABILITY_SPARSE_ENUMERATION = 'sparse_enumeration'

# All capabilities as a frozenset for validation
ALL_CAPABILITIES = frozenset({
    CAPABILITY_FULLY_MUTABLE,
    CAPABILITY_PERMUTE_ROWS,
    CAPABILITY_PERMUTE_COLUMNS,
    CAPABILITY_REMOVE_ROW,
    CAPABILITY_REMOVE_COLUMN,
    CAPABILITY_SPARSE_ENUMERATION,
})

__all__ = [
    'CAPABILITY_FULLY_MUTABLE',
    'CAPABILITY_PERMUTE_ROWS',
    'CAPABILITY_PERMUTE_COLUMNS',
    'CAPABILITY_REMOVE_ROW',
    'CAPABILITY_REMOVE_COLUMN',
    'CAPABILITY_SPARSE_ENUMERATION',
    'ALL_CAPABILITIES',
]
