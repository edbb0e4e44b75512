r"""
The 27 "detailed" scenarios whose full terminal-price samples are kept.

Columns 0–2 hold the pivot scenario (pivot spot, pivot vol) for maturities
0–2. Columns 3–26 are three blocks of eight, one per maturity, starting at
``3 + 8 * maturity_index``; inside a block the (spot, vol) order is fixed:

======  =====  ======  ==========
offset  spot   vol     label
======  =====  ======  ==========
0       1      2       S-
1       1      1       S-, V-
2       1      3       S-, V+
3       2      1       V-
4       2      3       V+
5       3      2       S+
6       3      1       S+, V-
7       3      3       S+, V+
======  =====  ======  ==========

Indices refer to positions on the five-point axes (2 is the pivot). Outer
points (0 and 4) and maturities beyond the third are never retained.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

__all__ = [
    "DETAILED_COLUMN_COUNT",
    "DETAILED_MATURITIES",
    "DetailedColumn",
    "DETAILED_COLUMNS",
    "detailed_column_index",
]

DETAILED_MATURITIES = 3
_BLOCK_START = DETAILED_MATURITIES
_BLOCK_WIDTH = 8
DETAILED_COLUMN_COUNT = _BLOCK_START + _BLOCK_WIDTH * DETAILED_MATURITIES

_PIVOT = (2, 2)

# (spot_index, vol_index) -> (offset within block, label)
_BLOCK_LAYOUT: dict[tuple[int, int], tuple[int, str]] = {
    (1, 2): (0, "S-"),
    (1, 1): (1, "S-, V-"),
    (1, 3): (2, "S-, V+"),
    (2, 1): (3, "V-"),
    (2, 3): (4, "V+"),
    (3, 2): (5, "S+"),
    (3, 1): (6, "S+, V-"),
    (3, 3): (7, "S+, V+"),
}


@dataclass(frozen=True)
class DetailedColumn:
    """Grid coordinates and display label of one detailed column."""

    column: int
    spot_index: int
    vol_index: int
    maturity_index: int
    label: str


def detailed_column_index(spot_index: int, vol_index: int, maturity_index: int) -> Optional[int]:
    r"""
    Column slot of a (spot, vol, maturity) triple, or ``None`` if not retained.

    Examples
    --------
    >>> detailed_column_index(2, 2, 1)
    1
    >>> detailed_column_index(1, 2, 0)
    3
    >>> detailed_column_index(3, 3, 2)
    26
    >>> detailed_column_index(0, 2, 0) is None
    True
    """
    if not 0 <= maturity_index < DETAILED_MATURITIES:
        return None
    if (spot_index, vol_index) == _PIVOT:
        return maturity_index
    entry = _BLOCK_LAYOUT.get((spot_index, vol_index))
    if entry is None:
        return None
    return _BLOCK_START + _BLOCK_WIDTH * maturity_index + entry[0]


def _build_columns() -> tuple[DetailedColumn, ...]:
    cols = [DetailedColumn(t, *_PIVOT, t, "Pivot") for t in range(DETAILED_MATURITIES)]
    by_offset = sorted(_BLOCK_LAYOUT.items(), key=lambda kv: kv[1][0])
    for t in range(DETAILED_MATURITIES):
        for (i, j), (offset, label) in by_offset:
            cols.append(DetailedColumn(_BLOCK_START + _BLOCK_WIDTH * t + offset, i, j, t, label))
    return tuple(cols)


DETAILED_COLUMNS = _build_columns()
