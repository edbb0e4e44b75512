import itertools

import pytest

from mcscenario.columns import DETAILED_COLUMN_COUNT, DETAILED_COLUMNS, detailed_column_index


class TestDetailedColumnIndex:
    """Fixed mapping of grid triples to the 27 detailed columns"""

    @pytest.mark.parametrize("t", [0, 1, 2])
    def test_pivot_occupies_first_columns(self, t):
        assert detailed_column_index(2, 2, t) == t

    @pytest.mark.parametrize(
        "spot,vol,offset",
        [
            (1, 2, 0),
            (1, 1, 1),
            (1, 3, 2),
            (2, 1, 3),
            (2, 3, 4),
            (3, 2, 5),
            (3, 1, 6),
            (3, 3, 7),
        ],
    )
    @pytest.mark.parametrize("t", [0, 1, 2])
    def test_block_layout(self, spot, vol, offset, t):
        assert detailed_column_index(spot, vol, t) == 3 + 8 * t + offset

    @pytest.mark.parametrize("spot,vol", [(0, 0), (0, 2), (4, 2), (2, 0), (2, 4), (4, 4), (1, 4), (0, 3)])
    def test_outer_points_unmapped(self, spot, vol):
        assert detailed_column_index(spot, vol, 0) is None

    def test_maturities_beyond_third_unmapped(self):
        assert detailed_column_index(2, 2, 3) is None
        assert detailed_column_index(1, 2, 5) is None

    def test_complete_permutation_for_three_maturities(self):
        cols = [
            c
            for i, j, t in itertools.product(range(5), range(5), range(3))
            if (c := detailed_column_index(i, j, t)) is not None
        ]
        assert len(cols) == 27
        assert sorted(cols) == list(range(DETAILED_COLUMN_COUNT))

    def test_nine_per_maturity(self):
        for t in range(3):
            mapped = [detailed_column_index(i, j, t) for i in range(5) for j in range(5)]
            assert sum(c is not None for c in mapped) == 9


class TestDetailedColumns:
    """Column descriptors"""

    def test_descriptors_in_column_order(self):
        assert [c.column for c in DETAILED_COLUMNS] == list(range(27))

    def test_descriptors_agree_with_mapping(self):
        for c in DETAILED_COLUMNS:
            assert detailed_column_index(c.spot_index, c.vol_index, c.maturity_index) == c.column

    def test_labels(self):
        assert [c.label for c in DETAILED_COLUMNS[:3]] == ["Pivot"] * 3
        assert [c.label for c in DETAILED_COLUMNS[3:11]] == [
            "S-", "S-, V-", "S-, V+", "V-", "V+", "S+", "S+, V-", "S+, V+",
        ]
