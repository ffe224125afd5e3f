from __future__ import annotations

import dataclasses
import unittest

import numpy as np

from atmointerp.errors import DimensionMismatchError, MalformedGridError, OutOfRangeError
from atmointerp.gridpos import (
    ArrayOfGridPos,
    GridPos,
    fractional_gp,
    gridpos,
    gridpos2gridrange,
    gridpos_check_fd,
    gridpos_extpol,
    gridpos_force_end_fd,
    is_gridpos_at_index_i,
    p2gridpos,
)


class TestGridPosTypes(unittest.TestCase):
    def test_from_fraction_sets_complement(self) -> None:
        gp = GridPos.from_fraction(3, 0.25)
        self.assertEqual(gp.idx, 3)
        self.assertEqual(gp.fd, (0.25, 0.75))

    def test_array_is_read_only(self) -> None:
        agp = ArrayOfGridPos.from_fractions([0, 1], [0.5, 0.25])
        with self.assertRaises(ValueError):
            agp.idx[0] = 1
        with self.assertRaises(ValueError):
            agp.fd[0, 0] = 0.0
        with self.assertRaises(dataclasses.FrozenInstanceError):
            agp.idx = np.array([0, 0])

    def test_array_indexing_and_slicing(self) -> None:
        agp = ArrayOfGridPos.from_fractions([0, 1, 2], [0.5, 0.25, 1.0])
        self.assertEqual(len(agp), 3)
        self.assertEqual(agp[1], GridPos(1, (0.25, 0.75)))
        sub = agp[1:]
        self.assertIsInstance(sub, ArrayOfGridPos)
        np.testing.assert_array_equal(sub.idx, [1, 2])
        self.assertEqual([gp.idx for gp in agp], [0, 1, 2])
        np.testing.assert_allclose(agp.fractional(), [0.5, 1.25, 3.0])
        picked = agp[np.array([2, 0])]
        np.testing.assert_array_equal(picked.idx, [2, 0])
        masked = agp[agp.fd[:, 0] < 1.0]
        np.testing.assert_allclose(masked.fractional(), [0.5, 1.25])
        self.assertEqual(agp[np.int64(2)], GridPos(2, (1.0, 0.0)))

    def test_array_from_gridpos(self) -> None:
        agp = ArrayOfGridPos.from_gridpos([GridPos(0, (0.5, 0.5)), GridPos(4, (0.0, 1.0))])
        np.testing.assert_array_equal(agp.idx, [0, 4])
        np.testing.assert_allclose(agp.fd, [[0.5, 0.5], [0.0, 1.0]])
        self.assertEqual(len(ArrayOfGridPos.from_gridpos([])), 0)

    def test_array_rejects_bad_fd_shape(self) -> None:
        with self.assertRaises(DimensionMismatchError):
            ArrayOfGridPos([0, 1], np.zeros((3, 2)))


class TestLocator(unittest.TestCase):
    def test_ascending_grid(self) -> None:
        agp = gridpos_extpol([1.0, 2.0, 3.0], [1.5, 2.5], 0.5)
        np.testing.assert_array_equal(agp.idx, [0, 1])
        np.testing.assert_allclose(agp.fd, [[0.5, 0.5], [0.5, 0.5]])

    def test_descending_pressure_levels(self) -> None:
        gp = gridpos([100.0, 10.0, 1.0], 5.5)
        self.assertIsInstance(gp, GridPos)
        self.assertEqual(gp.idx, 1)
        self.assertAlmostEqual(gp.fd[0], 0.5)
        self.assertAlmostEqual(gp.fd[1], 0.5)

    def test_descending_matches_mirrored_ascending(self) -> None:
        old = np.array([0.0, 1.0, 3.0, 4.5, 7.0])
        new = np.array([0.2, 2.0, 6.9, 3.3, 4.4])
        up = gridpos_extpol(old, new)
        down = gridpos_extpol(old[::-1], new)
        n = old.size
        # Bracket k of the reversed grid is bracket n-2-k of the original one.
        np.testing.assert_array_equal(down.idx, n - 2 - up.idx)
        np.testing.assert_allclose(down.fd[:, 0], up.fd[:, 1], atol=1.0e-14)

    def test_output_postconditions(self) -> None:
        rng = np.random.default_rng(3)
        old = np.cumsum(rng.uniform(0.1, 2.0, size=30))
        new = rng.uniform(old[0] - 0.05, old[-1] + 0.05, size=200)
        agp = gridpos_extpol(old, new)
        self.assertEqual(len(agp), new.size)
        self.assertTrue(np.all(agp.idx >= 0))
        self.assertTrue(np.all(agp.idx <= old.size - 2))
        np.testing.assert_allclose(agp.fd[:, 0] + agp.fd[:, 1], 1.0, rtol=0.0, atol=1.0e-15)
        np.testing.assert_allclose(old[agp.idx] + agp.fd[:, 0] * (old[agp.idx + 1] - old[agp.idx]), new)

    def test_sorted_queries_give_monotone_brackets(self) -> None:
        old = np.linspace(0.0, 10.0, 11)
        new = np.sort(np.random.default_rng(1).uniform(0.0, 10.0, size=50))
        agp = gridpos_extpol(old, new)
        self.assertTrue(np.all(np.diff(agp.idx) >= 0))
        inner = (new > old[0]) & (new < old[-1])
        self.assertTrue(np.all(old[agp.idx[inner]] <= new[inner]))
        self.assertTrue(np.all(new[inner] <= old[agp.idx[inner] + 1]))

    def test_sorted_queries_on_descending_grid(self) -> None:
        old = np.linspace(10.0, 0.0, 11)
        new = np.sort(np.random.default_rng(2).uniform(0.0, 10.0, size=50))
        agp = gridpos_extpol(old, new)
        self.assertTrue(np.all(np.diff(agp.idx) <= 0))
        rev = new[::-1]
        agp = gridpos_extpol(old, rev)
        self.assertTrue(np.all(np.diff(agp.idx) >= 0))
        inner = (rev > 0.0) & (rev < 10.0)
        self.assertTrue(np.all(old[agp.idx[inner]] >= rev[inner]))
        self.assertTrue(np.all(rev[inner] >= old[agp.idx[inner] + 1]))

    def test_unsorted_queries(self) -> None:
        old = np.arange(6.0)
        new = np.array([5.0, 4.0, 3.0, 2.0, 2.5, 3.0, 4.0])
        np.testing.assert_allclose(gridpos_extpol(old, new).fractional(), new)

    def test_extrapolation_boundary_is_inclusive(self) -> None:
        old = [0.0, 1.0, 2.0]
        low = gridpos(old, -0.5)
        self.assertEqual(low.idx, 0)
        self.assertAlmostEqual(low.fd[0], -0.5)
        high = gridpos(old, 2.5)
        self.assertEqual(high.idx, 1)
        self.assertAlmostEqual(high.fd[0], 1.5)
        with self.assertRaises(OutOfRangeError):
            gridpos(old, -0.5000001)
        with self.assertRaises(OutOfRangeError):
            gridpos(old, 2.5000001)

    def test_extpolfac_zero_allows_only_the_grid_range(self) -> None:
        gridpos([0.0, 1.0], [0.0, 1.0], extpolfac=0.0)
        with self.assertRaises(OutOfRangeError):
            gridpos([0.0, 1.0], [1.0e-9 + 1.0], extpolfac=0.0)

    def test_nan_query_is_out_of_range(self) -> None:
        with self.assertRaises(OutOfRangeError) as ctx:
            gridpos([0.0, 1.0, 2.0], [0.5, np.nan])
        self.assertIn("position 1", str(ctx.exception))

    def test_malformed_reference_grids(self) -> None:
        for old in ([0.0], [0.0, 1.0, 1.0, 2.0], [0.0, 2.0, 1.0], [3.0, 2.0, 2.5]):
            with self.subTest(old=old):
                with self.assertRaises(MalformedGridError):
                    gridpos(old, [0.5])

    def test_empty_query(self) -> None:
        self.assertEqual(len(gridpos([0.0, 1.0], [])), 0)

    def test_coincident_point_keeps_current_bracket(self) -> None:
        agp = gridpos_extpol([0.0, 1.0, 2.0], [2.0, 1.0])
        np.testing.assert_array_equal(agp.idx, [1, 1])
        np.testing.assert_array_equal(agp.fd[:, 0], [1.0, 0.0])

    def test_tie_break_policies(self) -> None:
        old = [0.0, 1.0, 2.0]
        lower = gridpos_extpol(old, [1.0], tie_break="lower")
        self.assertEqual(lower[0], GridPos(1, (0.0, 1.0)))
        upper = gridpos_extpol(old, [2.0, 1.0], tie_break="upper")
        self.assertEqual(upper[0], GridPos(1, (1.0, 0.0)))
        self.assertEqual(upper[1], GridPos(0, (1.0, 0.0)))
        # The grid ends cannot move their bracket.
        self.assertEqual(gridpos_extpol(old, [2.0], tie_break="lower")[0], GridPos(1, (1.0, 0.0)))
        self.assertEqual(gridpos_extpol(old, [0.0], tie_break="upper")[0], GridPos(0, (0.0, 1.0)))
        with self.assertRaises(ValueError):
            gridpos_extpol(old, [1.0], tie_break="nearest")

    def test_negative_extpolfac_rejected(self) -> None:
        with self.assertRaises(ValueError):
            gridpos_extpol([0.0, 1.0], [0.5], -0.1)


class TestPressureGridPos(unittest.TestCase):
    def test_log_space_midpoint(self) -> None:
        gp = p2gridpos([1000.0, 100.0, 10.0], np.sqrt(1.0e5))
        self.assertEqual(gp.idx, 0)
        self.assertAlmostEqual(gp.fd[0], 0.5)

    def test_array_query(self) -> None:
        agp = p2gridpos([1000.0, 100.0, 10.0], [1000.0, 100.0, 10.0])
        np.testing.assert_allclose(agp.fractional(), [0.0, 1.0, 2.0], atol=1.0e-12)

    def test_non_positive_pressures(self) -> None:
        with self.assertRaises(MalformedGridError):
            p2gridpos([1000.0, 0.0], [500.0])
        with self.assertRaises(OutOfRangeError):
            p2gridpos([1000.0, 100.0], [-1.0])


class TestGridPosUtilities(unittest.TestCase):
    def test_fractional_gp(self) -> None:
        self.assertEqual(fractional_gp(GridPos(2, (0.25, 0.75))), 2.25)
        agp = ArrayOfGridPos.from_fractions([0, 3], [0.5, 0.0])
        np.testing.assert_allclose(fractional_gp(agp), [0.5, 3.0])

    def test_check_fd_clamps_noise(self) -> None:
        gp = gridpos_check_fd(GridPos(1, (1.0005, -0.0005)))
        self.assertEqual(gp, GridPos(1, (1.0, 0.0)))
        agp = gridpos_check_fd(ArrayOfGridPos([0, 1], [[-0.0002, 1.0002], [0.5, 0.5]]))
        np.testing.assert_allclose(agp.fd, [[0.0, 1.0], [0.5, 0.5]])

    def test_check_fd_rejects_real_errors(self) -> None:
        with self.assertRaises(ValueError):
            gridpos_check_fd(GridPos(0, (5.0, -4.0)), float("nan"))
        with self.assertRaises(ValueError):
            gridpos_check_fd(GridPos(0, (0.5, 0.5)), 0.0)
        with self.assertRaises(OutOfRangeError):
            gridpos_check_fd(GridPos(1, (1.01, -0.01)))
        with self.assertRaises(OutOfRangeError):
            gridpos_check_fd(GridPos(0, (-0.002, 1.002)))
        # A looser tolerance accepts the same deviation.
        self.assertEqual(gridpos_check_fd(GridPos(0, (-0.002, 1.002)), fd_tol=1.0e-2), GridPos(0, (0.0, 1.0)))

    def test_force_end_fd(self) -> None:
        self.assertEqual(gridpos_force_end_fd(GridPos(0, (0.9999, 0.0001))), GridPos(0, (1.0, 0.0)))
        self.assertEqual(gridpos_force_end_fd(GridPos(0, (1.0e-5, 1.0 - 1.0e-5))), GridPos(0, (0.0, 1.0)))

    def test_is_gridpos_at_index_i(self) -> None:
        self.assertTrue(is_gridpos_at_index_i(GridPos(0, (1.0, 0.0)), 1))
        self.assertFalse(is_gridpos_at_index_i(GridPos(0, (1.0, 0.0)), 0))
        self.assertTrue(is_gridpos_at_index_i(GridPos(1, (0.0, 1.0)), 1))
        self.assertFalse(is_gridpos_at_index_i(GridPos(1, (0.5, 0.5)), 1))

    def test_gridpos2gridrange(self) -> None:
        self.assertEqual(gridpos2gridrange(GridPos(2, (0.3, 0.7)), True), 2)
        self.assertEqual(gridpos2gridrange(GridPos(2, (0.3, 0.7)), False), 2)
        self.assertEqual(gridpos2gridrange(GridPos(2, (0.0, 1.0)), True), 2)
        self.assertEqual(gridpos2gridrange(GridPos(2, (0.0, 1.0)), False), 1)
        self.assertEqual(gridpos2gridrange(GridPos(2, (1.0, 0.0)), True), 3)
        self.assertEqual(gridpos2gridrange(GridPos(2, (1.0, 0.0)), False), 2)
        with self.assertRaises(OutOfRangeError):
            gridpos2gridrange(GridPos(0, (0.0, 1.0)), False)
        with self.assertRaises(OutOfRangeError):
            gridpos2gridrange(GridPos(0, (1.5, -0.5)), True)


if __name__ == "__main__":
    unittest.main()
