from __future__ import annotations

import unittest

import numpy as np

from atmointerp.errors import DimensionMismatchError, MalformedGridError, OutOfRangeError, SingularStencilError
from atmointerp.gridpos import GridPos, gridpos
from atmointerp.polynomial import interp_poly, interp_poly_with_error, polint, stencil_start


class TestPolint(unittest.TestCase):
    def test_quadratic_through_three_points(self) -> None:
        y, dy = polint([0.0, 1.0, 2.0], [0.0, 1.0, 4.0], 1.5)
        self.assertAlmostEqual(y, 2.25)
        self.assertTrue(np.isfinite(dy))

    def test_single_point(self) -> None:
        self.assertEqual(polint([3.0], [7.0], 10.0), (7.0, 0.0))

    def test_cubic_through_four_points(self) -> None:
        xa = np.array([-1.0, 0.5, 2.0, 3.0])
        ya = xa**3 - 2.0 * xa
        y, _ = polint(xa, ya, 1.2)
        self.assertAlmostEqual(y, 1.2**3 - 2.4, places=12)

    def test_coincident_abscissas(self) -> None:
        with self.assertRaises(SingularStencilError):
            polint([0.0, 1.0, 1.0], [0.0, 1.0, 2.0], 0.5)
        with self.assertRaises(ZeroDivisionError):
            polint([0.0, 0.0], [1.0, 2.0], 0.5)

    def test_bad_lengths(self) -> None:
        with self.assertRaises(DimensionMismatchError):
            polint([], [], 0.0)
        with self.assertRaises(DimensionMismatchError):
            polint([0.0, 1.0], [0.0], 0.5)


class TestStencils(unittest.TestCase):
    def test_adaptive3(self) -> None:
        self.assertEqual(stencil_start(5, GridPos(0, (0.3, 0.7)), "adaptive3"), 0)
        self.assertEqual(stencil_start(5, GridPos(2, (0.3, 0.7)), "adaptive3"), 1)
        self.assertEqual(stencil_start(5, GridPos(2, (0.7, 0.3)), "adaptive3"), 2)
        self.assertEqual(stencil_start(5, GridPos(3, (0.7, 0.3)), "adaptive3"), 2)

    def test_fixed3(self) -> None:
        self.assertEqual(stencil_start(5, GridPos(0, (0.9, 0.1)), "fixed3"), 0)
        self.assertEqual(stencil_start(5, GridPos(2, (0.9, 0.1)), "fixed3"), 1)
        self.assertEqual(stencil_start(5, GridPos(3, (0.1, 0.9)), "fixed3"), 2)

    def test_cubic4(self) -> None:
        self.assertEqual(stencil_start(5, GridPos(0, (0.5, 0.5)), "cubic4"), 0)
        self.assertEqual(stencil_start(5, GridPos(2, (0.5, 0.5)), "cubic4"), 1)
        self.assertEqual(stencil_start(5, GridPos(3, (0.5, 0.5)), "cubic4"), 1)
        with self.assertRaises(DimensionMismatchError):
            stencil_start(3, GridPos(0, (0.5, 0.5)), "cubic4")

    def test_invalid_arguments(self) -> None:
        with self.assertRaises(ValueError):
            stencil_start(5, GridPos(0, (0.5, 0.5)), "quintic")
        with self.assertRaises(OutOfRangeError):
            stencil_start(5, GridPos(4, (0.5, 0.5)), "fixed3")


class TestInterpPoly(unittest.TestCase):
    def setUp(self) -> None:
        self.x = np.array([0.0, 1.0, 2.0, 3.0, 4.0])

    def test_quadratic_is_exact_for_three_point_stencils(self) -> None:
        y = 2.0 * self.x**2 - 3.0 * self.x + 1.0
        for stencil in ("adaptive3", "fixed3"):
            for x_i in (0.2, 1.7, 2.5, 3.9):
                with self.subTest(stencil=stencil, x_i=x_i):
                    gp = gridpos(self.x, x_i)
                    expected = 2.0 * x_i**2 - 3.0 * x_i + 1.0
                    self.assertAlmostEqual(interp_poly(self.x, y, x_i, gp, stencil), expected, places=12)

    def test_cubic_is_exact_for_cubic4(self) -> None:
        y = self.x**3
        for x_i in (0.3, 2.2, 3.8):
            gp = gridpos(self.x, x_i)
            self.assertAlmostEqual(interp_poly(self.x, y, x_i, gp, "cubic4"), x_i**3, places=10)

    def test_descending_grid(self) -> None:
        x = self.x[::-1].copy()
        y = x**2
        gp = gridpos(x, 2.5)
        value, err = interp_poly_with_error(x, y, 2.5, gp)
        self.assertAlmostEqual(value, 6.25, places=12)
        self.assertTrue(np.isfinite(err))

    def test_grid_requirements(self) -> None:
        with self.assertRaises(MalformedGridError):
            interp_poly([0.0, 1.0], [0.0, 1.0], 0.5, GridPos(0, (0.5, 0.5)))
        with self.assertRaises(MalformedGridError):
            interp_poly([0.0, 1.0, 2.0], [0.0, 1.0, 4.0], 0.5, GridPos(0, (0.5, 0.5)), "cubic4")
        with self.assertRaises(MalformedGridError):
            interp_poly([0.0, 1.0, 1.0], [0.0, 1.0, 4.0], 0.5, GridPos(0, (0.5, 0.5)))
        with self.assertRaises(DimensionMismatchError):
            interp_poly([0.0, 1.0, 2.0], [0.0, 1.0], 0.5, GridPos(0, (0.5, 0.5)))


if __name__ == "__main__":
    unittest.main()
