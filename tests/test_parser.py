"""Unit tests for point list parsing."""

import unittest

from curvefit_pkg.config import MAX_INPUT_LENGTH, MAX_POINTS
from curvefit_pkg.parser import coerce_points, parse_number, parse_points
from curvefit_pkg.types import DataPoint, ValidationError


class TestParsePoints(unittest.TestCase):
    """Test the accepted point list layouts."""

    def test_semicolon_separated(self):
        self.assertEqual(parse_points("0,1; 1,3"), [DataPoint(0, 1), DataPoint(1, 3)])

    def test_one_pair_per_line(self):
        text = "1 2\n3\t4\n\n5, 6\n"
        self.assertEqual(
            parse_points(text), [DataPoint(1, 2), DataPoint(3, 4), DataPoint(5, 6)]
        )

    def test_parenthesised(self):
        self.assertEqual(parse_points("(1, 2) (3, -4)"), [DataPoint(1, 2), DataPoint(3, -4)])
        self.assertEqual(parse_points("[1.5, 2]"), [DataPoint(1.5, 2)])

    def test_fractions_and_exponents(self):
        self.assertEqual(parse_points("1/2, 3e2"), [DataPoint(0.5, 300.0)])

    def test_empty(self):
        for text in ["", "   ", "\n;\n"]:
            with self.assertRaises(ValidationError) as ctx:
                parse_points(text)
            self.assertEqual(ctx.exception.code, "EMPTY_INPUT")

    def test_too_long(self):
        with self.assertRaises(ValidationError) as ctx:
            parse_points("1" * (MAX_INPUT_LENGTH + 1))
        self.assertEqual(ctx.exception.code, "TOO_LONG")

    def test_too_many_points(self):
        with self.assertRaises(ValidationError) as ctx:
            parse_points("0,0;" * (MAX_POINTS + 1))
        self.assertEqual(ctx.exception.code, "TOO_MANY_POINTS")

    def test_invalid_records(self):
        for text in ["1,2,3", "a,b", "1", "(1, 2) junk", "nan, 1", "1, inf", "1/0, 2"]:
            with self.assertRaises(ValidationError, msg=text) as ctx:
                parse_points(text)
            self.assertEqual(ctx.exception.code, "INVALID_POINT")


class TestCoercePoints(unittest.TestCase):
    def test_mixed_inputs(self):
        points = coerce_points([(0, 1), {"x": 2, "y": 3}, DataPoint(4, 5), "6, 7"])
        self.assertEqual(
            points, [DataPoint(0, 1), DataPoint(2, 3), DataPoint(4, 5), DataPoint(6, 7)]
        )

    def test_string_delegates_to_parser(self):
        self.assertEqual(coerce_points("1,2;3,4"), [DataPoint(1, 2), DataPoint(3, 4)])

    def test_bad_items(self):
        for items in [[(1,)], [(1, 2, 3)], [{"x": 1}], [(1, float("inf"))], [("a", 1)], [object()]]:
            with self.assertRaises(ValidationError, msg=repr(items)) as ctx:
                coerce_points(items)
            self.assertEqual(ctx.exception.code, "INVALID_POINT")

    def test_none_and_scalars(self):
        with self.assertRaises(ValidationError) as ctx:
            coerce_points(None)
        self.assertEqual(ctx.exception.code, "EMPTY_INPUT")
        with self.assertRaises(ValidationError) as ctx:
            coerce_points(42)
        self.assertEqual(ctx.exception.code, "INVALID_POINT")


def test_parse_number():
    assert parse_number(" -2.5 ") == -2.5
    assert parse_number("-1/4") == -0.25
