"""Tests for dot-path lookup and value display."""

import unittest

from formdoc.paths import display, get_path


class GetPathTest(unittest.TestCase):

    def setUp(self):
        self.data = {
            "client": {"name": "Acme", "address": {"city": "Oslo"}},
            "items": [{"sku": "A1"}, {"sku": "B2"}],
            "note": None,
        }

    def test_nested_lookup(self):
        self.assertEqual(get_path(self.data, "client.address.city"), "Oslo")

    def test_missing_segments_return_none(self):
        self.assertIsNone(get_path(self.data, "client.phone"))
        self.assertIsNone(get_path(self.data, "nope.deeper.still"))
        self.assertIsNone(get_path(self.data, "note.text"))
        self.assertIsNone(get_path(self.data, "client.name.first"))

    def test_numeric_segment_indexes_lists(self):
        self.assertEqual(get_path(self.data, "items.1.sku"), "B2")
        self.assertIsNone(get_path(self.data, "items.5.sku"))

    def test_empty_path(self):
        self.assertIsNone(get_path(self.data, ""))
        self.assertIsNone(get_path(self.data, None))

    def test_non_mapping_root(self):
        self.assertIsNone(get_path(None, "a"))
        self.assertIsNone(get_path("text", "a"))


class DisplayTest(unittest.TestCase):

    def test_display_values(self):
        cases = [
            (None, ""),
            ("x", "x"),
            (2, "2"),
            (2.0, "2"),
            (2.5, "2.5"),
            (True, "true"),
            (["a", "b", 3], "a, b, 3"),
            ([{"a": 1}, {"b": 2}], '{"a":1}, {"b":2}'),
            ({"a": [1, 2]}, '{"a":[1,2]}'),
            ([], ""),
        ]
        for value, expected in cases:
            self.assertEqual(display(value), expected, f"Failed for input: {value!r}")

    def test_circular_value_does_not_raise(self):
        loop = {}
        loop["me"] = loop
        self.assertIsInstance(display(loop), str)

    def test_deeply_nested_value_is_abbreviated(self):
        deep = []
        for _ in range(100000):
            deep = [deep]
        self.assertEqual(display({"x": deep}), "{...}")


if __name__ == "__main__":
    unittest.main()
