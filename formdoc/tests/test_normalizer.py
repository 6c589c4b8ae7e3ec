"""Tests for rehydrating JSON-encoded form values."""

import copy
import json
import unittest

from formdoc.normalizer import normalize


class NormalizeTest(unittest.TestCase):
    """normalize() turns '{..}' / '[..]' strings back into structures."""

    def test_object_and_array_strings_are_parsed(self):
        self.assertEqual(normalize('{"a": 1}'), {"a": 1})
        self.assertEqual(normalize(' [1, 2] '), [1, 2])

    def test_nested_encoded_strings_are_parsed_recursively(self):
        data = {"order": '{"items": "[{\\"sku\\": \\"A1\\"}]"}'}
        self.assertEqual(normalize(data), {"order": {"items": [{"sku": "A1"}]}})

    def test_non_container_strings_are_kept(self):
        for value in ["hello", "123", '"quoted"', "{not json}", "[1, 2", "true", ""]:
            self.assertEqual(normalize(value), value, f"Failed for input: {value!r}")

    def test_primitives_pass_through(self):
        for value in [5, 2.5, None, True, False]:
            self.assertIs(normalize(value), value)

    def test_lists_and_tuples_are_mapped(self):
        self.assertEqual(normalize(["[1]", "x", ("{}",)]), [[1], "x", [{}]])

    def test_input_is_not_mutated(self):
        data = {"rows": '[{"a": 1}]', "nested": {"x": "[2]"}}
        before = copy.deepcopy(data)
        normalize(data)
        self.assertEqual(data, before)

    def test_self_referencing_dict_terminates(self):
        data = {"name": "loop", "child": "[1]"}
        data["self"] = data
        out = normalize(data)
        self.assertEqual(out["child"], [1])
        self.assertIs(out["self"], out)

    def test_self_referencing_list_terminates(self):
        items = ["[1]"]
        items.append(items)
        out = normalize(items)
        self.assertEqual(out[0], [1])
        self.assertIs(out[1], out)

    def test_shared_child_is_normalized_everywhere(self):
        shared = {"tags": '["a"]'}
        out = normalize({"left": shared, "right": shared})
        self.assertEqual(out["left"], {"tags": ["a"]})
        self.assertEqual(out["right"], {"tags": ["a"]})

    def test_deeply_nested_string_is_kept(self):
        deep = "[" * 100000 + "]" * 100000
        self.assertEqual(normalize(deep), deep)
        self.assertEqual(normalize({"x": deep}), {"x": deep})

    def test_deeply_nested_data_does_not_raise(self):
        deep = ["[1]"]
        for _ in range(100000):
            deep = [deep]
        out = normalize({"rows": deep})
        self.assertIsInstance(out["rows"], list)
        shallow = normalize([[["[1]"]]])
        self.assertEqual(shallow, [[[[1]]]])

    def test_idempotent(self):
        samples = [
            {"a": '{"b": "[1, 2]"}', "c": 3},
            ['{"x": null}', "plain", [True]],
            '[{"sku": "A1", "qty": 2}]',
            "text",
            None,
        ]
        for sample in samples:
            once = normalize(sample)
            self.assertEqual(normalize(once), once)

    def test_round_trip_through_json_string(self):
        for obj in [{"a": [1, {"b": "c"}]}, [{"sku": "A1"}, 3], {}, []]:
            self.assertEqual(normalize(json.dumps(obj)), normalize(obj))


if __name__ == "__main__":
    unittest.main()
