"""Tests for shaping raw form values against the form schema."""

import unittest

from formdoc.inputs import coerce_inputs, missing_required
from formdoc.schema import JSONSchemaNode

SCHEMA = JSONSchemaNode.model_validate({
    "type": "object",
    "required": ["name", "amount"],
    "properties": {
        "name": {"type": "string"},
        "amount": {"type": "number"},
        "count": {"type": "integer"},
        "paid": {"type": "boolean"},
        "tags": {"type": "array", "items": {"type": "string"}},
        "client": {"type": "object"},
        "anything": {},
    },
})


class CoerceInputsTest(unittest.TestCase):

    def test_types(self):
        out = coerce_inputs(SCHEMA, {
            "name": 42, "amount": "12.50", "count": "3.7", "paid": "true",
            "tags": "solo", "client": '{"id": 1}', "anything": [1],
        })
        self.assertEqual(out, {
            "name": "42", "amount": 12.5, "count": 3, "paid": True,
            "tags": ["solo"], "client": {"id": 1}, "anything": [1],
        })

    def test_numbers(self):
        self.assertEqual(coerce_inputs(SCHEMA, {"amount": "7"})["amount"], 7)
        self.assertEqual(coerce_inputs(SCHEMA, {"amount": "abc"})["amount"], 0)
        self.assertEqual(coerce_inputs(SCHEMA, {"amount": None})["amount"], 0)

    def test_arrays(self):
        self.assertEqual(coerce_inputs(SCHEMA, {"tags": '["a", "b"]'})["tags"], ["a", "b"])
        self.assertEqual(coerce_inputs(SCHEMA, {"tags": ""})["tags"], [])
        self.assertEqual(coerce_inputs(SCHEMA, {"tags": None})["tags"], [])

    def test_strings_and_booleans(self):
        self.assertEqual(coerce_inputs(SCHEMA, {"name": None})["name"], "")
        self.assertEqual(coerce_inputs(SCHEMA, {"name": ["a", "b"]})["name"], "a, b")
        self.assertEqual(coerce_inputs(SCHEMA, {"name": True})["name"], "true")
        self.assertEqual(coerce_inputs(SCHEMA, {"name": 2.0})["name"], "2")
        self.assertFalse(coerce_inputs(SCHEMA, {"paid": "no"})["paid"])
        self.assertTrue(coerce_inputs(SCHEMA, {"paid": 1})["paid"])

    def test_undeclared_keys_are_dropped(self):
        self.assertEqual(coerce_inputs(SCHEMA, {"name": "x", "extra": 1}), {"name": "x"})

    def test_without_schema_inputs_pass_through(self):
        self.assertEqual(coerce_inputs(None, {"rows": "[1]", "x": 2}), {"rows": [1], "x": 2})


class MissingRequiredTest(unittest.TestCase):

    def test_missing_required(self):
        self.assertEqual(missing_required(SCHEMA, {"name": "", "amount": None}), ["name", "amount"])
        self.assertEqual(missing_required(SCHEMA, {"name": "x", "amount": 0}), [])
        self.assertEqual(missing_required(SCHEMA, None), ["name", "amount"])
        self.assertEqual(missing_required(None, {}), [])


if __name__ == "__main__":
    unittest.main()
