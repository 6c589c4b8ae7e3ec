"""Tests for deriving block templates from form schemas."""

import copy
import unittest

from formdoc.compiler import compile_schema, title_case
from formdoc.schema import (
    HeadingBlock, JSONSchemaNode, KeyValueListBlock, ListBlock, TableBlock, TemplateConfig,
)

INVOICE_SCHEMA = {
    "properties": {
        "name": {"type": "string", "title": "Name"},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"sku": {"type": "string"}, "qty": {"type": "number"}},
            },
        },
    }
}


class TitleCaseTest(unittest.TestCase):

    def test_title_case(self):
        cases = [
            ("sku", "Sku"),
            ("unit_price", "Unit Price"),
            ("due-date", "Due Date"),
            ("already Title", "Already Title"),
            ("vat_id_2", "Vat Id 2"),
        ]
        for key, expected in cases:
            self.assertEqual(title_case(key), expected)


class CompileSchemaTest(unittest.TestCase):
    """compile_schema() maps schema properties onto blocks in declaration order."""

    def test_invoice_example(self):
        config = compile_schema(INVOICE_SCHEMA)
        self.assertEqual([b.type for b in config.blocks], ["keyValueList", "table"])

        kv, table = config.blocks
        self.assertEqual([(r.label, r.bound_path()) for r in kv.rows], [("Name", "name")])
        self.assertEqual(table.array_path(), "items")
        self.assertEqual([c.header for c in table.columns], ["Sku", "Qty"])
        self.assertEqual([c.path for c in table.columns], ["sku", "qty"])

    def test_primitive_rows_flush_around_non_primitives(self):
        schema = {
            "properties": {
                "first": {"type": "string"},
                "amount": {"type": "number"},
                "tags": {"type": "array", "items": {"type": "string"}},
                "paid": {"type": "boolean"},
            }
        }
        blocks = compile_schema(schema).blocks
        self.assertIsInstance(blocks[0], KeyValueListBlock)
        self.assertEqual([r.path for r in blocks[0].rows], ["first", "amount"])
        self.assertIsInstance(blocks[1], ListBlock)
        self.assertEqual(blocks[1].array_path(), "tags")
        self.assertIsInstance(blocks[2], KeyValueListBlock)
        self.assertEqual([r.label for r in blocks[2].rows], ["Paid"])
        self.assertEqual(len(blocks), 3)

    def test_nested_object_gets_heading_and_prefixed_paths(self):
        schema = {
            "properties": {
                "client": {
                    "type": "object",
                    "title": "Client",
                    "properties": {
                        "name": {"type": "string"},
                        "lines": {
                            "type": "array",
                            "items": {"type": "object", "properties": {"desc": {"type": "string", "title": "Description"}}},
                        },
                    },
                }
            }
        }
        blocks = compile_schema(schema).blocks
        self.assertIsInstance(blocks[0], HeadingBlock)
        self.assertEqual(blocks[0].text, "Client")
        self.assertEqual(blocks[1].rows[0].path, "client.name")
        self.assertIsInstance(blocks[2], TableBlock)
        self.assertEqual(blocks[2].array_path(), "client.lines")
        self.assertEqual(blocks[2].columns[0].header, "Description")
        self.assertEqual(blocks[2].columns[0].path, "desc")

    def test_missing_or_malformed_properties_give_empty_template(self):
        for schema in [{}, {"type": "object"}, None, {"properties": "oops"}]:
            config = compile_schema(schema)
            self.assertIsInstance(config, TemplateConfig)
            self.assertEqual(config.blocks, [])

    def test_invalid_properties_are_skipped_and_siblings_kept(self):
        schema = {
            "properties": {
                "a": {"type": "string"},
                "b": "oops",
                "c": {"type": "array", "items": 5},
                "d": {"type": "number", "title": ["not", "a", "title"]},
            }
        }
        with self.assertLogs("formdoc.schema", level="WARNING") as logs:
            blocks = compile_schema(schema).blocks
        self.assertEqual([b.type for b in blocks], ["keyValueList", "list"])
        self.assertEqual([r.path for r in blocks[0].rows], ["a"])
        self.assertEqual(blocks[1].array_path(), "c")
        output = "\n".join(logs.output)
        self.assertIn("schema.properties.b", output)
        self.assertIn("schema.properties.c.items", output)
        self.assertIn("schema.properties.d", output)

    def test_compilation_is_deterministic(self):
        first = compile_schema(INVOICE_SCHEMA).to_json()
        second = compile_schema(INVOICE_SCHEMA).to_json()
        self.assertEqual(first, second)

    def test_schema_is_not_mutated(self):
        schema = copy.deepcopy(INVOICE_SCHEMA)
        compile_schema(schema)
        self.assertEqual(schema, INVOICE_SCHEMA)

    def test_accepts_schema_node(self):
        node = JSONSchemaNode.model_validate(INVOICE_SCHEMA)
        self.assertEqual(len(compile_schema(node).blocks), 2)

    def test_nullable_type_lists(self):
        schema = {"properties": {"memo": {"type": ["string", "null"]}}}
        blocks = compile_schema(schema).blocks
        self.assertEqual(blocks[0].rows[0].label, "Memo")


if __name__ == "__main__":
    unittest.main()
