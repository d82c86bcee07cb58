import unittest
from typing import List, Optional

import jsonschema

from ada_cli.errors import SchemaError
from ada_cli.tools import default_registry, write_files
from ada_cli.tools.registry import Tool, ToolRegistry, tool, validate_arguments


@tool(category="file-ops", params={"mode": {"description": "How to do it", "enum": ["a", "b"]}})
def sample(path: str, count: int = 1, mode: str = "a", tags: Optional[List[str]] = None):
    """Sample tool.

    Longer explanation.
    """
    return path


def undecorated(path: str):
    return path


class TestToolDecorator(unittest.TestCase):
    """Tests for the schema built by the @tool decorator."""

    def setUp(self):
        self.tool = sample.__tool__

    def test_tool_metadata(self):
        self.assertEqual(self.tool.name, "sample")
        self.assertEqual(self.tool.category, "file-ops")
        self.assertEqual(self.tool.description, "Sample tool.\n\nLonger explanation.")
        self.assertFalse(self.tool.mutating)

    def test_schema_types_and_required(self):
        schema = self.tool.parameters
        self.assertEqual(schema["required"], ["path"])
        self.assertEqual(schema["properties"]["path"], {"type": "string"})
        self.assertEqual(schema["properties"]["count"], {"type": "integer"})
        self.assertEqual(
            schema["properties"]["mode"],
            {"type": "string", "description": "How to do it", "enum": ["a", "b"]},
        )
        self.assertEqual(
            schema["properties"]["tags"], {"type": "array", "items": {"type": "string"}}
        )

    def test_execute_calls_the_function(self):
        self.assertEqual(self.tool.execute({"path": "x"}), "x")

    def test_llm_spec_uses_openai_function_format(self):
        spec = self.tool.to_llm_spec()
        self.assertEqual(spec["type"], "function")
        self.assertEqual(spec["function"]["name"], "sample")
        self.assertIs(spec["function"]["parameters"], self.tool.parameters)

    def test_schema_rejects_extra_properties(self):
        self.assertIs(self.tool.parameters["additionalProperties"], False)

    def test_invalid_schema_keywords_are_rejected(self):
        with self.assertRaises(jsonschema.SchemaError):
            @tool(category="web", params={"url": {"enum": "https"}})
            def fetch(url: str):
                """Fetch."""

    def test_unknown_category_is_rejected(self):
        with self.assertRaises(ValueError):
            tool(category="kernel")

    def test_describing_unknown_parameter_is_rejected(self):
        with self.assertRaises(ValueError):
            @tool(category="web", params={"nope": {"description": "?"}})
            def fetch(url: str):
                """Fetch."""


class TestValidateArguments(unittest.TestCase):
    """Tests for argument validation against tool schemas."""

    def setUp(self):
        self.schema = sample.__tool__.parameters

    def test_valid_arguments_pass_through(self):
        args = {"path": "x", "count": 3, "mode": "b", "tags": ["t"]}
        self.assertEqual(validate_arguments(self.schema, args), args)

    def test_null_optional_arguments_are_dropped(self):
        self.assertEqual(
            validate_arguments(self.schema, {"path": "x", "tags": None}), {"path": "x"}
        )

    def test_missing_required_argument(self):
        with self.assertRaisesRegex(SchemaError, "Missing required argument"):
            validate_arguments(self.schema, {"count": 2})

    def test_null_required_argument_counts_as_missing(self):
        with self.assertRaisesRegex(SchemaError, "path"):
            validate_arguments(self.schema, {"path": None})

    def test_unknown_argument(self):
        with self.assertRaisesRegex(SchemaError, r"Unknown argument\(s\): force, zap\."):
            validate_arguments(self.schema, {"path": "x", "zap": 1, "force": True})

    def test_all_missing_arguments_are_listed(self):
        schema = write_files.__tool__.parameters
        with self.assertRaisesRegex(SchemaError, r"Missing required argument\(s\): files\."):
            validate_arguments(schema, {})

    def test_wrong_type(self):
        with self.assertRaisesRegex(SchemaError, "'path' must be of type string"):
            validate_arguments(self.schema, {"path": 5})

    def test_boolean_is_not_an_integer(self):
        with self.assertRaises(SchemaError):
            validate_arguments(self.schema, {"path": "x", "count": True})

    def test_enum_violation(self):
        with self.assertRaisesRegex(SchemaError, "must be one of"):
            validate_arguments(self.schema, {"path": "x", "mode": "c"})

    def test_array_items_are_checked(self):
        with self.assertRaisesRegex(SchemaError, r"tags\[1\]"):
            validate_arguments(self.schema, {"path": "x", "tags": ["a", 1]})

    def test_arguments_must_be_an_object(self):
        with self.assertRaisesRegex(SchemaError, "must be an object"):
            validate_arguments(self.schema, ["x"])

    def test_nested_object_fields_are_required(self):
        schema = write_files.__tool__.parameters
        with self.assertRaisesRegex(SchemaError, "missing field 'content'"):
            validate_arguments(schema, {"files": [{"path": "a.txt"}]})


class TestToolRegistry(unittest.TestCase):
    """Tests for the ToolRegistry."""

    def test_registry_is_read_only_after_initialization(self):
        registry = ToolRegistry.from_functions([sample])
        with self.assertRaises(RuntimeError):
            registry.register(
                Tool("other", "", {"type": "object"}, "web", function=lambda: None)
            )

    def test_duplicate_names_are_rejected(self):
        with self.assertRaises(ValueError):
            ToolRegistry.from_functions([sample, sample])

    def test_undecorated_function_is_rejected(self):
        with self.assertRaises(ValueError):
            ToolRegistry.from_functions([undecorated])

    def test_lookup(self):
        registry = ToolRegistry.from_functions([sample])
        self.assertIn("sample", registry)
        self.assertNotIn("missing", registry)
        self.assertIs(registry.get("sample"), sample.__tool__)
        self.assertIsNone(registry.get("missing"))
        self.assertEqual(len(registry), 1)

    def test_get_tools_skips_unknown_names(self):
        registry = ToolRegistry.from_functions([sample])
        specs = registry.get_tools(["sample", "missing"])
        self.assertEqual([s["function"]["name"] for s in specs], ["sample"])

    def test_default_registry_catalog(self):
        registry = default_registry()
        self.assertEqual(
            sorted(registry.names()),
            sorted([
                "read_file", "edit", "write_files", "file_ops", "list_directory", "tree",
                "grep", "glob", "search_directory", "git", "execute", "webfetch",
            ]),
        )
        self.assertEqual(
            [t.name for t in registry.by_category("code-search")],
            ["grep", "glob", "search_directory"],
        )
        mutating = sorted(t.name for t in registry if t.mutating)
        self.assertEqual(mutating, ["edit", "file_ops", "write_files"])


if __name__ == "__main__":
    unittest.main()
