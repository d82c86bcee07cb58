import os
import tempfile
import unittest
from unittest.mock import MagicMock

from ada_cli.ai.agent import Agent
from ada_cli.errors import ToolExecutionError
from ada_cli.invoker import SUMMARY_LIMIT, ToolInvoker
from ada_cli.tools import default_registry
from ada_cli.tools.diff import apply_diff
from ada_cli.tools.output import FileChange, ToolOutput
from ada_cli.tools.registry import Tool, ToolCall, ToolRegistry

SCHEMA = {
    "type": "object",
    "properties": {"path": {"type": "string"}, "limit": {"type": "integer"}},
    "required": ["path"],
}


class TestToolInvoker(unittest.TestCase):
    """Tests for scope checks, validation and result normalization."""

    def setUp(self):
        self.function = MagicMock(return_value="done")
        registry = ToolRegistry(
            [Tool("inspect", "Inspect a path.", SCHEMA, "file-ops", function=self.function)]
        ).freeze()
        self.invoker = ToolInvoker(registry)
        self.agent = Agent("file-ops", "File Operations", ("inspect", "ghost"))

    def test_successful_call(self):
        result = self.invoker.invoke(ToolCall("inspect", {"path": "a.txt", "limit": 2}), self.agent)

        self.function.assert_called_once_with(path="a.txt", limit=2)
        self.assertTrue(result.success)
        self.assertEqual(result.tool_name, "inspect")
        self.assertEqual(result.title, "inspect")
        self.assertEqual(result.summary, "a.txt, 2")
        self.assertEqual(result.output, "done")

    def test_tool_outside_agent_scope_is_never_run(self):
        agent = Agent("web", "Web Fetching", ("webfetch",))

        result = self.invoker.invoke(ToolCall("inspect", {"path": "a.txt"}), agent)

        self.function.assert_not_called()
        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, "scope")
        self.assertIn("Web Fetching", result.error)

    def test_unknown_tool_in_scope(self):
        result = self.invoker.invoke(ToolCall("ghost", {}), self.agent)
        self.assertEqual(result.error_kind, "scope")
        self.assertIn("Unknown tool", result.error)

    def test_invalid_arguments_are_never_run(self):
        result = self.invoker.invoke(ToolCall("inspect", {"limit": "ten"}), self.agent)

        self.function.assert_not_called()
        self.assertEqual(result.error_kind, "schema")

    def test_tool_execution_error(self):
        self.function.side_effect = ToolExecutionError("disk full")

        result = self.invoker.invoke(ToolCall("inspect", {"path": "a.txt"}), self.agent)

        self.assertFalse(result.success)
        self.assertEqual(result.error, "disk full")
        self.assertEqual(result.error_kind, "execution")
        self.assertEqual(result.summary, "a.txt")

    def test_unexpected_exception_is_contained(self):
        self.function.side_effect = KeyError("boom")

        with self.assertLogs("ada_cli.invoker", level="ERROR"):
            result = self.invoker.invoke(ToolCall("inspect", {"path": "a.txt"}), self.agent)

        self.assertFalse(result.success)
        self.assertEqual(result.error_kind, "execution")
        self.assertTrue(result.error.startswith("Unexpected error"))

    def test_list_output_is_joined(self):
        self.function.return_value = ["one", "two"]
        result = self.invoker.invoke(ToolCall("inspect", {"path": "a"}), self.agent)
        self.assertEqual(result.output, "one\ntwo")

    def test_long_summary_is_shortened(self):
        result = self.invoker.invoke(ToolCall("inspect", {"path": "x" * 100}), self.agent)
        self.assertEqual(len(result.summary), SUMMARY_LIMIT)
        self.assertTrue(result.summary.endswith("..."))

    def test_structured_output_becomes_diffs(self):
        self.function.return_value = ToolOutput(
            "Edit", "a.txt", changes=[FileChange("a.txt", "a\n", "a\nb\n")]
        )

        result = self.invoker.invoke(ToolCall("inspect", {"path": "a.txt"}), self.agent)

        self.assertEqual(result.title, "Edit")
        self.assertEqual(result.summary, "a.txt")
        self.assertEqual(len(result.diffs), 1)
        self.assertEqual((result.diffs[0].additions, result.diffs[0].removals), (1, 0))


class TestInvokerWithFileTools(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = os.path.join(self._tmp.name, "Cargo.toml")
        self.before = '[package]\nname = "demo"\n\n[dependencies]\nserde = "1"\n'
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(self.before)

        self.invoker = ToolInvoker(default_registry())
        self.agent = Agent("file-ops", "File Operations", ("edit",))

    def test_edit_diff_reproduces_file(self):
        call = ToolCall(
            "edit",
            {
                "file_path": self.path,
                "old_string": "[dependencies]\n",
                "new_string": '[dependencies]\ntokio = "1"\n',
            },
        )

        result = self.invoker.invoke(call, self.agent)

        self.assertTrue(result.success, result.error)
        with open(self.path, "r", encoding="utf-8", newline="") as f:
            after = f.read()
        diff = result.diffs[0]
        self.assertEqual((diff.additions, diff.removals), (1, 0))
        self.assertEqual(apply_diff(self.before, diff), after)
        self.assertNotIn("[package]", [line.text for line in diff.lines])


if __name__ == "__main__":
    unittest.main()
