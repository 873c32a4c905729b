"""
Tests for the MCP tool output formatting.
"""

from wp_intent_gateway import mcp_server
from wp_intent_gateway.models import GatewayResult


class TestFormatResult:
    """Test the text returned by the wordpress tool."""

    def test_success(self):
        assert mcp_server.format_result(GatewayResult(success=True, output="done")) == "done"

    def test_failure_lists_suggestions(self):
        result = GatewayResult(success=False, output="I couldn't understand", suggestions=["list posts", "test"])
        output = mcp_server.format_result(result)
        assert output.startswith("I couldn't understand")
        assert "**Suggestions:**" in output
        assert "- list posts\n" in output
        assert "- test\n" in output

    def test_failure_without_suggestions(self):
        assert mcp_server.format_result(GatewayResult(success=False, output="nope")) == "nope"

    def test_gateway_built_at_import(self):
        assert mcp_server.gateway.classifier.trained is True
