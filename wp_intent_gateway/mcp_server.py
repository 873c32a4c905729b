#!/usr/bin/env python3
"""
WordPress gateway MCP server.

Exposes a single `wordpress(query="...")` tool that accepts natural
language and executes it against the default site (WP_URL, WP_USERNAME,
WP_APP_PASSWORD or WP_PASSWORD).

Port: 8891 (configurable via WP_GATEWAY_MCP_PORT)
Transport: SSE
"""

import logging
import os
import sys

from fastmcp import FastMCP

from wp_intent_gateway.gateway import WordPressGateway

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("wp-gateway.mcp")

# Configuration
MCP_ENABLED = os.getenv("WP_GATEWAY_MCP_ENABLED", "false").lower() == "true"
MCP_PORT = int(os.getenv("WP_GATEWAY_MCP_PORT", "8891"))
MCP_HOST = os.getenv("WP_GATEWAY_MCP_HOST", "0.0.0.0")

mcp = FastMCP(name="wordpress-intent-gateway")

# Trains the classifier and registers providers and handlers
gateway = WordPressGateway()


def format_result(result) -> str:
    """Tool output: the reply, plus suggestions when the request failed."""
    if not result.success and result.suggestions:
        output = result.output + "\n\n**Suggestions:**\n"
        for suggestion in result.suggestions:
            output += f"- {suggestion}\n"
        return output
    return result.output


@mcp.tool()
async def wordpress(query: str) -> str:
    """
    Manage the WordPress site using natural language.

    Describe what you want to do in plain English (or simple French
    commands) and the gateway turns it into a WordPress REST call.

    Args:
        query: Natural language description of the operation.

    Examples:
        - "list all posts"
        - "show post 12"
        - "create a post called 'Hello' with content 'My first post'"
        - "delete page 7"
        - "activate plugin akismet"
        - "crée un article intitulé 'Mon titre' avec le contenu 'Bonjour'"
        - "test"

    Returns:
        The operation result, or suggestions if the request could not be
        understood or executed.
    """
    logger.info(f"Tool called: wordpress(query='{query[:80]}')")
    result = await gateway.process(query)
    return format_result(result)


def main():
    """Main entry point."""
    if not MCP_ENABLED:
        logger.warning("WordPress gateway MCP server is DISABLED")
        logger.warning("To enable: export WP_GATEWAY_MCP_ENABLED=true")
        sys.exit(0)

    logger.info(f"Starting WordPress gateway MCP server on {MCP_HOST}:{MCP_PORT}")
    logger.info("Tool: wordpress(query='...')")

    mcp.run(transport="sse", host=MCP_HOST, port=MCP_PORT)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)
