#!/usr/bin/env python3
"""
stackanswers MCP server
Exposes a search session over the Model Context Protocol (stdio).
"""

import asyncio
import json
import logging
import sys
from typing import Dict, List, Any, Optional

# MCP Protocol imports
from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from .search.fetcher import PageFetcher
from .search.models import PageResult
from .search.session import SearchSession
from .utils.formatter import ResultFormatter
from .config.settings import settings

logger = logging.getLogger(__name__)

NAVIGATION_SCHEMA = {"type": "object", "properties": {}}

class AnswerSearchMCPServer:
    """MCP server holding one search session for its connection"""

    def __init__(self, fetcher: Optional[PageFetcher] = None):
        self.fetcher = fetcher or PageFetcher()
        self.session = SearchSession(self.fetcher)
        self.formatter = ResultFormatter(self.session.config.answer_count)

        self.server = Server("stackanswers")
        self._setup_handlers()

        logger.info("stackanswers MCP server initialized")
        if settings.config.server.debug:
            logger.debug(f"Configuration: {settings.to_dict()}")

    def list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(
                name="search_answers",
                description="Search Q&A pages for a coding question and return the first page's answers and code",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "q": {
                            "type": "string",
                            "description": "Search query"
                        }
                    },
                    "required": ["q"]
                }
            ),
            types.Tool(
                name="next_answer",
                description="Move to the next candidate page of the current search",
                inputSchema=NAVIGATION_SCHEMA
            ),
            types.Tool(
                name="previous_answer",
                description="Move back to the previous candidate page of the current search",
                inputSchema=NAVIGATION_SCHEMA
            ),
            types.Tool(
                name="current_answer",
                description="Show the current page again without fetching anything",
                inputSchema=NAVIGATION_SCHEMA
            ),
        ]

    def _setup_handlers(self):
        """Setup MCP protocol handlers"""

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            """List available tools"""
            return self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
            """Handle tool calls"""
            result = await self.call_tool(name, arguments or {})
            return [types.TextContent(
                type="text",
                text=json.dumps(result, indent=2, ensure_ascii=False)
            )]

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Run a tool and return its JSON payload; errors come back as payload too"""
        try:
            if name == "search_answers":
                query = arguments.get("q", "")
                result = await self.session.submit(query)
            elif name == "next_answer":
                result = await self.session.advance()
            elif name == "previous_answer":
                result = await self.session.retreat()
            elif name == "current_answer":
                result = self.session.peek()
            else:
                return {"error": f"Unknown tool: {name}"}
        except Exception as e:
            logger.error(f"Tool {name} failed: {e}", exc_info=True)
            return {"error": str(e), "query": self.session.query}

        return self._payload(result)

    def _payload(self, result: PageResult) -> Dict[str, Any]:
        return {
            "query": self.session.query,
            "state": self.session.state.value,
            "candidates": len(self.session.candidates),
            "text": self.formatter.format_result(result),
            **result.to_dict(),
        }

    async def cleanup(self):
        logger.info("Cleaning up resources...")
        await self.fetcher.close()

    async def run_server(self):
        """Run the MCP server over stdio"""
        logger.info("Starting stackanswers MCP server...")

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(read_stream, write_stream, self.server.create_initialization_options())


async def main():
    """Main entry point of the MCP server"""
    settings.setup_logging()

    if not settings.validate_config():
        logger.error("Invalid configuration, stopping server")
        sys.exit(1)

    server = AnswerSearchMCPServer()

    try:
        if len(sys.argv) > 1 and sys.argv[1] == "test":
            # Simple manual test mode
            test_query = input("Query: ")
            if test_query:
                result = await server.call_tool("search_answers", {"q": test_query})
                print(json.dumps(result, indent=2, ensure_ascii=False))
        else:
            await server.run_server()

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

    finally:
        await server.cleanup()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
