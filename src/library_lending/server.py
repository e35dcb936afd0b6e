"""Library Lending MCP Server - FastMCP Implementation

Exposes the lending engine to MCP clients over stdio.

Features exposed:
- Resources: book catalog, member list, borrow records
- Tools: borrow and return, catalog and membership maintenance
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from .config import get_config
from .lending import get_engine, reset_engine
from .resources import all_resources
from .tools import all_tools
from .tools.base import LendingTool

config = get_config()

# Logs go to stderr; stdout carries the stdio transport
logging.basicConfig(
    level=logging.DEBUG if config.debug else config.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

logger = logging.getLogger(__name__)

# =============================================================================
# MCP SERVER INITIALIZATION
# =============================================================================

# WHY: FastMCP handles JSON-RPC parsing, routing and capability negotiation
# HOW: Resources and tools registered below are advertised during the handshake
mcp = FastMCP(
    name=config.server_name,
    version=config.server_version,
    instructions=(
        "Library Lending MCP Server - the catalog, members and loans of a small "
        "library. Read books, members and borrow records through resources; use "
        "the borrow_book and return_book tools to lend and take back copies, and "
        "the catalog and member tools to maintain the library. Loans are due 14 "
        "days after borrowing and late returns are fined per day."
    ),
)

# =============================================================================
# RESOURCE REGISTRATION
# =============================================================================

# Resources are the read side: catalog, members and borrow records
# Templates such as library://books/{book_id} pass the URI parameter to the
# handler as a string; the handler parses it and raises ResourceError
for resource in all_resources:
    uri = resource.get("uri_template", resource.get("uri"))
    if not uri:
        logger.error("Resource missing URI: %s", resource)
        continue

    logger.debug("Registering resource: %s with URI: %s", resource["name"], uri)
    try:
        mcp.resource(
            uri=uri,
            name=resource["name"],
            description=resource["description"],
            mime_type=resource["mime_type"],
        )(resource["handler"])
    except Exception:
        logger.exception("Failed to register resource %s", resource["name"])
        raise

logger.info("Registered %d resources", len(all_resources))

# =============================================================================
# TOOL REGISTRATION
# =============================================================================

# Tools are the write side and go through the lending engine
# WHY: A handler takes the raw arguments dict, so its signature says nothing
# about member_id or book_id
# HOW: LendingTool advertises the pydantic input model as the input schema
# and passes the flat arguments through to the handler
for tool in all_tools:
    logger.debug("Registering tool: %s", tool["name"])
    try:
        mcp.add_tool(LendingTool.from_definition(tool))
    except Exception:
        logger.exception("Failed to register tool %s", tool["name"])
        raise

logger.info("Registered %d tools", len(all_tools))


def run_stdio_server() -> None:
    """Run the MCP server using stdio transport.

    Stdin receives JSON-RPC requests, stdout sends responses.
    """
    logger.info("Starting %s v%s on stdio transport", config.server_name, config.server_version)

    if config.debug:
        logger.debug("Debug mode enabled - verbose protocol logging active")
    else:
        logging.getLogger("fastmcp").setLevel(logging.WARNING)

    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, initiating shutdown...", signum)
        reset_engine()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        # Build the engine (and seed the in-memory library) before the first request
        engine = get_engine()
        if not engine.db.verify_connection():
            logger.error("Library database is not reachable, refusing to start")
            sys.exit(1)

        logger.info(
            "Library ready: %d books, %d members, %d borrow records",
            len(engine.list_books()),
            len(engine.list_members()),
            len(engine.list_loans()),
        )
        logger.info("MCP Server ready and waiting for connections...")
        mcp.run(transport="stdio")

    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)


def main() -> None:
    """Main entry point for the MCP server.

    Started via ``python -m library_lending.server`` or the
    ``library-lending-mcp`` console script.
    """
    try:
        logger.info("=" * 60)
        logger.info("Library Lending MCP Server")
        logger.info("Version: %s", config.server_version)
        logger.info("Transport: %s", config.transport)
        logger.info("Database: %s", config.database_url)
        logger.info("Loan period: %d days, late fee: %d per day", config.loan_period_days, config.daily_late_fee)
        logger.info("Debug Mode: %s", config.debug)
        logger.info("=" * 60)

        if config.transport == "stdio":
            run_stdio_server()
        else:
            logger.error("Unsupported transport: %s", config.transport)
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Failed to start MCP server")
        sys.exit(1)


if __name__ == "__main__":
    main()
