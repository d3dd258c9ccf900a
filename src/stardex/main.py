"""
Stardex MCP Server
Offline StarDict dictionary lookups exposed as FastMCP tools.
"""

import json
import logging
from typing import Annotated

from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import Field

from .config import StardexConfig
from .manager import DictionaryManager, QueryOptions, QueryStatus

logger = logging.getLogger("stardex")

if not load_dotenv():
    logger.debug(".env file not found, using the process environment only")

config = StardexConfig.from_env()

logging.basicConfig(level=config.log_level)

manager = DictionaryManager.from_config(config)
logger.debug(f"📚 Dictionary manager initialized ({len(manager.sources)} sources loaded)")

mcp = FastMCP(name="stardex")


def format_outcome(word: str, exact_only: bool = False, prefer_online: bool = False) -> str:
    """Run a query and render it as text for the tool response."""
    options = None
    if exact_only or prefer_online:
        options = QueryOptions(prioritize_online=prefer_online, exact_only=exact_only)

    outcome = manager.query(word, options)
    if outcome.status is QueryStatus.NOT_FOUND:
        return f"❌ No result found for '{outcome.word}'"

    if outcome.status is QueryStatus.FUZZY:
        header = f"🔍 No exact match for '{outcome.word}'. Closest headwords:"
        lines = [f"• {item.word} ({item.source})" for item in outcome.items]
        body = "\n\n".join(str(item) for item in outcome.items)
        return header + "\n" + "\n".join(lines) + "\n\n" + body

    return "\n\n".join(f"**{item.source}**\n{item}" for item in outcome.items)


@mcp.tool
def lookup_word(
    word: Annotated[str, Field(description="Word to look up. A leading '@' prefers online, '|' disables fuzzy matching")],
    exact_only: Annotated[bool, Field(description="Only return exact (case-insensitive) matches")] = False,
    prefer_online: Annotated[bool, Field(description="Ask the online dictionary before local ones")] = False,
) -> str:
    """Look up a word in every loaded dictionary.

    Returns exact matches from all local dictionaries, otherwise an online
    answer, otherwise the closest headwords by edit distance.
    """
    return format_outcome(word, exact_only=exact_only, prefer_online=prefer_online)


@mcp.tool
def list_dictionaries() -> str:
    """List loaded dictionaries with their type and word count."""
    summaries = manager.list_dictionaries()
    if not summaries:
        return "❌ No dictionaries loaded! Set STARDEX_DICT_DIRS to your StarDict folders."

    result = {
        "dictionaries": [summary.to_dict() for summary in summaries],
        "skipped": manager.failures,
    }
    return json.dumps(result, indent=2, ensure_ascii=False)


def main() -> None:
    """Main entry point for the Stardex MCP Server."""
    mcp.run()

if __name__ == "__main__":
    main()
