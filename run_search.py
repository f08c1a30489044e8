#!/usr/bin/env python3
"""
Interactive search session runner.
For local development only - drives a SearchSession from the terminal.
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

# Add src to path
project_dir = Path(__file__).parent
sys.path.insert(0, str(project_dir / "src"))

# Load .env file if it exists (values take priority over defaults)
from dotenv import load_dotenv

env_file = project_dir / ".env"
if env_file.exists():
    load_dotenv(env_file)
    print(f"📁 Loaded config from {env_file}")

os.environ.setdefault("VENDORAMA_DEBUG_LOGGING", "true")

from vendorama_search import SearchSession, Settings, TaxonomyCache, VendoramaClient
from vendorama_search.otel import init_otel
from vendorama_search.suggestions import fetch_suggestions

HELP = """Commands:
  <text>            search for text
  vendor <id>       show a vendor storefront
  related <v.p>     items related to a composite product id
  within <text>     search inside the current vendor
  category <vc>     browse a category code
  suggest <text>    autocomplete suggestions
  more | refresh | back | reset | quit
"""


def _print_session(session: SearchSession) -> None:
    print(
        f"[{session.mode.value}] {len(session.products)}/{session.total_count} "
        f"has_more={session.has_more} filters={session.active_filters_count} "
        f"back={session.can_go_back}"
    )
    if session.last_error is not None:
        print(f"  last error: {session.last_error}")
    for product in session.products[-10:]:
        print(f"  {product.id:>12}  {product.name}  {product.price}")


async def main() -> None:
    settings = Settings()
    init_otel()
    client = VendoramaClient(settings)
    session = SearchSession(client, settings, taxonomy=TaxonomyCache(client))
    print(f"🔗 Backend API: {settings.api_base_url}")
    print(HELP)

    try:
        while True:
            try:
                line = input("search> ").strip()
            except (KeyboardInterrupt, EOFError):
                print()
                break
            if not line:
                continue
            command, _, arg = line.partition(" ")
            if command == "quit":
                break
            elif command == "more":
                await session.load_next_page()
            elif command == "refresh":
                await session.refresh_first_page()
            elif command == "back":
                if not session.go_back():
                    print("Nothing to go back to.")
            elif command == "reset":
                session.reset()
            elif command == "vendor" and arg:
                await session.search_vendor(arg)
            elif command == "related" and arg:
                await session.search_related(arg)
            elif command == "within" and arg:
                await session.search_within_vendor(arg)
            elif command == "category" and arg.isdigit():
                await session.search_category(int(arg))
            elif command == "suggest" and arg:
                for suggestion in await fetch_suggestions(client, arg):
                    print(f"  {suggestion}")
                continue
            else:
                await session.search(line)
            _print_session(session)
    finally:
        await client.aclose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG if os.getenv("VENDORAMA_DEBUG_LOGGING") == "true" else logging.INFO)
    asyncio.run(main())
