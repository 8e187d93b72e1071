import asyncio
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from mw_bot_client import MediaWikiBot, load_config


async def main(category: str):
    print("Loading configuration...")
    config = load_config(os.getenv("MW_CONFIG_FILE"))

    async with MediaWikiBot(config) as bot:
        identity = await bot.prime()
        print(f"Acting as {identity.name or 'anonymous'}")

        titles = await bot.queries.pages_in_category(category, only_titles=True)
        print(f"Found {len(titles)} pages in {category}.")
        if not titles:
            return

        result = await bot.purge(category)
        purged = result.get("purge", [])
        print(f"Purged {len(purged)} pages.")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: purge_category.py 'Category:Name'")
        sys.exit(1)
    asyncio.run(main(sys.argv[1]))
