import asyncio
import os
import sys

sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from mw_bot_client import MediaWikiBot, MediaWikiClientError, load_config


async def main():
    config = load_config(os.getenv("MW_CONFIG_FILE"))
    print(f"Testing connectivity to {config.server}{config.path}/api.php ...")

    async with MediaWikiBot(config) as bot:
        try:
            version = await bot.queries.mw_version()
            print(f"MediaWiki {version}")

            identity = await bot.prime()
            print(f"Logged in as {identity.name} (groups: {', '.join(identity.groups)})")

            token = await bot.get_token()
            print(f"csrf token acquired ({len(token)} chars)")
        except MediaWikiClientError as e:
            print(f"An error occurred: {e}")
            sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
