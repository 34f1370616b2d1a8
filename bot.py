"""
Sorimes Tickets - Discord support ticket bot

Loads the branches in branches/ (tickets, control API) and runs the bot.
"""

import discord
from discord.ext import commands
import logging
import sys
from datetime import datetime
from pathlib import Path

from constants import LOG_FORMAT, LOG_DATE_FORMAT

# Create logs directory if it doesn't exist
logs_dir = Path("logs")
logs_dir.mkdir(exist_ok=True)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
    datefmt=LOG_DATE_FORMAT,
    handlers=[
        logging.FileHandler(logs_dir / f'tickets_{datetime.now().strftime("%Y%m%d")}.log', encoding="utf-8"),
        logging.StreamHandler(sys.stdout)
    ]
)

# Set discord.py logging level
logging.getLogger('discord').setLevel(logging.WARNING)
logging.getLogger('discord.http').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

BRANCHES_DIR = Path(__file__).parent / "branches"

# Configure Discord intents
intents = discord.Intents.default()
intents.guilds = True            # Required for channels, categories and roles
intents.members = True           # Required for member and role checks

# Validate required intents are enabled
REQUIRED_INTENTS = {
    "guilds": "Required for resolving the panel channel, ticket category and support role",
    "members": "Required for fetching members and checking the support role"
}

for intent_name, reason in REQUIRED_INTENTS.items():
    if not getattr(intents, intent_name, False):
        logger.error(f"Missing required intent: {intent_name}")
        logger.error(f"Reason: {reason}")
        logger.error("Please enable this intent in the Discord Developer Portal:")
        logger.error("https://discord.com/developers/applications")
        sys.exit(1)


class TicketBot(commands.Bot):
    """Support ticket bot."""

    def __init__(self):
        super().__init__(command_prefix=commands.when_mentioned, intents=intents)

    async def setup_hook(self):
        try:
            logger.info("Loading branches...")
            await self.load_branches()

            logger.info("Setup complete!")
        except Exception as e:
            logger.critical(f"Failed to setup bot: {e}", exc_info=True)
            raise

    async def load_branches(self):
        """Load every enabled branch, generating missing configs."""
        from core.branch_loader import BranchLoader

        loader = BranchLoader(BRANCHES_DIR)
        branch_names = loader.discover_branches()

        loaded_branches = []
        skipped_branches = []
        failed_branches = []

        logger.info(f"Discovered {len(branch_names)} branches")

        for branch_name in branch_names:
            try:
                config = loader.load_config(branch_name)

                if not config.get("enabled", True):
                    skipped_branches.append(branch_name)
                    logger.info(f"⏭️  Skipped {branch_name} (disabled in config)")
                    continue

                load_path = loader.get_load_path(branch_name)
                if not load_path:
                    failed_branches.append((branch_name, "Could not determine load path"))
                    continue

                await self.load_extension(load_path)
                loaded_branches.append(branch_name)
                logger.info(f"✅ Loaded branch: {branch_name}")

            except Exception as e:
                failed_branches.append((branch_name, str(e)))
                logger.error(f"❌ Failed to load branch {branch_name}: {e}", exc_info=True)

        logger.info(f"Loaded {len(loaded_branches)}/{len(branch_names)} branches: {', '.join(loaded_branches)}")

        if skipped_branches:
            logger.info(f"Skipped {len(skipped_branches)} disabled branches: {', '.join(skipped_branches)}")

        if failed_branches:
            logger.warning(f"Failed to load {len(failed_branches)} branches:")
            for branch_name, error in failed_branches:
                logger.warning(f"  - {branch_name}: {error}")

    async def on_ready(self):
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")
        logger.info("Bot is ready!")

    async def on_error(self, event_method: str, *args, **kwargs):
        logger.error(f"Error in {event_method}", exc_info=True)


def main():
    from config import DISCORD_TOKEN

    try:
        logger.info("Starting ticket bot...")
        bot = TicketBot()
        bot.run(DISCORD_TOKEN, log_handler=None)  # We handle logging ourselves
    except KeyboardInterrupt:
        logger.info("Ticket bot shutting down...")
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

if __name__ == "__main__":
    main()
