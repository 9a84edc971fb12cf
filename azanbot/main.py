"""Main entry point for the Azan reminder bot."""

import logging
import sys

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from azanbot.bot.callbacks import callback_router
from azanbot.bot.handlers import handle_text, help_command, menu_command, start_command
from azanbot.config import Config
from azanbot.db.migrations import run_migrations
from azanbot.db.repository import Repository
from azanbot.engine.conversation import Conversation
from azanbot.engine.prayer_times import PrayerTimesCalculator
from azanbot.engine.scheduler import sweep
from azanbot.services.location import LocationResolver
from azanbot.utils.error_handler import error_handler
from azanbot.utils.errors import ConfigurationError
from azanbot.utils.locks import UserLocks
from azanbot.utils.time_utils import seconds_until_next_minute

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO),
    stream=sys.stdout,
)
# httpx logs every request URL at INFO, including the bot token
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


async def sweep_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Job callback for the per-minute prayer sweep."""
    repo: Repository = context.bot_data["repo"]
    calculator: PrayerTimesCalculator = context.bot_data["calculator"]
    await sweep(context.bot, repo, calculator, concurrency=Config.SCHEDULER_CONCURRENCY)


async def post_init(application: Application) -> None:
    """Initialize bot resources after application is created."""
    # Initialize database
    await run_migrations(Config.DATABASE_PATH)

    # Create repository and store in bot_data
    repo = Repository(Config.DATABASE_PATH)
    await repo.connect()

    calculator = PrayerTimesCalculator()
    resolver = LocationResolver()

    application.bot_data["repo"] = repo
    application.bot_data["calculator"] = calculator
    application.bot_data["resolver"] = resolver
    application.bot_data["conversation"] = Conversation(repo, resolver, calculator)
    application.bot_data["locks"] = UserLocks()

    if not Config.TIMEZONEDB_API_KEY:
        logger.warning("TIMEZONEDB_API_KEY is not set; city lookups will fail")

    # Start the sweep on the next minute boundary
    job_queue = application.job_queue
    if job_queue:
        job_queue.run_repeating(
            sweep_job,
            interval=Config.SCHEDULER_INTERVAL,
            first=seconds_until_next_minute(),
            name="prayer_sweep",
        )
        logger.info(f"Prayer sweep scheduled (interval: {Config.SCHEDULER_INTERVAL}s)")
    else:
        logger.error("JobQueue unavailable; install python-telegram-bot[job-queue]")

    logger.info("Azan reminder bot initialized successfully")


async def post_shutdown(application: Application) -> None:
    """Cleanup resources on shutdown."""
    resolver: LocationResolver | None = application.bot_data.get("resolver")
    if resolver:
        await resolver.close()

    repo: Repository | None = application.bot_data.get("repo")
    if repo:
        await repo.close()

    logger.info("Azan reminder bot shut down")


def build_application() -> Application:
    """Create the application and register handlers."""
    application = (
        Application.builder()
        .token(Config.TELEGRAM_BOT_TOKEN)
        .concurrent_updates(True)  # per-user ordering comes from UserLocks
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    # Commands
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("menu", menu_command))

    # Callback queries (buttons)
    application.add_handler(CallbackQueryHandler(callback_router))

    # Plain text: city names and typed offsets (must be last)
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))

    # Error handler
    application.add_error_handler(error_handler)

    return application


def main() -> None:
    """Start the bot."""
    # Validate configuration
    try:
        Config.validate()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    application = build_application()

    # Start the bot
    logger.info("Starting Azan reminder bot...")
    application.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    main()
