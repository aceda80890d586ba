"""
Entry point for a single meeting bot container.

Reads the session from environment variables (MEETING_URL, PLATFORM,
BOT_NAME, IS_ORGANIZER, JOIN_TIMEOUT_SEC, MEETING_PASSCODE, MEETING_ID,
SESSION_ID) and runs it until the meeting ends.
"""

import asyncio
import signal
import sys

from meeting_bot.core.exceptions import MeetingBotException
from meeting_bot.core.logging import setup_logging
from meeting_bot.domain.models import SessionConfig
from meeting_bot.session import MeetingSession
from meeting_bot.status import StatusReporter


async def main() -> None:
    """Main entry point."""
    logger = setup_logging()

    reporter = StatusReporter(session_id=None)
    config = SessionConfig.from_env(send_status_update=reporter)
    reporter.session_id = config.session_id

    session = MeetingSession(config)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, session.stop)
        except NotImplementedError:
            # Windows event loops don't support signal handlers
            pass

    logger.info(f"Starting meeting bot for {config.platform_id}: {config.meeting_url}")
    try:
        await session.run()
    finally:
        await reporter.close()


def run() -> None:
    """Run the meeting bot (synchronous entry point)."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except MeetingBotException as e:
        print(f"\nFatal error: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    run()
