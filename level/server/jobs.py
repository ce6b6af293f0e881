"""
Command line entry point for periodic work.

``level-send-digests`` builds the digests of every nudge due in the current
minute. Run it from cron (or any external scheduler) once a minute.
"""

import asyncio

from level.core.database.session import async_session_maker, engine
from level.core.logging_config import get_logger, setup_logging
from level.server.services import DigestService

logger = get_logger(__name__)


async def send_nudge_digests() -> int:
    async with async_session_maker() as session:
        digests = await DigestService(session).send_nudge_digests()
    await engine.dispose()
    return len(digests)


def main() -> None:
    setup_logging()
    count = asyncio.run(send_nudge_digests())
    logger.info(f"Sent {count} nudge digest(s)")
