from unittest.mock import AsyncMock, patch

from level.server import jobs


async def test_send_nudge_digests_counts_built_digests(session_maker):
    with (
        patch.object(jobs, "async_session_maker", session_maker),
        patch.object(jobs, "engine") as mock_engine,
        patch.object(jobs.DigestService, "send_nudge_digests", AsyncMock(return_value=["a", "b"])) as mock_send,
    ):
        mock_engine.dispose = AsyncMock()
        count = await jobs.send_nudge_digests()

    assert count == 2
    mock_send.assert_awaited_once()
    mock_engine.dispose.assert_awaited_once()


def test_main_logs_the_count():
    with (
        patch.object(jobs, "setup_logging") as mock_setup,
        patch.object(jobs, "send_nudge_digests", AsyncMock(return_value=3)),
        patch.object(jobs, "logger") as mock_logger,
    ):
        jobs.main()

    mock_setup.assert_called_once()
    assert "Sent 3 nudge digest(s)" in mock_logger.info.call_args[0][0]
