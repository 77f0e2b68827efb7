import asyncio

from tablebook.sweeper import ExpirySweeper


def test_sweeper_runs_until_stopped():
    calls = []

    def sweep():
        calls.append(1)
        return 0

    async def scenario():
        sweeper = ExpirySweeper(sweep, interval=0.01)
        sweeper.start()
        assert sweeper.running
        await asyncio.sleep(0.1)
        await sweeper.stop()
        assert not sweeper.running

    asyncio.run(scenario())
    assert len(calls) >= 1


def test_failing_sweep_keeps_the_timer_alive(caplog):
    calls = []

    def sweep():
        calls.append(1)
        raise RuntimeError("database is locked")

    async def scenario():
        sweeper = ExpirySweeper(sweep, interval=0.01)
        sweeper.start()
        await asyncio.sleep(0.1)
        assert sweeper.running
        await sweeper.stop()

    asyncio.run(scenario())
    assert len(calls) >= 2
    failures = [r for r in caplog.records if "Expiry sweep failed" in r.getMessage()]
    assert failures
    # traceback kept for the log
    assert failures[0].exc_info is not None


def test_stop_without_start_is_harmless():
    asyncio.run(ExpirySweeper(lambda: 0).stop())
