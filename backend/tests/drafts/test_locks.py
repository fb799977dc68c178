import asyncio

from drafts.application.locks import KeyedLock


async def test_same_key_is_serialized():
    locks = KeyedLock()
    order = []

    async def worker(name):
        async with locks.hold("draft-1"):
            order.append(f"{name}-start")
            await asyncio.sleep(0.01)
            order.append(f"{name}-end")

    await asyncio.gather(worker("a"), worker("b"))
    assert order == ["a-start", "a-end", "b-start", "b-end"]


async def test_different_keys_run_concurrently():
    locks = KeyedLock()
    inside = asyncio.Event()
    release = asyncio.Event()

    async def first():
        async with locks.hold("draft-1"):
            inside.set()
            await release.wait()

    async def second():
        await inside.wait()
        async with locks.hold("draft-2"):
            release.set()

    await asyncio.wait_for(asyncio.gather(first(), second()), timeout=1)


async def test_lock_is_dropped_after_release():
    locks = KeyedLock()
    async with locks.hold("draft-1"):
        assert "draft-1" in locks
    assert "draft-1" not in locks
