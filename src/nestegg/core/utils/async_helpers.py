"""Bridge from synchronous callers (the CLI) into the async price loader."""

import asyncio
from concurrent.futures import ThreadPoolExecutor


def run_async_safely(coro):
    """
    Run ``coro`` to completion and return its result.

    Outside an event loop this is asyncio.run(). Inside one (a notebook, a web
    handler calling load_price_history_sync) the coroutine runs on a fresh loop
    in a worker thread, since a running loop cannot be re-entered.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with ThreadPoolExecutor(max_workers=1) as executor:
        return executor.submit(asyncio.run, coro).result()
