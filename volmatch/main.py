from __future__ import annotations

import asyncio

from aiohttp import web

from volmatch.container import build_container
from volmatch.telemetry.logger import get_logger
from volmatch.web.app import create_app


log = get_logger("main")


async def main() -> None:
    c = await build_container()
    app = create_app(c)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, c.settings.HOST, c.settings.PORT)
    await site.start()
    log.info("http.started", host=c.settings.HOST, port=c.settings.PORT)

    try:
        await asyncio.Event().wait()
    finally:
        # runs on_cleanup, which closes the container
        await runner.cleanup()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
