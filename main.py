# main.py: FastAPI + APScheduler on one event loop
import asyncio
import logging

import uvicorn
from freestuff.config import settings
from freestuff.db import init_db
from freestuff.jobs.scheduler import IngestScheduler
from freestuff.services.ingest import ListingWriter
from freestuff.services.orchestrator import ScraperOrchestrator, build_default_scrapers
from freestuff.services.runlog import RunLog
from freestuff.utils.http import Fetcher
from freestuff.web.server import create_app as create_web_app

logger = logging.getLogger(__name__)
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

async def run():
    # 1) DB
    await init_db()

    # 2) Scrapers, run log, scheduler (first run fires immediately)
    orchestrator = ScraperOrchestrator(build_default_scrapers(Fetcher(), ListingWriter()))
    run_log = RunLog()
    scheduler = IngestScheduler(orchestrator, run_log)
    scheduler.start()

    # 3) FastAPI via Uvicorn (blocks until Ctrl+C / shutdown)
    web_app = create_web_app(scheduler, run_log)
    server = uvicorn.Server(
        uvicorn.Config(
            web_app,
            host=settings.WEB_HOST,
            port=settings.WEB_PORT,
            log_level=settings.LOG_LEVEL.lower(),
        )
    )

    try:
        await server.serve()
    finally:
        scheduler.shutdown()

if __name__ == "__main__":
    try:
        asyncio.run(run())
    except (KeyboardInterrupt, SystemExit):
        pass
