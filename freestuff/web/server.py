# freestuff/web/server.py
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from freestuff.config import settings
from freestuff.jobs.scheduler import IngestScheduler
from freestuff.services.runlog import RunLog

def create_app(scheduler: IngestScheduler, run_log: RunLog) -> FastAPI:
    app = FastAPI(title="Free Stuff Map ingestion")

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    @app.post("/api/scrape")
    async def scrape():
        entry = await scheduler.run_once()
        if entry is None:
            return JSONResponse(status_code=409, content={"error": "scrape already in progress"})
        if not entry.success:
            return JSONResponse(status_code=500, content={"error": entry.error})
        return [r.model_dump() for r in entry.results or []]

    @app.get("/api/scraper-stats")
    async def scraper_stats():
        return {"runs": run_log.tail(settings.RUN_LOG_TAIL)}

    return app
