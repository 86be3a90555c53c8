# src/release_report/api/server.py
import logging
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from ..agent.errors import ReportError
from ..agent.report_orchestrator import generate_report
from ..models.settings import ReportSettings

load_dotenv()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("release-report.api")


def get_settings() -> ReportSettings:
    return ReportSettings.from_env()


app = FastAPI(
    title="Release Report",
    version="0.1.0",
)


@app.exception_handler(ReportError)
async def report_error_handler(request: Request, error: ReportError):
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


@app.get("/deploy-report")
async def deploy_report_endpoint(
    start: Optional[str] = None,
    end: Optional[str] = None,
    settings: ReportSettings = Depends(get_settings),
):
    """
    Summarize what shipped in the configured repo between `start` and `end`
    (both YYYY-MM-DD, inclusive).
    """
    report = await generate_report(start, end, settings)
    logger.info("Served report with %d commits", report.meta.commit_count)
    return JSONResponse(content=report.to_response())
