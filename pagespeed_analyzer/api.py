from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Literal, Optional

import httpx
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from groq import AsyncGroq
from pydantic import BaseModel, Field, validator

from pagespeed_analyzer.config import Settings, load_settings
from pagespeed_analyzer.errors import AnalyzerError, UnexpectedError, ValidationError
from pagespeed_analyzer.fetcher import PageSpeedFetcher
from pagespeed_analyzer.llm_groq import ReportGenerator, build_groq_client
from pagespeed_analyzer.summarizer import summarize

logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "PageSpeed Groq Analyzer API is running."


class PagespeedRequest(BaseModel):
    url: Optional[str] = None
    strategy: Literal["desktop", "mobile"] = "desktop"

    @validator("url")
    def strip_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None


class AnalysisRequest(BaseModel):
    pagespeed_data: Optional[dict[str, Any]] = Field(default=None, alias="pagespeedData")


def get_fetcher(request: Request) -> PageSpeedFetcher:
    return request.app.state.fetcher


def get_report_generator(request: Request) -> ReportGenerator:
    return request.app.state.report_generator


router = APIRouter(prefix="/api")


@router.get("", response_class=PlainTextResponse)
def health() -> str:
    return HEALTH_MESSAGE


@router.post("/get-pagespeed-data")
async def get_pagespeed_data(
    req: Optional[PagespeedRequest] = None,
    fetcher: PageSpeedFetcher = Depends(get_fetcher),
) -> JSONResponse:
    if req is None or not req.url:
        raise ValidationError("URL is required")

    try:
        payload = await fetcher.fetch(req.url, strategy=req.strategy)
    except ValidationError:
        raise
    except AnalyzerError:
        logger.exception("Error in /api/get-pagespeed-data")
        raise
    except Exception as exc:
        logger.exception("Error in /api/get-pagespeed-data")
        raise UnexpectedError.from_exception(exc) from exc
    return JSONResponse(content=payload)


@router.post("/get-analysis")
async def get_analysis(
    req: Optional[AnalysisRequest] = None,
    generator: ReportGenerator = Depends(get_report_generator),
) -> dict[str, str]:
    if req is None or req.pagespeed_data is None:
        raise ValidationError("pagespeedData is required")

    try:
        summary = summarize(req.pagespeed_data)
        analysis = await generator.generate(summary)
    except AnalyzerError:
        logger.exception("Error in /api/get-analysis")
        raise
    except Exception as exc:
        logger.exception("Error in /api/get-analysis")
        raise UnexpectedError.from_exception(exc) from exc
    return {"analysis": analysis}


async def _analyzer_error_handler(request: Request, exc: AnalyzerError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    if app.state.owns_http_client:
        await app.state.http_client.aclose()
    if app.state.owns_llm_client and app.state.llm_client is not None:
        await app.state.llm_client.close()


def create_app(
    settings: Optional[Settings] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    llm_client: Optional[AsyncGroq] = None,
) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="PageSpeed Groq Analyzer API", version="1.0.0", lifespan=_lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Clients live as long as the process; handlers reach them via app.state.
    app.state.settings = settings
    app.state.owns_http_client = http_client is None
    app.state.owns_llm_client = llm_client is None
    app.state.http_client = http_client or httpx.AsyncClient()
    app.state.llm_client = llm_client if llm_client is not None else build_groq_client(settings.groq_api_key)
    app.state.fetcher = PageSpeedFetcher(app.state.http_client, api_key=settings.pagespeed_api_key)
    app.state.report_generator = ReportGenerator(app.state.llm_client, model=settings.groq_model)

    app.add_exception_handler(AnalyzerError, _analyzer_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(router)
    return app
