"""
FastAPI entrypoint.

Routes:
- POST /upload          validate + parse a CSV file into TabularData
- POST /analyze         insights in every configured language + charts
- POST /chat            one question about the uploaded data
- POST /charts/download fetch a chart image as an attachment
- GET  /languages       the configured language list

The service keeps no state between requests: the client sends the parsed
data back with every /analyze and /chat call.
"""

import logging
import os
from functools import lru_cache
from typing import List, Optional
from urllib.parse import quote

import httpx
from fastapi import Depends, FastAPI, File, HTTPException, UploadFile
from fastapi.responses import Response

from .analyzer import ChatOrchestrator, InsightOrchestrator
from .charts import ChartGenerator, PlaceholderChartGenerator, download_chart
from .config import LanguageInfo, Settings
from .errors import AnalysisFailure, ChartDownloadError, ChatFailure, IngestionError
from .ingestion import file_meta, validate_and_parse
from .llm_client import AiClient
from .schemas import (
    AnalysisRequest,
    AnalysisResponse,
    ChartDescriptor,
    ChatRequest,
    ChatResponse,
    UploadResult,
)

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Multilingual CSV Insights")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def get_ai_client(settings: Settings = Depends(get_settings)) -> AiClient:
    return AiClient(settings)


def _attachment_header(filename: str) -> str:
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("\"", "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"


def get_chart_generator() -> ChartGenerator:
    return PlaceholderChartGenerator()


def get_image_transport() -> Optional[httpx.AsyncBaseTransport]:
    # overridden in tests; None means a real network transport
    return None


@app.get("/")
async def root():
    return {"message": "Multilingual CSV Insights API is running"}


@app.get("/languages", response_model=List[LanguageInfo])
async def languages(settings: Settings = Depends(get_settings)):
    return list(settings.languages)


@app.post("/upload", response_model=UploadResult)
async def upload_endpoint(
    file: UploadFile = File(...),
    settings: Settings = Depends(get_settings),
):
    try:
        data = await validate_and_parse(file, max_bytes=settings.max_upload_bytes)
    except IngestionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return UploadResult(file=file_meta(file), data=data)


@app.post("/analyze", response_model=AnalysisResponse)
async def analyze_endpoint(
    request: AnalysisRequest,
    settings: Settings = Depends(get_settings),
    client: AiClient = Depends(get_ai_client),
    chart_generator: ChartGenerator = Depends(get_chart_generator),
):
    orchestrator = InsightOrchestrator(client, settings.languages, chart_generator)
    try:
        return await orchestrator.analyze(request.csv_data)
    except AnalysisFailure as e:
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/chat", response_model=ChatResponse)
async def chat_endpoint(
    request: ChatRequest,
    client: AiClient = Depends(get_ai_client),
):
    orchestrator = ChatOrchestrator(client)
    try:
        answer = await orchestrator.ask(request.question, request.csv_data, request.language)
    except ChatFailure as e:
        raise HTTPException(status_code=500, detail=str(e))
    return ChatResponse(answer=answer)


@app.post("/charts/download")
async def chart_download_endpoint(
    chart: ChartDescriptor,
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_image_transport),
):
    try:
        download = await download_chart(chart, transport=transport, timeout=settings.request_timeout)
    except ChartDownloadError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return Response(
        content=download.content,
        media_type=download.media_type,
        headers={"Content-Disposition": _attachment_header(download.filename)},
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))
