"""
Chart gallery support.

Charts are externally hosted images. No chart is rendered here: the default
generator returns one static sample chart, and other generators can be
plugged into the analyzer through the ChartGenerator protocol.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

import httpx

from .config import DEFAULT_TIMEOUT_SECONDS
from .errors import ChartDownloadError
from .schemas import ChartDescriptor, TabularData

logger = logging.getLogger(__name__)

SAMPLE_CHART = ChartDescriptor(
    id="1",
    title="Sales by Region (Example)",
    type="bar",
    image="https://images.pexels.com/photos/590020/pexels-photo-590020.jpeg?auto=compress&cs=tinysrgb&w=600",
    description="This is a sample chart. Dynamic chart generation is not yet implemented.",
)


class ChartGenerator(Protocol):
    def generate(self, data: TabularData) -> List[ChartDescriptor]:
        ...


class PlaceholderChartGenerator:
    """Always returns the static sample chart; `data` is not inspected."""

    def generate(self, data: TabularData) -> List[ChartDescriptor]:
        return [SAMPLE_CHART]


def chart_download_filename(title: str) -> str:
    # Always .png, whatever the image format really is
    return f"{title.replace(' ', '_')}.png"


@dataclass(frozen=True)
class ChartDownload:
    filename: str
    content: bytes
    media_type: str


async def download_chart(chart: ChartDescriptor,
                         transport: Optional[httpx.AsyncBaseTransport] = None,
                         timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS) -> ChartDownload:
    """Fetch the chart image so it can be offered as a local download."""
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport,
                                     follow_redirects=True) as client:
            response = await client.get(chart.image)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Error downloading chart {chart.id}: {type(e).__name__}: {e}")
        raise ChartDownloadError() from e

    media_type = response.headers.get("content-type", "application/octet-stream")
    logger.info(f"Downloaded {len(response.content)} bytes for chart {chart.id}")
    return ChartDownload(
        filename=chart_download_filename(chart.title),
        content=response.content,
        media_type=media_type,
    )
