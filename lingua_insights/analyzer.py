"""
Core orchestration / pipeline.

Flow (analysis):
1. Receive parsed TabularData
2. One LLM call produces the insights in the source language (English)
3. One translation call per target language, all launched together
4. Join: if any translation fails, cancel the rest and fail the whole call
5. Attach charts from the configured ChartGenerator and return

Flow (chat):
1. Build a context prompt from the question and a small data sample
2. Single LLM call, answer returned as-is
"""

import asyncio
import logging
from typing import Dict, Optional, Sequence

from .charts import ChartGenerator, PlaceholderChartGenerator
from .config import LANGUAGE_CATALOG, LanguageInfo
from .errors import AiClientError, AnalysisFailure, ChatFailure
from .llm_client import AiClient
from .prompts import build_analysis_prompt, build_chat_prompt, build_translation_prompt
from .schemas import AnalysisResponse, InsightBundle, TabularData

logger = logging.getLogger(__name__)


class InsightOrchestrator:
    def __init__(
        self,
        client: AiClient,
        languages: Sequence[LanguageInfo] = LANGUAGE_CATALOG,
        chart_generator: Optional[ChartGenerator] = None,
    ):
        if not languages:
            raise ValueError("At least one language is required")
        self.client = client
        # first language is the one the analysis is written in
        self.source_language = languages[0]
        self.target_languages = tuple(languages[1:])
        self.chart_generator = chart_generator or PlaceholderChartGenerator()

    async def _translate_all(self, text: str) -> Dict[str, str]:
        """Fan out one translation per target language; fail fast on the first error."""
        tasks = {
            lang.code: asyncio.ensure_future(
                self.client.complete(build_translation_prompt(text, lang.code))
            )
            for lang in self.target_languages
        }
        if not tasks:
            return {}

        try:
            results = await asyncio.gather(*tasks.values())
        except BaseException:
            for task in tasks.values():
                task.cancel()
            # let cancelled siblings settle so none is left pending
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            raise
        return dict(zip(tasks.keys(), results))

    async def analyze(self, data: TabularData) -> AnalysisResponse:
        logger.info(
            f"Analyzing dataset with {data.row_count} rows and {len(data.headers)} columns"
        )
        try:
            source_text = await self.client.complete(
                build_analysis_prompt(data, self.source_language.code)
            )
            translations = await self._translate_all(source_text)
        except AiClientError as e:
            logger.error(f"Error analyzing CSV: {e}")
            raise AnalysisFailure(e) from e

        insights: InsightBundle = {self.source_language.code: source_text}
        insights.update(translations)

        charts = self.chart_generator.generate(data)
        logger.info(f"Insight bundle ready: {list(insights)} with {len(charts)} chart(s)")
        return AnalysisResponse(insights=insights, charts=charts)


class ChatOrchestrator:
    def __init__(self, client: AiClient):
        self.client = client

    async def ask(self, question: str, data: TabularData, language: str) -> str:
        prompt = build_chat_prompt(question, data, language)
        try:
            return await self.client.complete(prompt)
        except AiClientError as e:
            logger.error(f"Error in chat: {e}")
            raise ChatFailure(e) from e
