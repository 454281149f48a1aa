from __future__ import annotations
from pathlib import Path
from typing import Optional
import json
import re
from pydantic import ValidationError
from esghub.analysis.schema import AnalysisResult
from esghub.utils.config import AppConfig
from esghub.utils.exception import AnalysisError, ServiceCallError, ServiceError
from esghub.utils.logger import logger
from esghub.utils.text import clip_with_note

ANALYSIS_PROMPT_PATH = Path(__file__).resolve().parent.parent / "prompts" / "esg_analysis.txt"
with open(ANALYSIS_PROMPT_PATH, "r", encoding="utf-8") as f:
    ANALYSIS_TEMPLATE = f.read()

FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.S | re.I)


def _get_llm(config: AppConfig):
    from esghub.llm.gemini import GeminiClient
    return GeminiClient(config)


def parse_analysis(raw: str) -> AnalysisResult:
    """Decode and validate the service's JSON. Any deviation raises ServiceError."""
    if raw is None:
        raise ServiceError("Analysis service returned no content.")
    m = FENCE_RE.match(raw)
    body = m.group(1) if m else raw.strip()
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise ServiceError(f"Analysis response is not valid JSON: {e.msg}") from e
    if not isinstance(payload, dict):
        raise ServiceError("Analysis response is not a JSON object.")
    try:
        return AnalysisResult.model_validate(payload)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise ServiceError(f"Analysis response does not match the expected schema ({', '.join(fields)}).") from e


class EsgAnalyzer:
    """Single request/response analysis of extracted report text.

    Input longer than `analysis_max_chars` is clipped and the prompt says so.
    Network, status and payload failures all surface as AnalysisError.
    """

    def __init__(self, config: AppConfig, llm=None):
        self.config = config
        self.llm = llm if llm is not None else _get_llm(config)

    def build_prompt(self, text: str) -> str:
        return ANALYSIS_TEMPLATE.format(document=clip_with_note(text, self.config.analysis_max_chars))

    def analyze(self, text: Optional[str], document_id: Optional[str] = None) -> AnalysisResult:
        if not text or not text.strip():
            raise AnalysisError("PDF content is not available for analysis.")
        logger.info("Requesting ESG analysis for document %s (%d chars)", document_id or "-", len(text))
        try:
            raw = self.llm.generate(self.build_prompt(text))
            result = parse_analysis(raw)
        except ServiceCallError as e:
            logger.error("Analysis failed for document %s: %s", document_id or "-", e)
            raise AnalysisError(str(e)) from e
        logger.info(
            "Analysis for document %s: score %.0f, %d flagged statement(s)",
            document_id or "-", result.confidence_score, len(result.flagged_statements),
        )
        return result
