from __future__ import annotations
import json
from typing import Any, Dict, List, Optional
from esghub.analysis.schema import AnalysisResult
from esghub.utils.types import ChatTurn, Document


def build_analysis_json(
    document: Optional[Document],
    result: Optional[AnalysisResult],
    chat_turns: List[ChatTurn],
    meta: Dict[str, Any],
) -> str:
    """Return a JSON snapshot of one document's analysis and its conversation.

    System turns are left out: they carry the document text itself.
    """
    payload = {
        "meta": meta,
        "document": None if document is None else {
            "id": document.id,
            "title": document.title,
            "file_name": document.file_name,
            "category": document.category,
            "upload_date": document.upload_date,
        },
        "analysis": None if result is None else {
            **result.model_dump(),
            "greenwashing_risk": result.greenwashing_risk,
        },
        "chat": [t.as_message() for t in chat_turns if t.role != "system"],
    }
    return json.dumps(payload, ensure_ascii=False, indent=2)
