"""Lightweight health check utilities for ESG ReportHub.

No network calls: checks that the core libraries import and that the text
extractor can read a PDF generated on the spot.
"""
from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Dict, Any, List


@dataclass
class HealthStatus:
    component: str
    ok: bool
    detail: str

    def as_dict(self) -> Dict[str, Any]:
        return {"component": self.component, "ok": self.ok, "detail": self.detail}


def _check_import(module: str) -> HealthStatus:
    try:
        __import__(module)
        return HealthStatus(module, True, "import ok")
    except Exception as e:  # pragma: no cover - diagnostic path
        return HealthStatus(module, False, f"import failed: {e}")


CORE_IMPORTS = [
    "streamlit",
    "pypdf",
    "google.generativeai",
    "requests",
    "pydantic",
    "reportlab.pdfgen",
]


def _check_extractor() -> HealthStatus:
    try:
        from reportlab.pdfgen import canvas
        from esghub.ingest.pdf_text import extract_text

        buf = io.BytesIO()
        c = canvas.Canvas(buf)
        c.drawString(72, 720, "Health check page")
        c.showPage()
        c.save()
        extracted = extract_text(buf.getvalue())
        if extracted.page_count == 1 and "Health check" in extracted.text:
            return HealthStatus("extractor", True, "pdf text extraction ok")
        return HealthStatus("extractor", False, "unexpected extraction output")
    except Exception as e:  # pragma: no cover - rare path
        return HealthStatus("extractor", False, f"extraction failed: {e}")


def run_health_check() -> Dict[str, Any]:
    results: List[HealthStatus] = [_check_import(mod) for mod in CORE_IMPORTS]
    results.append(_check_extractor())
    return {
        "ok": all(r.ok for r in results),
        "components": [r.as_dict() for r in results],
    }


if __name__ == "__main__":  # Manual invocation helper
    import json, sys
    report = run_health_check()
    print(json.dumps(report, indent=2))
    sys.exit(0 if report["ok"] else 1)
