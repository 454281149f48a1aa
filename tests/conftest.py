import io
import pytest
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas
from esghub.utils.config import AppConfig


def build_pdf(pages):
    """Build a PDF where each entry of `pages` is a list of lines (or one string)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    for page in pages:
        lines = [page] if isinstance(page, str) else page
        y = 780
        for line in lines:
            c.drawString(72, y, line)
            y -= 18
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def config():
    return AppConfig(
        google_api_key="test-google-key",
        openrouter_api_key="test-openrouter-key",
        chat_context_chars=12000,
        analysis_max_chars=5000,
        locate_settle_seconds=1.0,
        locate_reset_seconds=3.0,
        viewer_poll_interval=0.01,
        viewer_ready_timeout=0.05,
    )
