from __future__ import annotations
import html
from typing import List, Optional, Tuple
import pandas as pd
import streamlit as st
import streamlit.components.v1 as st_components
from esghub.analysis.schema import AnalysisResult
from esghub.chat.session import ChatSession
from esghub.utils.types import CATEGORY_ICONS, Document
from esghub.viewer.frame import PdfFrame
from esghub.ui.state import DashboardState, ViewerState, ZOOM_MAX, ZOOM_MIN

PRIMARY_COLOR = "#2563EB"
RISK_COLORS = {"Major": "#F87171", "Minor": "#FACC15"}
RISK_EMOJI = {"Major": "🔺", "Minor": "⚠️"}
CATEGORY_EMOJI = {"Environmental": "🌿", "Social": "👥", "Governance": "⚖️"}
FRAME_HEIGHT = 760

_CSS_TEMPLATE = r"""
<style>
html, body, [class*="css"]  { font-family: 'Inter', 'Segoe UI', sans-serif; }
section.main > div { padding-top: 1rem; }
.brand {display:flex;align-items:center;gap:.6rem;margin-bottom:.4rem;}
.brand-badge {width:32px;height:32px;display:flex;align-items:center;justify-content:center;background:__PRIMARY__;color:#fff;font-weight:700;border-radius:8px;font-size:.85rem;}
.report-card { background:#1f2937; border:1px solid #374151; border-radius:12px; padding:1rem 1.1rem .6rem; margin-bottom:.4rem; transition: border .15s, transform .15s; }
.report-card:hover { border-color:#4b5563; transform:translateY(-1px); }
.report-card .icon { font-size:2.1rem; }
.report-card h4 { margin:.5rem 0 .25rem 0; font-size:1rem; color:#f3f4f6; }
.report-card p { margin:0; font-size:.75rem; color:#9ca3af; }
.meta-grid { display:grid; grid-template-columns:repeat(2,minmax(0,1fr)); gap:.6rem; background:rgba(31,41,55,.5); padding:.75rem; border-radius:10px; margin-bottom:.75rem; }
.meta-grid h6 { margin:0; font-size:.72rem; color:#f3f4f6; }
.meta-grid span { font-size:.8rem; color:#d1d5db; }
.flag-card { background:#1f2937; border:1px solid #374151; border-radius:10px; padding:.65rem .8rem; margin-bottom:.35rem; }
.flag-card.active { border-color:__PRIMARY__; box-shadow:0 0 10px rgba(37,99,235,.25); }
.flag-card q { font-style:italic; font-weight:600; color:#f3f4f6; }
.flag-card .row { font-size:.72rem; margin-top:.35rem; color:#d1d5db; }
.searching-tag { font-size:.6rem; background:rgba(37,99,235,.2); color:#93c5fd; padding:2px 6px; border-radius:4px; margin-left:.4rem; }
.error-panel { background:rgba(127,29,29,.8); border:1px solid #ef4444; border-radius:10px; padding:.8rem 1rem; }
.error-panel pre { font-size:.7rem; background:rgba(69,10,10,.5); padding:.5rem; border-radius:6px; max-height:200px; overflow:auto; white-space:pre-wrap; }
</style>
"""

GLOBAL_CSS = _CSS_TEMPLATE.replace("__PRIMARY__", PRIMARY_COLOR)


def inject_css():
    st.markdown(GLOBAL_CSS, unsafe_allow_html=True)


def brand_header(subtitle: str = ""):
    st.markdown(
        f"<div class='brand'><div class='brand-badge'>E</div><h3 style='margin:0;'>ESG ReportHub</h3></div>"
        f"<div style='color:#9ca3af;font-size:.85rem;'>{html.escape(subtitle)}</div>",
        unsafe_allow_html=True,
    )


def view_mode_toggle(state: DashboardState) -> bool:
    """Returns True when the user switched between grid and list."""
    label = "☰ List view" if state.view_mode == "grid" else "▦ Grid view"
    return st.button(label, key="toggle_view_mode")


def report_cards(documents: List[Document], view_mode: str) -> Optional[Document]:
    """Render the stored reports; returns the one the user opened, if any."""
    if not documents:
        st.markdown("### No reports yet")
        st.caption("Upload your first ESG report to get started")
        return None
    if view_mode == "list":
        table = pd.DataFrame([
            {"": d.icon, "Title": d.title, "Category": d.category, "Uploaded": d.display_date, "Sources": d.source_count}
            for d in documents
        ])
        st.dataframe(table, hide_index=True, use_container_width=True)
        titles = {f"{d.title} ({d.display_date})": d for d in documents}
        choice = st.selectbox("Open report", list(titles.keys()), key="open_report_choice")
        if st.button("Open", key="open_report_list"):
            return titles[choice]
        return None
    cols = st.columns(4)
    opened = None
    for idx, d in enumerate(documents):
        with cols[idx % len(cols)]:
            sources = f"{d.source_count} source{'s' if d.source_count != 1 else ''}"
            st.markdown(
                f"<div class='report-card'><div class='icon'>{d.icon}</div>"
                f"<h4>{html.escape(d.title)}</h4><p>{html.escape(d.display_date)} • {sources}</p></div>",
                unsafe_allow_html=True,
            )
            if st.button("Open", key=f"open_{d.id}", use_container_width=True):
                opened = d
    return opened


def upload_form() -> Optional[Tuple[object, str, str]]:
    """Upload dialog; returns (uploaded_file, title, category) on submit."""
    with st.form("upload_form", clear_on_submit=True):
        uploaded = st.file_uploader("ESG report (PDF)", type=["pdf"])
        title = st.text_input("Title", placeholder="e.g., Acme Sustainability Report 2024")
        category = st.selectbox("Category", list(CATEGORY_ICONS.keys()))
        submitted = st.form_submit_button("Upload", type="primary")
    if submitted:
        if uploaded is None:
            st.warning("Choose a PDF to upload.")
            return None
        return uploaded, title.strip() or uploaded.name, category
    return None


def viewer_header(document: Document, state: ViewerState, can_analyze: bool, pdf_bytes: Optional[bytes]) -> Optional[str]:
    """Toolbar above the document. Returns one of back / zoom_in / zoom_out / analyze."""
    action = None
    back_col, title_col, zoom_out_col, zoom_col, zoom_in_col, dl_col, analyze_col = st.columns([1, 6, 1, 1, 1, 2, 3])
    with back_col:
        if st.button("←", key="viewer_back", help="Back to dashboard"):
            action = "back"
    with title_col:
        st.markdown(f"**{html.escape(document.display_name)}**  \n<span style='color:#9ca3af;font-size:.8rem;'>ESG Report</span>", unsafe_allow_html=True)
    with zoom_out_col:
        if st.button("−", key="zoom_out", disabled=state.zoom <= ZOOM_MIN):
            action = "zoom_out"
    with zoom_col:
        st.markdown(f"<div style='text-align:center;padding-top:.4rem;'>{state.zoom}%</div>", unsafe_allow_html=True)
    with zoom_in_col:
        if st.button("+", key="zoom_in", disabled=state.zoom >= ZOOM_MAX):
            action = "zoom_in"
    with dl_col:
        st.download_button("Download", data=pdf_bytes or b"", file_name=document.file_name or f"{document.title}.pdf",
                           mime="application/pdf", disabled=not pdf_bytes, key="download_pdf")
    with analyze_col:
        label = "Analyzing..." if state.analyzing else "✨ Analyze with Gemini"
        if st.button(label, key="analyze", disabled=state.analyzing or not can_analyze, type="primary"):
            action = "analyze"
    return action


def pdf_view(frame: PdfFrame, zoom: int):
    src = html.escape(frame.src(), quote=True)
    scale = zoom / 100
    # queued locate scripts run against the embedded document's window
    scripts = "".join(
        f"<script>document.getElementById('pdf-view').addEventListener('load', function () {{"
        f" (function (window) {{ {js} }})(this.contentWindow); }});</script>"
        for js in frame.take_scripts()
    )
    st_components.html(
        f"<div style='width:100%;height:{FRAME_HEIGHT}px;overflow:auto;background:#fff;border-radius:8px;'>"
        f"<iframe id='pdf-view' title='{html.escape(frame.file_name, quote=True)}' src=\"{src}\" "
        f"style='border:none;width:100%;height:100%;transform:scale({scale});transform-origin:top center;'></iframe></div>"
        f"{scripts}",
        height=FRAME_HEIGHT + 10,
    )


def analysis_popup(result: AnalysisResult, active_index: Optional[int], searching: bool) -> Tuple[bool, Optional[int]]:
    """Analysis panel. Returns (closed, index of the flagged statement clicked)."""
    closed = False
    clicked = None
    head_col, close_col = st.columns([6, 1])
    with head_col:
        st.markdown("#### 🔍 Gemini ESG Analysis")
    with close_col:
        closed = st.button("✕", key="close_popup")
    meta = result.report_metadata
    st.markdown("**📄 Report Metadata**")
    st.markdown(
        "<div class='meta-grid'>"
        + "".join(
            f"<div><h6>{label}</h6><span>{html.escape(value or 'N/A')}</span></div>"
            for label, value in [
                ("🏢 Company Name", meta.company_name),
                ("🗓️ Reporting Year", meta.reporting_year),
                ("🌍 Country/Region", meta.country_or_region),
                ("📑 Report Type", meta.report_type),
            ]
        )
        + "</div>",
        unsafe_allow_html=True,
    )
    risk = result.greenwashing_risk
    st.markdown(
        "<div class='meta-grid'>"
        f"<div><h6>🟢 Potential Greenwashing</h6><span>{result.confidence_score:.0f}% "
        f"<b style='color:{RISK_COLORS[risk]}'>({risk})</b></span></div>"
        f"<div><h6>🔥 Overall Classification</h6><span style='color:{RISK_COLORS[result.classification]}'>{result.classification}</span></div>"
        f"<div><h6>📘 Claimed Frameworks</h6><span>{html.escape(', '.join(result.frameworks_claimed) or 'None')}</span></div>"
        f"<div><h6>🌍 Other Frameworks</h6><span>{html.escape(', '.join(result.other_frameworks) or 'None')}</span></div>"
        "</div>",
        unsafe_allow_html=True,
    )
    st.markdown("**📌 Flagged Statements**")
    if not result.flagged_statements:
        st.caption("No statements flagged.")
    for idx, item in enumerate(result.flagged_statements):
        active = idx == active_index
        tag = "<span class='searching-tag'>Searching...</span>" if active and searching else ""
        st.markdown(
            f"<div class='flag-card{' active' if active else ''}'><q>{html.escape(item.statement)}</q>{tag}"
            f"<div class='row'><b>{CATEGORY_EMOJI.get(item.esg_category, '📊')} Category:</b> {html.escape(item.esg_category)}"
            f" &nbsp; <b>{RISK_EMOJI[item.risk_level]} Risk Level:</b> "
            f"<span style='color:{RISK_COLORS[item.risk_level]}'>{item.risk_level}</span></div>"
            f"<div class='row'><b>🧠 Reason:</b> {html.escape(item.reason)}</div></div>",
            unsafe_allow_html=True,
        )
        if st.button("Find in document", key=f"locate_{idx}", disabled=searching):
            clicked = idx
    return closed, clicked


def analysis_error(message: str) -> bool:
    """Dismissible error panel; returns True when dismissed."""
    st.markdown(
        f"<div class='error-panel'><b>Analysis Error</b><p style='font-size:.85rem;margin:.4rem 0;'>{html.escape(message)}</p>"
        f"<pre>{html.escape(message)}</pre></div>",
        unsafe_allow_html=True,
    )
    return st.button("Dismiss", key="dismiss_error")


def chat_widget(session: ChatSession) -> Optional[str]:
    """Conversation panel; returns submitted text when sending is allowed."""
    st.markdown("#### AI Assistant")
    st.caption("Ask questions about your ESG report")
    history = st.container(height=420)
    with history:
        if not session.has_context:
            st.info("Waiting for document...")
        elif not session.visible_turns():
            st.caption("Document loaded. Start a conversation by asking a question!")
        for turn in session.visible_turns():
            with st.chat_message(turn.role):
                st.markdown(turn.content)
    disabled = not session.has_context or session.pending
    prompt = st.chat_input("Ask about your ESG report...", disabled=disabled, key="chat_input")
    if prompt and session.can_send(prompt):
        return prompt
    return None


def export_buttons(json_blob: str, pdf_blob: Optional[bytes], base_name: str):
    col_json, col_pdf = st.columns(2)
    with col_json:
        st.download_button("🗂️ Export JSON", data=json_blob, file_name=f"{base_name}_analysis.json",
                           mime="application/json", use_container_width=True, key="export_json")
    with col_pdf:
        st.download_button("📥 PDF Report", data=pdf_blob or b"", file_name=f"{base_name}_analysis.pdf",
                           mime="application/pdf", use_container_width=True, disabled=not pdf_blob, key="export_pdf")
