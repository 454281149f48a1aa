import re
import threading
from concurrent.futures import CancelledError, TimeoutError as FutureTimeout
import streamlit as st
from streamlit.runtime.scriptrunner import add_script_run_ctx
from esghub.utils.config import AppConfig
from esghub.utils.exception import AnalysisError, ConfigError, DocumentParseError, LocateUnavailable, ServiceCallError
from esghub.utils.logger import logger, set_level
from esghub.utils.scheduling import Scheduler
from esghub.ingest.pdf_text import extract_text, load_document
from esghub.analysis.esg import EsgAnalyzer
from esghub.chat.session import ChatSession
from esghub.store.client import DocumentStoreClient
from esghub.viewer.frame import PdfFrame
from esghub.viewer.locator import Locator
from esghub.report.json_export import build_analysis_json
from esghub.report.report import cached_report
from esghub.ui import state as ui_state
from esghub.ui.components import (
    inject_css, brand_header, view_mode_toggle, report_cards, upload_form, viewer_header,
    pdf_view, analysis_popup, analysis_error, chat_widget, export_buttons,
)

config = AppConfig.from_env()
set_level(config.log_level)

st.set_page_config(page_title="ESG ReportHub", layout="wide", page_icon="🌱")
inject_css()

try:
    config.require_credentials()
except ConfigError as e:
    st.error(f"{e}. Set them in the environment or a .env file and restart.")
    st.stop()


def _session_timer(delay, fn):
    t = threading.Timer(delay, fn)
    t.daemon = True
    add_script_run_ctx(t)
    return t


if 'dashboard' not in st.session_state:
    st.session_state.dashboard = ui_state.DashboardState()
if 'viewer' not in st.session_state:
    st.session_state.viewer = ui_state.ViewerState()
if 'chat' not in st.session_state:
    st.session_state.chat = ChatSession(config)
if 'store' not in st.session_state:
    st.session_state.store = DocumentStoreClient(config)
if 'analyzer' not in st.session_state:
    st.session_state.analyzer = EsgAnalyzer(config)
if 'documents' not in st.session_state:
    st.session_state.documents = None
if 'report_cache' not in st.session_state:
    st.session_state.report_cache = {}
for key in ('frame', 'locator', 'pdf_bytes'):
    if key not in st.session_state:
        st.session_state[key] = None

store: DocumentStoreClient = st.session_state.store
chat: ChatSession = st.session_state.chat


def refresh_documents():
    try:
        st.session_state.documents = store.list_documents()
    except ServiceCallError as e:
        logger.error("Failed to fetch reports: %s", e)
        st.session_state.documents = []
        st.toast("Failed to load reports", icon="⚠️")


def open_viewer(document, data, extracted):
    """Bind the viewer, chat and locator to `document`; tears down the previous ones."""
    close_viewer()
    frame = PdfFrame(
        file_name=document.display_name,
        data=data,
        file_url=store.file_url(document),
        pages=extracted.pages if extracted else None,
        viewer_url=config.pdfjs_viewer_url,
        allow_scripts=True,
    )
    st.session_state.frame = frame
    st.session_state.locator = Locator(config, frame, scheduler=Scheduler(_session_timer))
    st.session_state.pdf_bytes = data
    st.session_state.viewer = ui_state.ViewerState()
    context = extracted.text if extracted else None
    st.session_state.dashboard = ui_state.open_document(st.session_state.dashboard, document, context)
    chat.attach(document.id, context)


def close_viewer():
    if st.session_state.locator is not None:
        st.session_state.locator.close()
    st.session_state.locator = None
    st.session_state.frame = None
    st.session_state.pdf_bytes = None


def handle_upload(uploaded, title, category):
    data = uploaded.getvalue()
    try:
        extracted = load_document(uploaded)
    except DocumentParseError as e:
        st.error(f"Could not read {uploaded.name}: {e}")
        return
    try:
        document = store.upload(data, uploaded.name, title, category)
    except ServiceCallError as e:
        st.error(f"Upload failed: {e}")
        return
    refresh_documents()
    st.toast("ESG report uploaded successfully!", icon="✅")
    open_viewer(document, data, extracted)
    st.rerun()


def handle_open(document):
    data, extracted = None, None
    try:
        data = store.fetch_pdf(document)
        extracted = extract_text(data)
    except DocumentParseError as e:
        st.error(f"Could not read {document.display_name}: {e}")
        return
    except ServiceCallError as e:
        logger.warning("Opening %s without text context: %s", document.id, e)
        st.toast("Report text unavailable; chat and analysis are disabled.", icon="⚠️")
    open_viewer(document, data, extracted)
    st.rerun()


def render_dashboard():
    dash = st.session_state.dashboard
    chat.attach(None, None)
    if st.session_state.documents is None:
        with st.spinner("Loading reports..."):
            refresh_documents()
    top_left, top_right = st.columns([5, 1])
    with top_left:
        brand_header("Manage and analyze your ESG reports")
    with top_right:
        if view_mode_toggle(dash):
            st.session_state.dashboard = ui_state.toggle_view_mode(dash)
            st.rerun()
        if st.button("＋ Create new", key="create_new"):
            st.session_state.dashboard = ui_state.set_upload_open(dash, not dash.upload_open)
            st.rerun()
    if dash.upload_open:
        submitted = upload_form()
        if submitted:
            with st.spinner("Reading and uploading report..."):
                handle_upload(*submitted)
    opened = report_cards(st.session_state.documents or [], dash.view_mode)
    if opened is not None:
        with st.spinner("Opening report..."):
            handle_open(opened)


def run_analysis(document, context):
    viewer = ui_state.start_analysis(st.session_state.viewer)
    st.session_state.viewer = viewer
    seq = viewer.analysis_seq
    result, error = None, "Analysis failed unexpectedly."
    with st.spinner("Analyzing..."):
        try:
            result = st.session_state.analyzer.analyze(context, document.id)
        except AnalysisError as e:
            error = str(e)
        finally:
            # always leave the analyzing state, even on an unexpected exception
            if result is not None:
                st.session_state.viewer = ui_state.finish_analysis(st.session_state.viewer, seq, result)
            else:
                st.session_state.viewer = ui_state.fail_analysis(st.session_state.viewer, seq, error)


def run_locate(statement, index):
    locator: Locator = st.session_state.locator
    future = locator.request(statement, index)
    wait = config.locate_settle_seconds + config.viewer_ready_timeout + 2
    with st.spinner("Searching in document..."):
        try:
            outcome = future.result(timeout=wait)
        except LocateUnavailable as e:
            st.toast(str(e), icon="⚠️")
            return
        except (FutureTimeout, CancelledError) as e:
            logger.warning("Locate did not complete: %r", e)
            return
    if outcome is not None:
        st.toast(outcome.notice, icon="🔎" if outcome.found else "⚠️")


def render_viewer():
    dash = st.session_state.dashboard
    document = dash.selected
    context = dash.pdf_context
    chat.attach(document.id, context)
    viewer = st.session_state.viewer
    action = viewer_header(document, viewer, bool(context), st.session_state.pdf_bytes)
    if action == "back":
        close_viewer()
        st.session_state.viewer = ui_state.ViewerState()
        st.session_state.dashboard = ui_state.back_to_dashboard(dash)
        st.rerun()
    elif action in ("zoom_in", "zoom_out"):
        transition = ui_state.zoom_in if action == "zoom_in" else ui_state.zoom_out
        st.session_state.viewer = transition(viewer)
        st.rerun()
    elif action == "analyze":
        run_analysis(document, context)
        st.rerun()

    doc_col, side_col = st.columns([3, 2])
    with doc_col:
        if st.session_state.frame is not None:
            pdf_view(st.session_state.frame, viewer.zoom)
    with side_col:
        analysis_tab, chat_tab = st.tabs(["Analysis", "AI Assistant"])
        with analysis_tab:
            if viewer.error:
                if analysis_error(viewer.error):
                    st.session_state.viewer = ui_state.dismiss_error(viewer)
                    st.rerun()
            if viewer.result is not None:
                locator = st.session_state.locator
                closed, clicked = analysis_popup(viewer.result, locator.active_index, locator.in_progress)
                if closed:
                    st.session_state.viewer = ui_state.close_popup(viewer)
                    st.rerun()
                if clicked is not None:
                    run_locate(viewer.result.flagged_statements[clicked].statement, clicked)
                    st.rerun()
                base = re.sub(r"[^A-Za-z0-9_-]+", "_", document.title)[:40] or "report"
                meta = {"app": "ESG ReportHub", "analysis_model": config.analysis_model, "chat_model": config.chat_model}
                export_buttons(
                    build_analysis_json(document, viewer.result, chat.turns, meta),
                    cached_report(st.session_state.report_cache, (document.id, viewer.analysis_seq), document, viewer.result),
                    base,
                )
            elif not viewer.error:
                st.info("Run 'Analyze with Gemini' to flag potentially misleading statements.")
        with chat_tab:
            prompt = chat_widget(chat)
            if prompt:
                with st.spinner("Thinking..."):
                    chat.send(prompt)
                st.rerun()


if st.session_state.dashboard.current_view == "pdf" and st.session_state.dashboard.selected is not None:
    render_viewer()
else:
    render_dashboard()
