"""Per-view state records and their pure transitions.

Each view keeps one record in st.session_state and replaces it through the
functions below; nothing here touches Streamlit.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Literal, Optional
from esghub.analysis.schema import AnalysisResult
from esghub.utils.types import Document

ZOOM_MIN = 50
ZOOM_MAX = 200
ZOOM_STEP = 25


@dataclass(frozen=True)
class DashboardState:
    view_mode: Literal["grid", "list"] = "grid"
    current_view: Literal["dashboard", "pdf"] = "dashboard"
    selected: Optional[Document] = None
    pdf_context: Optional[str] = None
    upload_open: bool = False


def open_document(state: DashboardState, document: Document, pdf_context: Optional[str]) -> DashboardState:
    return replace(state, current_view="pdf", selected=document, pdf_context=pdf_context or None, upload_open=False)


def back_to_dashboard(state: DashboardState) -> DashboardState:
    return replace(state, current_view="dashboard", selected=None, pdf_context=None)


def toggle_view_mode(state: DashboardState) -> DashboardState:
    return replace(state, view_mode="list" if state.view_mode == "grid" else "grid")


def set_upload_open(state: DashboardState, is_open: bool) -> DashboardState:
    return replace(state, upload_open=is_open)


@dataclass(frozen=True)
class ViewerState:
    zoom: int = 100
    analyzing: bool = False
    analysis_seq: int = 0
    result: Optional[AnalysisResult] = None
    error: Optional[str] = None


def zoom_in(state: ViewerState) -> ViewerState:
    return replace(state, zoom=min(state.zoom + ZOOM_STEP, ZOOM_MAX))


def zoom_out(state: ViewerState) -> ViewerState:
    return replace(state, zoom=max(state.zoom - ZOOM_STEP, ZOOM_MIN))


def start_analysis(state: ViewerState) -> ViewerState:
    """Begin a new request; any earlier result or error is dropped."""
    return replace(state, analyzing=True, analysis_seq=state.analysis_seq + 1, result=None, error=None)


def finish_analysis(state: ViewerState, seq: int, result: AnalysisResult) -> ViewerState:
    if seq != state.analysis_seq:
        return state
    return replace(state, analyzing=False, result=result, error=None)


def fail_analysis(state: ViewerState, seq: int, message: str) -> ViewerState:
    if seq != state.analysis_seq:
        return state
    return replace(state, analyzing=False, result=None, error=message or "An unknown error occurred during analysis.")


def close_popup(state: ViewerState) -> ViewerState:
    return replace(state, result=None)


def dismiss_error(state: ViewerState) -> ViewerState:
    return replace(state, error=None)
