"""Analysis utilities for the canvas graph."""

from archflow.analysis.canvas_summary import (
    CanvasSummary,
    ConnectionSummary,
    format_summary,
    summarize,
    summary_to_dict,
)

__all__ = [
    "CanvasSummary",
    "ConnectionSummary",
    "format_summary",
    "summarize",
    "summary_to_dict",
]
