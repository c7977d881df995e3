"""Output formatters for sales reports."""

from grocery_core.formatters.console import format_kpis_for_console, format_views_for_console

__all__ = ["format_kpis_for_console", "format_views_for_console"]
