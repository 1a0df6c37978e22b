"""UI utilities for podcaster CLI."""

from podcaster.ui.console import (
    ConsoleReporter,
    listings_to_json,
    render_listing,
    render_report,
)

__all__ = ["ConsoleReporter", "listings_to_json", "render_listing", "render_report"]
