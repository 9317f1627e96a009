"""Reusable GUI widgets."""

from supercli.gui.widgets.status_bar import StatusBar

__all__ = ["StatusBar"]
