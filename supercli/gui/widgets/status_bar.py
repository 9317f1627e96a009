"""Status bar widget."""

from __future__ import annotations

import customtkinter as ctk

from supercli.gui import theme

_DEFAULT_INFO = "Ready"


class StatusBar(ctk.CTkFrame):
    """Bottom status line: terminal info (left) + project path (right).

    ``flash`` shows a transient message that reverts to the last
    ``set_info`` text after a delay.
    """

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        revert_ms: int = 3000,
        error_revert_ms: int = 4000,
    ) -> None:
        super().__init__(master, fg_color=theme.COLOR_STATUS_BG, corner_radius=0)
        self.grid_columnconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=0)

        self._revert_ms = revert_ms
        self._error_revert_ms = error_revert_ms
        self._info_text = _DEFAULT_INFO
        self._info_level = "muted"
        self._revert_id: str | None = None

        self._label = ctk.CTkLabel(
            self,
            text=_DEFAULT_INFO,
            anchor="w",
            text_color=theme.COLOR_TEXT_MUTED,
            font=(theme.FONT_FAMILY, 12),
        )
        self._label.grid(row=0, column=0, sticky="ew", padx=10, pady=4)

        self._project_label = ctk.CTkLabel(
            self,
            text="",
            anchor="e",
            text_color=theme.COLOR_TEXT_MUTED,
            font=(theme.FONT_FAMILY, 12),
        )
        self._project_label.grid(row=0, column=1, sticky="e", padx=10, pady=4)

    def set_info(self, text: str, level: str = "muted") -> None:
        self._info_text = text
        self._info_level = level
        if self._revert_id is None:
            self._show(text, level)

    def flash(self, text: str, level: str = "info", duration_ms: int | None = None) -> None:
        if duration_ms is None:
            duration_ms = self._error_revert_ms if level == "error" else self._revert_ms
        self._cancel_revert()
        self._show(text, level)
        self._revert_id = self.after(duration_ms, self._revert)

    def set_project(self, text: str) -> None:
        self._project_label.configure(text=text)

    def destroy(self) -> None:
        self._cancel_revert()
        super().destroy()

    def _revert(self) -> None:
        self._revert_id = None
        self._show(self._info_text, self._info_level)

    def _cancel_revert(self) -> None:
        if self._revert_id is not None:
            self.after_cancel(self._revert_id)
            self._revert_id = None

    def _show(self, text: str, level: str) -> None:
        self._label.configure(text=text, text_color=theme.level_color(level))
