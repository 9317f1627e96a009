"""Terminal surface: a pyte-backed text view plus its tab in the tab strip."""

from __future__ import annotations

import tkinter as tk
import tkinter.font
from typing import Callable, Optional

import customtkinter as ctk
import pyte
from loguru import logger

from supercli.gui import theme

_KEY_MAP = {
    "Return": "\r",
    "KP_Enter": "\r",
    "BackSpace": "\x7f",
    "Delete": "\x1b[3~",
    "Up": "\x1b[A",
    "Down": "\x1b[B",
    "Left": "\x1b[D",
    "Right": "\x1b[C",
    "Home": "\x1b[H",
    "End": "\x1b[F",
    "Prior": "\x1b[5~",
    "Next": "\x1b[6~",
    "Escape": "\x1b",
    "Tab": "\t",
}
_CTRL_MASK = 0x4
_MIN_COLS = 20
_MIN_ROWS = 5


def translate_key(keysym: str, char: str, state: int) -> str:
    """Map a Tk key event to the bytes a terminal would send."""
    if keysym in _KEY_MAP:
        return _KEY_MAP[keysym]
    if state & _CTRL_MASK:
        ch = keysym.lower()
        if len(ch) == 1 and "a" <= ch <= "z":
            return chr(ord(ch) - 96)
    if char and len(char) == 1 and ord(char) >= 32:
        return char
    return ""


class TabButton(ctk.CTkFrame):
    """Tab strip entry: CLI name plus a close button."""

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        title: str,
        cli_command: str,
        on_select: Callable[[], None],
        on_close: Callable[[], None],
    ) -> None:
        super().__init__(master, fg_color=theme.COLOR_TAB_NORMAL_BG, corner_radius=6)
        self._title = title
        self._active = False

        badge = ctk.CTkFrame(self, width=8, height=8, corner_radius=4, fg_color=theme.cli_color(cli_command))
        badge.pack(side="left", padx=(8, 4))

        self._label = ctk.CTkLabel(
            self,
            text=title,
            font=(theme.FONT_FAMILY, 12),
            text_color=theme.COLOR_TEXT_MUTED,
        )
        self._label.pack(side="left", padx=(0, 4), pady=4)
        self._label.bind("<Button-1>", lambda _e: on_select())
        self.bind("<Button-1>", lambda _e: on_select())

        ctk.CTkButton(
            self,
            text="×",
            width=20,
            height=20,
            fg_color="transparent",
            hover_color=theme.COLOR_TAB_HOVER_BG,
            text_color=theme.COLOR_TEXT_MUTED,
            command=on_close,
        ).pack(side="left", padx=(0, 6))

    def set_active(self, active: bool) -> None:
        self._active = active
        self.configure(fg_color=theme.COLOR_TAB_ACTIVE_BG if active else theme.COLOR_TAB_NORMAL_BG)
        self._label.configure(text_color=theme.COLOR_TEXT if active else theme.COLOR_TEXT_MUTED)

    def mark_exited(self) -> None:
        self._label.configure(text=f"{self._title} (exited)", text_color=theme.COLOR_TAB_EXITED_TEXT)


class TerminalView(ctk.CTkFrame):
    """One session's terminal output, rendered from a pyte HistoryScreen.

    Keystrokes go to ``on_input``; the tab controller decides whether the
    session accepts them. Only the active view is gridded, hidden views keep
    their screen so scrollback survives tab switches.
    """

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        tab_bar: ctk.CTkBaseClass,
        session_id: str,
        title: str,
        cli_command: str,
        on_input: Callable[[str, str], None],
        on_resize: Callable[[str], None],
        on_select: Callable[[str], None],
        on_close: Callable[[str], None],
        on_paste: Callable[[str, str], None],
        font_size: int = theme.FONT_SIZE,
        scrollback: int = 1000,
        cols: int = 80,
        rows: int = 30,
    ) -> None:
        super().__init__(master, fg_color=theme.COLOR_BG_TERMINAL, corner_radius=0)
        self.session_id = session_id
        self._on_input = on_input
        self._on_resize = on_resize
        self._on_paste = on_paste
        self._tab_visible = False
        self._render_id: Optional[str] = None
        self._prev_render = ""
        self._last_size = (0, 0)

        self._cols = cols
        self._rows = rows
        self._screen = pyte.HistoryScreen(cols, rows, history=scrollback)
        self._screen.set_mode(pyte.modes.LNM)
        self._stream = pyte.Stream(self._screen)

        self._font = tkinter.font.Font(family=theme.MONO_FAMILY, size=font_size)
        self.output = tk.Text(
            self,
            bg=theme.COLOR_BG_TERMINAL,
            fg=theme.COLOR_TEXT,
            insertbackground=theme.COLOR_TEXT,
            font=self._font,
            wrap="none",
            relief="flat",
            borderwidth=0,
            highlightthickness=0,
            padx=6,
            pady=4,
            cursor="xterm",
        )
        self.output.pack(fill="both", expand=True)
        self.output.config(state="disabled")

        scrollbar = ctk.CTkScrollbar(self.output, command=self.output.yview)
        self.output.configure(yscrollcommand=scrollbar.set)
        scrollbar.place(relx=1.0, rely=0, relheight=1.0, anchor="ne")

        self.output.bind("<Key>", self._on_key)
        self.output.bind("<Button-1>", lambda _e: self.output.focus_set())
        self.output.bind("<Configure>", self._on_configure)

        self.tab = TabButton(
            tab_bar,
            title=title,
            cli_command=cli_command,
            on_select=lambda: on_select(session_id),
            on_close=lambda: on_close(session_id),
        )

    # ------------------------------------------------------------------ #
    # TerminalSurface                                                      #
    # ------------------------------------------------------------------ #

    def write(self, data: str) -> None:
        try:
            self._stream.feed(data)
        except Exception as exc:
            logger.debug(f"[view] {self.session_id} unparsable output dropped: {exc}")
            return
        self._schedule_render()

    def set_active(self, active: bool) -> None:
        self.tab.set_active(active)
        if active:
            self.grid(row=0, column=0, sticky="nsew")
            self.tkraise()
        else:
            self.grid_remove()

    def set_tab_visible(self, visible: bool) -> None:
        if visible and not self._tab_visible:
            self.tab.pack(side="left", padx=(0, 4), pady=4)
        elif not visible and self._tab_visible:
            self.tab.pack_forget()
        self._tab_visible = visible

    def fit(self) -> tuple[int, int]:
        """Resize the screen to the widget and return (cols, rows)."""
        self.update_idletasks()
        width = self.output.winfo_width()
        height = self.output.winfo_height()
        char_w = self._font.measure("M")
        char_h = self._font.metrics("linespace")
        if width <= 1 or height <= 1 or char_w <= 0 or char_h <= 0:
            return self._cols, self._rows

        cols = max(_MIN_COLS, (width - 12) // char_w)
        rows = max(_MIN_ROWS, (height - 8) // char_h)
        if (cols, rows) != (self._cols, self._rows):
            self._cols, self._rows = cols, rows
            self._screen.resize(rows, cols)
            self._schedule_render()
        return cols, rows

    def focus(self) -> None:
        self.output.focus_set()

    def mark_exited(self) -> None:
        self.tab.mark_exited()

    def dispose(self) -> None:
        if self._render_id is not None:
            self.after_cancel(self._render_id)
            self._render_id = None
        self.tab.destroy()
        self.destroy()

    # ------------------------------------------------------------------ #
    # Rendering                                                            #
    # ------------------------------------------------------------------ #

    def _schedule_render(self) -> None:
        if self._render_id is None:
            self._render_id = self.after_idle(self._render)

    def _history_line_to_text(self, line: object) -> str:
        if isinstance(line, dict):
            cols = self._screen.columns
            return "".join(line[x].data if x in line else " " for x in range(cols)).rstrip()
        return str(line).rstrip()

    def _render(self) -> None:
        self._render_id = None
        lines = [self._history_line_to_text(line) for line in self._screen.history.top]
        lines.extend(line.rstrip() for line in self._screen.display)
        while lines and lines[-1] == "":
            lines.pop()

        rendered = "\n".join(lines)
        if rendered == self._prev_render:
            return
        self._prev_render = rendered

        self.output.config(state="normal")
        self.output.delete("1.0", "end")
        if rendered:
            self.output.insert("1.0", rendered)
        self.output.see("end")
        self.output.config(state="disabled")

    # ------------------------------------------------------------------ #
    # Input                                                                #
    # ------------------------------------------------------------------ #

    def _on_configure(self, event: tk.Event) -> None:
        size = (event.width, event.height)
        if size == self._last_size:
            return
        self._last_size = size
        self._on_resize(self.session_id)

    def _on_key(self, event: tk.Event) -> str:
        ctrl = bool(event.state & _CTRL_MASK)
        key = event.keysym.lower()

        if ctrl and key == "c" and self._copy_selection():
            return "break"
        if ctrl and key == "v":
            try:
                text = self.clipboard_get()
            except tk.TclError:
                return "break"
            self._on_paste(self.session_id, text)
            return "break"

        data = translate_key(event.keysym, event.char, event.state)
        if data:
            self._on_input(self.session_id, data)
        return "break"

    def _copy_selection(self) -> bool:
        try:
            text = self.output.get(tk.SEL_FIRST, tk.SEL_LAST)
        except tk.TclError:
            return False
        self.clipboard_clear()
        self.clipboard_append(text)
        return True
