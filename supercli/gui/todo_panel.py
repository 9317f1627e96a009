"""TODO checklist side panel backed by the project's TODO.md."""

from __future__ import annotations

import customtkinter as ctk
from loguru import logger

from supercli.gui import theme
from supercli.session.todo_store import UNCATEGORIZED, TodoList, TodoStore


class TodoPanel(ctk.CTkFrame):
    """Shows the active project's TODO.md as checkboxes.

    Every change is written straight back to the file; the panel keeps no
    state of its own beyond the last loaded list.
    """

    def __init__(self, master: ctk.CTkBaseClass, store: TodoStore | None = None) -> None:
        super().__init__(
            master,
            fg_color=theme.COLOR_BG_PANEL,
            border_width=1,
            border_color=theme.COLOR_BORDER,
            corner_radius=8,
            width=260,
        )
        self._store = store or TodoStore()
        self._project_path: str | None = None
        self._todo = TodoList()

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._header = ctk.CTkLabel(
            self,
            text="TODO",
            anchor="w",
            text_color=theme.COLOR_TEXT,
            font=(theme.FONT_FAMILY, 13, "bold"),
        )
        self._header.grid(row=0, column=0, sticky="ew", padx=10, pady=(8, 4))

        self._list_frame = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._list_frame.grid(row=1, column=0, sticky="nsew", padx=6)
        self._list_frame.grid_columnconfigure(0, weight=1)

        add_row = ctk.CTkFrame(self, fg_color="transparent")
        add_row.grid(row=2, column=0, sticky="ew", padx=8, pady=(4, 8))
        add_row.grid_columnconfigure(0, weight=1)
        self._entry = ctk.CTkEntry(
            add_row,
            height=28,
            font=(theme.FONT_FAMILY, 12),
            placeholder_text="Add item (section: text)",
        )
        self._entry.grid(row=0, column=0, sticky="ew")
        self._entry.bind("<Return>", lambda _e: self._add())
        ctk.CTkButton(add_row, text="+", width=28, height=28, command=self._add).grid(
            row=0, column=1, padx=(4, 0)
        )

        self._render()

    def set_project(self, project_path: str | None) -> None:
        self._project_path = project_path
        self.reload()

    def reload(self) -> None:
        self._todo = self._store.load(self._project_path) if self._project_path else TodoList()
        self._render()

    def _add(self) -> None:
        raw = self._entry.get().strip()
        if not raw or not self._project_path:
            return
        section, sep, text = raw.partition(":")
        if not sep or not text.strip():
            section, text = UNCATEGORIZED, raw
        try:
            self._todo = self._store.add_item(self._project_path, section.strip(), text)
        except OSError as exc:
            logger.error(f"Failed to update TODO.md: {exc}")
            return
        self._entry.delete(0, "end")
        self._render()

    def _toggle(self, section_title: str, index: int) -> None:
        if not self._project_path:
            return
        try:
            self._todo = self._store.toggle_item(self._project_path, section_title, index)
        except (OSError, KeyError, IndexError) as exc:
            logger.error(f"Failed to toggle TODO item: {exc}")
            self.reload()
            return
        self._render()

    def _remove(self, section_title: str, index: int) -> None:
        if not self._project_path:
            return
        try:
            self._todo = self._store.remove_item(self._project_path, section_title, index)
        except (OSError, KeyError, IndexError) as exc:
            logger.error(f"Failed to remove TODO item: {exc}")
            self.reload()
            return
        self._render()

    def _render(self) -> None:
        for child in self._list_frame.winfo_children():
            child.destroy()

        done, total = self._todo.counts()
        self._header.configure(text=f"{self._todo.title} ({done}/{total})" if total else self._todo.title)

        if not self._project_path:
            ctk.CTkLabel(
                self._list_frame,
                text="No project selected",
                text_color=theme.COLOR_TEXT_MUTED,
                font=(theme.FONT_FAMILY, 12),
            ).grid(row=0, column=0, sticky="w")
            return

        row = 0
        for section in self._todo.sections:
            ctk.CTkLabel(
                self._list_frame,
                text=section.title,
                anchor="w",
                text_color=theme.COLOR_ACCENT,
                font=(theme.FONT_FAMILY, 12, "bold"),
            ).grid(row=row, column=0, columnspan=2, sticky="ew", pady=(6, 2))
            row += 1
            for index, item in enumerate(section.items):
                var = ctk.BooleanVar(value=item.done)
                ctk.CTkCheckBox(
                    self._list_frame,
                    text=item.text,
                    variable=var,
                    font=(theme.FONT_FAMILY, 12),
                    text_color=theme.COLOR_TEXT_MUTED if item.done else theme.COLOR_TEXT,
                    command=lambda s=section.title, i=index: self._toggle(s, i),
                ).grid(row=row, column=0, sticky="w", pady=1)
                ctk.CTkButton(
                    self._list_frame,
                    text="×",
                    width=20,
                    height=20,
                    fg_color="transparent",
                    text_color=theme.COLOR_TEXT_MUTED,
                    hover_color=theme.COLOR_TAB_HOVER_BG,
                    command=lambda s=section.title, i=index: self._remove(s, i),
                ).grid(row=row, column=1, sticky="e")
                row += 1
