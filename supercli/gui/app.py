"""Main customtkinter desktop application."""

from __future__ import annotations

import threading
from pathlib import Path
from tkinter import filedialog
from typing import Callable

import customtkinter as ctk
from loguru import logger

from supercli.config.schema import Config
from supercli.gui import theme
from supercli.gui.cli_dialog import CLIDialog
from supercli.gui.images import grab_clipboard_png, to_png
from supercli.gui.tab_controller import TabController, TerminalSurface
from supercli.gui.terminal_view import TerminalView
from supercli.gui.todo_panel import TodoPanel
from supercli.gui.widgets.status_bar import StatusBar
from supercli.session.preferences_store import PreferencesStore
from supercli.session.project_store import ProjectRegistry, ProjectStore
from supercli.terminal.service import TerminalService
from supercli.terminal.timers import AfterScheduler

_IMAGE_TYPES = [("Images", "*.png *.jpg *.jpeg *.gif *.bmp *.webp"), ("All files", "*.*")]


class SuperCLIApp:
    """Single window: project bar, tab strip, terminal area, input bar, status line."""

    def __init__(
        self,
        config: Config | None = None,
        project_path: str | None = None,
        preferences: PreferencesStore | None = None,
    ) -> None:
        self._config = config or Config()
        self._initial_project = project_path
        self._preferences = preferences or PreferencesStore()
        self._projects = ProjectRegistry()
        self._project_store = ProjectStore()

        self._root: ctk.CTk | None = None
        self._service: TerminalService | None = None
        self._controller: TabController | None = None
        self._status_bar: StatusBar | None = None
        self._todo_panel: TodoPanel | None = None
        self._tab_bar: ctk.CTkFrame | None = None
        self._terminal_area: ctk.CTkFrame | None = None
        self._input: ctk.CTkEntry | None = None
        self._project_menu: ctk.CTkOptionMenu | None = None
        self._cli_dialog: CLIDialog | None = None
        self._pump_id: str | None = None
        self._project_paths: dict[str, str] = {}

        self._ui_thread_id: int | None = None
        self._pending_calls: list[Callable[[], None]] = []

    def run(self) -> None:
        """Build and run tkinter mainloop."""
        prefs = self._preferences.load()
        theme.setup_theme(prefs.theme or self._config.gui.theme)
        root = ctk.CTk()
        self._root = root
        self._ui_thread_id = threading.get_ident()

        root.title("SuperCLI")
        root.minsize(800, 500)
        root.geometry(f"{self._config.gui.width}x{self._config.gui.height}")
        root.configure(fg_color=theme.COLOR_BG_APP)
        root.protocol("WM_DELETE_WINDOW", self._handle_close)
        root.bind("<Control-t>", lambda _e: self._show_cli_dialog())
        root.bind("<Configure>", self._on_root_configure)

        root.grid_columnconfigure(0, weight=1)
        root.grid_columnconfigure(1, weight=0)
        root.grid_rowconfigure(0, weight=1)

        main = ctk.CTkFrame(root, fg_color="transparent")
        main.grid(row=0, column=0, sticky="nsew", padx=(10, 6), pady=10)
        main.grid_columnconfigure(0, weight=1)
        main.grid_rowconfigure(2, weight=1)

        self._build_top_bar(main)

        self._tab_bar = ctk.CTkFrame(main, fg_color="transparent", height=34)
        self._tab_bar.grid(row=1, column=0, sticky="ew", pady=(0, 4))

        self._terminal_area = ctk.CTkFrame(
            main,
            fg_color=theme.COLOR_BG_TERMINAL,
            border_width=1,
            border_color=theme.COLOR_BORDER,
            corner_radius=6,
        )
        self._terminal_area.grid(row=2, column=0, sticky="nsew")
        self._terminal_area.grid_columnconfigure(0, weight=1)
        self._terminal_area.grid_rowconfigure(0, weight=1)

        self._build_input_bar(main)

        self._status_bar = StatusBar(
            main,
            revert_ms=self._config.gui.status_revert_ms,
            error_revert_ms=self._config.gui.error_revert_ms,
        )
        self._status_bar.grid(row=4, column=0, sticky="ew")

        self._todo_panel = TodoPanel(root)
        self._todo_panel.grid(row=0, column=1, sticky="nsew", padx=(0, 10), pady=10)

        self._service = TerminalService(
            AfterScheduler(root),
            settings=self._config.terminal,
            projects=self._projects,
        )
        self._controller = TabController(
            self._service,
            self._projects,
            surface_factory=self._make_surface,
            on_request_session=self._request_session,
            project_store=self._project_store,
            status=self._status_bar,
        )

        if self._initial_project:
            self._controller.select_project(self._initial_project)
            self._refresh_project_ui()

        self._apply_pending_calls()
        self._schedule_pump()
        root.after(100, self._show_cli_dialog)
        root.mainloop()

    def stop(self) -> None:
        """Close GUI safely from any thread."""
        self._run_on_ui(self._handle_close)

    # ------------------------------------------------------------------ #
    # Layout                                                               #
    # ------------------------------------------------------------------ #

    def _build_top_bar(self, parent: ctk.CTkFrame) -> None:
        top_bar = ctk.CTkFrame(parent, fg_color="transparent")
        top_bar.grid(row=0, column=0, sticky="ew", pady=(0, 6))
        top_bar.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            top_bar,
            text="Project:",
            font=(theme.FONT_FAMILY, 12),
            text_color=theme.COLOR_TEXT_MUTED,
        ).grid(row=0, column=0, sticky="w", padx=(0, 6))

        self._project_menu = ctk.CTkOptionMenu(
            top_bar,
            values=["No project"],
            command=self._on_project_menu,
            width=240,
            font=(theme.FONT_FAMILY, 12),
        )
        self._project_menu.grid(row=0, column=1, sticky="w")

        ctk.CTkButton(
            top_bar,
            text="Open Folder",
            width=100,
            command=self._open_folder,
        ).grid(row=0, column=2, sticky="e", padx=(0, 8))
        ctk.CTkButton(
            top_bar,
            text="+ New Terminal",
            width=120,
            fg_color=theme.COLOR_ACCENT,
            command=self._show_cli_dialog,
        ).grid(row=0, column=3, sticky="e")

    def _build_input_bar(self, parent: ctk.CTkFrame) -> None:
        bar = ctk.CTkFrame(parent, fg_color=theme.COLOR_BG_INPUT, corner_radius=6)
        bar.grid(row=3, column=0, sticky="ew", pady=(6, 6))
        bar.grid_columnconfigure(0, weight=1)

        self._input = ctk.CTkEntry(
            bar,
            height=32,
            font=(theme.FONT_FAMILY, theme.FONT_SIZE),
            placeholder_text="Type a command and press Enter",
        )
        self._input.grid(row=0, column=0, sticky="ew", padx=(8, 4), pady=6)
        self._input.bind("<Return>", lambda _e: self._send_input())
        self._input.bind("<Control-Shift-V>", self._paste_image)

        ctk.CTkButton(bar, text="Image", width=70, command=self._attach_image).grid(
            row=0, column=1, padx=(0, 4)
        )
        ctk.CTkButton(
            bar,
            text="Send",
            width=70,
            fg_color=theme.COLOR_ACCENT,
            command=self._send_input,
        ).grid(row=0, column=2, padx=(0, 8))

    def _make_surface(
        self,
        session_id: str,
        title: str,
        on_input: Callable[[str, str], None],
        on_resize: Callable[[str], None],
    ) -> TerminalSurface:
        controller = self._controller
        if self._terminal_area is None or self._tab_bar is None or controller is None:
            raise RuntimeError("Terminal area is not built yet")
        return TerminalView(
            self._terminal_area,
            self._tab_bar,
            session_id=session_id,
            title=title,
            cli_command=title,
            on_input=on_input,
            on_resize=on_resize,
            on_select=controller.activate,
            on_close=controller.close,
            on_paste=controller.paste,
            font_size=self._config.gui.font_size,
            scrollback=self._config.gui.scrollback,
            cols=self._config.terminal.cols,
            rows=self._config.terminal.rows,
        )

    # ------------------------------------------------------------------ #
    # Projects                                                             #
    # ------------------------------------------------------------------ #

    def _pick_folder(self) -> str | None:
        active = self._projects.active_project
        selected = filedialog.askdirectory(
            title="Select Project Folder",
            initialdir=active.path if active else None,
        )
        return selected or None

    def _open_folder(self) -> None:
        path = self._pick_folder()
        if path is None or self._controller is None:
            return
        self._controller.select_project(path, prompt_if_empty=True)
        self._refresh_project_ui()
        if self._status_bar:
            self._status_bar.flash("Project folder selected", "success")

    def _on_project_menu(self, label: str) -> None:
        path = self._project_paths.get(label)
        if path is None or self._controller is None:
            return
        if path == self._projects.active_path:
            return
        self._controller.switch_project(path)
        self._refresh_project_ui()

    def _refresh_project_ui(self) -> None:
        self._project_paths = {}
        for project in self._projects.projects():
            label = project.display_name
            if label in self._project_paths:
                label = project.path
            self._project_paths[label] = project.path

        active = self._projects.active_project
        if self._project_menu is not None:
            self._project_menu.configure(values=list(self._project_paths) or ["No project"])
            current = next(
                (label for label, path in self._project_paths.items() if active and path == active.path),
                "No project",
            )
            self._project_menu.set(current)
        if self._status_bar is not None:
            self._status_bar.set_project(active.path if active else "")
        if self._todo_panel is not None:
            self._todo_panel.set_project(active.path if active else None)

    # ------------------------------------------------------------------ #
    # Sessions                                                             #
    # ------------------------------------------------------------------ #

    def _request_session(self) -> None:
        if self._root is not None:
            self._root.after_idle(self._show_cli_dialog)

    def _show_cli_dialog(self) -> None:
        if self._root is None:
            return
        if self._cli_dialog is not None and self._cli_dialog.winfo_exists():
            self._cli_dialog.lift()
            return
        self._cli_dialog = CLIDialog(
            self._root,
            clis=list(self._config.clis),
            on_confirm=self._on_cli_confirm,
            on_error=lambda msg: self._status_bar.flash(msg, "error") if self._status_bar else None,
        )

    def _on_cli_confirm(self, cli_command: str, new_project: bool) -> None:
        self._cli_dialog = None
        if self._controller is None:
            return
        if self._projects.active_project is None or new_project:
            path = self._pick_folder()
            if path is None:
                logger.info("Folder selection cancelled")
                return
            self._controller.select_project(path)
            self._refresh_project_ui()
        self._controller.open_session(cli_command)

    def _send_input(self) -> None:
        if self._input is None or self._controller is None:
            return
        if self._controller.send_command(self._input.get()):
            self._input.delete(0, "end")

    def _attach_image(self) -> None:
        if self._projects.active_project is None:
            if self._status_bar:
                self._status_bar.flash("Select a project folder first", "error")
            return
        selected = filedialog.askopenfilename(title="Attach Image", filetypes=_IMAGE_TYPES)
        if not selected:
            return
        try:
            data = to_png(Path(selected).read_bytes())
        except OSError as exc:
            logger.error(f"Failed to read image {selected}: {exc}")
            if self._status_bar:
                self._status_bar.flash(f"Failed to read image: {exc}", "error")
            return
        self._store_image(data)

    def _paste_image(self, _event: object = None) -> str:
        if self._projects.active_project is None:
            if self._status_bar:
                self._status_bar.flash("Select a project folder first", "error")
            return "break"
        data = grab_clipboard_png()
        if data is None:
            if self._status_bar:
                self._status_bar.flash("No image on the clipboard", "warn")
            return "break"
        self._store_image(data)
        return "break"

    def _store_image(self, data: bytes) -> None:
        active = self._projects.active_project
        if active is None:
            return
        result = self._project_store.save_image(active.path, data)
        if not result.success:
            if self._status_bar:
                self._status_bar.flash(f"Failed to save image: {result.error}", "error")
            return
        if self._input is not None:
            self._input.insert("insert", result.filepath)
            self._input.focus_set()
        if self._status_bar:
            self._status_bar.flash(f"Image saved: {result.filename}", "success")

    # ------------------------------------------------------------------ #
    # Loop / lifecycle                                                     #
    # ------------------------------------------------------------------ #

    def _schedule_pump(self) -> None:
        if self._root is None:
            return
        self._pump_id = self._root.after(self._config.terminal.pump_interval_ms, self._pump)

    def _pump(self) -> None:
        self._pump_id = None
        if self._service is not None:
            self._service.pump()
        self._schedule_pump()

    def _on_root_configure(self, event: object) -> None:
        if getattr(event, "widget", None) is self._root and self._controller is not None:
            self._controller.resize_active()

    def _run_on_ui(self, fn: Callable[[], None]) -> None:
        if self._root is None:
            self._pending_calls.append(fn)
            return
        if threading.get_ident() == self._ui_thread_id:
            fn()
            return
        self._root.after(0, fn)

    def _apply_pending_calls(self) -> None:
        queued = list(self._pending_calls)
        self._pending_calls.clear()
        for fn in queued:
            fn()

    def _handle_close(self) -> None:
        root = self._root
        if root is not None and self._pump_id is not None:
            root.after_cancel(self._pump_id)
            self._pump_id = None
        if self._controller is not None:
            self._controller.shutdown()
        if root is not None:
            try:
                root.quit()
                root.destroy()
            except Exception as exc:
                logger.warning("Error during GUI shutdown: {}", exc)
            self._root = None
