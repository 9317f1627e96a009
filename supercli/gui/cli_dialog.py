"""CLI selection dialog shown before a new terminal is opened."""

from __future__ import annotations

from typing import Callable

import customtkinter as ctk

from supercli.gui import theme

SHELL_CHOICE = "shell"
CUSTOM_CHOICE = "custom"


def resolve_cli_choice(choice: str, custom_command: str) -> str | None:
    """Return the command to launch, "" for a plain shell, None if invalid."""
    if choice == CUSTOM_CHOICE:
        command = custom_command.strip()
        return command or None
    if choice == SHELL_CHOICE:
        return ""
    return choice.strip() or None


class CLIDialog(ctk.CTkToplevel):
    """Modal picker: one of the configured CLIs, a plain shell or a custom command.

    Usage::

        CLIDialog(root, clis=["claude", "codex"], on_confirm=callback)

    ``on_confirm(cli_command, new_project)`` fires after the dialog closes.
    """

    def __init__(
        self,
        master: ctk.CTkBaseClass,
        clis: list[str],
        on_confirm: Callable[[str, bool], None],
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__(master)
        self._on_confirm = on_confirm
        self._on_error = on_error

        self.title("New Terminal")
        self.geometry("380x360")
        self.resizable(False, False)
        self.transient(master)
        self.grab_set()
        self.configure(fg_color=theme.COLOR_BG_APP)
        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self,
            text="Select a CLI",
            font=(theme.FONT_FAMILY, 15, "bold"),
            text_color=theme.COLOR_TEXT,
        ).grid(row=0, column=0, sticky="ew", padx=20, pady=(20, 12))

        options = ctk.CTkFrame(self, fg_color="transparent")
        options.grid(row=1, column=0, sticky="ew", padx=20)
        options.grid_columnconfigure(0, weight=1)

        self._choice = ctk.StringVar(value=clis[0] if clis else SHELL_CHOICE)
        labels = [(cli, cli.capitalize()) for cli in clis]
        labels += [(SHELL_CHOICE, "Shell"), (CUSTOM_CHOICE, "Custom command")]
        for row, (value, label) in enumerate(labels):
            ctk.CTkRadioButton(
                options,
                text=label,
                value=value,
                variable=self._choice,
                font=(theme.FONT_FAMILY, 12),
                text_color=theme.COLOR_TEXT,
                command=self._on_choice_changed,
            ).grid(row=row, column=0, sticky="w", pady=3)

        self._custom_entry = ctk.CTkEntry(
            self,
            height=30,
            font=(theme.FONT_FAMILY, 12),
            placeholder_text="e.g. aider --model sonnet",
        )

        self._new_project = ctk.BooleanVar(value=False)
        ctk.CTkCheckBox(
            self,
            text="Open in a new project folder",
            variable=self._new_project,
            font=(theme.FONT_FAMILY, 12),
            text_color=theme.COLOR_TEXT_MUTED,
        ).grid(row=3, column=0, sticky="w", padx=20, pady=(12, 0))

        actions = ctk.CTkFrame(self, fg_color="transparent")
        actions.grid(row=4, column=0, sticky="ew", padx=20, pady=(16, 20))
        actions.grid_columnconfigure(0, weight=1)
        ctk.CTkButton(actions, text="Cancel", width=90, command=self.destroy).grid(
            row=0, column=1, sticky="e", padx=(0, 8)
        )
        ctk.CTkButton(
            actions,
            text="Open",
            width=100,
            fg_color=theme.COLOR_ACCENT,
            command=self._confirm,
        ).grid(row=0, column=2, sticky="e")

        self.bind("<Escape>", lambda _: self.destroy())
        self.bind("<Return>", lambda _: self._confirm())

    def _on_choice_changed(self) -> None:
        if self._choice.get() == CUSTOM_CHOICE:
            self._custom_entry.grid(row=2, column=0, sticky="ew", padx=20, pady=(8, 0))
            self._custom_entry.focus_set()
        else:
            self._custom_entry.grid_remove()

    def _confirm(self) -> None:
        command = resolve_cli_choice(self._choice.get(), self._custom_entry.get())
        if command is None:
            self._custom_entry.configure(border_color=theme.COLOR_DANGER)
            if self._on_error is not None:
                self._on_error("Please enter a custom CLI command")
            return
        new_project = bool(self._new_project.get())
        self.grab_release()
        self.destroy()
        self._on_confirm(command, new_project)
