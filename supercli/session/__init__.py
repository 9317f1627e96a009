"""Project, TODO and preference stores."""

from supercli.session.preferences_store import Preferences, PreferencesStore
from supercli.session.project_store import Project, ProjectRegistry, ProjectStore
from supercli.session.todo_store import TodoItem, TodoList, TodoSection, TodoStore, parse_todo, render_todo

__all__ = [
    "Preferences",
    "PreferencesStore",
    "Project",
    "ProjectRegistry",
    "ProjectStore",
    "TodoItem",
    "TodoList",
    "TodoSection",
    "TodoStore",
    "parse_todo",
    "render_todo",
]
