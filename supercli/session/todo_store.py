"""Per-project TODO checklist stored as Markdown.

Dialect::

    # TODO                <- document title (first level-1 heading)
    ## Work               <- any other heading starts a section
    - [ ] open item
    - [x] done item       <- x is case-insensitive

Items that appear before any section heading land in ``Uncategorized``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

UNCATEGORIZED = "Uncategorized"
DEFAULT_TITLE = "TODO"
TODO_FILENAME = "TODO.md"

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)(?:\s+#+)?\s*$")
_ITEM_RE = re.compile(r"^\s*[-*]\s+\[( |x|X)\]\s+(.*?)\s*$")


@dataclass
class TodoItem:
    text: str
    done: bool = False


@dataclass
class TodoSection:
    title: str
    items: list[TodoItem] = field(default_factory=list)


@dataclass
class TodoList:
    title: str = DEFAULT_TITLE
    sections: list[TodoSection] = field(default_factory=list)

    def section(self, title: str, create: bool = False) -> TodoSection | None:
        for section in self.sections:
            if section.title == title:
                return section
        if not create:
            return None
        section = TodoSection(title=title)
        self.sections.append(section)
        return section

    def add_item(self, section_title: str, text: str) -> TodoItem:
        item = TodoItem(text=text.strip())
        self.section(section_title or UNCATEGORIZED, create=True).items.append(item)
        return item

    def toggle_item(self, section_title: str, index: int) -> TodoItem:
        section = self.section(section_title)
        if section is None:
            raise KeyError(f"Unknown TODO section: {section_title}")
        item = section.items[index]
        item.done = not item.done
        return item

    def remove_item(self, section_title: str, index: int) -> TodoItem:
        section = self.section(section_title)
        if section is None:
            raise KeyError(f"Unknown TODO section: {section_title}")
        return section.items.pop(index)

    def counts(self) -> tuple[int, int]:
        """Return (done, total) across all sections."""
        items = [item for section in self.sections for item in section.items]
        return sum(1 for item in items if item.done), len(items)


def parse_todo(text: str) -> TodoList:
    todo = TodoList()
    current: TodoSection | None = None
    seen_title = False

    for raw_line in text.splitlines():
        heading = _HEADING_RE.match(raw_line)
        if heading:
            level, title = len(heading.group(1)), heading.group(2)
            if level == 1 and not seen_title and current is None:
                todo.title = title
                seen_title = True
                continue
            current = todo.section(title, create=True)
            continue

        item = _ITEM_RE.match(raw_line)
        if item is None:
            continue
        if current is None:
            current = todo.section(UNCATEGORIZED, create=True)
        current.items.append(TodoItem(text=item.group(2), done=item.group(1).lower() == "x"))

    return todo


def render_todo(todo: TodoList) -> str:
    blocks = [f"# {todo.title or DEFAULT_TITLE}\n"]
    for section in todo.sections:
        lines = [f"## {section.title}"]
        lines.extend(f"- [{'x' if item.done else ' '}] {item.text}" for item in section.items)
        blocks.append("\n".join(lines) + "\n")
    return "\n".join(blocks)


class TodoStore:
    """Reads and writes ``<project>/TODO.md``."""

    def __init__(self, filename: str = TODO_FILENAME) -> None:
        self._filename = filename

    def path_for(self, project_path: str | Path) -> Path:
        return Path(project_path) / self._filename

    def load(self, project_path: str | Path) -> TodoList:
        path = self.path_for(project_path)
        if not path.exists():
            return TodoList()
        try:
            raw = path.read_bytes()
        except OSError as exc:
            logger.warning(f"Failed to read {path}: {exc}")
            return TodoList()
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.warning(f"{path} is not valid UTF-8, undecodable bytes replaced: {exc}")
            text = raw.decode("utf-8", errors="replace")
        return parse_todo(text)

    def save(self, project_path: str | Path, todo: TodoList) -> None:
        self.path_for(project_path).write_text(render_todo(todo), encoding="utf-8")

    def add_item(self, project_path: str | Path, section_title: str, text: str) -> TodoList:
        todo = self.load(project_path)
        todo.add_item(section_title, text)
        self.save(project_path, todo)
        return todo

    def toggle_item(self, project_path: str | Path, section_title: str, index: int) -> TodoList:
        todo = self.load(project_path)
        todo.toggle_item(section_title, index)
        self.save(project_path, todo)
        return todo

    def remove_item(self, project_path: str | Path, section_title: str, index: int) -> TodoList:
        todo = self.load(project_path)
        todo.remove_item(section_title, index)
        self.save(project_path, todo)
        return todo
