"""Turn tab-indented plain text into composer keystrokes.

The target composer auto-formats: typing ``* text`` starts a bullet,
``1. text`` starts a numbered list, a soft newline continues the current
list, Tab nests one level, Shift+Tab un-nests one level, and Backspace on
an empty bullet drops back to plain text. The planner tracks the mode and
depth the composer is in and emits the keystrokes that keep the two in
sync. It has no view of the composer itself, so a composer that behaves
differently silently desyncs.

Key names and counts live in ``ComposerKeys`` because they are tuned
against one composer version.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum

log = logging.getLogger(__name__)

_NUMBERED = re.compile(r"^(\d+\.)\s+(.*)$")
_BULLET_MARKERS = ("- ", "• ")


class Mode(Enum):
    PLAIN = "plain"
    BULLETED = "bulleted"
    NUMBERED = "numbered"


class Role:
    TEXT = "text"
    NEWLINE = "newline"
    INDENT = "indent"
    OUTDENT = "outdent"
    EXIT_LIST = "exit_list"


@dataclass(frozen=True)
class ComposerKeys:
    soft_newline: str = "Shift+Enter"
    indent: str = "Tab"
    outdent: str = "Shift+Tab"
    exit_bulleted: tuple[str, ...] = ("Backspace",)
    # Numbered lists have no nesting to cancel; a blank line ends them.
    exit_numbered: tuple[str, ...] = ()
    bullet_prefix: str = "* "


@dataclass(frozen=True)
class KeyAction:
    role: str
    value: str

    @property
    def is_text(self) -> bool:
        return self.role == Role.TEXT


@dataclass
class PostingCursor:
    mode: Mode = Mode.PLAIN
    depth: int = 0


@dataclass(frozen=True)
class Line:
    kind: Mode
    depth: int
    text: str
    marker: str = ""


def parse_line(raw: str) -> Line | None:
    """Classify one input line. Returns None for blank lines.

    Depth is the count of leading tab characters.
    """
    stripped = raw.strip()
    if not stripped:
        return None
    depth = len(raw) - len(raw.lstrip("\t"))
    if stripped.startswith(_BULLET_MARKERS):
        return Line(Mode.BULLETED, depth, stripped[2:].strip())
    m = _NUMBERED.match(stripped)
    if m:
        return Line(Mode.NUMBERED, depth, m.group(2).strip(), m.group(1))
    return Line(Mode.PLAIN, depth, stripped)


@dataclass
class ComposerPlanner:
    """Stateful line-by-line planner. Use ``plan()`` for a whole document."""

    keys: ComposerKeys = field(default_factory=ComposerKeys)
    cursor: PostingCursor = field(default_factory=PostingCursor)
    actions: list[KeyAction] = field(default_factory=list)

    def _text(self, value: str) -> None:
        self.actions.append(KeyAction(Role.TEXT, value))

    def _newline(self) -> None:
        self.actions.append(KeyAction(Role.NEWLINE, self.keys.soft_newline))

    def _exit_list(self) -> None:
        """Leave the current list mode: new item, then cancel the list."""
        exit_keys = (self.keys.exit_bulleted if self.cursor.mode is Mode.BULLETED
                     else self.keys.exit_numbered)
        self._newline()
        for key in exit_keys:
            self.actions.append(KeyAction(Role.EXIT_LIST, key))
        self.cursor.mode = Mode.PLAIN
        self.cursor.depth = 0

    def _move_to_depth(self, target: int) -> None:
        # One keystroke per level; the composer has no multi-level jump.
        while self.cursor.depth < target:
            self.actions.append(KeyAction(Role.INDENT, self.keys.indent))
            self.cursor.depth += 1
        while self.cursor.depth > target:
            self.actions.append(KeyAction(Role.OUTDENT, self.keys.outdent))
            self.cursor.depth -= 1

    def feed(self, raw: str) -> None:
        line = parse_line(raw)
        mode = self.cursor.mode

        if line is None:
            if mode is Mode.PLAIN:
                self._newline()
            else:
                log.debug("Swallowed blank line inside %s list", mode.value)
            return

        if line.kind is Mode.PLAIN:
            if mode is not Mode.PLAIN:
                self._exit_list()
                self._newline()
            self._text(line.text)
            self._newline()
            return

        if line.kind is Mode.BULLETED:
            if mode is Mode.BULLETED:
                self._newline()
                self._move_to_depth(line.depth)
                self._text(line.text)
                return
            if mode is Mode.NUMBERED:
                self._exit_list()
            self._text(f"{self.keys.bullet_prefix}{line.text}")
            self.cursor.mode = Mode.BULLETED
            self.cursor.depth = line.depth
            return

        # Numbered line. Tab depth is ignored: numbered mode is flat.
        if mode is Mode.NUMBERED:
            self._newline()
            self._text(line.text)
            return
        if mode is Mode.BULLETED:
            self._exit_list()
        self._text(f"{line.marker} {line.text}")
        self.cursor.mode = Mode.NUMBERED
        self.cursor.depth = 0

    def plan(self, text: str) -> list[KeyAction]:
        for raw in text.splitlines():
            self.feed(raw)
        log.debug("Planned %d key actions, final cursor %s/%d",
                  len(self.actions), self.cursor.mode.value, self.cursor.depth)
        return self.actions


def plan_keystrokes(text: str, keys: ComposerKeys | None = None) -> list[KeyAction]:
    """Plan the keystrokes for a whole document with a fresh cursor."""
    return ComposerPlanner(keys=keys or ComposerKeys()).plan(text)
