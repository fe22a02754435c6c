"""Replay planned key actions on a Playwright page keyboard."""
import logging
from dataclasses import dataclass

from .plan import KeyAction, Role

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComposerTiming:
    """Milliseconds to let the composer catch up after each kind of action."""
    typing_delay_ms: int = 10
    after_newline_ms: int = 100
    after_level_change_ms: int = 150
    after_exit_ms: int = 0


def _pause_for(action: KeyAction, timing: ComposerTiming) -> int:
    if action.role == Role.NEWLINE:
        return timing.after_newline_ms
    if action.role in (Role.INDENT, Role.OUTDENT):
        return timing.after_level_change_ms
    if action.role == Role.EXIT_LIST:
        return timing.after_exit_ms
    return 0


def clear_composer(page) -> None:
    """Select everything in the focused composer and delete it."""
    page.keyboard.press("ControlOrMeta+A")
    page.keyboard.press("Backspace")


def replay(page, actions: list[KeyAction], timing: ComposerTiming | None = None) -> int:
    """Send *actions* to the focused element. Returns the number sent."""
    timing = timing or ComposerTiming()
    keyboard = page.keyboard
    for action in actions:
        if action.is_text:
            keyboard.type(action.value, delay=timing.typing_delay_ms)
            continue
        keyboard.press(action.value)
        pause = _pause_for(action, timing)
        if pause:
            page.wait_for_timeout(pause)
    log.info("Typed %d key actions", len(actions))
    return len(actions)
