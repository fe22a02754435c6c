"""compose: keystroke planning and replay for rich-text chat composers."""
from .plan import (  # noqa: F401
    ComposerKeys,
    ComposerPlanner,
    KeyAction,
    Mode,
    PostingCursor,
    Role,
    parse_line,
    plan_keystrokes,
)
from .driver import ComposerTiming, clear_composer, replay  # noqa: F401
