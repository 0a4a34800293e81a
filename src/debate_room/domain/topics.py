from __future__ import annotations

DEBATE_TOPICS: tuple[str, ...] = (
    "Should artificial intelligence be regulated?",
    "Is social media doing more harm than good?",
    "Should college education be free?",
    "Is remote work better than office work?",
)

# Timer presets offered at room creation, in seconds.
TIMER_OPTIONS: tuple[tuple[int, str], ...] = (
    (120, "2 minutes"),
    (300, "5 minutes"),
    (600, "10 minutes"),
)

DEFAULT_TIMER_SECONDS = 120
