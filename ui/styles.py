from rich.theme import Theme
from rich.console import Console
from rich.style import Style
from rich.text import Text

ACCENT_TEAL = "#16A085"
ACCENT_GOLD = "#F1C40F"
SUCCESS_GREEN = "#27AE60"
ERROR_RED = "#C0392B"
INFO_BLUE = "#3498DB"
MUTED_GRAY = "#7F8C8D"
TEXT_WHITE = "#FFFFFF"

DEFAULT_THEME = Theme(
    {
        "primary": Style(color=ACCENT_TEAL, bold=True),
        "secondary": Style(color=ACCENT_GOLD, bold=True),
        "success": Style(color=SUCCESS_GREEN),
        "error": Style(color=ERROR_RED, bold=True),
        "info": Style(color=INFO_BLUE),
        "muted": Style(color=MUTED_GRAY),
        "title": Style(color=ACCENT_TEAL, bold=True),
        "subtitle": Style(color=MUTED_GRAY),
        "kind_gap_fill": Style(color=ACCENT_GOLD, bold=True),
        "kind_matching": Style(color=INFO_BLUE, bold=True),
        "kind_multiple_choice": Style(color=ACCENT_TEAL, bold=True),
        "kind_ordering": Style(color=SUCCESS_GREEN, bold=True),
    }
)

CONSOLE = Console(theme=DEFAULT_THEME)
ERROR_CONSOLE = Console(theme=DEFAULT_THEME, stderr=True)


def get_score_style(ratio: float) -> Style:
    """Get color style based on the share of points earned."""
    if ratio >= 1.0:
        return Style(color=SUCCESS_GREEN, bold=True)
    elif ratio > 0:
        return Style(color=ACCENT_GOLD)
    else:
        return Style(color=ERROR_RED)


def get_kind_style(kind: str) -> Style:
    """Get style for an exercise kind label."""
    styles = {
        "gap_fill": Style(color=ACCENT_GOLD, bold=True),
        "matching": Style(color=INFO_BLUE, bold=True),
        "multiple_choice": Style(color=ACCENT_TEAL, bold=True),
        "ordering": Style(color=SUCCESS_GREEN, bold=True),
    }
    return styles.get(kind.lower(), Style())


def create_verdict_header(is_correct: bool, partial: bool = False) -> Text:
    """Create the headline of a verdict: correct, partly correct or wrong."""
    header = Text()
    if is_correct:
        header.append("✓ Correct!", Style(color=SUCCESS_GREEN, bold=True))
    elif partial:
        header.append("◐ Partly correct", Style(color=ACCENT_GOLD, bold=True))
    else:
        header.append("✗ Not quite!", Style(color=ERROR_RED, bold=True))
    return header


def create_error_header(title: str) -> Text:
    """Create the headline of an evaluation failure."""
    header = Text()
    header.append("✗ ", Style(color=ERROR_RED, bold=True))
    header.append(title, Style(color=ERROR_RED, bold=True))
    return header
