from decimal import Decimal
from rich.text import Text
from rich.panel import Panel
from rich.table import Table
from rich.style import Style
from rich.align import Align
from rich.console import Group
from rich import box
from typing import Optional, List, Tuple, Any

from models import ExerciseKind, Verdict
from grading.schemas import ExerciseBlock
from ui.styles import (
    ACCENT_TEAL,
    ACCENT_GOLD,
    SUCCESS_GREEN,
    ERROR_RED,
    MUTED_GRAY,
    TEXT_WHITE,
    create_error_header,
    create_verdict_header,
    get_kind_style,
    get_score_style,
)

DetailRow = Tuple[str, str, str, bool]


def _display(value: Any) -> str:
    if value is None or value == "":
        return "-"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or "-"
    return str(value)


def detail_rows(kind: ExerciseKind, verdict: Verdict) -> List[DetailRow]:
    """Flatten a verdict's detailed feedback into (unit, submitted, expected, ok) rows."""
    details = verdict.detailed_feedback

    if kind == ExerciseKind.GAP_FILL:
        expected = {
            blank["blankId"]: blank["correctAnswer"]
            for blank in verdict.correct_answer.get("blanks", [])
        }
        return [
            (
                blank["blankId"],
                _display(blank.get("submittedValue") or blank.get("submittedOptionId")),
                _display(expected.get(blank["blankId"])),
                blank["isCorrect"],
            )
            for blank in details.get("blanks", [])
        ]

    if kind == ExerciseKind.MATCHING:
        return [
            (
                pair["leftItemId"],
                _display(pair["selectedPairId"]),
                _display(pair["correctPairId"]),
                pair["isCorrect"],
            )
            for pair in details.get("pairs", [])
        ]

    if kind == ExerciseKind.ORDERING:
        return [
            (
                str(position["position"] + 1),
                _display(position["submittedId"]),
                _display(position["correctId"]),
                position["isCorrect"],
            )
            for position in details.get("positions", [])
        ]

    return [
        (
            "selection",
            _display(details.get("submittedOptions")),
            _display(details.get("correctOptions")),
            verdict.is_correct,
        )
    ]


class VerdictPanel:
    """A styled panel for displaying a verdict."""

    def __init__(
        self,
        verdict: Verdict,
        kind: ExerciseKind,
        block_id: str,
        show_details: bool = True,
    ):
        self.verdict = verdict
        self.kind = kind
        self.block_id = block_id
        self.show_details = show_details

    def render(self) -> Panel:
        partial = not self.verdict.is_correct and self.verdict.points_earned > 0
        content = create_verdict_header(self.verdict.is_correct, partial)
        content.append("\n\n")
        content.append("Points: ", Style(color=MUTED_GRAY))
        content.append(
            f"{_format_points(self.verdict.points_earned)} / {_format_points(self.verdict.max_points)}",
            get_score_style(self._score_ratio()),
        )
        content.append("\n")
        content.append("Feedback: ", Style(color=MUTED_GRAY))
        content.append(self.verdict.feedback, Style(color=TEXT_WHITE))

        body = [Align.left(content)]
        if self.show_details:
            rows = detail_rows(self.kind, self.verdict)
            if rows:
                body.append(Text())
                body.append(DetailTable(rows))

        return Panel(
            Group(*body),
            title=f"{self.kind.value} · {self.block_id}",
            border_style=SUCCESS_GREEN if self.verdict.is_correct else ERROR_RED,
            box=box.HEAVY,
            padding=(1, 2),
        )

    def _score_ratio(self) -> float:
        if self.verdict.max_points <= 0:
            return 1.0 if self.verdict.is_correct else 0.0
        return float(self.verdict.points_earned / self.verdict.max_points)

    def __rich__(self) -> Panel:
        return self.render()


class DetailTable:
    """A styled table comparing each submitted unit with the expected one."""

    def __init__(self, rows: List[DetailRow]):
        self.rows = rows

    def render(self) -> Table:
        table = Table(
            show_header=True,
            header_style=Style(color=ACCENT_TEAL, bold=True),
            border_style=MUTED_GRAY,
            row_styles=[Style(), Style(dim=True)],
            box=box.HEAVY,
        )

        table.add_column("Unit", style=Style(color=ACCENT_GOLD, bold=True))
        table.add_column("Submitted", style=Style(color=TEXT_WHITE))
        table.add_column("Expected", style=Style(color=MUTED_GRAY))
        table.add_column("", justify="center")

        for unit, submitted, expected, ok in self.rows:
            mark = (
                Text("✓", style=Style(color=SUCCESS_GREEN, bold=True))
                if ok
                else Text("✗", style=Style(color=ERROR_RED, bold=True))
            )
            table.add_row(unit, submitted, expected, mark)

        return table

    def __rich__(self) -> Table:
        return self.render()


class BlockListTable:
    """A styled table listing the blocks found in a content document."""

    def __init__(self, blocks: List[Tuple[ExerciseKind, ExerciseBlock]], source: str = ""):
        self.blocks = blocks
        self.source = source

    def render(self) -> Panel:
        table = Table(
            show_header=True,
            header_style=Style(color=ACCENT_TEAL, bold=True),
            border_style=MUTED_GRAY,
            row_styles=[Style(), Style(dim=True)],
            box=box.HEAVY,
        )

        table.add_column("Order", justify="right", style=Style(color=MUTED_GRAY))
        table.add_column("Kind")
        table.add_column("Id", style=Style(color=TEXT_WHITE, bold=True))
        table.add_column("Points", justify="right", style=Style(color=ACCENT_GOLD))
        table.add_column("Instruction", style=Style(color=MUTED_GRAY))

        for kind, block in self.blocks:
            table.add_row(
                str(block.order),
                Text(kind.value, style=get_kind_style(kind.value)),
                block.id,
                _format_points(block.points),
                block.instruction or "-",
            )

        if not self.blocks:
            table.add_row("", "", Text("no blocks found", style=Style(color=ERROR_RED)), "", "")

        return Panel(
            Align.center(table),
            title=f"Blocks in {self.source}" if self.source else "Blocks",
            border_style=ACCENT_GOLD,
            box=box.HEAVY,
            padding=(1, 1),
        )

    def __rich__(self) -> Panel:
        return self.render()


class ErrorPanel:
    """A styled panel for evaluation failures."""

    def __init__(self, title: str, message: str, hint: Optional[str] = None):
        self.title = title
        self.message = message
        self.hint = hint

    def render(self) -> Panel:
        content = create_error_header(self.title)
        content.append("\n\n")
        content.append(self.message, Style(color=TEXT_WHITE))
        if self.hint:
            content.append("\n\n")
            content.append(self.hint, Style(color=MUTED_GRAY))

        return Panel(
            Align.left(content),
            title=self.title,
            border_style=ERROR_RED,
            box=box.HEAVY,
            padding=(1, 2),
        )

    def __rich__(self) -> Panel:
        return self.render()


def _format_points(points: Decimal) -> str:
    return format(points.normalize(), "f") if points == points.to_integral() else str(points)
