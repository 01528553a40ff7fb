"""Status color maps."""

from env_operator.models import Color
from env_operator.models.diff import DeletionStatus

DELETION_COLORS: dict[DeletionStatus, str] = {
    DeletionStatus.DELETED: "green",
    DeletionStatus.NOT_FOUND: "dim",
    DeletionStatus.SKIPPED: "yellow",
    DeletionStatus.FAILED: "red bold",
}

COLOUR_STYLES: dict[Color, str] = {
    Color.BLUE: "blue",
    Color.GREEN: "green",
}


def styled_deletion(status: DeletionStatus) -> str:
    color = DELETION_COLORS.get(status, "white")
    return f"[{color}]{status.value}[/{color}]"


def styled_colour(colour: Color | None) -> str:
    if colour is None:
        return "[dim]-[/dim]"
    style = COLOUR_STYLES.get(colour, "white")
    return f"[{style}]{colour}[/{style}]"
