"""Interactive quality selection for ``--select-quality``.

Renders the tiers a video actually offers as a Rich table, then asks
for one with a questionary arrow-key prompt.  The returned value is
the tier's position in the advertised accept list, which is what
:func:`bvgrab.core.stream_resolver.resolve` expects.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from bvgrab.cli.console import console
from bvgrab.core.models import QualityTier
from bvgrab.exceptions import EnvironmentError, QualitySelectionError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


def build_choice_label(position: int, tier: QualityTier) -> str:
    """Single-line label, e.g. ``"  1.  超清 4K          (120)"``."""
    return f"  {position + 1}.  {tier.label:<16} ({tier.quality_id})"


def _display_tier_table(title: str, tiers: Sequence[QualityTier]) -> None:
    table_class = _import_rich_table()

    console.print()
    console.print(f"[bold cyan]Title:[/bold cyan]  {title}")
    console.print()

    table = table_class(
        title="Available Qualities",
        show_header=True,
        header_style="bold magenta",
        border_style="dim",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Quality", justify="left", min_width=12)
    table.add_column("ID", justify="right", min_width=5)

    for position, tier in enumerate(tiers, start=1):
        table.add_row(str(position), tier.label, str(tier.quality_id))

    console.print(table)
    console.print()


async def prompt_quality_selection(title: str, tiers: Sequence[QualityTier]) -> int:
    """Show *tiers* for *title* and return the chosen accept-list index.

    Raises
    ------
    QualitySelectionError
        If the user cancels the prompt.
    """
    questionary = _import_questionary()

    _display_tier_table(title, tiers)

    choices = [
        questionary.Choice(title=build_choice_label(position, tier), value=tier.index)
        for position, tier in enumerate(tiers)
    ]

    selected: int | None = await questionary.select(
        "Select quality to download:",
        choices=choices,
        use_arrow_keys=True,
        use_shortcuts=False,
    ).ask_async()  # None on Ctrl+C / Esc

    if selected is None:
        raise QualitySelectionError(
            f"No quality selected for '{title}'.",
            hint="Use arrow keys to pick a quality, then press Enter.",
        )
    return selected
