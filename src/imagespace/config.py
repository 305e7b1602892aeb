"""Save and load engine and view settings as JSON files."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from imagespace.model import FrustumSettings, RenderStyle

logger = logging.getLogger(__name__)

_VALID_SECTIONS = frozenset({"frustum", "render_style"})


@dataclass
class SettingsSet:
    """Settings loaded from or saved to a file.

    Both fields are optional.  A file that only contains ``"frustum"``
    loads with ``render_style`` set to ``None``.

    Attributes:
        frustum: Frustum parameters, colours, and transition timing.
        render_style: Observer positions and drawing options.
    """

    frustum: FrustumSettings | None = None
    render_style: RenderStyle | None = None


def save_settings(
    path: str | Path,
    *,
    frustum: FrustumSettings | None = None,
    render_style: RenderStyle | None = None,
) -> None:
    """Save settings to a JSON file.

    Only sections that are not ``None`` are written, and within each
    section only values that differ from the defaults.

    Args:
        path: Destination file path.
        frustum: Frustum settings.
        render_style: View settings.
    """
    data: dict = {}
    if frustum is not None:
        data["frustum"] = frustum.to_dict()
    if render_style is not None:
        data["render_style"] = render_style.to_dict()

    Path(path).write_text(json.dumps(data, indent=2) + "\n")
    logger.debug("Saved settings sections %s to %s", sorted(data), path)


def load_settings(path: str | Path) -> SettingsSet:
    """Load settings from a JSON file.

    Args:
        path: Source file path.

    Returns:
        A :class:`SettingsSet` with the parsed sections.

    Raises:
        ValueError: If the file contains unknown top-level keys, or a
            section holds invalid values.
    """
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"settings file must hold a JSON object, got {type(data).__name__}")

    unknown = set(data) - _VALID_SECTIONS
    if unknown:
        raise ValueError(
            f"unknown top-level keys in settings file: {sorted(unknown)}"
        )

    frustum = None
    if "frustum" in data:
        frustum = FrustumSettings.from_dict(data["frustum"])

    render_style = None
    if "render_style" in data:
        render_style = RenderStyle.from_dict(data["render_style"])

    return SettingsSet(frustum=frustum, render_style=render_style)
