"""Balance change policy shared by the poll, webhook and manual-check paths."""

from __future__ import annotations

from typing import Optional


def has_changed(last_known_minor_units: Optional[int], observed_minor_units: int) -> bool:
    """A first observation always counts as a change."""
    if last_known_minor_units is None:
        return True
    return last_known_minor_units != observed_minor_units


def delta(last_known_minor_units: Optional[int], observed_minor_units: int) -> int:
    if last_known_minor_units is None:
        return 0
    return observed_minor_units - last_known_minor_units
