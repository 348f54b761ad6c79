"""Compute the slice of rows worth painting for a scroll position."""

from __future__ import annotations

from revu.diff.models import VirtualWindow

DEFAULT_OVERSCAN = 5


def compute_virtual_window(
    total_items: int,
    viewport_size: int,
    scroll_offset: int,
    overscan: int = DEFAULT_OVERSCAN,
) -> VirtualWindow:
    """Return the renderable index range around ``scroll_offset``.

    The offset is clamped so the viewport never runs past the last item, and
    ``overscan`` extra rows are kept on each side of the viewport.
    """
    total = max(0, total_items)
    viewport = max(0, viewport_size)
    margin = max(0, overscan)

    if total == 0:
        return VirtualWindow(0, 0, range(0), 0, 0)

    offset = min(max(0, scroll_offset), max(0, total - viewport))
    start = max(0, offset - margin)
    end = min(total, offset + viewport + margin)
    return VirtualWindow(
        start_index=start,
        end_index=end,
        visible_range=range(start, end),
        padding_top=start,
        padding_bottom=total - end,
    )


def clamp_scroll_offset(total_items: int, viewport_size: int, scroll_offset: int) -> int:
    return min(max(0, scroll_offset), max(0, total_items - max(0, viewport_size)))


def scroll_to_reveal(selected: int, scroll_offset: int, viewport_size: int) -> int:
    """Smallest scroll change that keeps ``selected`` inside the viewport."""
    if viewport_size <= 0:
        return selected
    if selected < scroll_offset:
        return selected
    if selected >= scroll_offset + viewport_size:
        return selected - viewport_size + 1
    return scroll_offset
