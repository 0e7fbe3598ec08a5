from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CONTENT_WIDTH = 704
MIN_EFFECTIVE_WIDTH = 300
LAYOUT_PADDING = 60  # both sides of the content column
MOBILE_WIDTH = 450
TABLET_WIDTH = 600


@dataclass(frozen=True)
class LayoutPolicy:
    """Derives rendering widths from the layout's content column.

    ``content_width`` is what the host layout declares for its main column;
    when it is unknown the policy falls back to ``DEFAULT_CONTENT_WIDTH``.
    """

    content_width: int | None = None

    @property
    def max_content_width(self) -> int:
        if self.content_width:
            return int(self.content_width)
        return DEFAULT_CONTENT_WIDTH

    @staticmethod
    def effective_width(content_width: int) -> int:
        return max(MIN_EFFECTIVE_WIDTH, int(content_width) - LAYOUT_PADDING)

    def recommended_widths(self) -> dict[str, int]:
        """Variant widths worth generating for this layout, keyed by size name."""
        width = self.max_content_width
        return {
            "content_optimized": width,
            "content_retina": width * 2,
            "mobile_optimized": MOBILE_WIDTH,
            "tablet_optimized": TABLET_WIDTH,
        }
