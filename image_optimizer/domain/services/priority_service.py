from __future__ import annotations

from dataclasses import dataclass

EAGER_ATTRIBUTES = {"loading": "eager", "fetchpriority": "high", "decoding": "async"}
LAZY_ATTRIBUTES = {"loading": "lazy", "decoding": "async"}


@dataclass
class RenderContext:
    """Per-request rendering state.

    Create one per page render and pass it to every delivery call of that
    render. Nothing here is shared between requests.
    """

    eager_budget: int = 1
    lcp_identifier: str | None = None
    rendered: int = 0

    def next_position(self) -> int:
        position = self.rendered
        self.rendered += 1
        return position


class PriorityService:
    """Decides which image is the LCP candidate and how each image should load."""

    @staticmethod
    def detect_lcp(context: RenderContext, identifier: str) -> bool:
        """Record ``identifier`` as the LCP candidate unless one is already set."""
        if context.lcp_identifier is not None:
            return False
        context.lcp_identifier = str(identifier)
        return True

    @staticmethod
    def is_lcp(context: RenderContext, identifier: str | None) -> bool:
        return identifier is not None and context.lcp_identifier == str(identifier)

    @staticmethod
    def loading_attributes(context: RenderContext, identifier: str | None = None) -> dict[str, str]:
        position = context.next_position()
        if PriorityService.is_lcp(context, identifier):
            return dict(EAGER_ATTRIBUTES)
        # without an explicit candidate the first images of the page are treated as above the fold
        if context.lcp_identifier is None and position < context.eager_budget:
            return dict(EAGER_ATTRIBUTES)
        return dict(LAZY_ATTRIBUTES)
