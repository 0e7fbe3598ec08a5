from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from pathlib import Path

from image_optimizer.application.dtos.delivery_dto import (
    PreloadHint,
    ResponsiveSelection,
    VariantDTO,
)
from image_optimizer.domain.entities.source_image import SizeVariant
from image_optimizer.domain.services.layout_policy import LayoutPolicy
from image_optimizer.domain.services.priority_service import PriorityService, RenderContext
from image_optimizer.domain.services.size_selector import SizeSelector


@dataclass
class SelectResponsiveVariantUseCase:
    """
    Render-time delivery decision for one image.

    Picks the variant for the container width, builds the srcset and sizes
    hints and, when a ``RenderContext`` is passed, the loading attributes and
    the preload data for the LCP image. Nothing is written anywhere.
    """

    selector: SizeSelector = field(default_factory=SizeSelector)
    priority: PriorityService = field(default_factory=PriorityService)
    layout: LayoutPolicy = field(default_factory=LayoutPolicy)

    def execute(
        self,
        variants: Iterable[SizeVariant],
        target_width: int | None = None,
        context: RenderContext | None = None,
        identifier: str | None = None,
        prefer_webp: bool = False,
    ) -> ResponsiveSelection:
        variants = list(variants)
        width = int(target_width) if target_width else self.layout.max_content_width

        variant = self.selector.select_variant(width, variants)
        srcset = self.selector.build_srcset(variants, prefer_webp=prefer_webp)
        sizes = self.selector.build_sizes_hint(width)

        attributes: dict[str, str] = {}
        preload = None
        if context is not None:
            attributes = self.priority.loading_attributes(context, identifier)
            if variant is not None and self.priority.is_lcp(context, identifier):
                preload = PreloadHint(href=self._reference(variant, prefer_webp), srcset=srcset, sizes=sizes)

        return ResponsiveSelection(
            target_width=width,
            variant=self._to_dto(variant) if variant is not None else None,
            srcset=srcset,
            sizes=sizes,
            attributes=attributes,
            preload=preload,
        )

    @staticmethod
    def discover_webp_siblings(variants: Iterable[SizeVariant], directory: str | Path) -> list[SizeVariant]:
        """Attach ``{file}.webp`` references for variants whose sibling exists in ``directory``."""
        directory = Path(directory)
        found = []
        for variant in variants:
            if not variant.has_webp and (directory / f"{variant.file_reference}.webp").is_file():
                variant = replace(variant, webp_reference=f"{variant.file_reference}.webp")
            found.append(variant)
        return found

    @staticmethod
    def _reference(variant: SizeVariant, prefer_webp: bool) -> str:
        if prefer_webp and variant.has_webp:
            return variant.webp_reference
        return variant.file_reference

    @staticmethod
    def _to_dto(variant: SizeVariant) -> VariantDTO:
        return VariantDTO(
            width=variant.width,
            height=variant.height,
            file_reference=variant.file_reference,
            webp_reference=variant.webp_reference,
        )
