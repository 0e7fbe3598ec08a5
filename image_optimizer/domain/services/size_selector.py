from __future__ import annotations

from collections.abc import Iterable

from image_optimizer.domain.entities.source_image import SizeVariant


class SizeSelector:
    """Picks the pre-generated size that best fits a rendering width.

    The chosen variant is always at least as wide as the container so the
    browser only ever downscales. When every variant is narrower than the
    target, the widest one is returned instead of nothing.
    """

    @staticmethod
    def sort_variants(variants: Iterable[SizeVariant]) -> list[SizeVariant]:
        # sorted() is stable: equal widths keep their input order
        return sorted(variants, key=lambda v: v.width)

    @staticmethod
    def select_variant(target_width: int, variants: Iterable[SizeVariant]) -> SizeVariant | None:
        ordered = SizeSelector.sort_variants(variants)
        if not ordered:
            return None
        for variant in ordered:
            if variant.width >= target_width:
                return variant
        return ordered[-1]

    # Viewports up to the target use the full viewport width, wider ones cap at the target.
    @staticmethod
    def build_sizes_hint(target_width: int) -> str:
        width = int(target_width)
        return f"(max-width: {width}px) 100vw, {width}px"

    @staticmethod
    def build_srcset(variants: Iterable[SizeVariant], prefer_webp: bool = False) -> str:
        parts = []
        for variant in SizeSelector.sort_variants(variants):
            if variant.width <= 0:
                continue
            ref = variant.webp_reference if prefer_webp and variant.has_webp else variant.file_reference
            parts.append(f"{ref} {variant.width}w")
        return ", ".join(parts)
