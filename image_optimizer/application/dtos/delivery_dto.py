from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VariantDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    width: int = Field(..., description="Width in pixels", examples=[600], ge=0)
    height: int = Field(..., description="Height in pixels", examples=[400], ge=0)
    file_reference: str = Field(..., description="Path or URL of the variant")
    webp_reference: Optional[str] = Field(None, description="Path or URL of its WebP sibling")


class PreloadHint(BaseModel):
    """Data for a high-priority preload of the LCP image (not markup)."""

    model_config = ConfigDict(frozen=True)

    href: str = Field(..., description="Resource to fetch first")
    srcset: str = Field("", description="Candidate list with width descriptors")
    sizes: str = Field("", description="Viewport-to-width mapping")
    fetchpriority: str = Field("high", description="Fetch priority hint")


class ResponsiveSelection(BaseModel):
    """Render-time delivery decision for one image. Never persisted."""

    model_config = ConfigDict(frozen=True)

    target_width: int = Field(..., description="Container width the image renders at", ge=0)
    variant: Optional[VariantDTO] = Field(None, description="Chosen variant; None when there are no variants")
    srcset: str = Field("", description="Variant list with widths", examples=["a-300.jpg 300w, a-600.jpg 600w"])
    sizes: str = Field(..., description="Viewport mapping", examples=["(max-width: 600px) 100vw, 600px"])
    attributes: dict[str, str] = Field(default_factory=dict, description="Loading/priority hints")
    preload: Optional[PreloadHint] = Field(None, description="Preload data when this is the LCP image")
