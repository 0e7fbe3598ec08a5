from image_optimizer.domain.services.layout_policy import LayoutPolicy
from image_optimizer.domain.services.priority_service import PriorityService, RenderContext


def test_layout_defaults_and_theme_width():
    assert LayoutPolicy().max_content_width == 704
    assert LayoutPolicy(645).max_content_width == 645


def test_effective_width_has_floor():
    assert LayoutPolicy.effective_width(1024) == 964
    assert LayoutPolicy.effective_width(320) == 300


def test_recommended_widths():
    assert LayoutPolicy(645).recommended_widths() == {
        "content_optimized": 645,
        "content_retina": 1290,
        "mobile_optimized": 450,
        "tablet_optimized": 600,
    }


def test_first_image_is_eager_without_explicit_candidate():
    ctx = RenderContext()

    first = PriorityService.loading_attributes(ctx, "1")
    second = PriorityService.loading_attributes(ctx, "2")

    assert first == {"loading": "eager", "fetchpriority": "high", "decoding": "async"}
    assert second == {"loading": "lazy", "decoding": "async"}


def test_detected_lcp_wins_regardless_of_position():
    ctx = RenderContext()
    assert PriorityService.detect_lcp(ctx, "9") is True
    assert PriorityService.detect_lcp(ctx, "10") is False

    assert PriorityService.loading_attributes(ctx, "1")["loading"] == "lazy"
    assert PriorityService.loading_attributes(ctx, "9")["fetchpriority"] == "high"


def test_contexts_do_not_leak_between_requests():
    first_request = RenderContext()
    PriorityService.detect_lcp(first_request, "5")
    PriorityService.loading_attributes(first_request, "5")

    second_request = RenderContext()
    assert second_request.lcp_identifier is None
    assert PriorityService.loading_attributes(second_request, "8")["loading"] == "eager"
