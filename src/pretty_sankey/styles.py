from __future__ import annotations

# ============================================================================
# Font metrics: character width estimates for Inter at different sizes.
# ============================================================================


def estimate_text_width(text: str, font_size: float, font_weight: int) -> float:
    """Average character width in px at the given font size and weight (proportional font)."""
    if font_weight >= 600:
        width_ratio = 0.58
    elif font_weight >= 500:
        width_ratio = 0.55
    else:
        width_ratio = 0.52
    return len(text) * font_size * width_ratio


# Fixed font sizes (px) for the annotation callout
FONT_SIZES = {
    "annotation_title": 13,
    "annotation_value": 11,
}

FONT_WEIGHTS = {
    "annotation_title": 600,
    "annotation_value": 400,
}

# ============================================================================
# Spacing & emphasis constants
# ============================================================================

# Gap between a node edge and its label
LABEL_GAP = 8

# Vertical gap between a label's name line and value line
LABEL_LINE_GAP = 2

ANNOTATION_PADDING = 8
ANNOTATION_LINE_GAP = 4

# Opacity multipliers while a link is selected
SELECTION_OPACITY = {
    "selected_link": 1.0,
    "dimmed_link": 0.2,
    "label": 0.7,
}

TEXT_BASELINE_SHIFT = "0.35em"
