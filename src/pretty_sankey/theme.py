from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

# ============================================================================
# Types
# ============================================================================


@dataclass(slots=True)
class DiagramColors:
    """Diagram chrome colors.

    Required: bg + fg drive text and annotation surfaces.
    Optional: muted, surface, border override the derived shades.
    Node and link colors come from the data itself.
    """

    bg: str
    fg: str
    muted: str | None = None
    surface: str | None = None
    border: str | None = None


# ============================================================================
# Defaults
# ============================================================================

DEFAULTS = {"bg": "#FFFFFF", "fg": "#27272A"}

# ============================================================================
# color-mix() weights for derived CSS variables
# ============================================================================

MIX = {
    "text_sec": 60,
    "text_muted": 40,
    "annotation_fill": 3,
    "annotation_stroke": 20,
}

# ============================================================================
# Well-known theme palettes
# ============================================================================

THEMES: dict[str, DiagramColors] = {
    "zinc-light": DiagramColors(bg="#FFFFFF", fg="#27272A"),
    "zinc-dark": DiagramColors(bg="#18181B", fg="#FAFAFA"),
    "tokyo-night": DiagramColors(bg="#1a1b26", fg="#a9b1d6", muted="#565f89"),
    "catppuccin-mocha": DiagramColors(bg="#1e1e2e", fg="#cdd6f4", muted="#6c7086"),
    "catppuccin-latte": DiagramColors(bg="#eff1f5", fg="#4c4f69", muted="#9ca0b0"),
    "nord": DiagramColors(bg="#2e3440", fg="#d8dee9", muted="#616e88"),
    "dracula": DiagramColors(bg="#282a36", fg="#f8f8f2", muted="#6272a4"),
    "github-light": DiagramColors(bg="#ffffff", fg="#1f2328", muted="#59636e"),
    "github-dark": DiagramColors(bg="#0d1117", fg="#e6edf3", muted="#9198a1"),
    "solarized-light": DiagramColors(bg="#fdf6e3", fg="#657b83", muted="#93a1a1"),
    "solarized-dark": DiagramColors(bg="#002b36", fg="#839496", muted="#586e75"),
}


# ============================================================================
# SVG style block
# ============================================================================


def build_style_block(font: str) -> str:
    """Build the CSS variable derivation rules for the SVG <style> block."""
    font_import = (
        f"@import url('https://fonts.googleapis.com/css2?family={quote(font)}"
        f":wght@400;500;600;700&amp;display=swap');"
    )

    derived_vars = f"""
    /* Derived from --bg and --fg (overridable via --muted, --surface, --border) */
    --_text:              var(--fg);
    --_text-sec:          var(--muted, color-mix(in srgb, var(--fg) {MIX["text_sec"]}%, var(--bg)));
    --_text-muted:        var(--muted, color-mix(in srgb, var(--fg) {MIX["text_muted"]}%, var(--bg)));
    --_annotation-fill:   var(--surface, color-mix(in srgb, var(--fg) {MIX["annotation_fill"]}%, var(--bg)));
    --_annotation-stroke: var(--border, color-mix(in srgb, var(--fg) {MIX["annotation_stroke"]}%, var(--bg)));"""

    lines = [
        "<style>",
        f"  {font_import}",
        f"  text {{ font-family: '{font}', system-ui, sans-serif; }}",
        f"  svg {{{derived_vars}",
        "  }",
        "</style>",
    ]
    return "\n".join(lines)


def svg_open_tag(
    width: float,
    height: float,
    colors: DiagramColors,
    transparent: bool = False,
) -> str:
    """Build the SVG opening tag with CSS variables set as inline styles."""
    vars_parts = [
        f"--bg:{colors.bg}",
        f"--fg:{colors.fg}",
    ]
    if colors.muted:
        vars_parts.append(f"--muted:{colors.muted}")
    if colors.surface:
        vars_parts.append(f"--surface:{colors.surface}")
    if colors.border:
        vars_parts.append(f"--border:{colors.border}")

    vars_str = ";".join(vars_parts)
    bg_style = "" if transparent else ";background:var(--bg)"

    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {height}" '
        f'width="{width}" height="{height}" style="{vars_str}{bg_style}">'
    )
