"""Two-column raster rendering of a ``DiffReport``.

Left half is the old text, right half the new one. A half gets a tinted
background when it holds words that became more frequent on that side, and
those words are drawn brighter the larger their frequency delta.
"""
from __future__ import annotations
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from docmigrator.text.diff import NEW, OLD, DiffReport, SkipMarker, Token, analyze

log = logging.getLogger(__name__)

FONT_CANDIDATES = ("DejaVuSansMono.ttf", "Consolas.ttf", "cour.ttf", "LiberationMono-Regular.ttf")

COLORS = {
    "bg": (18, 18, 18),
    "text_dim": (85, 85, 85),
    "line_num": (68, 68, 68),
    "divider": (51, 51, 51),
    "red_base": (255, 180, 171),
    "green_base": (183, 240, 217),
    "bg_red": (65, 14, 11, 128),
    "bg_green": (0, 55, 30, 128),
}


@dataclass
class RenderConfig:
    width: int = 1200
    padding: int = 40
    font_size: int = 14
    line_height: int = 24
    col_gap: int = 20
    row_gap: int = 10
    gutter: int = 40  # line-number column inside each half

    @property
    def col_width(self) -> float:
        return (self.width - self.padding * 2 - self.col_gap) / 2

    @property
    def wrap_width(self) -> float:
        return self.col_width - self.gutter


@dataclass
class RowLayout:
    index: int
    top: int
    height: int
    skipped_before: int = 0
    wrapped: Dict[str, List[List[Token]]] = field(default_factory=dict)


def load_font(size: int):
    for name in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def wrap_tokens(tokens: List[Token], font, max_width: float) -> List[List[Token]]:
    """Greedy word wrap; a word wider than ``max_width`` still gets its own row."""
    rows: List[List[Token]] = []
    current: List[Token] = []
    width = 0.0
    for token in tokens:
        w = font.getlength(token.display + " ")
        if current and width + w > max_width:
            rows.append(current)
            current, width = [], 0.0
        current.append(token)
        width += w
    if current:
        rows.append(current)
    return rows


def layout(report: DiffReport, font, config: RenderConfig) -> Tuple[List[RowLayout], int]:
    """Vertical placement of every selected line; returns the rows and the canvas height."""
    y = config.padding
    rows: List[RowLayout] = []
    pending_skip = 0
    for item in report.rows():
        if isinstance(item, SkipMarker):
            y += config.line_height
            pending_skip = item.skipped
            continue
        wrapped = {}
        for side in (OLD, NEW):
            line = report.line(side, item)
            wrapped[side] = wrap_tokens(line.tokens, font, config.wrap_width) if line else []
        count = max(len(wrapped[OLD]), len(wrapped[NEW]), 1)
        height = count * config.line_height
        rows.append(RowLayout(index=item, top=y, height=height, skipped_before=pending_skip, wrapped=wrapped))
        pending_skip = 0
        y += height + config.row_gap
    return rows, y + config.padding


def _word_fill(report: DiffReport, side: str, token: Token) -> Tuple[int, ...]:
    intensity = report.token_intensity(side, token)
    if intensity is None:
        return COLORS["text_dim"]
    base = COLORS["red_base"] if side == OLD else COLORS["green_base"]
    return (*base, round(255 * intensity))


def render_report(report: DiffReport, config: Optional[RenderConfig] = None) -> Optional[bytes]:
    """PNG bytes for ``report``, or ``None`` when no line was selected."""
    if report.is_empty:
        return None
    config = config or RenderConfig()
    font = load_font(config.font_size)
    rows, height = layout(report, font, config)

    image = Image.new("RGB", (config.width, height), COLORS["bg"])
    draw = ImageDraw.Draw(image, "RGBA")
    half = config.width // 2
    draw.line([(half, 0), (half, height)], fill=COLORS["divider"], width=2)

    for row in rows:
        if row.skipped_before:
            dots_x = half - font.getlength("...") / 2
            draw.text((dots_x, row.top - config.line_height), "...", font=font, fill=COLORS["text_dim"])

        if report.tint_weight(OLD, row.index) > 0:
            draw.rectangle([0, row.top, half, row.top + row.height], fill=COLORS["bg_red"])
        if report.tint_weight(NEW, row.index) > 0:
            draw.rectangle([half, row.top, config.width, row.top + row.height], fill=COLORS["bg_green"])

        for side, offset_x in ((OLD, 0), (NEW, half)):
            if report.line(side, row.index) is None:
                continue
            number = str(row.index + 1)
            draw.text(
                (offset_x + 30 - font.getlength(number), row.top + 5),
                number, font=font, fill=COLORS["line_num"],
            )
            y = row.top + 5
            for tokens in row.wrapped[side]:
                x = offset_x + config.gutter
                for token in tokens:
                    draw.text((x, y), token.display, font=font, fill=_word_fill(report, side, token))
                    x += font.getlength(token.display + " ")
                y += config.line_height

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    log.info("Rendered diff image %dx%d with %d lines", config.width, height, len(rows))
    return buffer.getvalue()


def visualize_text_diff(old_text: str, new_text: str, config: Optional[RenderConfig] = None) -> Optional[bytes]:
    """Compare two linearized texts and render the changed lines; ``None`` if nothing changed."""
    return render_report(analyze(old_text, new_text), config)
