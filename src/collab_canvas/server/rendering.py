from __future__ import annotations

import io
import logging

from PIL import Image, ImageColor, ImageDraw

from collab_canvas.protocol.operations import Stroke

logger = logging.getLogger(__name__)


def _rgb(color: str) -> tuple[int, int, int]:
    try:
        rgb = ImageColor.getrgb(color)
    except ValueError:
        logger.debug("unparseable stroke colour %r, drawing black", color)
        return (0, 0, 0)
    return rgb[:3]


def render_strokes_png(*, strokes: list[Stroke], max_px: int, margin: float = 8.0) -> bytes:
    """
    Render the visible strokes as a PNG (debug view of a session).

    - **strokes**: folded canvas state, in canvas coordinates
    - **max_px**: longest edge of the output; the drawing is scaled to fit
    - **margin**: padding around the strokes' bounding box, in canvas units

    Line width follows stroke size scaled by point pressure. No smoothing.
    """
    xs = [pt.x for s in strokes for pt in s.points]
    ys = [pt.y for s in strokes for pt in s.points]
    if not xs:
        img = Image.new("RGB", (max_px, max_px), (255, 255, 255))
        bio = io.BytesIO()
        img.save(bio, format="PNG")
        return bio.getvalue()

    x0, y0 = min(xs) - margin, min(ys) - margin
    w = max(1.0, max(xs) + margin - x0)
    h = max(1.0, max(ys) + margin - y0)
    scale = max_px / max(w, h)
    img = Image.new("RGB", (max(1, int(w * scale)), max(1, int(h * scale))), (255, 255, 255))
    draw = ImageDraw.Draw(img)

    def to_px(x: float, y: float) -> tuple[float, float]:
        return ((x - x0) * scale, (y - y0) * scale)

    for s in strokes:
        col = _rgb(s.color)
        prev = None
        for pt in s.points:
            cur = to_px(pt.x, pt.y)
            width = max(1, int(s.size * scale * (0.5 + pt.p)))
            if prev is None:
                r = width / 2
                draw.ellipse([cur[0] - r, cur[1] - r, cur[0] + r, cur[1] + r], fill=col)
            else:
                draw.line([prev, cur], fill=col, width=width)
            prev = cur

    bio = io.BytesIO()
    img.save(bio, format="PNG", optimize=True)
    return bio.getvalue()
