"""
PDF export of a post.

The post is rendered into one tall image (title, metadata, AI summary when
ready, then the markdown body as wrapped text), sliced into pages with the
A4 aspect ratio and written as an image-based PDF with Pillow.
"""

import logging
import os
import re
from typing import List, Tuple

from PIL import Image, ImageDraw, ImageFont

from portal.client.models import Post, ReadySummary

logger = logging.getLogger(__name__)

PAGE_WIDTH = 1240
A4_RATIO = 297 / 210
MARGIN = 80
LINE_SPACING = 10
RESOLUTION = 150.0

TITLE_SIZE = 40
HEADING_SIZE = 30
BODY_SIZE = 22
META_SIZE = 18

MARKDOWN_INLINE_RE = re.compile(r"(\*\*|__|`|~~)")
MARKDOWN_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")


def sanitize_filename(title: str) -> str:
    """'My Post: v2!' → 'my_post__v2_.pdf'."""
    return re.sub(r"[^a-z0-9]", "_", title or "post", flags=re.IGNORECASE).lower() + ".pdf"


def _font(size: int):
    return ImageFont.load_default(size=size)


def _printable(text: str, font) -> str:
    if isinstance(font, ImageFont.FreeTypeFont):
        return text
    return text.encode("latin-1", "replace").decode("latin-1")


def _wrap(text: str, font, width: int) -> List[str]:
    """Greedy word wrap to `width` pixels; an over-long word gets its own line."""
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and font.getlength(candidate) > width:
            lines.append(current)
            current = word
        else:
            current = candidate
    lines.append(current)
    return lines


def _line_height(font) -> int:
    bbox = font.getbbox("Ag")
    return bbox[3] - bbox[1] + LINE_SPACING


def layout_post(post: Post, width: int = PAGE_WIDTH) -> List[Tuple[str, object, str]]:
    """
    Turn a post into `(text, font, colour)` lines ready to draw.

    Blank strings are paragraph gaps.
    """
    usable = width - 2 * MARGIN
    title_font, heading_font, body_font, meta_font = _font(TITLE_SIZE), _font(HEADING_SIZE), _font(BODY_SIZE), _font(META_SIZE)
    lines: List[Tuple[str, object, str]] = []

    def add(text: str, font, colour: str = "black") -> None:
        for line in _wrap(_printable(text, font), font, usable):
            lines.append((line, font, colour))

    add(post.title, title_font)
    meta = [post.type]
    if post.author:
        meta.append(f"by {post.author.name}")
    if post.created_at:
        meta.append(post.created_at.strftime("%Y-%m-%d"))
    meta.append(f"{post.views} views")
    add(" · ".join(meta), meta_font, "gray")
    if post.tags:
        add(" ".join(f"#{tag}" for tag in post.tags), meta_font, "gray")
    lines.append(("", body_font, "black"))

    if isinstance(post.summary, ReadySummary):
        add("TL;DR", heading_font)
        add(post.summary.tldr, body_font)
        for takeaway in post.summary.key_takeaways:
            add(f"• {takeaway}", body_font)
        lines.append(("", body_font, "black"))

    for raw in post.content.splitlines():
        text = MARKDOWN_INLINE_RE.sub("", raw).rstrip()
        heading = MARKDOWN_HEADING_RE.match(text)
        if heading:
            add(heading.group(2), heading_font)
        elif text.strip():
            add(text, body_font)
        else:
            lines.append(("", body_font, "black"))
    return lines


def render_post(post: Post, width: int = PAGE_WIDTH) -> Image.Image:
    """Draw the whole post on one white canvas `width` pixels wide."""
    lines = layout_post(post, width)
    height = 2 * MARGIN + sum(_line_height(font) for _, font, _ in lines)
    canvas = Image.new("RGB", (width, height), "white")
    draw = ImageDraw.Draw(canvas)
    y = MARGIN
    for text, font, colour in lines:
        if text:
            draw.text((MARGIN, y), text, font=font, fill=colour)
        y += _line_height(font)
    return canvas


def paginate(canvas: Image.Image) -> List[Image.Image]:
    """Slice a canvas into A4-ratio pages; the last page is padded with white."""
    width = canvas.width
    page_height = round(width * A4_RATIO)
    pages = []
    for top in range(0, canvas.height, page_height):
        page = Image.new("RGB", (width, page_height), "white")
        page.paste(canvas.crop((0, top, width, min(top + page_height, canvas.height))), (0, 0))
        pages.append(page)
    return pages


def export_post(post: Post, dest_dir: str = ".") -> str:
    """
    Write `<sanitised title>.pdf` into `dest_dir`.

    Parameters
    ----------
    post : Post
        Post to export (needs `content`, i.e. a detail payload).
    dest_dir : str
        Output directory, created when missing.

    Returns
    -------
    str
        Path of the written PDF.
    """
    pages = paginate(render_post(post))
    os.makedirs(dest_dir, exist_ok=True)
    path = os.path.join(dest_dir, sanitize_filename(post.title))
    pages[0].save(path, "PDF", resolution=RESOLUTION, save_all=True, append_images=pages[1:])
    logger.info(f"Exported post {post.id} to {path} ({len(pages)} pages)")
    return path
