"""Markdown link helpers — asset embedding and public-gateway rewriting.

Authors embed assets with URLs on their own node
(``http://localhost:1633/bytes/<ref>``), which nobody else can reach.
Before an article is published those URLs are rewritten onto the public
gateway:

- images stay on ``/bytes/<ref>``
- links to image files stay on ``/bytes/<ref>``
- every other link moves to ``/bzz/<ref>/`` so it opens as a web page
"""

from __future__ import annotations

import re

_IMAGE_SUFFIX = re.compile(r"\.(jpg|jpeg|png|gif|svg|webp)$", re.IGNORECASE)


def image_markdown(reference: str, gateway: str, alt: str = "Image") -> str:
    """Markdown image tag for an uploaded asset."""
    return f"![{alt}]({gateway.rstrip('/')}/bytes/{reference})"


def _patterns(local_gateway: str) -> tuple[re.Pattern[str], ...]:
    base = re.escape(local_gateway.rstrip("/"))
    return (
        re.compile(rf"!\[(.*?)\]\({base}/bytes/(.*?)\)"),
        re.compile(rf"<img\s+[^>]*src=\"{base}/bytes/(.*?)\"([^>]*)>"),
        re.compile(rf"(?<!!)\[(.*?)\]\({base}/bzz/(.*?)/?\)"),
        re.compile(rf"(?<!!)\[(.*?)\]\({base}/bytes/(.*?)\)"),
    )


def rewrite_for_public(markdown: str, *, local_gateway: str, public_gateway: str) -> str:
    """Point local-node asset and content URLs in ``markdown`` at the public gateway."""
    if not markdown:
        return ""
    public = public_gateway.rstrip("/")
    md_image, html_image, bzz_link, bytes_link = _patterns(local_gateway)

    out = md_image.sub(lambda m: f"![{m.group(1)}]({public}/bytes/{m.group(2)})", markdown)
    out = html_image.sub(lambda m: f'<img src="{public}/bytes/{m.group(1)}"{m.group(2)}>', out)
    out = bzz_link.sub(lambda m: f"[{m.group(1)}]({public}/bzz/{m.group(2)}/)", out)

    def _bytes_link(m: re.Match[str]) -> str:
        text, ref = m.group(1), m.group(2)
        if _IMAGE_SUFFIX.search(text):
            return f"[{text}]({public}/bytes/{ref})"
        return f"[{text}]({public}/bzz/{ref}/)"

    return bytes_link.sub(_bytes_link, out)


def extract_image_references(markdown: str, gateway: str) -> list[str]:
    """Unique references of images served from ``gateway``.

    Markdown images come first, then ``<img>`` tags, each in document order.
    """
    md_image, html_image, _, _ = _patterns(gateway)
    found: list[str] = []
    for pattern in (md_image, html_image):
        for match in pattern.finditer(markdown or ""):
            ref = match.group(2) if pattern is md_image else match.group(1)
            if ref and ref not in found:
                found.append(ref)
    return found
