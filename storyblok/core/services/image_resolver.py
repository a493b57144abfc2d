"""
Image Resolver - builds <img> tags with optional CDN optimization.

Only URLs hosted on the asset CDN are rewritten. A rewritten URL is the
source plus `/m/`, an optional `{w}x{h}/` size segment (scaled by pixel
density) and an optional `filters:` segment of colon-joined filters.
"""

from __future__ import annotations

from storyblok.domain.buffers import DEFAULT_POOL, BufferPool
from storyblok.domain.entities import RichTextNode, attr_str
from storyblok.domain.html import format_attributes
from storyblok.domain.keys import KeyCounter
from storyblok.domain.options import (
    DEFAULT_OPTIONS,
    KEY_ATTRIBUTE,
    ImageOptimizationOptions,
    RichTextOptions,
)

CDN_MARKER = "//a.storyblok.com/"


def is_cdn_url(src: str) -> bool:
    return CDN_MARKER in src


def optimize_image_src(
    src: str,
    image_options: ImageOptimizationOptions | None,
    width: int | None = None,
    pixel_density: int | None = None,
    pool: BufferPool = DEFAULT_POOL,
) -> str:
    """
    Rewrite a CDN image URL with size and filter directives.

    A srcset `width` overrides the configured width and zeroes the height,
    so the CDN keeps the aspect ratio.
    """
    if not is_cdn_url(src):
        return src

    configured = image_options or ImageOptimizationOptions()
    w = width if width is not None else configured.width
    h = 0 if width is not None else configured.height

    with pool.borrow() as buffer:
        buffer.write(src)
        buffer.write("/m/")
        if w is not None or h is not None:
            scale = pixel_density or 1
            buffer.write(f"{(w or 0) * scale}x{(h or 0) * scale}/")
        if configured.filters is not None:
            tokens = configured.filters.tokens()
            if tokens:
                buffer.write("filters:")
                buffer.write(":".join(tokens))
        return buffer.getvalue()


class ImageResolver:
    """Resolves image nodes; a missing `src` renders nothing."""

    def __init__(
        self,
        options: RichTextOptions = DEFAULT_OPTIONS,
        keys: KeyCounter | None = None,
        pool: BufferPool = DEFAULT_POOL,
    ) -> None:
        self._options = options
        self._keys = keys or KeyCounter()
        self._pool = pool

    def resolve(self, node: RichTextNode, options: RichTextOptions | None = None) -> str:
        opts = options or self._options
        src = attr_str(node.attrs, "src")
        if not src:
            return ""

        attrs: dict[str, str] = {}
        if opts.keyed_resolvers:
            attrs[KEY_ATTRIBUTE] = self._keys.key_for("img")
        attrs.update(self._image_attributes(src, node, opts))

        return f"<img {format_attributes(attrs, self._pool)}>"

    def _image_attributes(
        self,
        src: str,
        node: RichTextNode,
        opts: RichTextOptions,
    ) -> dict[str, str]:
        image_options = opts.image_options
        attrs: dict[str, str] = {
            "src": optimize_image_src(src, image_options, pool=self._pool)
            if opts.optimize_images
            else src
        }

        alt = attr_str(node.attrs, "alt")
        if alt is not None:
            attrs["alt"] = alt
        title = attr_str(node.attrs, "title")
        if title is not None:
            attrs["title"] = title

        if not opts.optimize_images or image_options is None:
            return attrs

        if image_options.width is not None:
            attrs["width"] = str(image_options.width)
        if image_options.height is not None:
            attrs["height"] = str(image_options.height)
        if image_options.loading:
            attrs["loading"] = image_options.loading
        if image_options.css_class:
            attrs["class"] = image_options.css_class

        if image_options.srcset and is_cdn_url(src):
            attrs["srcset"] = ", ".join(
                f"{optimize_image_src(src, image_options, e.width, e.pixel_density, self._pool)}"
                f" {e.width}w"
                for e in image_options.srcset
            )
        if image_options.sizes:
            attrs["sizes"] = ", ".join(image_options.sizes)

        return attrs
