# storyblok-richtext: Services (Rendering Core)
# Resolvers and the sanitizer; pure string construction, no I/O

from storyblok.core.services.block_resolver import BlockResolver
from storyblok.core.services.component_resolver import (
    BaseComponentResolver,
    ComponentNodeResolver,
    ComponentResolverChain,
)
from storyblok.core.services.emoji_resolver import EmojiResolver
from storyblok.core.services.image_resolver import ImageResolver, optimize_image_src
from storyblok.core.services.mark_resolver import MarkResolver
from storyblok.core.services.sanitizer import HtmlSanitizer, sanitize_html
from storyblok.core.services.text_resolver import TextResolver

__all__ = [
    "BaseComponentResolver",
    "BlockResolver",
    "ComponentNodeResolver",
    "ComponentResolverChain",
    "EmojiResolver",
    "HtmlSanitizer",
    "ImageResolver",
    "MarkResolver",
    "TextResolver",
    "optimize_image_src",
    "sanitize_html",
]
