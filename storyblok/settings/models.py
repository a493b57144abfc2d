from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from storyblok.domain.options import (
    ImageFilters,
    ImageOptimizationOptions,
    LinkPolicy,
    RichTextOptions,
    SanitizerOptions,
    SrcSetEntry,
    build_sanitizer_options,
)
from storyblok.domain.policy import InvalidNodeStrategy

Region = Literal["eu", "us", "cn", "ap", "ca"]


class ClientSettings(BaseModel):
    access_token: str | None = None
    region: Region = "eu"
    https: bool = True
    endpoint: str | None = None
    max_retries: int = Field(default=5, ge=0)
    retry_delay_seconds: float = Field(default=1.0, ge=0)
    timeout_seconds: float = Field(default=30.0, gt=0)
    rate_limit: int = Field(default=5, gt=0)
    headers: dict[str, str] = {}


class CacheSettings(BaseModel):
    type: Literal["none", "memory"] = "memory"
    clear: Literal["manual", "auto"] = "manual"
    default_ttl_seconds: float | None = Field(default=None, gt=0)


class ImageFilterSettings(BaseModel):
    quality: int | None = Field(default=None, ge=0, le=100)
    format: str | None = None
    grayscale: bool = False
    blur: int | None = None
    brightness: int | None = None
    rotate: int | None = None
    fill: str | None = None


class SrcSetSettings(BaseModel):
    width: int = Field(gt=0)
    pixel_density: int | None = Field(default=None, gt=0)


class ImageSettings(BaseModel):
    width: int | None = Field(default=None, ge=0)
    height: int | None = Field(default=None, ge=0)
    loading: str | None = None
    css_class: str | None = Field(default=None, alias="class")
    filters: ImageFilterSettings | None = None
    srcset: list[SrcSetSettings] = []
    sizes: list[str] = []

    model_config = ConfigDict(populate_by_name=True)


class LinkSettings(BaseModel):
    prefix_email_links: bool = False
    append_anchor: bool = False


class RichTextSettings(BaseModel):
    optimize_images: bool = False
    image: ImageSettings | None = None
    keyed_resolvers: bool = False
    invalid_node_handling: InvalidNodeStrategy = InvalidNodeStrategy.REMOVE
    links: LinkSettings = LinkSettings()


class SanitizerSettings(BaseModel):
    """Omitted lists keep the built-in defaults."""

    allowed_tags: list[str] | None = None
    allowed_attributes: dict[str, list[str]] | None = None
    uri_attributes: list[str] | None = None
    allowed_protocols: list[str] | None = None
    self_closing_tags: list[str] | None = None
    strip_comments: bool = True


class Settings(BaseModel):
    client: ClientSettings = ClientSettings()
    cache: CacheSettings = CacheSettings()
    richtext: RichTextSettings = RichTextSettings()
    sanitizer: SanitizerSettings = SanitizerSettings()

    def to_sanitizer_options(self) -> SanitizerOptions:
        s = self.sanitizer

        def as_set(values: list[str] | None) -> frozenset[str] | None:
            return frozenset(values) if values is not None else None

        attributes = None
        if s.allowed_attributes is not None:
            attributes = {tag: frozenset(names) for tag, names in s.allowed_attributes.items()}

        return build_sanitizer_options(
            allowed_tags=as_set(s.allowed_tags),
            allowed_attributes=attributes,
            uri_attributes=as_set(s.uri_attributes),
            allowed_protocols=as_set(s.allowed_protocols),
            self_closing_tags=as_set(s.self_closing_tags),
            strip_comments=s.strip_comments,
        )

    def to_image_options(self) -> ImageOptimizationOptions | None:
        image = self.richtext.image
        if image is None:
            return None
        filters = None
        if image.filters is not None:
            filters = ImageFilters(**image.filters.model_dump())
        return ImageOptimizationOptions(
            width=image.width,
            height=image.height,
            loading=image.loading,
            css_class=image.css_class,
            filters=filters,
            srcset=tuple(SrcSetEntry(e.width, e.pixel_density) for e in image.srcset),
            sizes=tuple(image.sizes),
        )

    def to_richtext_options(self) -> RichTextOptions:
        rt = self.richtext
        return RichTextOptions(
            optimize_images=rt.optimize_images,
            image_options=self.to_image_options(),
            keyed_resolvers=rt.keyed_resolvers,
            invalid_node_handling=rt.invalid_node_handling,
            sanitizer=self.to_sanitizer_options(),
            link_policy=LinkPolicy(
                prefix_email_links=rt.links.prefix_email_links,
                append_anchor=rt.links.append_anchor,
            ),
        )
