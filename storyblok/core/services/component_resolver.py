"""
Component Resolvers - embedded component rendering.

Key behaviors:
- Resolvers are tried in registration order; first match wins
- Unmatched components go to the options' fallback callback, if any
- A failing component is handled by the invalid node policy, scoped to
  that component's output
- `blok` nodes render each entry of `attrs.body` in order
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from threading import Lock
from typing import Any

from storyblok.core.ports.component import ComponentResolverPort
from storyblok.domain.buffers import DEFAULT_POOL, BufferPool
from storyblok.domain.entities import NodeKind, RichTextNode, attr_str
from storyblok.domain.options import DEFAULT_OPTIONS, RichTextOptions
from storyblok.domain.policy import handle_invalid_node

logger = logging.getLogger(__name__)

ComponentRenderer = Callable[[Mapping[str, Any]], str]


# --- Base Resolver ---


class BaseComponentResolver:
    """
    Resolver backed by a registry of per-type render functions.

    Component types are matched case-insensitively.
    """

    def __init__(self) -> None:
        self._renderers: dict[str, ComponentRenderer] = {}
        self._required: dict[str, tuple[str, ...]] = {}

    def register_component(
        self,
        component_type: str,
        renderer: ComponentRenderer,
        required_props: Iterable[str] = (),
    ) -> None:
        if not component_type:
            raise ValueError("component_type is required")
        key = component_type.lower()
        self._renderers[key] = renderer
        self._required[key] = tuple(required_props)

    def supports_component(self, component_type: str) -> bool:
        return component_type.lower() in self._renderers

    def validate_props(self, component_type: str, props: Mapping[str, Any]) -> None:
        """
        Check that every required prop is present.

        Raises:
            ValueError: If a required prop is missing.
        """
        for prop in self._required.get(component_type.lower(), ()):
            if prop not in props:
                raise ValueError(
                    f"Required prop '{prop}' missing for component '{component_type}'"
                )

    def resolve_component(self, component_type: str, props: Mapping[str, Any]) -> str:
        renderer = self._renderers.get(component_type.lower())
        if renderer is None:
            return ""
        self.validate_props(component_type, props)
        return renderer(props)


# --- Chain ---


class ComponentResolverChain:
    """Ordered, thread-safe list of component resolvers."""

    def __init__(self, resolvers: Iterable[ComponentResolverPort] = ()) -> None:
        self._lock = Lock()
        self._resolvers: tuple[ComponentResolverPort, ...] = tuple(resolvers)

    def add(self, resolver: ComponentResolverPort) -> None:
        if resolver is None:
            raise ValueError("resolver is required")
        with self._lock:
            self._resolvers = (*self._resolvers, resolver)

    @property
    def resolvers(self) -> tuple[ComponentResolverPort, ...]:
        return self._resolvers

    def __len__(self) -> int:
        return len(self._resolvers)

    def find(self, component_type: str) -> ComponentResolverPort | None:
        """First resolver supporting `component_type`, or None."""
        for resolver in self._resolvers:
            if resolver.supports_component(component_type):
                return resolver
        return None


# --- Node Resolver ---


class ComponentNodeResolver:
    """Resolves component nodes through a resolver chain."""

    def __init__(
        self,
        chain: ComponentResolverChain | None = None,
        options: RichTextOptions = DEFAULT_OPTIONS,
        pool: BufferPool = DEFAULT_POOL,
    ) -> None:
        self._chain = chain if chain is not None else ComponentResolverChain()
        self._options = options
        self._pool = pool

    @property
    def chain(self) -> ComponentResolverChain:
        return self._chain

    def resolve(self, node: RichTextNode, options: RichTextOptions | None = None) -> str:
        opts = options or self._options

        body = node.attrs.get("body")
        if node.kind is NodeKind.COMPONENT and isinstance(body, list):
            return self._pool.join(
                self.resolve_component(attr_str(entry, "component") or "", entry, opts)
                for entry in body
                if isinstance(entry, Mapping)
            )

        component_type = attr_str(node.attrs, "component")
        if not component_type:
            return ""
        return self.resolve_component(component_type, node.attrs, opts)

    def resolve_component(
        self,
        component_type: str,
        props: Mapping[str, Any],
        options: RichTextOptions | None = None,
    ) -> str:
        """
        Render one component.

        Raises:
            InvalidNodeError: If the resolver fails and the strategy is THROW.
        """
        opts = options or self._options
        if not component_type:
            return ""

        try:
            resolver = self._chain.find(component_type)
            if resolver is not None:
                return resolver.resolve_component(component_type, props)
            if opts.component_resolver is not None:
                return opts.component_resolver(component_type, props)
        except Exception as exc:
            logger.warning("Component '%s' failed to render: %s", component_type, exc)
            return handle_invalid_node(
                opts.invalid_node_handling,
                f"component:{component_type}",
                error=exc,
            )
        return ""
