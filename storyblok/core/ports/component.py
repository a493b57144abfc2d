"""
Component Resolver Interface.

Embedded CMS components are rendered by caller-supplied resolvers. The
renderer tries registered resolvers in order; the first one whose
`supports_component` returns True renders the component.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class ComponentResolverPort(Protocol):
    """Renders embedded components to HTML."""

    def supports_component(self, component_type: str) -> bool:
        """Return True if this resolver renders `component_type`."""
        ...

    def resolve_component(self, component_type: str, props: Mapping[str, Any]) -> str:
        """
        Render a component.

        Args:
            component_type: The component's technical name.
            props: The component's fields.

        Returns:
            HTML fragment. It still passes through the sanitizer.
        """
        ...
