"""Deterministic initialization order."""

from __future__ import annotations

from collections.abc import Iterable

from pluginforge.models.extensions import ExtensionDescriptor


def order_extensions(descriptors: Iterable[ExtensionDescriptor]) -> list[ExtensionDescriptor]:
    """Sort by ordering hint (lower first), then by declared name.

    The name tie-break makes the order reproducible across runs regardless
    of the order discovery produced.
    """
    return sorted(descriptors, key=lambda d: d.sort_key)
