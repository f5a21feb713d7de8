"""Boundary-data intake for workers.

Workers receive parameters either from trusted code (plain dicts) or from
an untrusted boundary such as an HTTP request wrapper. ``permit_attributes``
turns both into a plain dict without the worker knowing which it got.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from workspine.core.protocols import Permittable


def permit_attributes(attributes: Any, *allowed_fields: str) -> dict[str, Any]:
    """
    Convert *attributes* to a plain dict.

    - a ``Mapping`` is trusted as-is and deep-copied (*allowed_fields* ignored)
    - a ``Permittable`` is narrowed to *allowed_fields*
    - anything else yields ``{}``
    """
    if isinstance(attributes, Mapping):
        return copy.deepcopy(dict(attributes))
    if isinstance(attributes, Permittable):
        permitted = attributes.permit(*allowed_fields)
        to_dict = getattr(permitted, "to_dict", None)
        if callable(to_dict):
            return dict(to_dict())
        return dict(permitted)
    return {}


__all__ = ["permit_attributes"]
