"""
Deep merging of configuration layers.

Layers are plain dicts loaded from YAML. Nested dicts merge key by key;
any other value in a higher-precedence layer replaces the lower one.
"""

from __future__ import annotations

import copy as _copy
import typing as _typing


def deep_merge(*layers: dict[str, _typing.Any]) -> dict[str, _typing.Any]:
    """
    Merge layers into a new dict. Later layers take precedence.

    Example:
        >>> builtin = {"hook": {"name": "custom", "version": "v1alpha2"}}
        >>> user = {"hook": {"version": "v1alpha1"}}
        >>> deep_merge(builtin, user)
        {'hook': {'name': 'custom', 'version': 'v1alpha1'}}

    Source layers are never modified.
    """
    merged: dict[str, _typing.Any] = {}
    for layer in layers:
        _merge_into(merged, layer)
    return merged


def _merge_into(target: dict[str, _typing.Any], layer: dict[str, _typing.Any]) -> None:
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(value, dict) and isinstance(current, dict):
            _merge_into(current, value)
        else:
            target[key] = _copy.deepcopy(value)
