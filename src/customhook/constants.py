"""
Shared constants for customhook.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Hook identity
HOOK_NAME = "custom"
"""Name the hook reports from its Info callback."""

DEFAULT_HOOK_VERSION = "v1alpha2"
"""Hook API version advertised when none is configured."""

# Overrides
DEFAULT_ANNOTATION_PREFIX = "custom.kubevirt.io/"
"""Annotation key prefix selecting domain overrides.

The remainder of a matching key is the dotted path, e.g.
``custom.kubevirt.io/devices.disk.driver``.
"""

# Logging
DEFAULT_LOG_COMPONENT = "custom-hook-sidecar"
"""Component name attached to every log record."""
