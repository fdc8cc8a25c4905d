"""
Merge dotted-path overrides into a domain XML document.

The merge runs in a fixed order: parse, then for each override ensure its
path and set its value, then serialize. Parsing, path ensuring and
serialization failures abort the merge. A failure to set one value only
skips that override; it is logged and recorded in the MergeResult.
"""

from __future__ import annotations

import collections.abc as _abc
import dataclasses as _dataclasses
import logging as _logging
import typing as _typing

import customhook.domain.errors as errors
import customhook.domain.paths as paths
import customhook.domain.tree as tree

_logger = _logging.getLogger(__name__)


@_dataclasses.dataclass(frozen=True)
class Override:
    """A requested scalar assignment into the document tree."""

    path: str
    value: str

    @classmethod
    def coerce(cls, item: Override | tuple[str, str]) -> Override:
        """Accept either an Override or a ``(path, value)`` pair."""
        if isinstance(item, Override):
            return item
        path, value = item
        return cls(path=path, value=value)


OverrideLike: _typing.TypeAlias = Override | tuple[str, str]


@_dataclasses.dataclass(frozen=True)
class SkippedOverride:
    """An override whose value could not be set, with the reason."""

    override: Override
    reason: str


@_dataclasses.dataclass
class MergeResult:
    """
    Outcome of a merge.

    Attributes:
        document: The serialized, merged document.
        applied: Overrides that were set, in the order they were applied.
        skipped: Overrides that failed in the set phase.
    """

    document: bytes
    applied: list[Override] = _dataclasses.field(default_factory=list)
    skipped: list[SkippedOverride] = _dataclasses.field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Whether every override was applied."""
        return not self.skipped


class PathMerger:
    """
    Applies ordered overrides to a document, one tree per call.

    The merger keeps no state between calls; a single instance can be shared
    by concurrent callers.
    """

    def __init__(
        self,
        *,
        logger: _logging.Logger | _logging.LoggerAdapter[_logging.Logger] | None = None,
        indent: bool = False,
    ) -> None:
        """
        Initialize the merger.

        Args:
            logger: Logger for diagnostics. Defaults to this module's logger.
            indent: Pretty-print the serialized document.
        """
        self._logger = logger or _logger
        self._indent = indent

    def merge(
        self,
        document: bytes | str,
        overrides: _abc.Iterable[OverrideLike],
    ) -> bytes:
        """
        Apply overrides to a document and return the serialized result.

        Raises:
            ParseError: If the document cannot be parsed.
            PathError: If an override's parent path cannot be created.
            SerializeError: If the merged tree cannot be serialized.
        """
        return self.merge_with_report(document, overrides).document

    def merge_with_report(
        self,
        document: bytes | str,
        overrides: _abc.Iterable[OverrideLike],
    ) -> MergeResult:
        """
        Apply overrides to a document, reporting applied and skipped overrides.

        Raises the same errors as merge().
        """
        try:
            parsed = tree.parse(document)
        except errors.ParseError as e:
            self._logger.error("Failed to parse given domain spec: %s", e)
            raise

        applied: list[Override] = []
        skipped: list[SkippedOverride] = []

        for item in overrides:
            override = Override.coerce(item)

            try:
                paths.ensure_path_exists(parsed, override.path)
            except errors.PathError as e:
                self._logger.error("Failed to create path %s: %s", override.path, e.reason)
                raise

            try:
                paths.set_value(parsed, override.path, override.value)
            except errors.PathError as e:
                self._logger.warning(
                    "Failed to set value %r to path %s: %s",
                    override.value,
                    override.path,
                    e.reason,
                )
                skipped.append(SkippedOverride(override=override, reason=e.reason))
                continue

            self._logger.debug("Set %s = %r", override.path, override.value)
            applied.append(override)

        try:
            merged = tree.serialize(parsed, indent=self._indent)
        except errors.SerializeError as e:
            self._logger.error("Failed to marshal updated domain spec: %s", e)
            raise

        self._logger.info(
            "Updated domain spec with %d override(s), %d skipped",
            len(applied),
            len(skipped),
        )
        return MergeResult(document=merged, applied=applied, skipped=skipped)


def merge(
    document: bytes | str,
    overrides: _abc.Iterable[OverrideLike],
    *,
    logger: _logging.Logger | _logging.LoggerAdapter[_logging.Logger] | None = None,
    indent: bool = False,
) -> bytes:
    """Apply overrides to a document. See PathMerger.merge."""
    return PathMerger(logger=logger, indent=indent).merge(document, overrides)
