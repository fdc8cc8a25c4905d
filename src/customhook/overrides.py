"""
Override extraction from virtual machine instance annotations.

A VM instance requests domain changes through annotations whose key starts
with a namespace prefix (``custom.kubevirt.io/`` by default). The rest of
the key is a dotted path into the domain XML and the annotation value is the
value to set there:

    metadata:
      annotations:
        custom.kubevirt.io/devices.disk.driver: qemu

Only the parts of the VM instance object needed here are modelled; every
other field is accepted and ignored.
"""

from __future__ import annotations

import collections.abc as _abc
import typing as _typing

import pydantic as _pydantic

import customhook.constants as constants
import customhook.domain.merger as merger

Override = merger.Override


class InvalidVMIError(Exception):
    """The VM instance payload could not be decoded."""

    pass


class ObjectMeta(_pydantic.BaseModel):
    """Object metadata of a VM instance."""

    model_config = _pydantic.ConfigDict(extra="allow")

    name: str | None = None
    namespace: str | None = None
    annotations: dict[str, str] = _pydantic.Field(default_factory=dict)

    @_pydantic.field_validator("annotations", mode="before")
    @classmethod
    def _null_annotations(cls, value: _typing.Any) -> _typing.Any:
        # Kubernetes serializes an unset map as null
        return {} if value is None else value


class VirtualMachineInstance(_pydantic.BaseModel):
    """The subset of a VM instance object that override extraction reads."""

    model_config = _pydantic.ConfigDict(extra="allow", populate_by_name=True)

    api_version: str | None = _pydantic.Field(default=None, alias="apiVersion")
    kind: str | None = None
    metadata: ObjectMeta = _pydantic.Field(default_factory=ObjectMeta)

    @_pydantic.field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: _typing.Any) -> _typing.Any:
        return {} if value is None else value

    @property
    def annotations(self) -> dict[str, str]:
        return self.metadata.annotations


def load_vmi(vmi_json: bytes | str) -> VirtualMachineInstance:
    """
    Decode a VM instance from its JSON form.

    Args:
        vmi_json: JSON-encoded VM instance object.

    Returns:
        Validated VirtualMachineInstance.

    Raises:
        InvalidVMIError: If the payload is not valid JSON or has the wrong shape.
    """
    try:
        return VirtualMachineInstance.model_validate_json(vmi_json)
    except _pydantic.ValidationError as e:
        raise InvalidVMIError(f"Failed to unmarshal given VMI spec: {e}") from e


def extract_overrides(
    annotations: _abc.Mapping[str, str],
    prefix: str = constants.DEFAULT_ANNOTATION_PREFIX,
    *,
    sort: bool = False,
) -> list[Override]:
    """
    Select annotations carrying ``prefix`` and turn them into overrides.

    Overrides follow the mapping's iteration order, which decides the winner
    when paths overlap. Pass ``sort=True`` to order them by path instead.

    Args:
        annotations: Annotation key/value pairs.
        prefix: Namespace prefix that marks an override.
        sort: Sort the overrides by path.

    Returns:
        Extracted overrides. Keys equal to the bare prefix are ignored.
    """
    overrides = [
        Override(path=key[len(prefix) :], value=value)
        for key, value in annotations.items()
        if key.startswith(prefix) and len(key) > len(prefix)
    ]
    if sort:
        overrides.sort(key=lambda o: o.path)
    return overrides


def parse_assignments(assignments: _abc.Iterable[str]) -> list[Override]:
    """
    Parse ``PATH=VALUE`` strings into overrides.

    Only the first ``=`` separates path from value, so values may contain it.

    Raises:
        ValueError: If an assignment has no ``=`` or an empty path.
    """
    overrides: list[Override] = []
    for assignment in assignments:
        path, sep, value = assignment.partition("=")
        if not sep or not path:
            raise ValueError(f"Expected PATH=VALUE, got {assignment!r}")
        overrides.append(Override(path=path, value=value))
    return overrides
