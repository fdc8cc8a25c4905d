"""
Hook points, API versions, and the data the hook callbacks exchange.

These define the transport-independent shape of the sidecar's callbacks:
- HookPointName: lifecycle points the hook can register for
- HookVersion: callback API versions the sidecar implements
- HookPoint / InfoResult: what the Info callback reports
- OnDefineDomainParams / OnDefineDomainResult: the domain rewrite callback
"""

from __future__ import annotations

import dataclasses as _dataclasses
import enum as _enum
import typing as _typing


class HookPointName(_enum.Enum):
    """Lifecycle points where the hypervisor manager calls hooks."""

    ON_DEFINE_DOMAIN = "OnDefineDomain"
    """Before the domain XML is defined. Can rewrite the domain."""

    PRE_CLOUD_INIT_ISO = "PreCloudInitIso"
    """Before the cloud-init ISO is built. Can rewrite cloud-init data."""


class HookVersion(_enum.Enum):
    """Callback API versions."""

    V1ALPHA1 = "v1alpha1"
    V1ALPHA2 = "v1alpha2"

    @property
    def supports_pre_cloud_init_iso(self) -> bool:
        """Whether this version defines the PreCloudInitIso callback."""
        return self is HookVersion.V1ALPHA2

    @classmethod
    def parse(cls, value: str) -> HookVersion:
        """
        Look up a version by name.

        Raises:
            ValueError: If the version is not supported.
        """
        try:
            return cls(value)
        except ValueError:
            supported = ", ".join(v.value for v in cls)
            raise ValueError(
                f"Unsupported hook version {value!r} (supported: {supported})"
            ) from None


@_dataclasses.dataclass(frozen=True)
class HookPoint:
    """A hook point the sidecar registers for, with its priority."""

    name: HookPointName
    priority: int = 0

    def to_dict(self) -> dict[str, _typing.Any]:
        return {"name": self.name.value, "priority": self.priority}


@_dataclasses.dataclass
class InfoResult:
    """
    Result of the Info callback.

    Attributes:
        name: Hook name.
        versions: Callback API versions the hook serves.
        hook_points: Points the hook wants to be called at.
    """

    name: str
    versions: list[str]
    hook_points: list[HookPoint] = _dataclasses.field(default_factory=list)

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to JSON-serializable dict."""
        return {
            "name": self.name,
            "versions": list(self.versions),
            "hookPoints": [p.to_dict() for p in self.hook_points],
        }


@_dataclasses.dataclass
class OnDefineDomainParams:
    """
    Input of the OnDefineDomain callback.

    Attributes:
        vmi: JSON-encoded VM instance object.
        domain_xml: Domain XML about to be defined.
    """

    vmi: bytes
    domain_xml: bytes


@_dataclasses.dataclass
class OnDefineDomainResult:
    """Output of the OnDefineDomain callback: the rewritten domain XML."""

    domain_xml: bytes
