"""
Hook callbacks for customhook.

The hypervisor manager calls a sidecar hook at fixed points of a VM's
lifecycle. This sidecar registers for OnDefineDomain and rewrites the domain
XML from the VM instance's ``custom.kubevirt.io/`` annotations.

Example usage:
    from customhook.hooks import HookService, OnDefineDomainParams

    service = HookService(version="v1alpha2")
    result = service.on_define_domain(
        OnDefineDomainParams(vmi=vmi_json, domain_xml=domain_xml),
    )
"""

from customhook.hooks.events import (
    HookPoint,
    HookPointName,
    HookVersion,
    InfoResult,
    OnDefineDomainParams,
    OnDefineDomainResult,
)
from customhook.hooks.service import HookService, UnsupportedCallbackError

__all__ = [
    "HookPoint",
    "HookPointName",
    "HookService",
    "HookVersion",
    "InfoResult",
    "OnDefineDomainParams",
    "OnDefineDomainResult",
    "UnsupportedCallbackError",
]
