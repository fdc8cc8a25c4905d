"""
Hook service - the sidecar's callbacks without any RPC binding.

A transport (gRPC over a unix socket in a real deployment) decodes requests
into the parameter dataclasses, calls the service, and encodes the results.
Errors propagate to the transport, which reports them as request failures.
"""

from __future__ import annotations

import logging as _logging

import customhook.config as config
import customhook.constants as constants
import customhook.domain as domain
import customhook.hooks.events as events
import customhook.overrides as overrides

_logger = _logging.getLogger(__name__)


class UnsupportedCallbackError(Exception):
    """A callback was called that the served hook API version does not define."""

    def __init__(self, hook_point: events.HookPointName, version: events.HookVersion) -> None:
        self.hook_point = hook_point
        self.version = version
        super().__init__(f"{hook_point.value} is not defined in hook API {version.value}")


class HookService:
    """
    Implements the Info, OnDefineDomain and PreCloudInitIso callbacks.

    The service holds only immutable settings; each OnDefineDomain call
    builds and discards its own document tree.
    """

    def __init__(
        self,
        *,
        name: str = constants.HOOK_NAME,
        version: str = constants.DEFAULT_HOOK_VERSION,
        annotation_prefix: str = constants.DEFAULT_ANNOTATION_PREFIX,
        sort_overrides: bool = False,
        indent: bool = False,
        logger: _logging.Logger | None = None,
    ) -> None:
        """
        Initialize the hook service.

        Args:
            name: Hook name reported by Info.
            version: Callback API version reported by Info.
            annotation_prefix: Annotation prefix selecting overrides.
            sort_overrides: Apply overrides sorted by path.
            indent: Pretty-print rewritten domains.
            logger: Logger for diagnostics. Defaults to this module's logger.

        Raises:
            ValueError: If ``version`` is not supported.
        """
        self._name = name
        self._version = events.HookVersion.parse(version)
        self._annotation_prefix = annotation_prefix
        self._sort_overrides = sort_overrides
        self._logger = logger or _logger
        self._merger = domain.PathMerger(logger=self._logger, indent=indent)

    @classmethod
    def from_settings(cls, settings: config.Settings) -> HookService:
        """Create a HookService from loaded settings."""
        return cls(
            name=settings.hook.name,
            version=settings.hook.version,
            annotation_prefix=settings.hook.annotation_prefix,
            sort_overrides=settings.merge.sort_overrides,
            indent=settings.merge.indent,
        )

    @property
    def version(self) -> events.HookVersion:
        return self._version

    def info(self) -> events.InfoResult:
        """Describe the hook: name, served version, and hook points."""
        self._logger.info("Hook's Info method has been called")
        return events.InfoResult(
            name=self._name,
            versions=[self._version.value],
            hook_points=[
                events.HookPoint(name=events.HookPointName.ON_DEFINE_DOMAIN, priority=0),
            ],
        )

    def on_define_domain(
        self,
        params: events.OnDefineDomainParams,
    ) -> events.OnDefineDomainResult:
        """
        Rewrite the domain XML using the VM instance's override annotations.

        Raises:
            InvalidVMIError: If the VM instance cannot be decoded.
            MergeError: If the merge fails fatally (parse, path or serialize).
        """
        self._logger.info("Hook's OnDefineDomain callback method has been called")

        vmi = overrides.load_vmi(params.vmi)
        requested = overrides.extract_overrides(
            vmi.annotations,
            self._annotation_prefix,
            sort=self._sort_overrides,
        )
        self._logger.debug(
            "Found %d override(s) on VMI %s/%s",
            len(requested),
            vmi.metadata.namespace,
            vmi.metadata.name,
        )

        merged = self._merger.merge(params.domain_xml, requested)
        self._logger.info("Successfully updated original domain spec with requested annotations")
        return events.OnDefineDomainResult(domain_xml=merged)

    def pre_cloud_init_iso(self, cloud_init_data: bytes) -> bytes:
        """
        Return cloud-init data unchanged; this hook does not modify it.

        Raises:
            UnsupportedCallbackError: If the served API version has no
                PreCloudInitIso callback.
        """
        if not self._version.supports_pre_cloud_init_iso:
            raise UnsupportedCallbackError(events.HookPointName.PRE_CLOUD_INIT_ISO, self._version)
        return cloud_init_data
