"""Resource attributes attached to every span of the process."""

from __future__ import annotations

import datetime
import logging
import socket
from typing import Any, Dict, List, Optional

from opentelemetry.resource.detector.containerid import ContainerResourceDetector
from opentelemetry.sdk.resources import (
    SERVICE_NAME,
    SERVICE_VERSION,
    OsResourceDetector,
    OTELResourceDetector,
    ProcessResourceDetector,
    Resource,
    ResourceDetector,
    get_aggregated_resources,
)

logger = logging.getLogger(__name__)

DETECTOR_TIMEOUT = 5


class HostResourceDetector(ResourceDetector):
    """Detects the host name."""

    def detect(self) -> Resource:
        return Resource({"host.name": socket.gethostname()})


class WeekdayResourceDetector(ResourceDetector):
    """Tags the process with the weekday it started on."""

    def detect(self) -> Resource:
        return Resource({"Weekday": datetime.date.today().strftime("%A")})


def default_detectors() -> List[ResourceDetector]:
    return [
        ProcessResourceDetector(),
        OsResourceDetector(),
        ContainerResourceDetector(),
        HostResourceDetector(),
        WeekdayResourceDetector(),
    ]


def build_resource(
    service_name: str,
    service_version: Optional[str] = None,
    attributes: Optional[Dict[str, Any]] = None,
    detectors: Optional[List[ResourceDetector]] = None,
) -> Resource:
    """
    Build the process resource.

    Merge order, later wins: telemetry SDK attributes, service name/version
    and ``attributes``, detector output, then ``OTEL_RESOURCE_ATTRIBUTES`` /
    ``OTEL_SERVICE_NAME`` from the environment. A failing detector is logged
    and skipped.
    """
    base: Dict[str, Any] = {SERVICE_NAME: service_name}
    if service_version:
        base[SERVICE_VERSION] = service_version
    base.update(attributes or {})

    resource = Resource.create(base)
    if detectors is None:
        detectors = default_detectors()
    if detectors:
        resource = get_aggregated_resources(detectors, initial_resource=resource, timeout=DETECTOR_TIMEOUT)
    resource = resource.merge(OTELResourceDetector().detect())
    logger.debug("Resource attributes: %s", dict(resource.attributes))
    return resource
