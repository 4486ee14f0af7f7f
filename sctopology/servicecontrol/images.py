"""Registry, image names and default tags of the ServiceControl family."""

REGISTRY = "docker.io"
TAG = "6.6"

RAVENDB_IMAGE = "particular/servicecontrol-ravendb"
SERVICE_CONTROL_IMAGE = "particular/servicecontrol"
SERVICE_CONTROL_AUDIT_IMAGE = "particular/servicecontrol-audit"
SERVICE_CONTROL_MONITORING_IMAGE = "particular/servicecontrol-monitoring"

SERVICE_PULSE_REGISTRY = "docker.io"
SERVICE_PULSE_IMAGE = "particular/servicepulse"
SERVICE_PULSE_TAG = "2.0"
