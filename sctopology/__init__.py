"""sctopology: declarative ServiceControl topology builder."""

__version__ = "0.1.0"
