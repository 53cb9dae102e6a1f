"""Declarative API test manifests: parsing, dependency planning, assertions, data flow and events."""

__version__ = "0.1.0"