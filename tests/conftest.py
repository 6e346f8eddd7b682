"""Shared fixtures for confkit tests."""

import pytest

from confkit import Schema, TypeRegistry

SEVERITY_LEVELS = {
    "trace": 0,
    "debug": 1,
    "info": 2,
    "warn": 3,
    "error": 4,
    "off": 5,
}


def severity_to_number(severity_name):
    """Map a severity name to its numeric level."""
    return SEVERITY_LEVELS.get(severity_name)


@pytest.fixture
def severity_hook():
    """Hook turning severity names into numbers."""
    return severity_to_number


@pytest.fixture
def registry():
    """Fresh registry isolated from the module-level default."""
    return TypeRegistry()


@pytest.fixture
def simple_schema():
    """Flat schema with a mandatory, an optional and a boolean field."""
    return Schema(
        {
            "version": ("This is the schema version", {"value": "1.1.0"}),
            "enabled": (True, "This is a boolean tag"),
            "tag": ("This is an optional tag", {"type": "string"}),
        }
    )


@pytest.fixture
def nested_schema():
    """Schema with nested global and logger sections."""
    return Schema(
        {
            "version": ("This is the schema version", {"value": "1.1.0"}),
            "enabled": (True, "This is a boolean tag"),
            "tag": ("This is an optional tag", {"type": "string"}),
            "global": Schema(
                {
                    "severity": (
                        "info",
                        "Global severity level",
                        {"hook": severity_to_number, "type": "number"},
                    ),
                },
                "Global settings",
            ),
            "logger": Schema(
                {
                    "default": Schema(
                        {
                            "severity": (
                                "Logger severity level",
                                {"hook": severity_to_number, "type": "number"},
                            ),
                        },
                        "Default logger settings",
                    ),
                },
                "Logger settings",
            ),
        }
    )


@pytest.fixture
def fallback_schema():
    """Schema routing logger.default.severity to global.severity."""
    return Schema(
        {
            "global": Schema(
                {
                    "severity": (
                        "info",
                        "Global severity level",
                        {"hook": severity_to_number, "type": "number"},
                    ),
                },
                "Global settings",
            ),
            "logger": Schema(
                {
                    "default": Schema(
                        {
                            "severity": (
                                "Logger severity level",
                                {"hook": severity_to_number, "type": "number"},
                            ),
                        },
                        "Default logger settings",
                    ),
                },
                "Logger settings",
            ),
        },
        {
            "description": "Schema root",
            "fallback": {"logger.default.severity": "global.severity"},
        },
    )
