"""
Basic Usage Example: Logger Configuration Schema

This example demonstrates the core confkit workflow:
1. Declare a schema of field-spec literals with nested sections
2. Route a logger severity to a global default via a fallback link
3. Stamp out independent instances and update them from plain dicts
4. Export the tree to a Pydantic model and a Polars field listing
"""

from confkit import Schema, ValidationError

SEVERITY_LEVELS = {"trace": 0, "debug": 1, "info": 2, "warn": 3, "error": 4, "off": 5}


def severity_to_number(severity_name):
    return SEVERITY_LEVELS.get(severity_name)


# Define the configuration schema
config_schema = Schema(
    {
        # Mandatory field with an explicit value, type inferred as string
        "version": ("Configuration format version", {"value": "1.1.0", "readonly": True}),
        # Default value in the first position
        "enabled": (True, "Whether logging is enabled"),
        # Optional field: no default, type given explicitly
        "tag": ("Free-form deployment tag", {"type": "string", "maxlen": 32}),
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
                            "Default logger severity level",
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
        "description": "Logging configuration",
        "fallback": {"logger.default.severity": "global.severity"},
    },
)


def main() -> None:
    """Demonstrate schema declaration, fallbacks, instancing and export."""

    # 1. Fallback: the logger severity follows the global one until overridden
    print(f"[OK] logger.default.severity = {config_schema.get('logger.default.severity').value}")
    config_schema({"global": {"severity": "error"}})
    print(f"[OK] after global update      = {config_schema.get('logger.default.severity').value}")

    # 2. Instances are independent copies with their own fallback links
    Config = config_schema.create_class()
    staging = Config.new({"tag": "staging", "logger": {"default": {"severity": "debug"}}})
    production = Config.new({"tag": "production"})
    print(f"[OK] staging:    {staging.to_dict()}")
    print(f"[OK] production: {production.to_dict()}")

    # 3. Validation errors list every violated rule and leave the value untouched
    try:
        staging({"tag": "x" * 64})
    except ValidationError as exc:
        print(f"[OK] Rejected update:\n{exc}")
    print(f"[OK] staging tag unchanged: {staging.tag.value}")

    # 4. Export
    ConfigModel = production.to_pydantic("LoggingConfig")
    print(f"[OK] Generated Pydantic model: {ConfigModel(tag='qa').model_dump()}")
    print(production.to_frame())

    print("\n[SUCCESS] Schema declared, instanced and exported!")


if __name__ == "__main__":
    main()
