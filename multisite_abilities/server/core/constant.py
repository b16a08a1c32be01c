"""Constants shared by the HTTP server."""

PROJECT_NAME = "Multisite Abilities"

API_V1_STR = "/api/v1"

API_VERSION = "0.1.0"

SCHEMA_VERSION = "v1"
