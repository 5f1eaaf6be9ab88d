# backend/inkmatch/core/constants.py
"""Application-wide constants."""

BRAND_NAME = "inkmatch"

API_TITLE = f"{BRAND_NAME} API"
API_DESCRIPTION = "Profile discovery for tattoo artists and studios."
API_VERSION = "1.0.0"

REQUEST_ID_HEADER = "X-Request-ID"
USER_ID_HEADER = "X-User-Id"
