"""Constants for the Enlighten cloud API and the local gateway."""

from __future__ import annotations

# Cloud service
DEFAULT_BASE_URL = "https://api.enphaseenergy.com"
DEFAULT_REDIRECT_URI = "https://api.enphaseenergy.com/oauth/redirect_uri"
DEFAULT_TIMEOUT = 30

TOKEN_PATH = "/oauth/token"
SYSTEMS_PATH = "/api/v4/systems"
SYSTEM_SUMMARY_PATH = "/api/v4/systems/{system_id}/summary"
SYSTEM_SUMMARY_SIZE = "100"
SYSTEM_ENERGY_LIFETIME_PATH = "/api/v4/systems/{system_id}/energy_lifetime"
SYSTEM_PRODUCTION_MICRO_PATH = "/api/v4/systems/{system_id}/telemetry/production_micro"

GRANT_AUTHORIZATION_CODE = "authorization_code"
GRANT_REFRESH_TOKEN = "refresh_token"

# Wire format for date-only query parameters and fields
DATE_FORMAT = "%Y-%m-%d"

# Local gateway, relative to its base URL
GATEWAY_HOME_PATH = "home.json"
GATEWAY_INFO_PATH = "info.xml"
GATEWAY_INVENTORY_PATH = "inventory.json"
GATEWAY_INVERTERS_PATH = "api/v1/production/inverters"
GATEWAY_PRODUCTION_PATH = "production.json"

# Environment variables read by pyenlighten.config
ENV_API_KEY = "ENPHASE_API_KEY"
ENV_CLIENT_ID = "ENPHASE_CLIENT_ID"
ENV_CLIENT_SECRET = "ENPHASE_CLIENT_SECRET"
ENV_OAUTH_CODE = "ENPHASE_OAUTH_CODE"
ENV_ACCESS_TOKEN = "ENPHASE_ACCESS_TOKEN"
ENV_REFRESH_TOKEN = "ENPHASE_REFRESH_TOKEN"
ENV_GATEWAY_URL = "ENVOY_URL"
ENV_GATEWAY_USERNAME = "ENVOY_USERNAME"
ENV_GATEWAY_PASSWORD = "ENVOY_PASSWORD"
