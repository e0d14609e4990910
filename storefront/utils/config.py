"""Storefront settings read from the environment."""

import os


class StorefrontConfig:
    """Environment-backed settings for the discovery and reservation pipeline."""

    API_BASE_URL = os.environ.get(
        "STOREFRONT_API_URL",
        "https://backend-flask-54ae.onrender.com/api"
    ).rstrip("/")
    HTTP_TIMEOUT_SECONDS = float(os.environ.get("STOREFRONT_HTTP_TIMEOUT_SECONDS", "10"))

    DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", "12"))
    SEARCH_PAGE_SIZE = int(os.environ.get("SEARCH_PAGE_SIZE", "100"))

    # Fixed delay standing in for a payment round-trip
    PAYMENT_SIMULATION_SECONDS = float(os.environ.get("PAYMENT_SIMULATION_SECONDS", "2.0"))
    PAYMENT_TOKEN_PREFIX = os.environ.get("PAYMENT_TOKEN_PREFIX", "demo")

    PLACEHOLDER_IMAGE = os.environ.get("PLACEHOLDER_IMAGE", "/placeholder.jpg")
    PLACEHOLDER_AVATAR = os.environ.get("PLACEHOLDER_AVATAR", "/placeholder-avatar.jpg")

    LOGIN_PATH = os.environ.get("LOGIN_PATH", "/login")
