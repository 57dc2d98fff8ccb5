"""OpenAPI customization utilities.

Enriches the generated schema with tag descriptions and documents the 429
response on every rate-limited operation. Health endpoints are exempt from
rate limiting and are left untouched.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {
        "name": "User Agents",
        "description": "Random and full-catalog access to desktop and mobile user agents.",
    },
    {
        "name": "Health",
        "description": "Liveness check with catalog sizes.",
    },
]

RATE_LIMITED_RESPONSE = {
    "description": "Too many requests from this client in the current window.",
    "headers": {
        "Retry-After": {"schema": {"type": "integer"}, "description": "Seconds to wait."},
        "X-RateLimit-Limit": {"schema": {"type": "integer"}},
        "X-RateLimit-Remaining": {"schema": {"type": "integer"}},
        "X-RateLimit-Reset": {"schema": {"type": "integer"}, "description": "Seconds until the window resets."},
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and 429 documentation."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        for tag in TAGS_METADATA:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if path.endswith("/health"):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj.setdefault("responses", {}).setdefault("429", RATE_LIMITED_RESPONSE)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
