"""OpenAPI customization.

Advertises the quota credential header as an API-key security scheme.
Health and token endpoints are marked as not requiring it.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_EXEMPT_PREFIXES = ("/health", "/token")


def apply_openapi_customizations(app: FastAPI, credential_header: str) -> None:
    """Patch FastAPI's OpenAPI generation to add the credential scheme and tags."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "QuotaCredential",
            {
                "type": "apiKey",
                "in": "header",
                "name": credential_header,
                "description": (
                    "Optional signed credential carrying its own quota. "
                    "Without it, requests are counted per client address."
                ),
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {"name": "Protected", "description": "Endpoints guarded by the request quota."},
            {"name": "Credentials", "description": "Issue and inspect quota credentials."},
            {"name": "Health", "description": "Liveness and readiness checks."},
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            exempt = path.startswith(_EXEMPT_PREFIXES)
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = [] if exempt else [{"QuotaCredential": []}]

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
