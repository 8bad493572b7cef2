from typing import Any

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from pydantic import BaseModel, Field

from sessiongate.config import Config


def set_custom_openapi(app: FastAPI, config: Config) -> None:
    def custom_openapi() -> dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title="SessionGate API",
            version="0.1.0",
            summary="Opaque bearer session tokens with hashed secrets",
            routes=app.routes,
        )

        # Add security schemes
        openapi_schema.setdefault("components", {})["securitySchemes"] = {
            "BearerAuth": {
                "type": "http",
                "scheme": "bearer",
                "description": "Session token `<id>.<secret>` (preferred)",
            },
            "SessionCookie": {
                "type": "apiKey",
                "in": "cookie",
                "name": config.cookie_name,
                "description": "Session token stored in cookie",
            },
        }

        openapi_schema["security"] = [
            {"BearerAuth": []},
            {"SessionCookie": []},
        ]

        # Health check is public
        health = openapi_schema["paths"].get("/health", {})
        for operation in health.values():
            operation["security"] = []

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi  # type: ignore[method-assign]


class ErrorResponse(BaseModel):
    """Standard error response format."""

    message: str = Field(..., description="Human-readable error message")
    type: str = Field(..., description="Machine-readable error type")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"message": "Not authenticated", "type": "authentication_error"},
                {"message": "Service temporarily unavailable, retry later.", "type": "service_unavailable"},
            ]
        }
    }
