# crmhub/config/security.py
# HTTP security configuration: response headers and CORS

from typing import Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from crmhub.config.settings import Settings


class SecurityConfig:
    """Security configuration for the application"""

    # Sent on every response
    SECURITY_HEADERS = {
        'X-Content-Type-Options': 'nosniff',
        'X-Frame-Options': 'DENY',
        'Referrer-Policy': 'strict-origin-when-cross-origin',
        'X-XSS-Protection': '1; mode=block',
    }

    # Only sent when running in production
    PRODUCTION_HEADERS = {
        'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
        'Content-Security-Policy': "default-src 'self'; script-src 'self'; style-src 'self' 'unsafe-inline'",
    }

    @classmethod
    def headers_for(cls, settings: Settings) -> Dict[str, str]:
        headers = dict(cls.SECURITY_HEADERS)
        if settings.is_production:
            headers.update(cls.PRODUCTION_HEADERS)
        return headers


def setup_security_middleware(app: FastAPI, settings: Settings) -> None:
    """Install CORS and security-header middleware on the app."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    headers = SecurityConfig.headers_for(settings)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in headers.items():
            response.headers.setdefault(name, value)
        return response
