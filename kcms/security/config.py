"""Security configuration and middleware."""

from flask import abort, request

# Largest accepted request body (JSON payloads and form posts)
MAX_REQUEST_BYTES = 1024 * 1024


def configure_security_headers(app):
    """Configure security headers."""

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses."""
        # Prevent MIME type sniffing
        response.headers['X-Content-Type-Options'] = 'nosniff'

        # Prevent clickjacking
        response.headers['X-Frame-Options'] = 'DENY'

        response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'

        csp_directives = [
            "default-src 'self'",
            "img-src 'self' data:",
            "connect-src 'self'",
            "frame-ancestors 'none'",
            "base-uri 'self'",
            "form-action 'self'"
        ]
        response.headers['Content-Security-Policy'] = "; ".join(csp_directives)

        # HSTS for HTTPS (only add if using HTTPS)
        if request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response

    return app


def configure_secure_session(app):
    """Configure secure session settings."""
    production = not (app.debug or app.testing)
    app.config.update(
        SESSION_COOKIE_SECURE=app.config.get('SESSION_COOKIE_SECURE', True) and production,
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE='Lax',
        PERMANENT_SESSION_LIFETIME=7200,  # 2 hours
    )

    app.config.update(
        WTF_CSRF_TIME_LIMIT=3600,
        WTF_CSRF_SSL_STRICT=production,
    )

    return app


def validate_input_length(app):
    """Middleware to validate request payload size."""
    @app.before_request
    def limit_request_size():
        if request.content_length and request.content_length > MAX_REQUEST_BYTES:
            abort(413)

    return app


def auth_rate_limit():
    """Rate limit for authentication endpoints."""
    return "5 per minute"


__all__ = [
    'configure_security_headers',
    'configure_secure_session',
    'validate_input_length',
    'auth_rate_limit',
]
