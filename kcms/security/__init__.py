"""Security package for KCMS."""

from kcms.security.config import (
    auth_rate_limit,
    configure_secure_session,
    configure_security_headers,
    validate_input_length,
)

__all__ = [
    'auth_rate_limit',
    'configure_secure_session',
    'configure_security_headers',
    'validate_input_length',
]
