# middleware/security.py
"""
Security headers for site responses
"""

from typing import Dict, Optional

from flask import current_app


def build_csp(policy: Dict[str, str]) -> str:
    return '; '.join(f"{directive} {sources}" for directive, sources in policy.items())


def security_headers(response, headers: Optional[Dict[str, str]] = None):
    """Add the configured security headers to a response"""
    configured = headers if headers is not None else current_app.config.get('SECURITY_HEADERS', {})
    for name, value in configured.items():
        response.headers.setdefault(name, value)

    policy = current_app.config.get('CSP_POLICY')
    if policy and 'Content-Security-Policy' not in response.headers:
        response.headers['Content-Security-Policy'] = build_csp(policy)

    return response
