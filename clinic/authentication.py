"""
Bearer token authentication for the API.

This module defines a thin subclass of simplejwt's ``JWTAuthentication``
so the project's REST framework configuration has a stable import path
that does not pull in any view code.  Keeping it apart from the login
views avoids circular imports while DRF initialises authentication
classes.
"""
from __future__ import annotations

from rest_framework_simplejwt.authentication import JWTAuthentication


class BearerJWTAuthentication(JWTAuthentication):
    """Resolve ``Authorization: Bearer <access token>`` to an active user.

    ``authenticate`` returns ``(user, validated_token)``; the role used for
    authorisation is read from ``user.role`` so a role change takes effect
    without waiting for outstanding tokens to expire.
    """

    www_authenticate_realm = 'campuscare'
