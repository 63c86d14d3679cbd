"""
Auth Package

Demo login for the mapping service:
- auth: login routes and the bearer-token dependency
- jwt_handler: token signing and verification
"""

__all__ = ["auth", "jwt_handler"]
