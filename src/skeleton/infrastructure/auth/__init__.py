"""
Authentication infrastructure for Skeleton.
"""

from skeleton.infrastructure.auth.jwt_verifier import JWTVerifier, MultiTokenVerifier

__all__ = ["JWTVerifier", "MultiTokenVerifier"]
