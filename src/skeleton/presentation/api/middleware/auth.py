"""
Authentication dependency for bearer token validation.
"""

from typing import Any, Callable, Dict, Optional, Sequence

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from skeleton.domain.exceptions import AuthenticationError
from skeleton.presentation.api.dependencies import get_container

# Bearer token security scheme; a missing header is reported by require_scopes
security = HTTPBearer(auto_error=False)


def require_scopes(scopes: Sequence[str]) -> Callable[..., Any]:
    """
    Build a dependency that requires a token carrying any of `scopes`.

    The dependency does nothing when no verifier is configured.

    Args:
        scopes: Accepted scopes

    Returns:
        FastAPI dependency returning the token claims (empty when auth
        is disabled)
    """
    required = list(scopes)

    # plain def: FastAPI runs it in the threadpool, off the event loop
    def dependency(
        request: Request,
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    ) -> Dict[str, Any]:
        verifier = get_container(request).auth_verifier
        if verifier is None:
            return {}

        if credentials is None or not credentials.credentials:
            raise AuthenticationError("missing bearer token")

        claims = verifier.authenticate(credentials.credentials, required)
        request.state.claims = claims
        return claims

    return dependency
