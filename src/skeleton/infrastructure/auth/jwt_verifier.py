"""
JWT verification infrastructure for Skeleton.

Handles JWT token validation and scope authorization across one or
more accepted issuers.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import jwt

from skeleton.config.settings import JWTAuthConfig
from skeleton.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    TokenExpiredError,
    TokenInvalidError,
)

logger = logging.getLogger(__name__)


class JWTVerifier:
    """
    JWT token verifier for a single issuer.

    Attributes:
        config: Issuer configuration
    """

    def __init__(self, config: JWTAuthConfig):
        """
        Initialize JWT verifier.

        Args:
            config: Issuer configuration
        """
        self.config = config
        self._jwks_client: Optional[jwt.PyJWKClient] = None
        if config.jwks_uri:
            self._jwks_client = jwt.PyJWKClient(config.jwks_uri)

    def _signing_key(self, token: str):
        if self._jwks_client is not None:
            try:
                return self._jwks_client.get_signing_key_from_jwt(token).key
            except jwt.PyJWKClientError as e:
                raise TokenInvalidError(f"invalid token: {e}") from e
        return self.config.secret

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify JWT token and return its claims.

        Checks signature, expiry, audience and issuer.

        Args:
            token: JWT token string

        Returns:
            Decoded claims

        Raises:
            TokenExpiredError: If token is expired
            TokenInvalidError: If token is invalid
        """
        try:
            return jwt.decode(
                token,
                self._signing_key(token),
                algorithms=[self.config.algorithm],
                audience=self.config.audience,
                issuer=self.config.issuer,
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError() from None
        except jwt.InvalidTokenError as e:
            raise TokenInvalidError(f"invalid token: {e}") from e

    def scopes(self, claims: Dict[str, Any]) -> List[str]:
        """
        Extract scopes from the configured roles claim.

        Accepts a space-delimited string or a list.
        """
        value = claims.get(self.config.roles_claim)
        if isinstance(value, str):
            return value.split()
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value]
        return []

    def subject(self, claims: Dict[str, Any]) -> Optional[str]:
        value = claims.get(self.config.username_claim)
        return str(value) if value is not None else None


class MultiTokenVerifier:
    """
    Accepts tokens from any of several issuers.

    A token is authenticated by the first verifier that validates it,
    then must carry at least one of the scopes the route requires.
    """

    def __init__(self, verifiers: Sequence[JWTVerifier]):
        if not verifiers:
            raise ConfigurationError("at least one enabled jwt auth config is required")
        self.verifiers = list(verifiers)

    @classmethod
    def from_configs(
        cls, configs: Sequence[JWTAuthConfig]
    ) -> Optional["MultiTokenVerifier"]:
        """
        Build a verifier from configuration.

        Args:
            configs: Issuer configurations

        Returns:
            MultiTokenVerifier, or None if no config is enabled

        Raises:
            ConfigurationError: If a verifier cannot be constructed
        """
        enabled = [c for c in configs if c.enabled]
        if not enabled:
            return None

        try:
            verifiers = [JWTVerifier(c) for c in enabled]
        except jwt.PyJWTError as e:
            raise ConfigurationError(f"failed to initialize auth middleware: {e}") from e

        return cls(verifiers)

    def authenticate(
        self, token: str, required_scopes: Sequence[str]
    ) -> Dict[str, Any]:
        """
        Authenticate a token and check it carries a required scope.

        Args:
            token: Bearer token
            required_scopes: Scopes accepted by the route (any one suffices)

        Returns:
            Decoded claims

        Raises:
            AuthenticationError: If no issuer accepts the token
            AuthorizationError: If the token lacks every required scope
        """
        last_error: AuthenticationError = TokenInvalidError()

        for verifier in self.verifiers:
            try:
                claims = verifier.verify_token(token)
            except AuthenticationError as e:
                last_error = e
                continue

            subject = verifier.subject(claims)
            if required_scopes and not set(verifier.scopes(claims)) & set(required_scopes):
                raise AuthorizationError(
                    "not authorized: missing required scope",
                    subject=subject,
                    required_scopes=list(required_scopes),
                )

            logger.debug(
                "token authenticated",
                extra={"fields": {"subject": subject, "issuer": verifier.config.issuer}},
            )
            return claims

        raise last_error
