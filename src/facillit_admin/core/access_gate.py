"""Administrator access gate.

Every protected request passes through AccessGate.check():

    CHECKING -> ALLOWED   profile.is_admin is exactly True
    CHECKING -> DENIED    no identity (plain redirect to the entry route)
    CHECKING -> DENIED    not admin, missing profile or failed lookup
                          (sign-out, redirect carrying the error message)

Nothing is cached between requests and nothing is retried. A failed
lookup counts as "not admin".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from urllib.parse import quote, urlencode

import structlog

from facillit_admin.backend.client import BackendClient, BackendError
from facillit_admin.config.app_config import GateConfig

logger = structlog.get_logger(__name__)


class GateState(Enum):
    """States of a single gate check."""

    CHECKING = auto()
    ALLOWED = auto()
    DENIED = auto()


@dataclass
class GateDecision:
    """Outcome of a gate check."""

    state: GateState
    user_id: str | None = None
    redirect_to: str | None = None
    signed_out: bool = False

    @property
    def allowed(self) -> bool:
        return self.state is GateState.ALLOWED


class AccessDeniedError(Exception):
    """Raised by the web layer when the gate denies a request."""

    def __init__(self, decision: GateDecision):
        self.decision = decision
        super().__init__(f"Access denied, redirecting to {decision.redirect_to}")


def denied_redirect(config: GateConfig) -> str:
    """Entry route carrying the access-denied message."""
    return f"{config.entry_route}?{urlencode({'error': config.denied_message}, quote_via=quote)}"


class AccessGate:
    """Checks that the caller is an administrator."""

    def __init__(self, backend: BackendClient, config: GateConfig | None = None):
        self.backend = backend
        self.config = config or GateConfig()
        self.state = GateState.CHECKING

    def _deny(self, redirect_to: str, user_id: str | None = None, signed_out: bool = False) -> GateDecision:
        self.state = GateState.DENIED
        return GateDecision(
            state=self.state,
            user_id=user_id,
            redirect_to=redirect_to,
            signed_out=signed_out,
        )

    def _fetch_admin_flag(self, user_id: str, access_token: str) -> object:
        """Read profiles.is_admin; None when the row is missing or the read fails."""
        try:
            profile = self.backend.select_one(
                "profiles",
                "is_admin",
                eq={"id": user_id},
                access_token=access_token,
            )
        except BackendError as e:
            logger.warning("gate_profile_lookup_failed", user_id=user_id, error=e.message)
            return None
        if profile is None:
            return None
        return profile.get("is_admin")

    def _force_sign_out(self, access_token: str, user_id: str) -> bool:
        try:
            self.backend.sign_out(access_token)
        except BackendError as e:
            logger.warning("gate_sign_out_failed", user_id=user_id, error=e.message)
            return False
        return True

    def check(self, access_token: str | None) -> GateDecision:
        """Run the check for one request.

        Args:
            access_token: Bearer token of the caller (None when absent)

        Returns:
            GateDecision. When denied, `redirect_to` says where to send the caller.
        """
        self.state = GateState.CHECKING

        if not access_token:
            logger.info("gate_denied", reason="no_token")
            return self._deny(self.config.entry_route)

        try:
            user = self.backend.get_user(access_token)
        except BackendError:
            user = None

        if user is None:
            logger.info("gate_denied", reason="no_identity")
            return self._deny(self.config.entry_route)

        is_admin = self._fetch_admin_flag(user.id, access_token)

        if is_admin is True:
            self.state = GateState.ALLOWED
            logger.debug("gate_allowed", user_id=user.id)
            return GateDecision(state=self.state, user_id=user.id)

        signed_out = self._force_sign_out(access_token, user.id)
        logger.info("gate_denied", reason="not_admin", user_id=user.id, signed_out=signed_out)
        return self._deny(denied_redirect(self.config), user_id=user.id, signed_out=signed_out)
