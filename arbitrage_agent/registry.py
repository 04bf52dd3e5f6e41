"""Whitelist of assets eligible for scanning and trading."""

from typing import Dict, Iterable, List, Optional

from .audit import AuditEventType, AuditLog
from .exceptions import TokenNotApproved, ValidationError
from .state import ConfigStore
from .utils import get_logger

logger = get_logger(__name__)


class TokenRegistry:
    def __init__(
        self,
        config: ConfigStore,
        audit: AuditLog,
        initial: Optional[Iterable[str]] = None,
    ):
        self.config = config
        self.audit = audit
        # Assets absent from the map are not approved
        self._approved: Dict[str, bool] = {token: True for token in initial or ()}

    def is_approved(self, token: str) -> bool:
        return self._approved.get(token, False)

    def require_approved(self, *tokens: str) -> None:
        for token in tokens:
            if not self.is_approved(token):
                logger.warning(f"Rejected: token {token} is not whitelisted")
                raise TokenNotApproved(f"Token {token} is not approved", token=token)

    def approve_token(self, caller: str, token: str, approved: bool) -> None:
        self.config.require_owner(caller, "approve_token")
        if not token:
            raise ValidationError("token must be a non-empty identifier")

        self._approved[token] = bool(approved)
        logger.info(f"Token {token} {'approved' if approved else 'revoked'}")
        self.audit.emit(AuditEventType.TOKEN_APPROVAL, token=token, approved=bool(approved))

    def approved_tokens(self) -> List[str]:
        return [token for token, ok in self._approved.items() if ok]
