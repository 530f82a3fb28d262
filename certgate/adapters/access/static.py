"""
Static access control adapter - Implements AccessControl protocol.

Principals and their roles come from settings. Passwords are stored as
bcrypt hashes; unknown usernames are checked against a dummy hash so
that authentication takes the same time whether or not the user exists.
"""

import logging
from collections.abc import Iterable, Mapping

import bcrypt

from certgate.domain.exceptions import NotAuthorized
from certgate.domain.ports import Role

logger = logging.getLogger(__name__)

_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10))


class StaticAccessControl:
    """
    Implements AccessControl protocol from a fixed principal table.

    Uses structural subtyping - no explicit inheritance from Protocol.

    Role assignment:
    - ADMIN: identities listed in admins
    - TRANSPORT: the single transport identity
    - REQUESTER: identities listed in requesters, or every known
      principal when requesters is empty
    """

    def __init__(
        self,
        principals: Mapping[str, str],
        admins: Iterable[str] = (),
        requesters: Iterable[str] = (),
        transport: str = "",
    ) -> None:
        """
        Args:
            principals: username -> bcrypt hash
            admins: usernames holding ADMIN
            requesters: usernames holding REQUESTER (empty means all principals)
            transport: username of the verification transport
        """
        self._principals = dict(principals)
        self._admins = frozenset(admins)
        self._requesters = frozenset(requesters)
        self._transport = transport

    def authenticate(self, username: str, password: str) -> bool:
        stored = self._principals.get(username)
        stored_hash = stored.encode() if stored is not None else _DUMMY_BCRYPT_HASH
        try:
            valid = bcrypt.checkpw(password.encode(), stored_hash)
        except ValueError:
            logger.error("Invalid bcrypt hash configured for principal %s", username)
            return False
        return stored is not None and valid

    def has_role(self, identity: str, role: Role) -> bool:
        if role is Role.ADMIN:
            return identity in self._admins
        if role is Role.TRANSPORT:
            return bool(self._transport) and identity == self._transport
        if self._requesters:
            return identity in self._requesters
        return identity in self._principals

    def require(self, identity: str, role: Role) -> None:
        if not self.has_role(identity, role):
            logger.warning("Access denied: identity=%s role=%s", identity, role.value)
            raise NotAuthorized(identity, role.value)
