from typing import Awaitable, Callable

from fastapi import Depends, Header

from ..integrations.identity import IdentityVerifier, VerifiedIdentity, get_identity_verifier
from ..models.user import UserDocument
from ..services.access_control import AccessControlGate, get_access_control_gate
from ..services.exceptions import UnauthorizedError


async def require_identity(
    authorization: str = Header(default=""),
    verifier: IdentityVerifier = Depends(get_identity_verifier),
) -> VerifiedIdentity:
    if not authorization.startswith("Bearer "):
        raise UnauthorizedError()

    token = authorization[len("Bearer ") :].strip()
    if not token:
        raise UnauthorizedError()
    return await verifier.verify_token(token)


def require_role(operation: str) -> Callable[..., Awaitable[UserDocument]]:
    """Dependency factory: verified identity whose role the policy allows for ``operation``."""

    async def _dependency(
        identity: VerifiedIdentity = Depends(require_identity),
        gate: AccessControlGate = Depends(get_access_control_gate),
    ) -> UserDocument:
        return await gate.require_role(identity, operation)

    return _dependency


__all__ = ["require_identity", "require_role"]
