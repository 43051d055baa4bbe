"""Workspace membership lookups and role gates.

Roles are checked by set membership. OWNER and ADMIN are interchangeable for
most gates, but OWNER_ONLY gates (workspace deletion, role changes) are not
satisfied by ADMIN, so there is no ordinal comparison here.
"""

import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from taskboard.errors import AuthorizationError
from taskboard.models.workspace import Role, WorkspaceMember

logger = logging.getLogger(__name__)

ANY_ROLE = frozenset({Role.OWNER, Role.ADMIN, Role.MEMBER})
OWNER_OR_ADMIN = frozenset({Role.OWNER, Role.ADMIN})
OWNER_ONLY = frozenset({Role.OWNER})


def resolve(db: Session, user_id: str, workspace_id: str) -> Optional[WorkspaceMember]:
    return (
        db.query(WorkspaceMember)
        .filter(WorkspaceMember.workspace_id == workspace_id, WorkspaceMember.user_id == user_id)
        .first()
    )


def require_role(db: Session, user_id: str, workspace_id: str, allowed_roles: Iterable[Role],
                 message: str = "You do not have permission to perform this action in this workspace") -> WorkspaceMember:
    membership = resolve(db, user_id, workspace_id)
    if membership is None or membership.role not in allowed_roles:
        logger.info("Denied user %s on workspace %s (role=%s)", user_id, workspace_id,
                    membership.role.value if membership else None)
        raise AuthorizationError(message)
    return membership


def require_member(db: Session, user_id: str, workspace_id: str,
                   message: str = "You are not a member of this workspace") -> WorkspaceMember:
    return require_role(db, user_id, workspace_id, ANY_ROLE, message)


def is_elevated(membership: Optional[WorkspaceMember]) -> bool:
    return membership is not None and membership.role in OWNER_OR_ADMIN
