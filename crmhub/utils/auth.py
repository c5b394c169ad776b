# crmhub/utils/auth.py
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from crmhub.config.settings import Settings
from crmhub.core.exceptions import AccountInactive, Unauthenticated
from crmhub.database import get_db
from crmhub.models.user import User
from crmhub.services.policy import Operation, Principal, require
from crmhub.utils.hierarchy import HierarchyManager
from crmhub.utils.security import decode_session_token


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise Unauthenticated()

    payload = decode_session_token(token, settings)
    if not payload or not payload.get("sub"):
        raise Unauthenticated()

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise Unauthenticated()

    user = db.get(User, user_id)
    if user is None:
        raise Unauthenticated()

    # Deactivation takes effect on the next request, not at token expiry
    if not user.is_active:
        raise AccountInactive("Account has been deactivated. Please contact administrator.")

    return user


def get_principal(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Principal:
    return HierarchyManager(db).principal_for(current_user)


def require_operation(operation: Operation):
    """Dependency factory enforcing the role gate for one operation"""

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        require(principal, operation)
        return principal

    return dependency
