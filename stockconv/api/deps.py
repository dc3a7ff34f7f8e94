from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from stockconv.core.security import decode_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)

ROLE_PERMISSIONS: dict[str, set[str]] = {
    "admin": {"inventory:manage", "inventory:view", "conversion:execute"},
    "depot_operator": {"inventory:view", "conversion:execute"},
    "viewer": {"inventory:view"},
}


@dataclass(frozen=True)
class Operator:
    username: str
    role: str
    # Set for operators bound to a single depot; None means every depot.
    depot_id: int | None = None


def get_current_operator(request: Request, token: str | None = Depends(oauth2_scheme)) -> Operator:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid authentication credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    raw_token = (token or "").strip().strip("\"'").strip()
    if not raw_token:
        raw_token = (request.headers.get("x-access-token") or "").strip()
    if not raw_token:
        raise credentials_exception

    try:
        payload = decode_token(raw_token)
    except JWTError as exc:
        raise credentials_exception from exc

    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or payload.get("type") != "access" or role not in ROLE_PERMISSIONS:
        raise credentials_exception

    depot_id = payload.get("depot_id")
    try:
        depot_id = int(depot_id) if depot_id is not None else None
    except (TypeError, ValueError) as exc:
        raise credentials_exception from exc
    return Operator(username=str(subject), role=role, depot_id=depot_id)


def require_permission(permission: str):
    def checker(current_operator: Operator = Depends(get_current_operator)) -> Operator:
        permissions = ROLE_PERMISSIONS.get(current_operator.role, set())
        if permission not in permissions:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission required: {permission}",
            )
        return current_operator

    return checker


def enforce_depot_scope(current_operator: Operator, depot_id: int | None) -> int | None:
    """Return the depot the operator may act on, rejecting cross-depot access."""
    if current_operator.depot_id is None:
        return depot_id
    if depot_id is not None and depot_id != current_operator.depot_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cross-depot access is not allowed")
    return current_operator.depot_id
