from fastapi import Depends, HTTPException, status

from installations_api.auth import require_user

WRITE_ROLES = ("admin", "installer")


def require_roles(*roles: str):
    def _check(user=Depends(require_user)):
        user_roles = set(user.get("roles") or [])
        if not user_roles.intersection(set(roles)):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing required role: {', '.join(roles)}",
            )
        return user

    return _check
