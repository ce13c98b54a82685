"""Builders shared by the test modules."""
from app.core.auth import roles
from app.core.schemas.auth import Principal


def make_principal(*role_names: str, user_id: str = "user-1", permissions=None) -> Principal:
    """Principal holding the permissions the seeded system roles would grant."""
    if permissions is None:
        permissions = sorted(
            f"{resource}:{action}"
            for (resource, action), holders in roles.SYSTEM_PERMISSIONS.items()
            if holders & set(role_names)
        )
    return Principal(
        user_id=user_id,
        email=f"{user_id}@plant.example.com",
        name=user_id.replace("-", " ").title(),
        role_names=list(role_names),
        permissions=permissions,
    )
