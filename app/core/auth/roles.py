"""Well-known role names. Role *identities* (which user acts for a role) live in config.ROLE_IDENTITIES."""

ADMIN = "admin"
PLANT_HEAD = "plant_head"
PRODUCTION_MANAGER = "production_manager"

SYSTEM_ROLES = {
    ADMIN: "Full administrative access",
    PLANT_HEAD: "Reviews and approves daily production plans",
    PRODUCTION_MANAGER: "Prepares production plans and daily reports",
}

# (resource, action) pairs seeded by /rbac/init, with the system roles that receive them
SYSTEM_PERMISSIONS = {
    ("production", "read"): {ADMIN, PLANT_HEAD, PRODUCTION_MANAGER},
    ("production", "create"): {ADMIN, PLANT_HEAD, PRODUCTION_MANAGER},
    ("production", "update"): {ADMIN, PLANT_HEAD, PRODUCTION_MANAGER},
    ("production", "delete"): {ADMIN},
    ("production", "approve"): {ADMIN, PLANT_HEAD},
    ("project", "create"): {ADMIN, PLANT_HEAD, PRODUCTION_MANAGER},
    ("task", "create"): {ADMIN, PLANT_HEAD, PRODUCTION_MANAGER},
    ("user", "manage"): {ADMIN},
}
