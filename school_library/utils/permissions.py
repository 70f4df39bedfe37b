SUPER_ADMIN = "super_admin"

LIBRARY_READ = "library:read"
LIBRARY_CREATE = "library:create"
LIBRARY_UPDATE = "library:update"
LIBRARY_DELETE = "library:delete"
LIBRARY_MANAGE = "library:manage"

ROLE_PERMISSIONS = {
    "admin": {LIBRARY_MANAGE},
    "librarian": {LIBRARY_MANAGE},
    "teacher": {LIBRARY_READ},
    "student": {LIBRARY_READ},
}


def permissions_for(role: str) -> set:
    return ROLE_PERMISSIONS.get(role, set())
