"""Business logic services."""

from .auth_service import (
    authenticate_user,
    create_access_token,
    create_user,
    get_current_user,
    get_user_by_email,
)
from .permission_service import (
    PermissionService,
    ProjectRole,
    get_permission_service,
    get_project_role,
    role_of,
)
from .section_filter import (
    ItemQueryFilters,
    apply_filters,
    build_section_items_query,
    parse_section_filter,
)

__all__ = [
    # Auth
    "authenticate_user",
    "create_access_token",
    "create_user",
    "get_current_user",
    "get_user_by_email",
    # Permissions
    "PermissionService",
    "ProjectRole",
    "get_permission_service",
    "get_project_role",
    "role_of",
    # Section filters
    "ItemQueryFilters",
    "apply_filters",
    "build_section_items_query",
    "parse_section_filter",
]
