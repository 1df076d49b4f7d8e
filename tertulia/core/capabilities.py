from enum import Enum


class Capability(str, Enum):
    """Named permissions a user may hold, stored as rows of UserCapability."""

    POST = "post"
    COMMENT = "comment"
    REACT = "react"
    UPDATE_USERNAME = "update_username"
    UPDATE_AVATAR = "update_avatar"


# Granted to every account at registration
DEFAULT_CAPABILITIES = tuple(Capability)


# Roles
ROLE_USER = "user"
ROLE_MOD = "mod"
ROLE_ADMIN = "admin"
MODERATOR_ROLES = (ROLE_MOD, ROLE_ADMIN)
