"""
Role Enumeration Module
=======================

Defines all valid roles in the system.

Roles are assigned by the backend only: self-registration may choose
PUBLIC or JOURNALIST, and only an administrator can grant MODERATOR or
ADMIN.
"""

from enum import Enum


class Role(str, Enum):
    """
    System-wide allowed roles.
    """

    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"
    JOURNALIST = "JOURNALIST"
    PUBLIC = "PUBLIC"
