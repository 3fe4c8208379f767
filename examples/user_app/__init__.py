"""
User sample application showcasing txhooks lifecycle hooks.
"""

from .demo import bootstrap_client, register_user, run_demo
from .models import USERS_DDL, User, read_users, user_columns, user_primary_keys

__all__ = [
    "USERS_DDL",
    "User",
    "bootstrap_client",
    "read_users",
    "register_user",
    "run_demo",
    "user_columns",
    "user_primary_keys",
]
