"""Initial data: the post calendar and the "admin" account."""

import logging
import secrets
import string
from datetime import date, timedelta

from dailyposts.core.context import AppContext
from dailyposts.core.security import hash_password
from dailyposts.models.post import PostDate
from dailyposts.models.user import AdminPatch, NameFilter, NewUser

logger = logging.getLogger(__name__)

PASSWORD_CHARS = string.ascii_letters + string.digits + "!$%&/()=?+#"
PASSWORD_LENGTH = 20


def seed_posts(ctx: AppContext) -> int:
    """Add one empty post per calendar day that doesn't have one yet."""
    start = date.fromisoformat(ctx.settings.setup_start)
    created = 0
    with ctx.mapper.transaction() as tx:
        for offset in range(ctx.settings.setup_days):
            day = (start + timedelta(days=offset)).isoformat()
            if tx.count("posts", PostDate(date=day)) == 0:
                tx.insert("posts", PostDate(date=day))
                created += 1
    return created


def seed_admin(ctx: AppContext) -> str | None:
    """Create the "admin" user with a random password. Returns None if it already exists."""
    if ctx.mapper.count("users", NameFilter(name="admin")) != 0:
        return None

    password = "".join(secrets.choice(PASSWORD_CHARS) for _ in range(PASSWORD_LENGTH))
    with ctx.mapper.transaction() as tx:
        tx.insert("users", NewUser(name="admin", password=hash_password(password)))
        tx.update("users", AdminPatch(admin=True), NameFilter(name="admin"))
    logger.info("Created admin user")
    return password
