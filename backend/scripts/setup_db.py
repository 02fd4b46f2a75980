"""One-time database setup.

Creates the tables, adds one post per day of the calendar and creates the
"admin" user with a random password, which is printed once.

Usage:
    cd backend
    python scripts/setup_db.py
"""

from dailyposts.core.config import Settings
from dailyposts.core.context import AppContext
from dailyposts.services.seed import seed_admin, seed_posts

context = AppContext.build(Settings())
context.executor.init_db()

created = seed_posts(context)
print(f"Created {created} posts starting {context.settings.setup_start}")

password = seed_admin(context)
if password is None:
    print("admin-user already exists, password unchanged")
else:
    print(f"admin-user is: 'admin' '{password}'")
