"""
Create the first admin account.

    ADMIN_EMAIL=owner@studio.com ADMIN_PASSWORD=... python seed.py

Running it again with the same email leaves the existing admin untouched.
"""
import logging
import sys

import auth
import config
from errors import InvalidInput, StoreError

logger = logging.getLogger(__name__)


def seed(email: str = None, password: str = None) -> dict:
    email = email or config.ADMIN_EMAIL
    password = password or config.ADMIN_PASSWORD
    admin, created = auth.create_admin(email, password)
    if created:
        logger.info("admin created: %s", admin["email"])
    else:
        logger.info("admin already exists: %s", admin["email"])
    return {"email": admin["email"], "created": created}


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    try:
        seed()
    except (InvalidInput, StoreError) as e:
        logger.error("seed failed: %s", e.detail)
        sys.exit(1)
