import logging

from app.core.config import settings
from app.core.security import BcryptHasher
from app.db.session import SessionLocal
from app.services.errors import Conflict
from app.services.user_store import SqlAlchemyUserStore
from app.services.users import UserAccountService

logger = logging.getLogger(__name__)

def seed_admin(s, name: str, email: str, password: str):
    svc = UserAccountService(SqlAlchemyUserStore(s), BcryptHasher())
    try:
        return svc.create(name=name, email=email, password=password, role="ADMIN")
    except Conflict:
        logger.info("admin %s already exists", email)
        return None

def main():
    logging.basicConfig(level=settings.log_level.upper())
    with SessionLocal() as s:
        seed_admin(s, settings.seed_admin_name, settings.seed_admin_email, settings.seed_admin_password)

if __name__ == "__main__":
    main()
