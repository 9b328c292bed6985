from fastapi import Depends
from sqlalchemy.orm import Session
from app.db.session import SessionLocal
from app.core.security import BcryptHasher
from app.services.user_store import SqlAlchemyUserStore
from app.services.users import UserAccountService

def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()

def user_service(s: Session = Depends(db)) -> UserAccountService:
    return UserAccountService(SqlAlchemyUserStore(s), BcryptHasher())
