from pydantic import BaseModel
from datetime import datetime

class UserCreate(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None

class UserUpdate(BaseModel):
    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None

class UserOut(BaseModel):
    id: int
    name: str
    email: str
    role: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
