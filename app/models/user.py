from typing import Optional
from datetime import date, datetime
from sqlmodel import Field, SQLModel
from app.models.base import timestamp_field

class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    # Basic Info
    name: str
    email: str = Field(unique=True, index=True)
    password_hash: str
    birthday: Optional[date] = None

    # Account Status
    is_active: bool = Field(default=True)
    is_superuser: bool = Field(default=False)

    # Timestamps
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()
