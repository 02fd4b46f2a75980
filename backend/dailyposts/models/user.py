"""User accounts and the partial records used to query and patch them."""

from typing import Optional

from sqlmodel import Field, SQLModel

from dailyposts.core.records import record


@record
class User(SQLModel, table=True):
    __tablename__ = "users"

    uid: Optional[int] = Field(default=None, primary_key=True)
    name: str
    admin: bool = Field(default=False, sa_column_kwargs={"server_default": "0"})
    password: bytes = b""


@record
class NewUser(SQLModel):
    name: str
    password: bytes


@record
class AdminFlag(SQLModel):
    admin: bool = False


@record
class UserName(SQLModel):
    uid: int = 0
    name: str = ""


@record
class UidFilter(SQLModel):
    uid: int


@record
class NameFilter(SQLModel):
    name: str


@record
class PasswordPatch(SQLModel):
    password: bytes


@record
class AdminPatch(SQLModel):
    admin: bool
