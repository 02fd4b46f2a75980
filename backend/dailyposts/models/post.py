from typing import Optional

from sqlmodel import Field, SQLModel

from dailyposts.core.records import record


@record
class Post(SQLModel, table=True):
    __tablename__ = "posts"

    pid: Optional[int] = Field(default=None, primary_key=True)
    date: str = Field(max_length=14, unique=True)
    content: str = Field(default="", sa_column_kwargs={"server_default": ""})


@record
class PostDate(SQLModel):
    date: str


@record
class PidFilter(SQLModel):
    pid: int


@record
class ContentPatch(SQLModel):
    content: str
