from typing import Optional

from sqlmodel import Field, SQLModel

from dailyposts.core.records import record


@record
class Comment(SQLModel, table=True):
    __tablename__ = "comments"

    cid: Optional[int] = Field(default=None, primary_key=True)
    pid: int = Field(index=True)
    uid: int
    text: str
    answer: Optional[str] = None


@record
class NewComment(SQLModel):
    pid: int
    uid: int
    text: str


@record
class CidFilter(SQLModel):
    cid: int


@record
class AnswerPatch(SQLModel):
    answer: Optional[str]
