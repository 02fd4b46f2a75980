from dailyposts.models.comment import Comment
from dailyposts.models.post import Post
from dailyposts.models.user import User

__all__ = ["Comment", "Post", "User"]
