from .base import SearchSource, SourceDescriptor, SourceType
from .comment import CommentSource
from .manager import SchemaFileProvider, SourceManager, SourceProvider
from .meta import CommentMetaSource, MetaSource, PostMetaSource, UserMetaSource
from .options import OptionsSource
from .post import PostSource
from .table import TableSource
from .terms import TermsSource
from .user import UserSource

__all__ = [
    "CommentMetaSource",
    "CommentSource",
    "MetaSource",
    "OptionsSource",
    "PostMetaSource",
    "PostSource",
    "SchemaFileProvider",
    "SearchSource",
    "SourceDescriptor",
    "SourceManager",
    "SourceProvider",
    "SourceType",
    "TableSource",
    "TermsSource",
    "UserMetaSource",
    "UserSource",
]
