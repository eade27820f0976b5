"""The two skill protocols rendered from one navigation core."""

from .directive import DirectiveAdapter
from .media import MediaUrlBuilder
from .remote_resolution import RemoteResolutionAdapter

__all__ = ["DirectiveAdapter", "MediaUrlBuilder", "RemoteResolutionAdapter"]
