"""codechat - ask an LLM provider questions about a project's source files."""

from .models import (  # noqa: F401 -- public re-exports
    ChatAnswer,
    ConfigStatus,
    FileReference,
    Message,
    OverviewResult,
    ProjectOverview,
    ResolvedFileContent,
)
from .config import ActiveConfiguration, Settings, resolve
from .errors import (
    CodechatError,
    ConfigurationError,
    FileAccessError,
    UnknownProviderError,
    UpstreamError,
    ValidationError,
)
from .service import answer_question, get_config_status, summarize_project

__version__ = "0.1.0"

__all__ = [
    "answer_question",
    "summarize_project",
    "get_config_status",
    "resolve",
    "Settings",
    "ActiveConfiguration",
    "ChatAnswer",
    "ConfigStatus",
    "FileReference",
    "Message",
    "OverviewResult",
    "ProjectOverview",
    "ResolvedFileContent",
    "CodechatError",
    "ConfigurationError",
    "FileAccessError",
    "UnknownProviderError",
    "UpstreamError",
    "ValidationError",
]
