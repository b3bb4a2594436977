"""Prompt builder -- system prompts and provider-agnostic conversations."""

from __future__ import annotations

import re
from collections.abc import Sequence

from .models import FileReference, Message, ProjectOverview, ResolvedFileContent

UNKNOWN = "Unknown"

_SYSTEM_PROMPT = """\
You are an AI code assistant specialized in analyzing and explaining codebases. \
You have access to project context and can reference specific files.

Project Context:
- Name: {project_name}
- Display Name: {display_name}
- Technologies: {technologies}
- File Count: {file_count}

"""

_REFERENCED_FILES = """\
Referenced Files:
{file_list}

The contents of these files are supplied separately in the user message.

"""

_INSTRUCTIONS = """\
Instructions:
1. Provide clear, helpful explanations about code structure and functionality
2. When referencing files, use the exact file paths provided
3. Explain complex code patterns in simple terms
4. Suggest improvements when appropriate
5. Be concise but thorough
6. If you need to see file contents, ask the user to reference them with @filename

Always be helpful and focus on code understanding and best practices."""

OVERVIEW_SYSTEM_PROMPT = """\
You are an AI assistant that generates project overviews. Analyze the provided \
file structure and generate a comprehensive overview including:

1. Project type and purpose
2. Main technologies and frameworks
3. Key directories and their purposes
4. Entry points and main files
5. Architecture patterns
6. Dependencies and tools

Be concise but informative. Focus on helping developers understand the project \
structure quickly."""


def _or_unknown(value: object) -> str:
    if value is None or value == "":
        return UNKNOWN
    return str(value)


def build_system_prompt(
    overview: ProjectOverview | None = None,
    file_references: Sequence[FileReference] | None = None,
) -> str:
    """Render the chat system prompt.

    Every project field is always present; missing metadata renders as
    ``Unknown`` so the provider sees the same shape on every request.
    """
    overview = overview or ProjectOverview()
    prompt = _SYSTEM_PROMPT.format(
        project_name=_or_unknown(overview.project_name),
        display_name=_or_unknown(overview.display_name),
        technologies=", ".join(overview.technologies or []) or UNKNOWN,
        file_count=_or_unknown(overview.file_count),
    )
    if file_references:
        file_list = "\n".join(f"- {ref.path}" for ref in file_references)
        prompt += _REFERENCED_FILES.format(file_list=file_list)
    return prompt + _INSTRUCTIONS


def _file_block(file: ResolvedFileContent) -> str:
    return f"File: {file.path}\n```{file.extension or 'text'}\n{file.content}\n```"


def build_conversation(
    user_text: str,
    system_prompt: str,
    resolved_files: Sequence[ResolvedFileContent] = (),
) -> list[Message]:
    """Assemble the system message (if any) and the single user message.

    File contents travel inside the user turn because not every provider has
    a separate attachment role.
    """
    messages: list[Message] = []
    if system_prompt:
        messages.append(Message(role="system", content=system_prompt))

    if resolved_files:
        file_context = "\n\n".join(_file_block(f) for f in resolved_files)
        content = (
            f"Here are the referenced files:\n\n{file_context}\n\n"
            f"User question: {user_text}"
        )
    else:
        content = user_text
    messages.append(Message(role="user", content=content))
    return messages


def build_overview_conversation(file_paths: Sequence[str]) -> list[Message]:
    """Conversation asking the provider to summarize a project's layout."""
    structure = "\n".join(file_paths)
    return [
        Message(role="system", content=OVERVIEW_SYSTEM_PROMPT),
        Message(
            role="user",
            content=f"Analyze this project structure and generate an overview:\n\n{structure}",
        ),
    ]


_MENTION_RE = re.compile(r"(?:^|(?<=\s))@([^\s]+)")


def parse_file_mentions(text: str) -> list[FileReference]:
    """Extract ``@path`` mentions from free text, in order, without duplicates."""
    seen: set[str] = set()
    refs: list[FileReference] = []
    for match in _MENTION_RE.finditer(text):
        path = match.group(1).rstrip(".,;:!?)")
        if path and path not in seen:
            seen.add(path)
            refs.append(FileReference(path=path))
    return refs
