"""System prompt construction for file-tree generation."""

from __future__ import annotations

from typing import Iterable

BASE_INSTRUCTIONS = (
    "You are being used to generate code. Return a 1 dimension json array of "
    "objects in json format. Each object will have a \"path\" property holding "
    "a relative path to code you are generating files or directory which must "
    "start with \"./\", a \"type\" property to determine if the object "
    "represents a \"directory\" or \"file\", a \"content\" property for the "
    "content of the file but only on file objects. You only need to generate "
    "directory objects for directories that dont have corresponding child "
    "files/directories that are in the same array."
)

NAME_INSTRUCTIONS = (
    "Wherever the name of the thing being generated belongs, in file paths, "
    "directory names or file contents, write the literal placeholder "
    "\"{placeholder}\" instead of a concrete name. It will be replaced later."
)


def build_system_prompt(
    placeholder: str | None = None,
    extra_instructions: Iterable[str] = (),
) -> str:
    """Assemble the system prompt sent with every generation request.

    The base instructions always come first, then the placeholder
    instruction when a placeholder is set, then any extra instructions
    in the order given. Blank extras are dropped.
    """
    sections = [BASE_INSTRUCTIONS]
    if placeholder:
        sections.append(NAME_INSTRUCTIONS.format(placeholder=placeholder))
    sections.extend(s.strip() for s in extra_instructions if s and s.strip())
    return "\n\n".join(sections)
