"""Normalizes and validates generated Python source before it is persisted."""

import ast

from .exceptions import GenerationIOError

MAX_BLANK_LINES = 2


def normalize_source(source: str, filename: str = "<generated>") -> str:
    """Tidy whitespace and check the module compiles.

    Strips trailing whitespace, caps runs of blank lines at MAX_BLANK_LINES and
    ends the text with exactly one newline.

    Raises:
        GenerationIOError: if the normalized text is not valid Python
    """
    lines = []
    blank_run = 0
    for line in source.splitlines():
        line = line.rstrip()
        if line:
            blank_run = 0
        else:
            blank_run += 1
            if blank_run > MAX_BLANK_LINES:
                continue
        lines.append(line)

    normalized = "\n".join(lines).strip("\n") + "\n"

    error = validate_python(normalized, filename)
    if error:
        raise GenerationIOError(f"Generated source is invalid: {error}", path=filename)
    return normalized


def validate_python(source: str, filename: str = "<generated>") -> str:
    """Check source for syntax errors.

    Compiling the parsed tree also catches errors the parser alone lets
    through, such as duplicate argument names.

    Returns an error message, or an empty string when the source is valid.
    """
    try:
        compile(ast.parse(source, filename=filename), filename, "exec")
    except SyntaxError as e:
        return f"SyntaxError: {e.msg} (line {e.lineno})"
    return ""
