"""Character-level scanning of JS source: strings, template literals, balanced spans."""

from __future__ import annotations

from styledshift.parser.errors import ParseError

_CLOSERS = {"(": ")", "[": "]", "{": "}", "<": ">"}


def line_col(text: str, index: int) -> tuple[int, int]:
    """Return the 1-based (line, column) of *index* in *text*."""
    line = text.count("\n", 0, index) + 1
    column = index - (text.rfind("\n", 0, index) + 1) + 1
    return line, column


def _error(text: str, index: int, message: str) -> ParseError:
    line, column = line_col(text, index)
    return ParseError(message, line, column)


def skip_string(text: str, i: int) -> int:
    """Skip a quoted string starting at ``text[i]``; return the index after it."""
    quote = text[i]
    j = i + 1
    while j < len(text):
        ch = text[j]
        if ch == "\\":
            j += 2
            continue
        if ch == quote:
            return j + 1
        if ch == "\n":
            break
        j += 1
    raise _error(text, i, "Unterminated string literal")


def skip_comment(text: str, i: int) -> int:
    """Skip a ``//`` or ``/* */`` comment at ``text[i]``; return the index after it."""
    if text.startswith("//", i):
        end = text.find("\n", i)
        return len(text) if end == -1 else end
    end = text.find("*/", i + 2)
    if end == -1:
        raise _error(text, i, "Unterminated comment")
    return end + 2


def _cook(raw: str) -> str:
    out = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw) and raw[i + 1] in "`$\\":
            out.append(raw[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def read_template(text: str, i: int) -> tuple[list[str], list[str], int]:
    """Read a template literal whose backtick is at ``text[i]``.

    Returns ``(quasis, expression_sources, end)`` where ``end`` is the index
    after the closing backtick and ``len(quasis) == len(expression_sources) + 1``.
    """
    quasis: list[str] = []
    expressions: list[str] = []
    j = i + 1
    start = j
    while j < len(text):
        ch = text[j]
        if ch == "\\":
            j += 2
            continue
        if ch == "`":
            quasis.append(_cook(text[start:j]))
            return quasis, expressions, j + 1
        if ch == "$" and text.startswith("${", j):
            quasis.append(_cook(text[start:j]))
            end = find_expression_end(text, j + 2)
            expressions.append(text[j + 2:end].strip())
            j = end + 1
            start = j
            continue
        j += 1
    raise _error(text, i, "Unterminated template literal")


def find_expression_end(text: str, i: int) -> int:
    """Return the index of the ``}`` closing a ``${`` expression that starts at *i*."""
    depth = 0
    j = i
    while j < len(text):
        ch = text[j]
        if ch in "\"'":
            j = skip_string(text, j)
            continue
        if ch == "`":
            j = read_template(text, j)[2]
            continue
        if ch == "/" and text[j:j + 2] in ("//", "/*"):
            j = skip_comment(text, j)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            if depth == 0:
                return j
            depth -= 1
        j += 1
    raise _error(text, i, "Unterminated template expression")


def skip_balanced(text: str, i: int) -> int:
    """Skip a bracketed span opening at ``text[i]``; return the index after it.

    Handles nested brackets of every kind, strings and template literals.
    ``=>`` inside angle brackets is not treated as a closer.
    """
    stack = [_CLOSERS[text[i]]]
    j = i + 1
    while j < len(text):
        ch = text[j]
        if ch in "\"'":
            j = skip_string(text, j)
            continue
        if ch == "`":
            j = read_template(text, j)[2]
            continue
        if ch == "/" and text[j:j + 2] in ("//", "/*"):
            j = skip_comment(text, j)
            continue
        if ch == ">" and text[j - 1] == "=":
            j += 1
            continue
        if ch in _CLOSERS and (ch != "<" or stack[-1] == ">"):
            stack.append(_CLOSERS[ch])
        elif ch == stack[-1]:
            stack.pop()
            if not stack:
                return j + 1
        j += 1
    raise _error(text, i, f"Unbalanced '{text[i]}'")


def extract_templates(source: str) -> tuple[str, list[tuple[list[str], list[str]]]]:
    """Replace each top-level template literal in *source* with ``__TPL_n__``.

    Returns the rewritten source and, per placeholder, the template's quasis
    and raw expression sources.
    """
    out: list[str] = []
    templates: list[tuple[list[str], list[str]]] = []
    i = 0
    start = 0
    while i < len(source):
        ch = source[i]
        if ch in "\"'":
            i = skip_string(source, i)
            continue
        if ch == "`":
            quasis, expressions, end = read_template(source, i)
            out.append(source[start:i])
            out.append(f" __TPL_{len(templates)}__ ")
            templates.append((quasis, expressions))
            i = start = end
            continue
        i += 1
    out.append(source[start:])
    return "".join(out), templates
