"""Output filters applied to twtxt client output.

The clients print whole timelines; these helpers cut them down the way the
old shell pipelines (``| head -n`` and ``| grep -i -m``) did.
"""

import re
from typing import List, Set

GROUP_SEPARATOR = "--\n"


def head_lines(text: str, count: int) -> str:
    """Return the first ``count`` newline-terminated lines of ``text``.

    A trailing line without a newline is kept when fewer than ``count``
    newlines are present.
    """
    if count <= 0:
        return ""
    end = -1
    for _ in range(count):
        end = text.find("\n", end + 1)
        if end == -1:
            return text
    return text[: end + 1]


def grep_context(
    text: str,
    pattern: str,
    *,
    max_count: int,
    before: int = 0,
    after: int = 0,
) -> str:
    """Case-insensitive line search with context, like ``grep -i -m N -B/-A``.

    Stops after ``max_count`` matching lines but still prints the trailing
    context of the last match. Non-adjacent groups are separated by ``--``.
    Returns an empty string when nothing matches.
    """
    regex = re.compile(pattern, re.IGNORECASE)
    # Only "\n" ends a line; multi-line entries use U+2028 inside one line
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    if max_count <= 0:
        return ""

    matches: List[int] = []
    for i, line in enumerate(lines):
        if regex.search(line):
            matches.append(i)
            if len(matches) >= max_count:
                break
    if not matches:
        return ""

    selected: Set[int] = set()
    for i in matches:
        start = max(0, i - before)
        stop = min(len(lines), i + after + 1)
        selected.update(range(start, stop))

    out: List[str] = []
    previous = None
    for i in sorted(selected):
        if (before or after) and previous is not None and i != previous + 1:
            out.append(GROUP_SEPARATOR)
        out.append(lines[i] + "\n")
        previous = i
    return "".join(out)
