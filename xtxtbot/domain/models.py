"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class CommandInvocation:
    """A message body split into command keyword and argument tokens."""

    keyword: str  # lower-cased first token
    args: List[str] = field(default_factory=list)
    raw: str = ""  # untouched message body
