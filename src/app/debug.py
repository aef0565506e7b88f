from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

@dataclass
class DebugBuffer:
    """
    Collects trace lines of one annotation run for console output.
    """
    lines: List[str] = field(default_factory=list)

    def add(self, line: str) -> None:
        self.lines.append(line)

    def as_text(self) -> str:
        return "\n".join(self.lines)
