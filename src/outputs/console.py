"""
Console output channel.

Writes landmark reports to stdout for terminal display.
"""
from __future__ import annotations


class ConsoleOutput:
    """
    Console output channel.

    Writes formatted reports to stdout with simple headers. In raw mode
    only the body is written, so JSON output can be piped.

    Example:
        >>> output = ConsoleOutput()
        >>> output.send("Landmarks", "km 8  Pass   Example Pass")

        ============================================================
          Landmarks
        ============================================================
        km 8  Pass   Example Pass
        ============================================================
    """

    def __init__(self, raw: bool = False) -> None:
        self._raw = raw

    @property
    def name(self) -> str:
        """Channel identifier."""
        return "console"

    def send(self, subject: str, body: str) -> None:
        """
        Print report to console.

        Args:
            subject: Report title (displayed as header)
            body: Report content
        """
        if self._raw:
            print(body)
            return
        print(f"\n{'=' * 60}")
        print(f"  {subject}")
        print(f"{'=' * 60}")
        print(body)
        print(f"{'=' * 60}\n")
