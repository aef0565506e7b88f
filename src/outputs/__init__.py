"""
Output channels for landmark reports.

Provides different output destinations implementing a common
OutputChannel protocol.
"""
from outputs.base import NullOutput, OutputChannel, OutputError, get_channel
from outputs.console import ConsoleOutput

__all__ = ["OutputChannel", "OutputError", "get_channel", "ConsoleOutput", "NullOutput"]
