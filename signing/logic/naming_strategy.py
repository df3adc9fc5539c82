from __future__ import annotations
import os
import time
from dataclasses import dataclass
from typing import Protocol, Optional

@dataclass(frozen=True)
class NamingContext:
    source_name: Optional[str]
    timestamp_ms: int

    @classmethod
    def now(cls, source_name: Optional[str] = None) -> "NamingContext":
        return cls(source_name=source_name, timestamp_ms=time.time_ns() // 1_000_000)

class NamingStrategy(Protocol):
    def strategy_id(self) -> str: ...
    def propose_name(self, ctx: NamingContext) -> str: ...

class TimestampStrategy:
    """Stored outputs: signed_<ms>.pdf"""
    def __init__(self, prefix: str = "signed_") -> None:
        self._prefix = prefix
    def strategy_id(self) -> str:
        return "timestamp"
    def propose_name(self, ctx: NamingContext) -> str:
        return f"{self._prefix}{ctx.timestamp_ms}.pdf"

class DefaultSuffixStrategy:
    """CLI default: file.pdf -> file_signed.pdf"""
    def strategy_id(self) -> str:
        return "default_suffix"
    def propose_name(self, ctx: NamingContext) -> str:
        root, ext = os.path.splitext(ctx.source_name or "document.pdf")
        if ext.lower() != ".pdf":
            ext = ".pdf"
        return f"{root}_signed{ext}"
