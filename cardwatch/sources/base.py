"""
Line source interface
"""
from abc import ABC, abstractmethod
from typing import AsyncIterator


class LineSource(ABC):
    """Producer of raw text lines, no ordering guaranteed across restarts"""

    @abstractmethod
    def lines(self) -> AsyncIterator[str]:
        pass

    async def close(self) -> None:
        return None

    def __aiter__(self) -> AsyncIterator[str]:
        return self.lines()
