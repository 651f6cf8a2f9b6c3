"""Memory primitives for the CHIP-8 address space."""

from __future__ import annotations

from typing import Iterable, List, Protocol


class Addressable(Protocol):
    """Protocol describing byte addressable components."""

    def load8(self, address: int) -> int:
        ...

    def store8(self, address: int, value: int) -> None:
        ...

    def load16(self, address: int) -> int:
        ...


class Memory(Addressable):
    """Flat memory block; accesses wrap around the block length."""

    start: int
    length: int
    data: List[int]

    def __init__(self, start: int, length: int) -> None:
        self.start = start
        self.length = length
        if start < 0 or length <= 0:
            raise ValueError("invalid memory range")
        self.data = [0x00] * length

    def _index(self, address: int) -> int:
        return (address - self.start) % self.length

    def load8(self, address: int) -> int:
        return self.data[self._index(address)] & 0xFF

    def store8(self, address: int, value: int) -> None:
        self.data[self._index(address)] = value & 0xFF

    def load16(self, address: int) -> int:
        index = self._index(address)
        hi = self.data[index] & 0xFF
        lo = self.data[(index + 1) % self.length] & 0xFF
        return ((hi << 8) | lo) & 0xFFFF

    def store_block(self, address: int, values: Iterable[int]) -> None:
        for offset, value in enumerate(values):
            self.store8(address + offset, value)

    def load_block(self, address: int, length: int) -> List[int]:
        return [self.load8(address + offset) for offset in range(length)]


class RAM(Memory):
    """Readable and writable memory block."""


__all__ = [
    "Addressable",
    "Memory",
    "RAM",
]
