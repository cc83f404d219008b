"""
Sequence value type used by the aligners
"""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Union

from .errors import MissingInputError


@dataclass(frozen=True)
class Sequence:
    """
    Immutable biological sequence (nucleotide or amino acid).

    Symbols are upper-cased at construction; identity is the symbol content.
    """
    symbols: str
    id: Optional[str] = field(default=None, compare=False)
    description: Optional[str] = field(default=None, compare=False)

    def __post_init__(self):
        if self.symbols is None:
            raise MissingInputError("symbols")
        object.__setattr__(self, "symbols", str(self.symbols).upper())

    def __len__(self) -> int:
        return len(self.symbols)

    def __str__(self) -> str:
        return self.symbols

    def __getitem__(self, index):
        return self.symbols[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self.symbols)

    @property
    def is_empty(self) -> bool:
        return len(self.symbols) == 0


SequenceLike = Union[str, Sequence]


def as_symbols(seq: Optional[SequenceLike], argument: str = "sequence") -> str:
    """Normalize a str or Sequence to its upper-case symbol string"""
    if seq is None:
        raise MissingInputError(argument)
    if isinstance(seq, Sequence):
        return seq.symbols
    return str(seq).upper()
