"""
optbind token sequence.

Tokens wraps the raw command-line tokens of one parse pass together with an
explicit consumed mask running parallel to them.

Contract
- A consumed position reads back as "" (the empty-string sentinel), so code that
  scans the sequence can skip it with a plain truthiness test.
- blank(index) consumes a position; blanking twice is a no-op.
- rewrite(index, text) replaces the text of a position (used when combined short
  flags like "-vx" lose one of their characters); a rewrite down to a bare "-"
  consumes the position.
- The original tokens are kept untouched and available through `original`.
"""
from collections.abc import Iterable, Sequence


class Tokens(Sequence):
    __slots__ = ("_original", "_texts", "_mask")

    def __init__(self, tokens=(), /):
        if isinstance(tokens, str) or not isinstance(tokens, Iterable):
            raise TypeError("tokens must be an iterable of strings")
        self._original = tuple(tokens)
        for token in self._original:
            if not isinstance(token, str):
                raise TypeError("tokens must be strings")
        self._texts = list(self._original)
        self._mask = [not token for token in self._original]

    @property
    def original(self):
        return self._original

    def __len__(self):
        return len(self._texts)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self[position] for position in range(*index.indices(len(self)))]
        return "" if self._mask[index] else self._texts[index]

    def __repr__(self):
        return "tokens(%r)" % (list(self),)

    def __rich_repr__(self):
        yield list(self)

    def consumed(self, index, /):
        return self._mask[index]

    def blank(self, index, /):
        self._mask[index] = True

    def rewrite(self, index, text, /):
        if self._mask[index]:
            return
        if not text or text == "-":
            self._mask[index] = True
        else:
            self._texts[index] = text

    def pending(self):
        """
        Yield (index, token) for every position not consumed yet, left to right.
        """
        for index, token in enumerate(self):
            if token:
                yield index, token

    def remaining(self):
        return [token for _, token in self.pending()]


__all__ = (
    "Tokens",
)
