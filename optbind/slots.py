r"""
optbind result slots: the typed destinations an option binds into.

Overview
- Slot: open base class. Every result slot owns a mutable `value`; its concrete
  class is the runtime type tag the binder, default applier and presenter match on.
- Closed variant (sealed, cannot be subclassed):
  • Bool          presence flag, arity 0
  • Int           scalar integer, or a counter when counter=True (arity 0)
  • Float         scalar float
  • String        scalar string (optionally constrained by the option's choices)
  • Resource      one open file handle
  • IntList / FloatList / StringList / ResourceList
                  one element appended per occurrence
  • Help          asks for the help text when bound

- Class-level traits used by the option layer
  • arity:  value tokens consumed per occurrence (0 or 1)
  • unique: whether the option defaults to "only once"
  • hint:   usage placeholder ("<integer>", "<float>", '"<value>"', "<file>", or "")

- Resources
  • acquire(identifier, slot): open `identifier` with the slot's mode/perm/encoding.
  • release(handle): close a handle previously acquired.

Extension
- Subclassing Slot directly is allowed (it is how foreign result types are
  declared), but the engine has no binding for them: binding or defaulting such an
  option fails with UnsupportedTypeError.
"""
import os
import re

from .utils import *


class Slot:
    """
    Base of every result slot.

    Subclasses get a hyphenated __typename__ (IntList → "int-list") used in messages.
    """
    __slots__ = ("value",)
    __typename__ = "slot"

    arity = 1
    unique = True
    hint = ""

    def __init_subclass__(cls, **options):
        super().__init_subclass__(**options)
        cls.__typename__ = re.sub(r"(?<!^)(?=[A-Z])", r"-", cls.__name__).lower()

    def __init__(self, value=None):
        self.value = value

    def __repr__(self):
        return "%s(%s)" % (type(self).__typename__, ", ".join("%s=%r" % pair for pair in self.__rich_repr__()))

    def __rich_repr__(self):
        yield "value", self.value


@seal
class Bool(Slot):
    __slots__ = ()
    arity = 0

    def __init__(self):
        super().__init__(False)


@seal
class Int(Slot):
    """
    Integer slot. With counter=True it takes no value token and accumulates the
    occurrence count instead (-vvv adds 3).
    """
    __slots__ = ("counter",)
    hint = "<integer>"

    def __init__(self, *, counter=False):
        super().__init__(0)
        self.counter = bool(counter)

    @property
    def arity(self):
        return 0 if self.counter else 1

    @property
    def unique(self):
        return not self.counter

    def __rich_repr__(self):
        yield from super().__rich_repr__()
        yield "counter", self.counter


@seal
class Float(Slot):
    __slots__ = ()
    hint = "<float>"

    def __init__(self):
        super().__init__(0.0)


@seal
class String(Slot):
    __slots__ = ()
    hint = '"<value>"'

    def __init__(self):
        super().__init__("")


class _Openable(Slot):
    """
    Shared open parameters for the resource slots (mode, creation permission bits, encoding).
    """
    __slots__ = ("mode", "perm", "encoding")
    hint = "<file>"

    def __init__(self, value=None, *, mode="r", perm=0o666, encoding=Unset):
        if not isinstance(mode, str) or not mode:
            raise TypeError(f"{type(self).__typename__} 'mode' must be a non-empty string")
        if not isinstance(perm, int) or isinstance(perm, bool) or not 0 <= perm <= 0o7777:
            raise ValueError(f"{type(self).__typename__} 'perm' must be permission bits (0 to 0o7777)")
        if not isinstance(encoding, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'encoding' must be a string")
        super().__init__(value)
        self.mode = mode
        self.perm = perm
        self.encoding = coalesce(encoding)

    def __rich_repr__(self):
        yield from super().__rich_repr__()
        yield "mode", self.mode
        yield "perm", oct(self.perm)
        if self.encoding is not None:
            yield "encoding", self.encoding


@seal
class Resource(_Openable):
    __slots__ = ()

    def __init__(self, *, mode="r", perm=0o666, encoding=Unset):
        super().__init__(None, mode=mode, perm=perm, encoding=encoding)


@seal
class IntList(Slot):
    __slots__ = ()
    unique = False
    hint = Int.hint

    def __init__(self):
        super().__init__([])


@seal
class FloatList(Slot):
    __slots__ = ()
    unique = False
    hint = Float.hint

    def __init__(self):
        super().__init__([])


@seal
class StringList(Slot):
    __slots__ = ()
    unique = False
    hint = String.hint

    def __init__(self):
        super().__init__([])


@seal
class ResourceList(_Openable):
    __slots__ = ()
    unique = False

    def __init__(self, *, mode="r", perm=0o666, encoding=Unset):
        super().__init__([], mode=mode, perm=perm, encoding=encoding)


@seal
class Help(Slot):
    __slots__ = ()
    arity = 0

    def __init__(self):
        super().__init__(None)


def acquire(identifier, slot, /):
    """
    Open `identifier` as described by a resource slot.

    The slot's perm bits apply only when the mode creates the file. Errors from
    the operating system (OSError) and from a malformed mode (ValueError) propagate.
    """
    if not isinstance(slot, _Openable):
        raise TypeError("acquire() slot must be a resource slot")
    return open(identifier, slot.mode, encoding=slot.encoding, opener=lambda path, flags: os.open(path, flags, slot.perm))


def release(handle, /):
    """
    Close a handle obtained from acquire(). OSError from the close propagates.
    """
    handle.close()


__all__ = (
    "Slot",
    "Bool",
    "Int",
    "Float",
    "String",
    "Resource",
    "IntList",
    "FloatList",
    "StringList",
    "ResourceList",
    "Help",
    "acquire",
    "release",
)
