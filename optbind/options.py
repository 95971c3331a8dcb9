r"""
optbind option definitions: matching, consumption, binding, defaults, presentation.

Overview
- Option: declarative record for one command-line option. It is built once, before
  parsing, from a set of names and a result slot (see optbind.slots), and it answers
  the per-token questions of a parse pass:
  • match(token)             → how many occurrences of this option the token carries
  • consume(position, tokens) → erase what was matched so later options skip it
  • bind(values, count)      → convert the captured value tokens into the slot
  • apply_default()          → fill an unmatched slot from the declared default
  • name / usage() / helpline() → presentation for help text

Names
- short: "-x" (one letter), long: "--name" or "--long-name" (two or more characters).
- At least one of each form must be given, at most one of each; order is irrelevant.
- "-h" and "--help" are reserved for the help trigger and only accepted on Help slots.

Metadata (sanitized on construction)
- slot: a Slot instance; its class is the type tag every operation dispatches on.
- unique: Unset | bool (defaults to the slot's trait: scalars once, lists/counters many).
- required: bool.
- default: Unset | Any (Unset and None both mean "no default"; Help slots take none).
- choices: Iterable[str], non-empty only with a String slot, duplicates rejected.
- descr: Unset | str (short help), non-empty when provided.
- validator: Unset | Callable[[list[str]], Any], run on the raw value tokens before
  conversion; raising rejects the occurrence.

Binding rules (per slot)
- Bool: no value token, sets True.
- Int(counter=True): no value token, adds the occurrence count.
- Int / Float / String / Resource: exactly one value token, converted and stored.
- IntList / FloatList / StringList / ResourceList: exactly one value token per
  occurrence, appended.
- ResourceList: when opening fails, every handle already held is closed, the list is
  emptied, and the ResourceOpenError names every close failure in its message and
  lists them under options["releases"].
- Resource rebinding (unique=False): the new handle is kept and the option is matched
  even when closing the previous handle fails; that ResourceReleaseError is raised after.
- Help: raises HelpRequested.
- Any other Slot subclass: UnsupportedTypeError.

Quick example:
    >>> from optbind import Option, Tokens
    >>> from optbind.slots import Int
    >>> number = Option("-n", "--number", slot=Int(), required=True)
    >>> tokens = Tokens(["-n", "5"])
    >>> number.match(tokens[0])
    1
    >>> number.bind(tokens[1:2]); number.consume(0, tokens)
    >>> number.value, number.usage()
    (5, '-n|--number <integer>')
"""
import functools
import operator
import re

from .faults import *
from .slots import *
from .tokens import Tokens
from .utils import *

_HELP_TOKENS = ("-h", "--help")


class OptionType(type):
    """
    Metaclass giving option classes a stable typename, read-only metadata
    properties, and readable __repr__/__rich_repr__.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - every name listed in __introspectable__ becomes a mirror() property over "_{name}".
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                field: mirror(field) for field in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for field in type(self).__introspectable__:
                yield field, getattr(self, field)
            yield "matched", self.matched
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate the option names and split them into short/long parts.

    Mutates metadata in place: 'names' becomes a tuple (short first), and
    'short'/'long' receive the bare identifiers (or None).

    Raises
    - TypeError: no names, or a non-string name.
    - ValueError: empty, malformed, duplicated or reserved names.
    """
    if not metadata["names"]:
        raise TypeError(f"{cls.__typename__} must specify at least one name")

    short = long = None
    for name in metadata["names"]:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        elif not (name := name.strip()):
            raise ValueError(f"{cls.__typename__} names cannot be empty-strings")
        elif re.fullmatch(r"-[^\W\d_]", name):
            if short is not None:
                raise ValueError(f"{cls.__typename__} accepts at most one short name (got -{short} and {name})")
            short = name[1:]
        elif re.fullmatch(r"--(?=..)[^\W\d_][^\W_]*(-[^\W_]+)*", name):
            if long is not None:
                raise ValueError(f"{cls.__typename__} accepts at most one long name (got --{long} and {name})")
            long = name[2:]
        else:
            raise ValueError(f"{cls.__typename__} names must be '-x' or '--long-name' (got {name!r})")

    if ("-" + (short or "") in _HELP_TOKENS or "--" + (long or "") in _HELP_TOKENS) and not isinstance(metadata["slot"], Help):
        raise ValueError(f"{cls.__typename__} names '-h' and '--help' are reserved for the help trigger")

    metadata["short"] = short
    metadata["long"] = long
    metadata["names"] = tuple(prefix + name for prefix, name in (("-", short), ("--", long)) if name is not None)


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate the slot and the configuration fields of an option.

    Mutates metadata in place, resolving Unset to concrete values.

    Raises
    - TypeError: wrong types, choices on a non-string slot, a default on a Help slot.
    - ValueError: empty descr, empty or duplicated choices.
    """
    if not isinstance(slot := metadata["slot"], Slot):
        raise TypeError(f"{cls.__typename__} 'slot' must be a result slot")

    if not isinstance(unique := metadata["unique"], bool | Unset):
        raise TypeError(f"{cls.__typename__} 'unique' must be a boolean")
    metadata["unique"] = coalesce(unique, bool(slot.unique))

    metadata["required"] = bool(metadata["required"])

    metadata["default"] = coalesce(metadata["default"])
    if isinstance(slot, Help) and metadata["default"] is not None:
        raise TypeError(f"help {cls.__typename__} cannot have a 'default'")

    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not callable(validator := metadata["validator"]) and validator is not Unset:
        raise TypeError(f"{cls.__typename__} 'validator' must be callable")
    metadata["validator"] = coalesce(validator)

    if isinstance(choices := metadata["choices"], str):
        raise TypeError(f"{cls.__typename__} 'choices' must be an iterable of strings, not a string")
    sanitized = []
    for choice in choices:
        if not isinstance(choice, str):
            raise TypeError(f"{cls.__typename__} 'choices' must contain strings")
        if choice in sanitized:
            raise ValueError(f"{cls.__typename__} 'choices' cannot contain duplicates")
        sanitized.append(choice)
    if sanitized and not isinstance(slot, String):
        raise TypeError(f"{cls.__typename__} 'choices' are only valid with a string slot")
    metadata["choices"] = tuple(sanitized)


class Option(metaclass=OptionType):
    """
    Named option definition bound to one result slot.

    The identity fields listed in __introspectable__ are read-only after
    construction; only `matched` and the slot's value change during a parse pass.
    """

    __introspectable__ = (
        "names",
        "short",
        "long",
        "slot",
        "unique",
        "required",
        "default",
        "choices",
        "descr",
        "validator",
    )

    def __init__(
            self,
            *names,
            slot,
            unique=Unset,
            required=False,
            default=Unset,
            choices=(),
            descr=Unset,
            validator=Unset,
    ):
        """
        Construct an option definition.

        Parameters
        - names: "-x" and/or "--long-name".
        - slot: result slot instance (Bool(), Int(), StringList(), ...).
        - unique: reject repeated occurrences; defaults from the slot.
        - required: the scan driver rejects a pass that never matches this option.
        - default: value of the slot's exact type applied when never matched
          (identifier strings for resource slots).
        - choices: allowed values for a String slot.
        - descr: one-line help.
        - validator: callable receiving the raw value tokens; raising rejects them.
        """
        metadata = {
            "names": names,
            "slot": slot,
            "unique": unique,
            "required": required,
            "default": default,
            "choices": choices,
            "descr": descr,
            "validator": validator,
        }
        _sanitize_metadata(type(self), metadata)
        _sanitize_names(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        self._matched = False

        if self.required and self.default is not None:
            trigger(UnreachableDefaultWarning(
                "required option %r declares a default that can never apply" % self.name,
                title="unreachable default",
                code=FaultCode.UNREACHABLE_DEFAULT,
                hint="drop the default or make %r optional" % self.name,
                option=self,
            ))

    @property
    def matched(self):
        return self._matched

    @property
    def arity(self):
        return self._slot.arity

    @property
    def value(self):
        return self._slot.value

    # --- matcher ---

    def _is_long(self, token):
        return bool(self._long) and len(token) > 2 and token.startswith("--") and token[2] != "-"

    def _is_short(self, token):
        return bool(self._short) and len(token) > 1 and token.startswith("-") and token[1] != "-"

    def match(self, token, /):
        """
        Return how many occurrences of this option `token` carries (0 when none).

        - "-h"/"--help" raises HelpRequested regardless of the option.
        - "--long" matches exactly once.
        - "-x" matches once; for zero-arity options every 'x' after the dash counts,
          so "-vvv" is three occurrences and "-vq" is one of each.
        """
        if not isinstance(token, str):
            raise TypeError("match() argument must be a string")
        if token in _HELP_TOKENS:
            raise HelpRequested(
                title="help requested",
                code=FaultCode.HELP_REQUESTED,
                option=self,
                input=token,
            )
        if self._is_long(token) and token[2:] == self._long:
            return 1
        if self._is_short(token):
            if self.arity == 0:
                return token[1:].count(self._short)
            if token[1:] == self._short:
                return 1
        return 0

    # --- consumer ---

    def consume(self, position, tokens, /):
        """
        Erase what this option matched at `position` from `tokens`.

        - long or single short match: the token and the `arity` value tokens after it.
        - combined zero-arity short match: only this option's character is removed;
          a token left as a bare "-" is consumed entirely.
        Consuming an already-consumed position does nothing.
        """
        if not isinstance(tokens, Tokens):
            raise TypeError("consume() tokens must be a Tokens sequence")
        if not (token := tokens[position]):
            return
        if self._is_long(token) and token[2:] == self._long:
            for index in range(position, min(position + self.arity + 1, len(tokens))):
                tokens.blank(index)
        elif self._is_short(token):
            if self.arity == 0:
                if self._short in token[1:]:
                    tokens.rewrite(position, "-" + token[1:].replace(self._short, ""))
            elif token[1:] == self._short:
                for index in range(position, min(position + self.arity + 1, len(tokens))):
                    tokens.blank(index)

    # --- binder ---

    def bind(self, values=(), count=1, /):
        """
        Convert the captured value tokens into the slot and mark the option matched.

        Raises
        - DuplicateOptionError when a unique option occurs again or more than once.
        - whatever CommandException the validator raises, or ValidationFailedError
          wrapping any other exception from it.
        - ArityMismatchError, ConversionError, InvalidChoiceError, ResourceOpenError,
          ResourceReleaseError, UnsupportedTypeError per the slot rules.
        - HelpRequested for a Help slot.
        """
        values = list(values)

        if self._unique and (self._matched or count > 1):
            raise DuplicateOptionError(
                "option %r can only be present once" % self.name,
                title="duplicate option",
                code=FaultCode.DUPLICATE_OPTION,
                hint="remove the repeated %r" % self.name,
                docs=getdoc(FaultCode.DUPLICATE_OPTION),
                option=self,
                count=count,
            )

        if self._validator is not None:
            try:
                self._validator(values)
            except CommandException:
                raise
            except Exception as exception:
                raise ValidationFailedError(
                    "invalid value for option %r: %s" % (self.name, exception),
                    title="validation failed",
                    code=FaultCode.VALIDATION_FAILED,
                    hint="check the value given to %r" % self.name,
                    docs=getdoc(FaultCode.VALIDATION_FAILED),
                    option=self,
                    values=tuple(values),
                    exception=exception,
                ) from exception

        slot = self._slot
        releases = ()
        match slot:
            case Help():
                raise HelpRequested(
                    title="help requested",
                    code=FaultCode.HELP_REQUESTED,
                    option=self,
                    input=self.name,
                )
            case Bool():
                self._nothing(values)
                slot.value = True
            case Int() if self.arity == 0:
                self._nothing(values)
                slot.value += count
            case Int():
                slot.value = self._integer(self._single(values, "an integer"))
            case Float():
                slot.value = self._float(self._single(values, "a floating point number"))
            case String():
                slot.value = self._choice(self._single(values, "a string"))
            case Resource():
                previous, slot.value = slot.value, self._open(self._single(values, "a path to file"))
                if previous is not None:
                    releases = self._rollback([previous])
            case StringList():
                slot.value.append(self._single(values, "a string"))
            case IntList():
                slot.value.append(self._integer(self._single(values, "an integer")))
            case FloatList():
                slot.value.append(self._float(self._single(values, "a floating point number")))
            case ResourceList():
                slot.value.append(self._open(self._single(values, "a path to file"), rollback=slot.value))
            case _:
                raise self._unsupported()

        self._matched = True
        if releases:
            raise releases[0]

    def _nothing(self, values):
        if values:
            raise ArityMismatchError(
                "option %r does not take a value" % self.name,
                title="unexpected value",
                code=FaultCode.ARITY_MISMATCH,
                hint="remove the value after %r" % self.name,
                docs=getdoc(FaultCode.ARITY_MISMATCH),
                option=self,
                expected=0,
                got=len(values),
            )

    def _single(self, values, noun):
        if len(values) < 1:
            raise ArityMismatchError(
                "option %r must be followed by %s" % (self.name, noun),
                title="missing value",
                code=FaultCode.ARITY_MISMATCH,
                hint="pass a value after %r" % self.name,
                docs=getdoc(FaultCode.ARITY_MISMATCH),
                option=self,
                expected=1,
                got=0,
            )
        if len(values) > 1:
            raise ArityMismatchError(
                "option %r followed by too many arguments" % self.name,
                title="too many values",
                code=FaultCode.ARITY_MISMATCH,
                hint="pass a single value per %r" % self.name,
                docs=getdoc(FaultCode.ARITY_MISMATCH),
                option=self,
                expected=1,
                got=len(values),
            )
        return values[0]

    def _integer(self, text):
        if not isinstance(text, str) or not re.fullmatch(r"[+-]?\d+", text, re.ASCII):
            raise ConversionError(
                "option %r bad integer value %r" % (self.name, text),
                title="not an integer",
                code=FaultCode.CONVERSION_FAILED,
                hint="use a whole number in base 10 (for example: %s 42)" % self.name,
                docs=getdoc(FaultCode.CONVERSION_FAILED),
                option=self,
                value=text,
            )
        return int(text)

    def _float(self, text):
        try:
            if not isinstance(text, str) or text != text.strip() or "_" in text:
                raise ValueError(text)
            return float(text)
        except ValueError:
            raise ConversionError(
                "option %r bad floating point value %r" % (self.name, text),
                title="not a float",
                code=FaultCode.CONVERSION_FAILED,
                hint="use a decimal number (for example: %s 0.5)" % self.name,
                docs=getdoc(FaultCode.CONVERSION_FAILED),
                option=self,
                value=text,
            ) from None

    def _choice(self, text):
        if self._choices and text not in self._choices:
            raise InvalidChoiceError(
                "bad value %r for option %r, allowed values are %s" % (text, self.name, list(self._choices)),
                title="invalid choice",
                code=FaultCode.INVALID_CHOICE,
                hint="pick one of: %s" % ", ".join(self._choices),
                docs=getdoc(FaultCode.INVALID_CHOICE),
                option=self,
                value=text,
                choices=self._choices,
            )
        return text

    def _open(self, identifier, /, *, rollback=()):
        """
        Open `identifier` with the slot's open parameters. On failure, close and empty
        `rollback` first, then raise ResourceOpenError chained from the cause.
        """
        try:
            return acquire(identifier, self._slot)
        except (OSError, ValueError) as error:
            releases = self._rollback(rollback)
            message = "option %r cannot open %r: %s" % (self.name, identifier, getattr(error, "strerror", None) or error)
            if releases:
                message += " (opened handles also failed to close: %s)" % "; ".join(map(str, releases))
            raise ResourceOpenError(
                message,
                title="cannot open resource",
                code=FaultCode.RESOURCE_OPEN_FAILED,
                hint="check that %r exists and is accessible" % identifier,
                docs=getdoc(FaultCode.RESOURCE_OPEN_FAILED),
                option=self,
                identifier=identifier,
                exception=error,
                releases=releases,
            ) from error

    def _rollback(self, handles):
        """
        Close every handle in `handles` and empty it when it is a list.
        Returns the close failures as ResourceReleaseError instances.
        """
        releases = []
        for handle in handles:
            try:
                release(handle)
            except OSError as error:
                releases.append(ResourceReleaseError(
                    "option %r failed to close %r: %s" % (self.name, getattr(handle, "name", handle), error),
                    title="cannot release resource",
                    code=FaultCode.RESOURCE_RELEASE_FAILED,
                    docs=getdoc(FaultCode.RESOURCE_RELEASE_FAILED),
                    option=self,
                    handle=handle,
                    exception=error,
                ))
        if isinstance(handles, list):
            handles.clear()
        return tuple(releases)

    def _unsupported(self):
        return UnsupportedTypeError(
            "option %r has unsupported result type %r" % (self.name, type(self._slot).__typename__),
            title="unsupported type",
            code=FaultCode.UNSUPPORTED_TYPE,
            hint="use one of the slots from optbind.slots",
            docs=getdoc(FaultCode.UNSUPPORTED_TYPE),
            option=self,
            slot=self._slot,
        )

    # --- default applier ---

    def apply_default(self):
        """
        Fill the slot from the declared default when the option was never matched.

        The default's runtime type must match the slot exactly (a bool is not an
        int, an int is not a float); resource slots take identifier strings, and
        resource lists are opened all-or-nothing.

        Raises
        - DefaultTypeMismatchError, ResourceOpenError, UnsupportedTypeError.
        """
        if self._matched or self._default is None:
            return

        slot = self._slot
        match slot:
            case Bool():
                slot.value = self._expect(bool)
            case Int():
                slot.value = self._expect(int)
            case Float():
                slot.value = self._expect(float)
            case String():
                slot.value = self._expect(str)
            case Resource():
                slot.value = self._open(self._expect(str))
            case StringList():
                slot.value = list(self._expect(list, str))
            case IntList():
                slot.value = list(self._expect(list, int))
            case FloatList():
                slot.value = list(self._expect(list, float))
            case ResourceList():
                handles = []
                for identifier in self._expect(list, str):
                    try:
                        handles.append(self._open(identifier, rollback=handles))
                    except ResourceOpenError:
                        slot.value = []
                        raise
                slot.value = handles
            case _:
                raise self._unsupported()

    def _expect(self, kind, element=Unset):
        default = self._default
        if type(default) is not kind or (element is not Unset and any(type(item) is not element for item in default)):
            expected = kind.__name__ if element is Unset else "%s[%s]" % (kind.__name__, element.__name__)
            raise DefaultTypeMismatchError(
                "option %r cannot use default of type %r as type %r" % (self.name, type(default).__name__, expected),
                title="default type mismatch",
                code=FaultCode.DEFAULT_TYPE_MISMATCH,
                hint="declare the default of %r as %s" % (self.name, expected),
                docs=getdoc(FaultCode.DEFAULT_TYPE_MISMATCH),
                option=self,
                default=default,
                expected=expected,
            )
        return default

    # --- presenter ---

    @property
    def name(self):
        """
        Canonical display name: "-s", "--long" or "-s|--long".
        """
        if self._long is None:
            return "-" + self._short
        if self._short is None:
            return "--" + self._long
        return "-%s|--%s" % (self._short, self._long)

    def usage(self):
        """
        Usage fragment for help text, bracketed unless the option is required.

        Examples
        - required Int:        -n|--number <integer>
        - optional Bool:       [-v|--verbose]
        - String with choices: [--mode (fast|slow)]
        - StringList:          [-i "<value>" [-i "<value>" ...]]
        """
        usage = self.name
        hint = self._slot.hint
        match self._slot:
            case String() if self._choices:
                usage += " (%s)" % "|".join(self._choices)
            case IntList() | FloatList() | StringList() | ResourceList():
                usage += " %s [%s %s ...]" % (hint, self.name, hint)
            case _ if self.arity and hint:
                usage += " " + hint
        if not self._required:
            usage = "[%s]" % usage
        return usage

    def helpline(self):
        """
        One-line help: the description, plus the default for optional options.
        """
        message = self._descr or ""
        if message and not self._required and self._default is not None:
            message += ". Default: %s" % (self._default,)
        return message


__all__ = (
    "Option",
)

# Keep the metaclass out of star-imports and docs.
del OptionType
