"""
optbind faults (errors, warnings, the help request) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- HelpRequested: the distinguished "help was asked for" outcome. It is not an
  error; its trigger prints the help text to stdout and exits with status 0.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

UX goals
- Name-first messages: every message quotes the canonical option name ('-n|--number')
  so users can match the complaint with what they typed.
- Soft but technical language: short titles, one-sentence bodies, a single clear hint.

Integration
- The binder, default applier and scan driver raise faults directly (non-shell flow).
- invoke() catches them at the top and calls trigger(fault, shell=..., ...) so they
  render via rich and terminate the process with the proper status.
"""
import inspect
import os.path
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType
from typing import final

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)
stdout = Console()


class FaultCode(IntEnum):
    """
    canonical fault codes used across the engine (stable identifiers).

    grouping (by high-level domain)
    - help (10xxx)
      • HELP_REQUESTED
    - binding (1111x)
      • DUPLICATE_OPTION, VALIDATION_FAILED, ARITY_MISMATCH, CONVERSION_FAILED,
        INVALID_CHOICE, RESOURCE_OPEN_FAILED, RESOURCE_RELEASE_FAILED
    - scanning (1112x/1114x)
      • MISSING_OPTION, UNPARSED_TOKENS
    - configuration (13xxx)
      • UNSUPPORTED_TYPE, DEFAULT_TYPE_MISMATCH
    - warnings (12xxx)
      • UNREACHABLE_DEFAULT
    """
    # --- help (10xxx) ---
    HELP_REQUESTED          = 10001

    # --- binding errors (11xxx) ---
    DUPLICATE_OPTION        = 11111
    VALIDATION_FAILED       = 11112
    ARITY_MISMATCH          = 11113
    CONVERSION_FAILED       = 11114
    INVALID_CHOICE          = 11115
    RESOURCE_OPEN_FAILED    = 11116
    RESOURCE_RELEASE_FAILED = 11117

    # --- scanning errors (11xxx) ---
    MISSING_OPTION          = 11121
    UNPARSED_TOKENS         = 11141

    # --- configuration errors (13xxx) ---
    UNSUPPORTED_TYPE        = 13101
    DEFAULT_TYPE_MISMATCH   = 13102

    # --- warnings (12xxx) ---
    UNREACHABLE_DEFAULT     = 12111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _prog(options):
    main = __import__("__main__")
    if "prog" in options:
        return options["prog"]
    return getattr(main, "__prog__", os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "optbind")


def _render(fault, palette, title_style):
    """
    shared rich rendering for exceptions and warnings: header, message, hint.
    """
    styles = defaultdict(str, palette | getattr(__import__("__main__"), "__styles__", {}))
    colorful = fault.options.get("colorful", False)
    fancy = fault.options.get("fancy", False)

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    code = fault.options.get("code")
    header = Text.assemble(
        "[ ",
        text(_prog(fault.options), styler("prog-name")),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", styler("code")),
        " | ",
        text(str(fault.options.get("title", type(fault).__name__)).title(), styler(title_style)),
        " ]"
    )
    message = text(fault.message, styler("message"))
    renders = [message]
    if hint := fault.options.get("hint"):
        renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(hint, styler("hint"))))

    if fancy:
        return Panel(Group(*renders), title=header, title_align="left")
    return Group(header, *renders)


class CommandException(Exception):
    """
    base of every binding/scanning/configuration fault.

    the message is the one-sentence body; every other piece of context
    (title, code, hint, docs, the offending option, values...) lives in the
    read-only `options` mapping.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message is not Unset else type(self).__name__

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, "error-title")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        fault = type(self)(self.message, **{**self.options, **overrides})
        fault.__cause__ = self.__cause__
        return fault


class DuplicateOptionError(CommandException): ...
class ValidationFailedError(CommandException): ...
class ArityMismatchError(CommandException): ...
class ConversionError(CommandException): ...
class InvalidChoiceError(CommandException): ...
class ResourceOpenError(CommandException): ...
class ResourceReleaseError(CommandException): ...
class MissingOptionError(CommandException): ...
class UnparsedTokensError(CommandException): ...
class UnsupportedTypeError(CommandException): ...
class DefaultTypeMismatchError(CommandException): ...


class CommandWarning(ABC, Warning):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning-title")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class UnreachableDefaultWarning(CommandWarning): ...


@final
class HelpRequested(Exception):
    """
    raised when a help token (or an option bound to a Help slot) is met.

    the scan driver attaches the `helper` renderer (a zero-argument callable
    returning a str or a rich renderable); triggering in shell mode prints it
    to stdout and exits with status 0, otherwise the request is re-raised so
    the caller decides.
    """

    def __init__(self, message="help requested", /, **options):
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __rich__(self):
        if callable(helper := self.options.get("helper")):
            return helper()
        return Text("")

    def __trigger__(self) -> None:
        if not self.options.get("shell"):
            raise self from None
        stdout.print(self)
        sys.exit(0)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})

    def __init_subclass__(cls, **options):
        raise TypeError("type 'HelpRequested' is not an acceptable base type")


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised
      and warnings go through the warnings module.

    typical options
    - prog, shell, fancy, colorful, title, code, hint, docs, helper, and any other
      context the reporter may want to show (e.g., option/value/values).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "DuplicateOptionError",
    "ValidationFailedError",
    "ArityMismatchError",
    "ConversionError",
    "InvalidChoiceError",
    "ResourceOpenError",
    "ResourceReleaseError",
    "MissingOptionError",
    "UnparsedTokensError",
    "UnsupportedTypeError",
    "DefaultTypeMismatchError",
    "CommandWarning",
    "UnreachableDefaultWarning",
    "HelpRequested",
    "FaultCode",
    "trigger",
    "getdoc",
)
