"""
optbind scan driver, help renderer and process entry point.

What this module provides
- scan(options, tokens, helper=..., strict=...): run one parse pass of option
  definitions over a token sequence.
- render_help(prog, options, descr=...): build the rich renderable for --help.
- invoke(prog, options, argv=...): read the process arguments, scan them, and turn
  faults into printed output and exit statuses.

Scanning order
- Definitions are visited in declaration order; each one scans every token not yet
  consumed, left to right, before the next definition starts. A token consumed by an
  earlier definition is invisible to later ones, and combined short flags ("-vq") lose
  one character per definition that claims it.
- After a definition's scan, a required one that never matched fails the pass, and an
  unmatched one receives its default.
- Help tokens ("-h"/"--help") stop the pass with HelpRequested carrying `helper`.
"""
import sys

from rich.console import Group
from rich.table import Table
from rich.text import Text

from .faults import *
from .options import Option
from .tokens import Tokens
from .utils import *


def scan(options, tokens, /, *, helper=Unset, strict=False):
    """
    Match, bind and default every option of `options` against `tokens`.

    Parameters
    - options: iterable of Option, scanned in order.
    - tokens: Tokens or an iterable of raw strings (wrapped into Tokens).
    - helper: zero-argument callable rendering the help text; attached to any
      HelpRequested raised during the pass.
    - strict: raise UnparsedTokensError when tokens remain unconsumed at the end.

    Returns
    - Tokens: the sequence after consumption (what no option claimed is left).

    Raises
    - HelpRequested, and any CommandException from binding, defaults, or the
      required/strict checks. The first fault ends the pass.
    """
    if not isinstance(tokens, Tokens):
        tokens = Tokens(tokens)
    options = tuple(options)
    for option in options:
        if not isinstance(option, Option):
            raise TypeError("scan() options must be Option instances")

    try:
        for option in options:
            for index in range(len(tokens)):
                if not (token := tokens[index]):
                    continue
                if not (count := option.match(token)):
                    continue
                if len(tokens) <= index + option.arity:
                    raise ArityMismatchError(
                        "not enough arguments for option %r" % option.name,
                        title="missing value",
                        code=FaultCode.ARITY_MISMATCH,
                        hint="pass a value after %r" % option.name,
                        docs=getdoc(FaultCode.ARITY_MISMATCH),
                        option=option,
                        expected=option.arity,
                        got=len(tokens) - index - 1,
                    )
                option.bind(tokens[index + 1:index + 1 + option.arity], count)
                option.consume(index, tokens)

            if option.required and not option.matched:
                raise MissingOptionError(
                    "option %r is required" % option.name,
                    title="missing option",
                    code=FaultCode.MISSING_OPTION,
                    hint="add %s to the command line" % option.usage(),
                    docs=getdoc(FaultCode.MISSING_OPTION),
                    option=option,
                )
            option.apply_default()
    except HelpRequested as request:
        raise request.__replace__(helper=helper if callable(helper) else None) from None

    if strict and (remaining := tokens.remaining()):
        raise UnparsedTokensError(
            "unknown arguments %s" % " ".join(remaining),
            title="unparsed arguments",
            code=FaultCode.UNPARSED_TOKENS,
            hint="check the spelling, or run with --help to list the options",
            docs=getdoc(FaultCode.UNPARSED_TOKENS),
            remaining=tuple(remaining),
        )
    return tokens


def render_help(prog, options, /, *, descr=Unset, colorful=True):
    """
    Render the help screen for `options` as a rich Group.

    Layout
    - "usage: <prog> [-h|--help] <usage fragments...>"
    - the description, when given
    - "Arguments:" followed by a grid of short name, long name and help line,
      starting with the built-in -h/--help entry.
- The built-in entry and its usage fragment are left out when a Help option
  already declares "-h" or "--help".

    Palette keys (overridable through __styles__ in __main__)
    - usage-label, program-name, usage-section, description-section,
      group-label, option-name, argument-description
    """
    styles = {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "usage-section": "bold #36C5F0",
        "description-section": "italic #A3A3A3",
        "group-label": "bold #FFFFFF",
        "option-name": "bold #00E6FF",
        "argument-description": "#9CA3AF",
    } | getattr(__import__("__main__"), "__styles__", {})

    def styler(style):
        return styles.get(style, "") if colorful else ""

    options = tuple(options)
    builtin = not any(name in ("-h", "--help") for option in options for name in option.names)

    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(str(prog), styler("program-name"))
    for fragment in ["[-h|--help]"] * builtin + [option.usage() for option in options]:
        usage.append(" ")
        usage.append(fragment, styler("usage-section"))

    renders = [usage]
    if descr := coalesce(descr):
        renders.append(Text(""))
        renders.append(Text(str(descr), styler("description-section")))

    table = Table.grid(padding=(0, 2))
    table.add_column(no_wrap=True)
    table.add_column(no_wrap=True)
    table.add_column()
    if builtin:
        table.add_row(
            Text("-h", styler("option-name")),
            Text("--help", styler("option-name")),
            Text("print help information", styler("argument-description")),
        )
    for option in options:
        table.add_row(
            Text("-" + option.short if option.short else "", styler("option-name")),
            Text("--" + option.long if option.long else "", styler("option-name")),
            Text(option.helpline(), styler("argument-description")),
        )

    renders.append(Text(""))
    renders.append(Text("Arguments:", styler("group-label")))
    renders.append(Text(""))
    renders.append(table)
    return Group(*renders)


def invoke(prog, options, argv=Unset, /, *, descr=Unset, shell=True, colorful=True, fancy=False):
    """
    Parse the process arguments (or `argv`) and return the bound values.

    Behavior
    - argv defaults to sys.argv[1:].
    - runs scan(..., strict=True) with a helper rendering render_help(prog, options, descr=descr).
    - HelpRequested: printed to stdout, exit status 0 (shell) or re-raised.
    - CommandException: rendered to stderr, exit status 1 (shell) or re-raised.

    Returns
    - dict mapping each option's canonical name to its slot value.
    """
    options = tuple(options)
    argv = list(coalesce(argv, sys.argv[1:]))

    @rename("helper")
    def helper():
        return render_help(prog, options, descr=descr, colorful=colorful)

    try:
        scan(options, argv, helper=helper, strict=True)
    except (HelpRequested, CommandException) as fault:
        trigger(fault, prog=prog, shell=shell, colorful=colorful, fancy=fancy)
    return {option.name: option.value for option in options}


__all__ = (
    "scan",
    "render_help",
    "invoke",
)
