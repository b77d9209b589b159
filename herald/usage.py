"""
herald usage and help rendering.

- UsageOptions: markers and rich styles used to render usage lines.
- InvocationChain: immutable trail of (label, command) links resolved while
  descending through sub-commands. extend() returns a new chain, so a branch
  never changes a chain another branch holds.
- HelpBuilder: collects usage lines (with descriptions) for commands and
  sends them to the actor; handed to commands through Special(HELP).

rendering
    /bar <name> greet [-o <option>] - greet someone

- "/" prefix, then every link: label, flags ("[-f]", "[-o <value>]"),
  positionals ("<name>" required, "[name]" optional), rest ("[args...]").
- with an actor and a permission check, rendering stops before the first
  link the actor may not run.
- with description=True the last rendered link's description follows.
- describe(command) renders the parameters that carry a descr, one indented
  line each; help lines follow every usage line with them.
"""
from collections.abc import Mapping
from typing import NamedTuple

from rich.text import Text

from .faults import ConfigurationError
from .parameters import Flag, Rest
from .utils import Unset, coalesce, mirror

STYLES = {
    "prefix": "green",
    "label": "bold green",
    "flag-marker": "cyan",
    "flag": "gold1",
    "value": "magenta",
    "required": "magenta",
    "optional": "cyan",
    "rest": "cyan",
    "description": "white",
}


class UsageOptions:
    """
    rendering configuration for usage lines.

    every marker is a plain string; styles maps the segment kinds listed in
    STYLES to rich style strings (unknown kinds are rejected).
    """
    __markers__ = (
        "prefix",
        "flag_start",
        "flag_end",
        "value_start",
        "value_end",
        "required_start",
        "required_end",
        "optional_start",
        "optional_end",
        "rest_start",
        "rest_end",
        "delimiter",
    )

    def __init__(
            self,
            *,
            prefix="/",
            flag_start="[",
            flag_end="]",
            value_start="<",
            value_end=">",
            required_start="<",
            required_end=">",
            optional_start="[",
            optional_end="]",
            rest_start="[",
            rest_end="...]",
            delimiter=" - ",
            styles=Unset,
    ):
        markers = {
            "prefix": prefix,
            "flag_start": flag_start,
            "flag_end": flag_end,
            "value_start": value_start,
            "value_end": value_end,
            "required_start": required_start,
            "required_end": required_end,
            "optional_start": optional_start,
            "optional_end": optional_end,
            "rest_start": rest_start,
            "rest_end": rest_end,
            "delimiter": delimiter,
        }
        for name, marker in markers.items():
            if not isinstance(marker, str):
                raise TypeError(f"usage-options {name!r} must be a string")
            setattr(self, "_" + name, marker)

        styles = coalesce(styles, {})
        if not isinstance(styles, Mapping):
            raise TypeError("usage-options 'styles' must be a mapping")
        if unknown := set(styles) - set(STYLES):
            raise ValueError(f"usage-options 'styles' has unknown kinds: {', '.join(sorted(unknown))}")
        self._styles = STYLES | dict(styles)

    prefix = mirror("prefix")
    flag_start = mirror("flag_start")
    flag_end = mirror("flag_end")
    value_start = mirror("value_start")
    value_end = mirror("value_end")
    required_start = mirror("required_start")
    required_end = mirror("required_end")
    optional_start = mirror("optional_start")
    optional_end = mirror("optional_end")
    rest_start = mirror("rest_start")
    rest_end = mirror("rest_end")
    delimiter = mirror("delimiter")

    def style(self, kind, /):
        return self._styles[kind]

    def __rich_repr__(self):
        for name in type(self).__markers__:
            yield name, getattr(self, name)

    def __repr__(self):
        return "usage-options(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())


class Link(NamedTuple):
    label: str
    command: object


class InvocationChain:
    """
    immutable sequence of Links.
    """
    __slots__ = ("_links",)

    def __init__(self, links=(), /):
        self._links = tuple(Link(*link) for link in links)

    @property
    def links(self):
        return self._links

    @property
    def last(self):
        return self._links[-1] if self._links else None

    def __len__(self):
        return len(self._links)

    def __iter__(self):
        return iter(self._links)

    def __eq__(self, other):
        if not isinstance(other, InvocationChain):
            return NotImplemented
        return self._links == other._links

    def __hash__(self):
        return hash(self._links)

    def extend(self, label, command, /):
        return type(self)(self._links + (Link(label, command),))

    def permitted(self, actor, check, /):
        """
        whether actor may run every link of the chain.
        """
        return all(link.command.permitted(actor, check) for link in self._links)

    def render(self, options=Unset, /, *, description=False, actor=Unset, check=Unset):
        """
        render the chain as a styled rich Text (see the module documentation).
        """
        options = coalesce(options, DEFAULT_OPTIONS)
        links = []
        for link in self._links:
            if check is not Unset and not link.command.permitted(actor, check):
                break
            links.append(link)

        text = Text(options.prefix, style=options.style("prefix"))
        for index, (label, command) in enumerate(links):
            if index:
                text.append(" ")
            text.append(label, style=options.style("label"))
            for specification in (*command.flags, *command.positionals, command.rest):
                if specification is not None:
                    text.append(" ")
                    text.append_text(_token(specification, options))

        if description and links and links[-1].command.description:
            text.append(options.delimiter + links[-1].command.description, style=options.style("description"))
        return text

    def usage(self, options=Unset, /, **kwargs):
        return self.render(options, **kwargs).plain

    def __str__(self):
        return self.usage()

    def __repr__(self):
        return f"invocation-chain({self.usage()!r})"


DEFAULT_OPTIONS = UsageOptions()


def _token(specification, options, /):
    """
    the usage segment of one flag, positional or rest specification.
    """
    if isinstance(specification, Flag):
        text = Text(options.flag_start, style=options.style("flag-marker"))
        text.append(specification.name, style=options.style("flag"))
        if not specification.boolean:
            text.append(" ")
            text.append(f"{options.value_start}{specification.value_name}{options.value_end}",
                        style=options.style("value"))
        text.append(options.flag_end, style=options.style("flag-marker"))
        return text
    if isinstance(specification, Rest):
        return Text(f"{options.rest_start}{specification.name}{options.rest_end}", style=options.style("rest"))
    if specification.optional:
        return Text(f"{options.optional_start}{specification.name}{options.optional_end}",
                    style=options.style("optional"))
    return Text(f"{options.required_start}{specification.name}{options.required_end}",
                style=options.style("required"))


def describe(command, options=Unset, /):
    """
    one indented line per flag, positional or rest of command that carries
    a descr, in usage order:
        "    [-o <option>] - the greeting option"
    """
    options = coalesce(options, DEFAULT_OPTIONS)
    lines = []
    for specification in (*command.flags, *command.positionals, command.rest):
        if specification is None or not specification.descr:
            continue
        text = Text("    ")
        text.append_text(_token(specification, options))
        text.append(options.delimiter + specification.descr, style=options.style("description"))
        lines.append(text)
    return lines


class HelpBuilder:
    """
    collect usage lines for commands and send them to the actor.

    parameters
    - registry: registry of the command being executed.
    - chain: chain up to and including the command being executed.
    - actor / host: used for permission filtering and for show().
    - options: UsageOptions.

    lookup
    - without a handler, names resolve in the current registry and render
      as siblings of the running command ("/greet <name>").
    - with a handler (typically the one a sub-command is about to return),
      names resolve among its commands and render below the running
      command ("/bar <name> greet [-o <option>]").
      the handler gets a throwaway registry; the sub-command cache is left
      to the dispatcher.

    for_command() and for_handler() return the builder, so calls chain:
        help.for_command("greet").for_command("say").show()
    """

    def __init__(self, registry, chain, actor, host, options=Unset):
        self._registry = registry
        self._chain = chain
        self._actor = actor
        self._host = host
        self._options = coalesce(options, DEFAULT_OPTIONS)
        self._lines = []

    def _resolve(self, handler):
        if handler is Unset:
            return self._registry, InvocationChain(self._chain.links[:-1])
        return type(self._registry)(handler, types=self._registry.types), self._chain

    def _add(self, registry, chain, name, permissions):
        if (binding := registry.lookup(name)) is None:
            raise ConfigurationError(f"help requested for unknown command {name!r}")
        chain = chain.extend(name, binding.command)
        if permissions and not chain.permitted(self._actor, self._host.has_permission):
            return
        self._lines.append(chain.render(self._options, description=True))
        self._lines.extend(describe(binding.command, self._options))

    def for_command(self, name, /, handler=Unset, *, permissions=True):
        """
        add the usage line of command name, followed by one line per
        described parameter. a command the actor may not run is skipped
        unless permissions is False.
        """
        self._add(*self._resolve(handler), name, permissions)
        return self

    def for_handler(self, handler=Unset, /, *, permissions=True):
        """
        add the lines of every command of handler (the current registry by default).
        """
        registry, chain = self._resolve(handler)
        for binding in registry.bindings:
            self._add(registry, chain, binding.command.name, permissions)
        return self

    @property
    def lines(self):
        """
        the collected lines as plain strings.
        """
        return tuple(line.plain for line in self._lines)

    def show(self):
        """
        send the collected lines to the actor and start over.
        """
        for line in self._lines:
            self._host.send_line(self._actor, line)
        self._lines.clear()


__all__ = (
    "STYLES",
    "UsageOptions",
    "Link",
    "InvocationChain",
    "HelpBuilder",
    "describe",
)
