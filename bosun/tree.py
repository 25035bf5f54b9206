"""
Bosun command tree: nodes, builder, and scope resolution.

What this module provides
- OptionNode: an option descriptor attached to one command, with per-attachment
  overrides applied. Owned by exactly one CommandNode.
- CommandNode: a command in the tree. Owns its subcommands and options (tuples, in
  registration order) and keeps a non-owning (weak) reference to its parent.
- Builder: imperative registration API (with_option / with_command) producing an
  immutable CommandNode tree in a single depth-first pass.
- scope(node): the ordered options visible at a node, each tagged with the command
  it was declared on and its distance from the node.

Tree invariants
- exactly one root (parent is None); every other node appears in exactly one
  parent's children.
- the builder rejects cycles (a command registered inside itself, directly or
  transitively), the same option identity attached twice to one command, and two
  direct subcommands sharing a name.
- option names may repeat across scopes; the nearest scope wins during matching.
"""
import weakref
from typing import NamedTuple

from .arguments import Overrides
from .utils import *


class OptionNode:
    """
    An option as attached to a command.

    The descriptor stays the identity token (parsed values are keyed by it); every
    other field is the descriptor's value unless an Overrides replaced it.
    """

    __introspectable__ = (
        "descriptor",
        "name",
        "descr",
        "required",
        "valued",
        "choices",
        "default",
        "warn_on_invalid",
        "hidden",
    )

    descriptor = mirror("descriptor")
    name = mirror("name")
    descr = mirror("descr")
    required = mirror("required")
    valued = mirror("valued")
    choices = mirror("choices")
    default = mirror("default")
    warn_on_invalid = mirror("warn_on_invalid")
    hidden = mirror("hidden")

    def __init__(self, descriptor, overrides=Unset, /):
        if not callable(getattr(descriptor, "__option__", None)):
            raise TypeError(f"option node descriptor must be an option or a flag, not {type(descriptor).__name__}")
        if not isinstance(overrides, Overrides | Unset):
            raise TypeError("option node overrides must be an Overrides instance")

        metadata = overrides.apply(descriptor) if overrides else {
            name: getattr(descriptor, name) for name in self.__introspectable__[1:]
        }
        self._descriptor = descriptor
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def match(self, token, /):
        """
        Match a raw token against this option's name.

        returns
        - Unset when the token does not denote this option.
        - None for the bare form (token == name).
        - the text after '=' for the NAME=VALUE form (possibly empty).
        """
        if not token.startswith(name := self.name):
            return Unset
        if len(token) == len(name):
            return None
        if token[len(name)] == "=":
            return token[len(name) + 1:]
        return Unset

    def __repr__(self):
        return f"option-node(name={self.name!r}, required={self.required!r}, default={self.default!r})"


class CommandNode:
    """
    A command in the resolved tree.

    Fields mirror the command descriptor (name, descr, examples, hidden, additional);
    children and options are owned tuples. parent is resolved through a weak
    reference so the tree holds no reference cycle.
    """

    __introspectable__ = (
        "descriptor",
        "name",
        "descr",
        "examples",
        "hidden",
        "additional",
        "children",
        "options",
    )

    descriptor = mirror("descriptor")
    name = mirror("name")
    descr = mirror("descr")
    examples = mirror("examples")
    hidden = mirror("hidden")
    additional = mirror("additional")
    children = mirror("children")
    options = mirror("options")

    def __init__(self, descriptor, options, children, /):
        self._descriptor = descriptor
        self._name = descriptor.name
        self._descr = descriptor.descr
        self._examples = descriptor.examples
        self._hidden = descriptor.hidden
        self._additional = descriptor.additional
        self._options = tuple(options)
        self._children = tuple(children)
        self._parent = None

        for child in self._children:
            child._parent = weakref.ref(self)

    @property
    def parent(self):
        """
        Return the enclosing command, or None for the root.

        Raises ReferenceError when the enclosing tree has been garbage collected while
        a detached node is still in use.
        """
        if self._parent is None:
            return None
        if (parent := self._parent()) is None:
            raise ReferenceError(f"command {self.name!r} outlived its parent tree")
        return parent

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    def child(self, name, /):
        """
        Return the direct subcommand called 'name', or None.
        """
        return next((child for child in self._children if child.name == name), None)

    def __repr__(self):
        return f"command-node(name={self.name!r}, children={[child.name for child in self._children]!r})"


class ScopedOption(NamedTuple):
    option: OptionNode
    scope: str
    depth: int


def scope(node, /, depth=0):
    """
    Return the options visible at 'node', nearest scope first.

    The node's own options come first (tagged with its name and 'depth'), then the
    parent's at depth + 1, and so on up to the root. Declaration order is kept within
    a level. The sequence is rebuilt on every call.
    """
    scoped = [ScopedOption(option, node.name, depth) for option in node.options]
    if (parent := node.parent) is not None:
        scoped.extend(scope(parent, depth + 1))
    return scoped


class Builder:
    """
    Assemble a CommandNode tree from descriptors.

    Constructing a builder applies the descriptor's own declarations right away:
    its static options, then its static subcommands, then its configure hook (which
    receives this builder). Further registrations can be chained:

        root = (
            Builder(tool)
            .with_option(verbose)
            .with_command(build)
            .build()
        )

    with_command builds the child subtree immediately (depth first); build() wires
    parent references and returns the immutable root node.
    """

    def __init__(self, descriptor, /, *, ancestors=()):
        if not callable(getattr(descriptor, "__command__", None)):
            raise TypeError(f"builder descriptor must be a command, not {type(descriptor).__name__}")
        self._descriptor = descriptor
        self._ancestors = tuple(ancestors) + (descriptor,)
        self._options = []
        self._children = []

        for declaration in descriptor.options:
            self.with_option(*declaration)
        for child in descriptor.commands:
            self.with_command(child)
        if descriptor.hook is not None:
            descriptor.hook(self)

    @property
    def descriptor(self):
        return self._descriptor

    def with_option(self, descriptor, overrides=Unset, /, **fields):
        """
        Attach an option to the command being built.

        Overrides may be passed either as an Overrides instance or as keyword fields
        (required=, descr=, choices=, default=, hidden=), not both.
        """
        if fields:
            if overrides is not Unset:
                raise TypeError("with_option() takes either overrides or override fields, not both")
            overrides = Overrides(**fields)

        node = OptionNode(descriptor, overrides)
        if any(option.descriptor is descriptor for option in self._options):
            raise ValueError(f"option {node.name!r} is already attached to command {self._descriptor.name!r}")
        self._options.append(node)
        return self

    def with_command(self, descriptor, /):
        """
        Build and attach a subcommand (and its whole subtree).
        """
        if descriptor in self._ancestors:
            route = " ".join(ancestor.name for ancestor in self._ancestors)
            raise ValueError(f"command {descriptor.name!r} cannot be nested inside itself ({route})")
        if any(child.name == descriptor.name for child in self._children):
            raise ValueError(f"subcommand name {descriptor.name!r} is already in use under {self._descriptor.name!r}")

        self._children.append(Builder(descriptor, ancestors=self._ancestors).build())
        return self

    def build(self):
        return CommandNode(self._descriptor, self._options, self._children)


__all__ = (
    "OptionNode",
    "CommandNode",
    "ScopedOption",
    "Builder",
    "scope",
)
