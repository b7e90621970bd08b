"""
Scope and Symbol Table
======================

This module implements the runtime symbol table: one global scope plus a
stack of nested local scopes, innermost first.

Lookup Rules
------------
Identifier and type lookups walk the local scopes innermost-first and
then fall back to the global scope. An inner declaration shadows, but
never modifies, an outer binding of the same name.

Scope Tags
----------
Each scope records the statement kind that opened it. The executor asks
has_any_scope() whether a 'continue' or 'break' has an eligible
enclosing construct.

Slot Table
----------
Every variable registered with add_ident() receives a handle, an integer
key into the slot table. Pointers store handles (see PointerRef) and
resolve them here. Popping a scope releases its handles, so a pointer
that outlives its target is detected on dereference.
"""

import itertools
import logging
from contextlib import contextmanager
from enum import Enum, auto
from typing import Optional

from cwalk.interp.errors import DanglingPointerError, NullPointerError
from cwalk.interp.types import DataType
from cwalk.interp.variable import Variable, PointerRef


logger = logging.getLogger(__name__)


class ScopeTag(Enum):
    """Statement kind that introduced a scope."""
    GLOBAL = auto()
    FUNCTION = auto()
    BLOCK = auto()
    FOR = auto()
    WHILE = auto()
    DO_WHILE = auto()
    SWITCH = auto()


# Tags that make 'continue' and 'break' legal
LOOP_TAGS = (ScopeTag.FOR, ScopeTag.WHILE, ScopeTag.DO_WHILE)
BREAKABLE_TAGS = LOOP_TAGS + (ScopeTag.SWITCH,)


class Scope:
    """
    A single lexical scope.

    Attributes:
        tag: The statement kind that opened this scope
        idents: Variables declared in this scope, by name
        types: Type aliases (typedefs) declared in this scope, by name
    """

    def __init__(self, tag: ScopeTag):
        self.tag = tag
        self.idents: dict[str, Variable] = {}
        self.types: dict[str, DataType] = {}

    def __repr__(self) -> str:
        return f"Scope({self.tag.name}, idents={list(self.idents)})"


class Scopes:
    """
    The global scope plus the stack of active local scopes.

    Example:
        scopes = Scopes()
        with scopes.scope(ScopeTag.BLOCK):
            scopes.add_ident("x", Variable.declare(TYPE_INT, "x"))
            scopes.find_ident("x")
        scopes.find_ident("x")   # None
    """

    def __init__(self):
        self.global_scope = Scope(ScopeTag.GLOBAL)
        self.locals: list[Scope] = []   # innermost first
        self._slots: dict[int, Variable] = {}
        self._handles = itertools.count(1)

    # =========================================================================
    # Scope Stack
    # =========================================================================

    @property
    def current(self) -> Scope:
        """The innermost scope, or the global scope if none is active."""
        return self.locals[0] if self.locals else self.global_scope

    @property
    def depth(self) -> int:
        """Number of active local scopes."""
        return len(self.locals)

    def in_global_scope(self) -> bool:
        return not self.locals

    def push_scope(self, tag: ScopeTag) -> Scope:
        """Create and activate a new innermost scope."""
        scope = Scope(tag)
        self.locals.insert(0, scope)
        logger.debug(f"Push {tag.name} scope (depth {self.depth})")
        return scope

    def pop_scope(self) -> Scope:
        """
        Deactivate the innermost scope and release its variables' handles.

        Raises:
            RuntimeError: If no local scope is active
        """
        if not self.locals:
            raise RuntimeError("pop_scope() called with no local scope active")
        scope = self.locals.pop(0)
        for variable in scope.idents.values():
            if variable.handle is not None:
                self._slots.pop(variable.handle, None)
        logger.debug(f"Pop {scope.tag.name} scope (depth {self.depth})")
        return scope

    @contextmanager
    def scope(self, tag: ScopeTag):
        """Push a scope for the duration of a with-block."""
        scope = self.push_scope(tag)
        try:
            yield scope
        finally:
            self.pop_scope()

    def has_any_scope(self, *tags: ScopeTag) -> bool:
        """Return True if any active local scope carries one of ``tags``."""
        return any(scope.tag in tags for scope in self.locals)

    # =========================================================================
    # Lookup
    # =========================================================================

    def _search(self, only_global: bool):
        if not only_global:
            yield from self.locals
        yield self.global_scope

    def find_ident(self, name: str, only_global: bool = False) -> Optional[Variable]:
        """Resolve an identifier, innermost scope first."""
        for scope in self._search(only_global):
            variable = scope.idents.get(name)
            if variable is not None:
                return variable
        return None

    def find_type(self, name: str, only_global: bool = False) -> Optional[DataType]:
        """Resolve a type alias, innermost scope first."""
        for scope in self._search(only_global):
            data_type = scope.types.get(name)
            if data_type is not None:
                return data_type
        return None

    def declared_in_current(self, name: str) -> bool:
        """Return True if ``name`` is already an identifier of the current scope."""
        return name in self.current.idents

    # =========================================================================
    # Registration
    # =========================================================================

    def add_ident(self, name: str, variable: Variable) -> Variable:
        """
        Register a variable in the current scope and give it a handle.

        Redeclaration is checked by the caller; this silently rebinds.
        """
        variable.name = name
        variable.handle = next(self._handles)
        self._slots[variable.handle] = variable
        self.current.idents[name] = variable
        return variable

    def add_type(self, name: str, data_type: DataType) -> None:
        """Register a type alias in the current scope."""
        self.current.types[name] = data_type

    # =========================================================================
    # Pointer Resolution
    # =========================================================================

    def resolve(self, ref: Optional[PointerRef]) -> Variable:
        """
        Return the variable a pointer value refers to.

        Raises:
            NullPointerError: If ``ref`` is None
            DanglingPointerError: If the target's scope has been popped
        """
        if ref is None:
            raise NullPointerError()
        variable = self._slots.get(ref.handle)
        if variable is None:
            raise DanglingPointerError()
        return variable

    # =========================================================================
    # Suggestions
    # =========================================================================

    def visible_names(self) -> list[str]:
        """Return every identifier visible from the current scope."""
        names = []
        for scope in self._search(False):
            for name in scope.idents:
                if name not in names:
                    names.append(name)
        return names

    def similar_names(self, name: str) -> list[str]:
        """
        Find visible identifiers with names close to ``name``.

        Used for "did you mean" hints on undeclared identifiers.
        """
        similar = []
        for candidate in self.visible_names():
            if (
                abs(len(candidate) - len(name)) <= 1
                and _edit_distance(name.lower(), candidate.lower()) <= 2
            ):
                similar.append(candidate)
        return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = range(len(s2) + 1)
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min((
                    distances[j],
                    distances[j + 1],
                    new_distances[-1]
                )))
        distances = new_distances

    return distances[-1]
