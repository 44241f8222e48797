"""
namespace_resolver.py
Folds the namespaces of several parsed modules into one namespace forest.

Same-named namespaces merge recursively, siblings keep their first insertion position, and a
function re-declared at the same path takes the later declaration. Every function and
notification becomes a Fun that owns a copy of what generators need plus its qualified path.
"""
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from idl_ast import Comment, Field, FunctionModifier, Module, NamespaceDecl
from generators.generator_utils import module_name, qualified_name, variant_name, wire_name


class ResolveError(Exception):
    pass


class DuplicateFunctionError(ResolveError):
    def __init__(self, path: Tuple[str, ...]):
        super().__init__(f"function '{'.'.join(path)}' is declared more than once")
        self.path = path


class NamingCollisionError(ResolveError):
    """Two different declarations map to the same wire method name, union variant or Rust module."""
    def __init__(self, kind: str, name: str, first, second):
        super().__init__(
            f"{kind} '{name}' is shared by '{first.dotted_path}' and '{second.dotted_path}'")
        self.kind = kind
        self.name = name
        self.first = first
        self.second = second


class FunKind(Enum):
    REQUEST = "request"
    NOTIFICATION = "notification"


class Fun:
    """Resolved function or notification, addressed by its full dotted path. Read-only after construction."""
    __slots__ = ('_name', '_kind', '_path', '_modifiers', '_params', '_results', '_comment')

    def __init__(self, name: str, kind: FunKind, path: Tuple[str, ...], params: List[Field],
                 results: Optional[List[Field]] = None, modifiers: Optional[List[FunctionModifier]] = None,
                 comment: Optional[Comment] = None):
        self._name = name
        self._kind = kind
        self._path = tuple(path)
        self._params = tuple(params)
        self._results = tuple(results or ())
        self._modifiers = tuple(modifiers or ())
        self._comment = comment

    @classmethod
    def from_function(cls, decl, prefix: Tuple[str, ...]) -> 'Fun':
        kind = FunKind.NOTIFICATION if decl.is_notification() else FunKind.REQUEST
        return cls(decl.name.text, kind, prefix + (decl.name.text,), decl.params,
                   [] if kind == FunKind.NOTIFICATION else decl.results,
                   modifiers=decl.modifiers, comment=decl.comment)

    @classmethod
    def from_notification(cls, decl, prefix: Tuple[str, ...]) -> 'Fun':
        return cls(decl.name.text, FunKind.NOTIFICATION, prefix + (decl.name.text,), decl.params,
                   modifiers=decl.modifiers, comment=decl.comment)

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> FunKind:
        return self._kind

    @property
    def path(self) -> Tuple[str, ...]:
        return self._path

    @property
    def params(self) -> Tuple[Field, ...]:
        return self._params

    @property
    def results(self) -> Tuple[Field, ...]:
        return self._results

    @property
    def modifiers(self) -> Tuple[FunctionModifier, ...]:
        return self._modifiers

    @property
    def comment(self) -> Optional[Comment]:
        return self._comment

    @property
    def dotted_path(self) -> str:
        return '.'.join(self._path)

    def is_notification(self) -> bool:
        return self._kind == FunKind.NOTIFICATION

    def rpc_name(self) -> str:
        return wire_name(self._path)

    def variant_name(self) -> str:
        return variant_name(self._path)

    def qualified_name(self, separator: str = '::') -> str:
        return qualified_name(self._path, separator)

    def mod_name(self) -> str:
        return module_name(self._path)

    def type_path(self, separator: str = '::') -> str:
        """Path of the generated leaf module: the namespace segments, then the module identifier."""
        return qualified_name(self._path[:-1] + (self.mod_name(),), separator)

    def _key(self):
        def fields(fs):
            return tuple((f.name.text, f.typ) for f in fs)
        return (self._path, self._kind, fields(self._params), fields(self._results))

    def __eq__(self, other):
        return isinstance(other, Fun) and self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return f"Fun({self.dotted_path!r}, {self._kind.value})"


class StructDef:
    """Owned copy of a struct declaration."""
    def __init__(self, name: str, fields: List[Field], comment: Optional[Comment] = None,
                 path: Tuple[str, ...] = ()):
        self.name = name
        self.fields = list(fields)
        self.comment = comment
        self.path = tuple(path)

    @property
    def dotted_path(self) -> str:
        return '.'.join(self.path)

    def __eq__(self, other):
        return (isinstance(other, StructDef) and self.path == other.path
                and [(f.name.text, f.typ) for f in self.fields] == [(f.name.text, f.typ) for f in other.fields])

    def __repr__(self):
        return f"StructDef({'.'.join(self.path)!r})"


class Namespace:
    """A namespace in the merged forest. Owns its children; nothing points back up."""
    def __init__(self, name: str, comment: Optional[Comment] = None, path: Tuple[str, ...] = ()):
        self.name = name
        self.comment = comment
        self.path = tuple(path) or (name,)
        self.children: Dict[str, 'Namespace'] = {}
        self.funs: Dict[str, Fun] = {}
        self.structs: Dict[str, StructDef] = {}

    @property
    def dotted_path(self) -> str:
        return '.'.join(self.path)

    @classmethod
    def build(cls, decl: NamespaceDecl, prefix: Tuple[str, ...] = ()) -> 'Namespace':
        """Rebuild a namespace declaration (and everything below it) into a fresh Namespace."""
        path = prefix + (decl.name.text,)
        ns = cls(decl.name.text, decl.comment, path)
        for f in decl.functions:
            ns.funs[f.name.text] = Fun.from_function(f, path)
        for n in decl.notifications:
            ns.funs[n.name.text] = Fun.from_notification(n, path)
        for s in decl.structs:
            ns.structs[s.name.text] = StructDef(s.name.text, s.fields, s.comment, path + (s.name.text,))
        for child_decl in decl.namespaces:
            child = cls.build(child_decl, path)
            if child.name in ns.children:
                ns.children[child.name].merge(child)
            else:
                ns.children[child.name] = child
        return ns

    def merge(self, rhs: 'Namespace', overwritten: Optional[list] = None):
        """
        Merge `rhs` into this namespace. `rhs` is consumed: its nodes move into this tree.
        Overwritten funs are reported to `overwritten` as (path, old, new).
        """
        if rhs.comment:
            self.comment = rhs.comment
        for k, v in rhs.children.items():
            if k in self.children:
                self.children[k].merge(v, overwritten)
            else:
                self.children[k] = v
        for k, v in rhs.funs.items():
            if k in self.funs and overwritten is not None:
                overwritten.append((v.path, self.funs[k], v))
            self.funs[k] = v
        for k, v in rhs.structs.items():
            self.structs[k] = v

    def all_funs(self) -> Iterator[Fun]:
        """Child namespaces first, then this namespace's own funs, all in insertion order."""
        for child in self.children.values():
            yield from child.all_funs()
        yield from self.funs.values()

    def all_structs(self) -> Iterator[StructDef]:
        for child in self.children.values():
            yield from child.all_structs()
        yield from self.structs.values()

    def __eq__(self, other):
        if not isinstance(other, Namespace):
            return False
        return (self.name == other.name and self.path == other.path
                and list(self.children.items()) == list(other.children.items())
                and list(self.funs.items()) == list(other.funs.items())
                and list(self.structs.items()) == list(other.structs.items()))

    def __repr__(self):
        return f"Namespace({'.'.join(self.path)!r})"


class NamespaceForest:
    """All top-level namespaces of a generator run, keyed by name in first-seen order."""
    def __init__(self, strict: bool = False, verbose: bool = False):
        self.namespaces: Dict[str, Namespace] = {}
        self.strict = strict
        self.verbose = verbose
        self.overwritten: List[Tuple[Tuple[str, ...], Fun, Fun]] = []

    def debug_print(self, message: str) -> None:
        if self.verbose:
            print(message)

    def add_module(self, module: Module) -> 'NamespaceForest':
        for decl in module.namespaces:
            self.add_namespace(Namespace.build(decl))
        return self

    def add_namespace(self, ns: Namespace):
        if ns.name in self.namespaces:
            before = len(self.overwritten)
            self.namespaces[ns.name].merge(ns, self.overwritten)
            for path, old, new in self.overwritten[before:]:
                if self.strict:
                    raise DuplicateFunctionError(path)
                self.debug_print(f"DEBUG: '{'.'.join(path)}' redeclared, keeping the later declaration")
        else:
            self.namespaces[ns.name] = ns

    def merge(self, other: 'NamespaceForest') -> 'NamespaceForest':
        """Fold another forest into this one. `other` is consumed."""
        for ns in other.namespaces.values():
            self.add_namespace(ns)
        return self

    def funs(self, kind: Optional[FunKind] = None) -> Iterator[Fun]:
        for ns in self.namespaces.values():
            for fun in ns.all_funs():
                if kind is None or fun.kind == kind:
                    yield fun

    def structs(self) -> Iterator[StructDef]:
        for ns in self.namespaces.values():
            yield from ns.all_structs()

    def __eq__(self, other):
        return isinstance(other, NamespaceForest) and list(self.namespaces.items()) == list(other.namespaces.items())

    def __repr__(self):
        return f"NamespaceForest({list(self.namespaces)!r})"


def resolve_modules(modules: List[Module], strict: bool = False, verbose: bool = False) -> NamespaceForest:
    """Fold an ordered list of parsed modules into one namespace forest."""
    forest = NamespaceForest(strict=strict, verbose=verbose)
    for module in modules:
        forest.add_module(module)
    return forest


def _check_module_names(ns: Namespace) -> None:
    # Child namespaces, leaf modules and structs all land in the same Rust type namespace
    seen = {}
    entries = ([(name, child) for name, child in ns.children.items()]
               + [(fun.mod_name(), fun) for fun in ns.funs.values()]
               + [(name, st) for name, st in ns.structs.items()])
    for name, item in entries:
        other = seen.get(name)
        if other is not None:
            raise NamingCollisionError("module name", '::'.join(ns.path + (name,)), other, item)
        seen[name] = item
    for child in ns.children.values():
        _check_module_names(child)


def check_name_collisions(forest: NamespaceForest) -> None:
    """
    Raise NamingCollisionError if two funs share a wire method name or a variant identifier,
    or if two items inside one namespace would be emitted under the same Rust name.
    """
    seen_wire: Dict[str, Fun] = {}
    seen_variant: Dict[str, Fun] = {}
    for fun in forest.funs():
        for kind, name, seen in (("wire method name", fun.rpc_name(), seen_wire),
                                 ("variant identifier", fun.variant_name(), seen_variant)):
            other = seen.get(name)
            if other is not None and other.path != fun.path:
                raise NamingCollisionError(kind, name, other, fun)
            seen[name] = fun

    for ns in forest.namespaces.values():
        _check_module_names(ns)
