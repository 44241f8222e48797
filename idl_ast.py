"""
idl_ast.py
The parsed declaration tree: namespaces, functions, notifications, structs and fields exactly
as they appear in one IDL file, with source spans and doc comments. Nothing here is resolved
or merged; see namespace_resolver.py for that.
"""
from enum import Enum
from typing import List, Optional


class Span:
    def __init__(self, file: str = "?", line: int = -1, column: int = -1, start: int = -1, end: int = -1):
        self.file = file
        self.line = line
        self.column = column
        self.start = start  # 0-based offset into the source text
        self.end = end

    def __repr__(self):
        return f"Span({self.file}:{self.line}:{self.column})"


class Identifier:
    def __init__(self, text: str, span: Optional[Span] = None):
        self.text = text
        self.span = span or Span()

    def __repr__(self):
        return f"Identifier({self.text!r})"


class Comment:
    """Doc comment lines (the text after '///'), in source order."""
    def __init__(self, lines: Optional[List[str]] = None):
        self.lines = lines or []

    def __bool__(self):
        return bool(self.lines)

    def __eq__(self, other):
        return isinstance(other, Comment) and self.lines == other.lines

    def __repr__(self):
        return f"Comment({self.lines!r})"


class FunctionModifier(Enum):
    SERVER = "server"
    CLIENT = "client"
    NOTIFICATION = "notification"


class Field:
    def __init__(self, name: Identifier, typ: str, comment: Optional[Comment] = None, loc: Optional[Span] = None):
        self.name = name
        self.typ = typ  # type expression text, copied verbatim from the source
        self.comment = comment
        self.loc = loc or Span()

    def __repr__(self):
        return f"Field({self.name.text}: {self.typ})"


class FunctionDecl:
    def __init__(self, name: Identifier, params: List[Field], results: List[Field],
                 modifiers: Optional[List[FunctionModifier]] = None, comment: Optional[Comment] = None,
                 loc: Optional[Span] = None):
        self.name = name
        self.params = params
        self.results = results
        self.modifiers = modifiers or []
        self.comment = comment
        self.loc = loc or Span()

    def is_notification(self) -> bool:
        return FunctionModifier.NOTIFICATION in self.modifiers


class NotificationDecl:
    def __init__(self, name: Identifier, params: List[Field], modifiers: Optional[List[FunctionModifier]] = None,
                 comment: Optional[Comment] = None, loc: Optional[Span] = None):
        self.name = name
        self.params = params
        self.modifiers = modifiers or []
        self.comment = comment
        self.loc = loc or Span()


class StructDecl:
    def __init__(self, name: Identifier, fields: List[Field], comment: Optional[Comment] = None,
                 loc: Optional[Span] = None):
        self.name = name
        self.fields = fields
        self.comment = comment
        self.loc = loc or Span()


class NamespaceDecl:
    def __init__(self, name: Identifier, functions: Optional[List[FunctionDecl]] = None,
                 notifications: Optional[List[NotificationDecl]] = None,
                 structs: Optional[List[StructDecl]] = None,
                 namespaces: Optional[List['NamespaceDecl']] = None,
                 comment: Optional[Comment] = None, loc: Optional[Span] = None):
        self.name = name
        self.functions = functions or []
        self.notifications = notifications or []
        self.structs = structs or []
        self.namespaces = namespaces or []
        self.comment = comment
        self.loc = loc or Span()

    def add_item(self, item):
        if isinstance(item, FunctionDecl):
            self.functions.append(item)
        elif isinstance(item, NotificationDecl):
            self.notifications.append(item)
        elif isinstance(item, StructDecl):
            self.structs.append(item)
        elif isinstance(item, NamespaceDecl):
            self.namespaces.append(item)
        else:
            raise TypeError(f"not a namespace item: {item!r}")


class Module:
    """One parsed IDL file."""
    def __init__(self, namespaces: List[NamespaceDecl], loc: Optional[Span] = None):
        self.namespaces = namespaces
        self.loc = loc or Span()


# Shorthand constructors, mostly for building trees in code and in tests.

def ident(text: str) -> Identifier:
    return Identifier(text)


def field(name: str, typ: str, doc: Optional[List[str]] = None) -> Field:
    return Field(Identifier(name), typ, Comment(doc) if doc else None)


def function(name: str, params=None, results=None, modifiers=None, doc=None) -> FunctionDecl:
    return FunctionDecl(Identifier(name), list(params or []), list(results or []),
                        modifiers=list(modifiers or []), comment=Comment(doc) if doc else None)


def notification(name: str, params=None, doc=None) -> NotificationDecl:
    return NotificationDecl(Identifier(name), list(params or []), comment=Comment(doc) if doc else None)


def struct(name: str, fields=None, doc=None) -> StructDecl:
    return StructDecl(Identifier(name), list(fields or []), comment=Comment(doc) if doc else None)


def namespace(name: str, *items, doc=None) -> NamespaceDecl:
    ns = NamespaceDecl(Identifier(name), comment=Comment(doc) if doc else None)
    for item in items:
        ns.add_item(item)
    return ns
