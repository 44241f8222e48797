"""
output.py
Indentation-aware text emission shared by the generators.

A Scope writes through to a text sink (an open file, a StringIO) and indents every line it
starts. Child scopes indent one level deeper, blocks and delimited lists open and close their
brackets around a `with` body, so nesting in the generator code is the nesting of the output.
"""
import io
from contextlib import contextmanager
from enum import Enum
from typing import Iterable, Iterator, Optional

INDENT_WIDTH = 4


class Brackets(Enum):
    ROUND = ("(", ")")
    SQUARE = ("[", "]")
    CURLY = ("{", "}")
    ANGLE = ("<", ">")
    NONE = ("", "")

    @property
    def open(self) -> str:
        return self.value[0]

    @property
    def close(self) -> str:
        return self.value[1]


class ScopeState(Enum):
    NEED_INDENT = "need_indent"
    INDENTED = "indented"


class Scope:
    def __init__(self, writer, indent: int = 0):
        self.writer = writer
        self.indent = indent
        self.state = ScopeState.NEED_INDENT

    def write(self, d) -> 'Scope':
        """
        Write text (or an element with a write_to method). Text after a newline is indented
        when something non-empty follows it; blank lines stay empty.
        """
        if hasattr(d, 'write_to'):
            d.write_to(self)
            return self
        for i, token in enumerate(str(d).split('\n')):
            if i > 0:
                self.writer.write('\n')
                self.state = ScopeState.NEED_INDENT
            if not token:
                continue
            if self.state == ScopeState.NEED_INDENT:
                self.writer.write(' ' * self.indent)
                self.state = ScopeState.INDENTED
            self.writer.write(token)
        return self

    def lf(self) -> 'Scope':
        return self.write('\n')

    def line(self, d) -> 'Scope':
        return self.write(d).lf()

    def lines(self, items: Iterable) -> 'Scope':
        for item in items:
            self.line(item)
        return self

    def comment(self, comment) -> 'Scope':
        """Write doc comment lines as '///' comments. Accepts a Comment, a list of lines, or None."""
        if comment is None:
            return self
        for line in getattr(comment, 'lines', comment):
            self.line(f"/// {line}".rstrip())
        return self

    def fresh_line(self) -> bool:
        return self.state == ScopeState.NEED_INDENT

    def scope(self) -> 'Scope':
        """A child scope on the same sink, one indentation level deeper."""
        return Scope(self.writer, self.indent + INDENT_WIDTH)

    @contextmanager
    def indented(self) -> Iterator['Scope']:
        child = self.scope()
        try:
            yield child
        finally:
            if not child.fresh_line():
                child.lf()

    @contextmanager
    def block(self, terminator: str = "") -> Iterator['Scope']:
        """
        `{`, an indented child scope, then `}` followed by `terminator` and a newline.
        The opening brace joins the current line when it is not empty.
        """
        if not self.fresh_line():
            self.write(" ")
        self.line("{")
        child = self.scope()
        try:
            yield child
        finally:
            if not child.fresh_line():
                child.lf()
            self.write("}").write(terminator).lf()

    @contextmanager
    def delimited(self, brackets: Brackets, separator: str = ", ",
                  omit_empty: bool = False) -> Iterator['DelimitedList']:
        lst = DelimitedList(self, brackets, separator, omit_empty)
        try:
            yield lst
        finally:
            lst.close()

    def write_list(self, items: Iterable, brackets: Brackets, separator: str = ", ",
                   omit_empty: bool = False) -> 'Scope':
        with self.delimited(brackets, separator, omit_empty) as lst:
            for item in items:
                lst.item(item)
        return self


class DelimitedList:
    """
    Writes the open bracket with the first item, the separator before every later item, and
    the close bracket once on close(). An empty list renders as a bare bracket pair, or as
    nothing at all with omit_empty.
    """
    def __init__(self, scope: Scope, brackets: Brackets, separator: str = ", ", omit_empty: bool = False):
        self.scope = scope
        self.brackets = brackets
        self.separator = separator
        self.omit_empty = omit_empty
        self.empty = True
        self.closed = False

    def item(self, item) -> 'DelimitedList':
        if self.closed:
            raise ValueError("list is already closed")
        if self.empty:
            self.scope.write(self.brackets.open)
            self.empty = False
        else:
            self.scope.write(self.separator)
        self.scope.write(item)
        return self

    def close(self):
        if self.closed:
            return
        self.closed = True
        if self.empty:
            if self.omit_empty:
                return
            self.scope.write(self.brackets.open).write(self.brackets.close)
        else:
            self.scope.write(self.brackets.close)


def render(element, indent: int = 0) -> str:
    """Render anything Scope.write accepts to a string."""
    buf = io.StringIO()
    Scope(buf, indent).write(element)
    return buf.getvalue()


def open_output(path: str, newline: Optional[str] = "\n"):
    """Open a generated artifact for writing (created or truncated)."""
    return open(path, 'w', encoding='utf-8', newline=newline)
