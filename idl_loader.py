# idl_loader.py
# Reads schema files and turns lark parse trees into the declaration tree from idl_ast.py.
import os
from typing import List, Optional

from lark import Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from idl_ast import (
    Comment, Field, FunctionDecl, FunctionModifier, Identifier, Module, NamespaceDecl,
    NotificationDecl, Span, StructDecl,
)
from generators.generator_utils import to_snake
from lark_parser import parse_idl


class IdlSyntaxError(Exception):
    """A schema file failed to parse. `diagnostic` holds the formatted, human-readable report."""
    def __init__(self, file: str, line: int, column: int, message: str, diagnostic: str):
        super().__init__(f"{file}:{line}:{column}: {message}")
        self.file = file
        self.line = line
        self.column = column
        self.message = message
        self.diagnostic = diagnostic


def load_idl_file(path: str) -> Module:
    """Convenience function to load a schema file and return its Module."""
    with open(path, 'r', encoding='utf-8') as f:
        text = f.read()
    return load_idl_text(text, source_file=path)


def load_idl_files(paths: List[str]) -> List[Module]:
    return [load_idl_file(p) for p in paths]


def load_idl_text(text: str, source_file: str = "<string>") -> Module:
    try:
        tree = parse_idl(text)
    except UnexpectedInput as e:
        raise _syntax_error(e, text, source_file) from e
    return build_module_from_lark_tree(tree, text, source_file)


def _describe_unexpected(e: UnexpectedInput) -> str:
    if isinstance(e, UnexpectedCharacters):
        return f"unexpected character {e.char!r}"
    if isinstance(e, UnexpectedEOF):
        expected = ", ".join(sorted(e.expected))
        return f"unexpected end of input (expected {expected})"
    if isinstance(e, UnexpectedToken):
        expected = ", ".join(sorted(e.expected))
        return f"unexpected {e.token.type} {str(e.token)!r} (expected {expected})"
    return str(e)


def format_parse_error(text: str, source_file: str, line: int, column: int, message: str) -> str:
    """Render a parse failure as 'file:line:col: error: ...' followed by the source line and a caret."""
    name = source_file.replace("./", "")
    lines = text.splitlines()
    out = [f"{name}:{line}:{column}: error: {message}"]
    if 1 <= line <= len(lines):
        out.append(lines[line - 1])
        out.append(" " * max(column - 1, 0) + "^")
    return "\n".join(out)


def _syntax_error(e: UnexpectedInput, text: str, source_file: str) -> IdlSyntaxError:
    line = getattr(e, 'line', -1)
    column = getattr(e, 'column', -1)
    if line is None or line < 1:
        # UnexpectedEOF carries no position; point just past the last line
        lines = text.splitlines() or [""]
        line, column = len(lines), len(lines[-1]) + 1
    message = _describe_unexpected(e)
    return IdlSyntaxError(source_file, line, column, message,
                          format_parse_error(text, source_file, line, column, message))


def build_module_from_lark_tree(tree: Tree, text: str, source_file: str = "?") -> Module:
    """Build a Module from a lark parse tree. `text` is the parsed source, used to copy type expressions."""

    def span_of_token(tok: Token) -> Span:
        return Span(source_file, tok.line, tok.column, tok.start_pos, tok.end_pos)

    def span_of_tree(node: Tree) -> Span:
        meta = node.meta
        if getattr(meta, 'empty', True):
            return Span(source_file)
        return Span(source_file, meta.line, meta.column, meta.start_pos, meta.end_pos)

    def identifier(tok: Token) -> Identifier:
        return Identifier(str(tok), span_of_token(tok))

    def first_token(node: Tree, type_name: str) -> Token:
        for child in node.children:
            if isinstance(child, Token) and child.type == type_name:
                return child
        raise ValueError(f"no {type_name} token in {node.data}")

    def subtree(node: Tree, data: str) -> Optional[Tree]:
        for child in node.children:
            if isinstance(child, Tree) and child.data == data:
                return child
        return None

    def parse_docs(docs_node: Optional[Tree]) -> Optional[Comment]:
        if docs_node is None:
            return None
        lines = []
        for tok in docs_node.children:
            line = str(tok).strip()[3:]
            if line.startswith(" "):
                line = line[1:]
            lines.append(line.rstrip())
        return Comment(lines) if lines else None

    def parse_fields(list_owner: Optional[Tree]) -> List[Field]:
        if list_owner is None:
            return []
        field_list = list_owner if list_owner.data == 'field_list' else subtree(list_owner, 'field_list')
        if field_list is None:
            return []
        fields = []
        for field_node in field_list.children:
            type_node = subtree(field_node, 'type_expr')
            meta = type_node.meta
            typ = text[meta.start_pos:meta.end_pos].strip()
            fields.append(Field(
                identifier(first_token(field_node, 'NAME')),
                typ,
                comment=parse_docs(subtree(field_node, 'docs')),
                loc=span_of_tree(field_node),
            ))
        return fields

    def parse_modifiers(node: Tree) -> List[FunctionModifier]:
        modifiers_node = subtree(node, 'modifiers')
        result = []
        if modifiers_node is not None:
            for m in modifiers_node.children:
                result.append(FunctionModifier(str(m.children[0])))
        return result

    def parse_function(node: Tree, comment: Optional[Comment]) -> FunctionDecl:
        return FunctionDecl(
            identifier(first_token(node, 'NAME')),
            parse_fields(subtree(node, 'params')),
            parse_fields(subtree(node, 'results')),
            modifiers=parse_modifiers(node),
            comment=comment,
            loc=span_of_tree(node),
        )

    def parse_notification(node: Tree, comment: Optional[Comment]) -> NotificationDecl:
        return NotificationDecl(
            identifier(first_token(node, 'NAME')),
            parse_fields(subtree(node, 'params')),
            modifiers=parse_modifiers(node),
            comment=comment,
            loc=span_of_tree(node),
        )

    def parse_struct(node: Tree, comment: Optional[Comment]) -> StructDecl:
        return StructDecl(
            identifier(first_token(node, 'NAME')),
            parse_fields(subtree(node, 'field_list')),
            comment=comment,
            loc=span_of_tree(node),
        )

    def parse_namespace(node: Tree, comment: Optional[Comment]) -> NamespaceDecl:
        ns = NamespaceDecl(identifier(first_token(node, 'NAME')), comment=comment, loc=span_of_tree(node))
        for item in node.children:
            if not (isinstance(item, Tree) and item.data == 'ns_item'):
                continue
            docs_node, decl_node = item.children
            item_comment = parse_docs(docs_node)
            if decl_node.data == 'namespace':
                ns.add_item(parse_namespace(decl_node, item_comment))
            elif decl_node.data == 'function':
                ns.add_item(parse_function(decl_node, item_comment))
            elif decl_node.data == 'notification':
                ns.add_item(parse_notification(decl_node, item_comment))
            elif decl_node.data == 'struct':
                ns.add_item(parse_struct(decl_node, item_comment))
        return ns

    namespaces = []
    for toplevel in tree.children:
        docs_node, ns_node = toplevel.children
        namespaces.append(parse_namespace(ns_node, parse_docs(docs_node)))
    return Module(namespaces, loc=Span(source_file, 1, 1, 0, len(text)))


def module_name_for_path(path: str) -> str:
    """Default workspace member name for a schema file: its base name without extension, in snake_case."""
    return to_snake(os.path.splitext(os.path.basename(path))[0])
