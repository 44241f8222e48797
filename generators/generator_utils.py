"""
Shared utilities for code generators.
Handles identifier case conversion and derives every name a function's dotted path maps to:
wire method name, union variant identifier, qualified type path and module identifier.
"""
import re
from typing import List, Sequence

# --- Case conversion ---
# Acronym followed by a capitalized word, a (capitalized) lowercase word, an acronym, or a number.
_WORD_RE = re.compile(r'[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+[0-9]*|[A-Z]+[0-9]*|[0-9]+')
_SEPARATOR_RE = re.compile(r'[^A-Za-z0-9]+')


def split_words(name: str) -> List[str]:
    """Split an identifier into words at separators and case boundaries: 'getHTTPCookies' -> get, HTTP, Cookies."""
    words = []
    for chunk in _SEPARATOR_RE.split(name):
        words.extend(_WORD_RE.findall(chunk))
    return words


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def to_upper_camel(name: str) -> str:
    return ''.join(_capitalize(w) for w in split_words(name))


def to_lower_camel(name: str) -> str:
    words = split_words(name)
    if not words:
        return ''
    return words[0].lower() + ''.join(_capitalize(w) for w in words[1:])


def to_snake(name: str) -> str:
    return '_'.join(w.lower() for w in split_words(name))


# --- Names derived from a dotted path ---
def _check_path(path: Sequence[str]) -> Sequence[str]:
    if not path:
        raise ValueError("a function path needs at least one segment")
    return path


def wire_name(path: Sequence[str]) -> str:
    """
    The method string carried on the wire: namespaces in lowerCamel, then the function in UpperCamel.
    ('svc', 'util', 'echo') -> 'svc.util.Echo'
    """
    path = _check_path(path)
    tokens = [to_lower_camel(segment) for segment in path[:-1]]
    tokens.append(to_upper_camel(path[-1]))
    return '.'.join(tokens)


def variant_name(path: Sequence[str]) -> str:
    """Union variant tag: the wire name with dots turned into underscores, lowercased."""
    return wire_name(path).replace('.', '_').lower()


def qualified_name(path: Sequence[str], separator: str = '::') -> str:
    return separator.join(_check_path(path))


def module_name(path: Sequence[str]) -> str:
    return to_snake(_check_path(path)[-1])


# Words the Rust compiler reserves; none of them can name a module.
RUST_KEYWORDS = frozenset((
    "as", "async", "await", "break", "const", "continue", "crate", "dyn", "else", "enum", "extern",
    "false", "fn", "for", "if", "impl", "in", "let", "loop", "match", "mod", "move", "mut", "pub",
    "ref", "return", "self", "Self", "static", "struct", "super", "trait", "true", "type", "unsafe",
    "use", "where", "while", "abstract", "become", "box", "do", "final", "macro", "override", "priv",
    "typeof", "unsized", "virtual", "yield", "try", "gen",
))

_IDENTIFIER_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')


def is_rust_identifier(name: str) -> bool:
    return bool(_IDENTIFIER_RE.match(name)) and name != "_" and name not in RUST_KEYWORDS


def rust_string_literal(text: str) -> str:
    """Quote text as a Rust string literal."""
    escaped = text.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n').replace('\t', '\\t')
    return f'"{escaped}"'
