"""
rust_ir.py
Small IR for the Rust constructs the RPC generator emits: functions, impl blocks, enums,
structs and attribute lists. Elements are plain data; write_to(scope) renders them through
generators.output, so brackets and indentation come from the Scope, never from string splicing.

Bodies are lists of items rendered by write_body: a string is one line ("" is a blank line),
a nested list is spliced in place, and anything else is an element with write_to.
"""
from typing import List, Optional

from generators.generator_utils import rust_string_literal
from generators.output import Brackets, Scope


def write_body(scope: Scope, items) -> None:
    for item in items:
        if item is None:
            continue
        if isinstance(item, str):
            scope.line(item)
        elif isinstance(item, (list, tuple)):
            write_body(scope, item)
        else:
            item.write_to(scope)


def quoted(text: str) -> str:
    return rust_string_literal(text)


class Block:
    """`head {` + items + `}terminator`"""
    def __init__(self, head: str, items=None, terminator: str = ""):
        self.head = head
        self.items = list(items or [])
        self.terminator = terminator

    def write_to(self, s: Scope):
        s.write(self.head)
        with s.block(self.terminator) as b:
            write_body(b, self.items)


class Indented:
    """Items one level deeper, without braces (match arm bodies, continued expressions)."""
    def __init__(self, items=None):
        self.items = list(items or [])

    def write_to(self, s: Scope):
        with s.indented() as child:
            write_body(child, self.items)


class TypeParam:
    def __init__(self, name: str, bound: Optional[str] = None):
        self.name = name
        self.bound = bound


def _write_where(s: Scope, type_params: List[TypeParam], self_bound: Optional[str] = None):
    if self_bound is None and not any(tp.bound for tp in type_params):
        return
    s.lf()
    s.line("where")
    with s.indented() as w:
        if self_bound is not None:
            w.line(f"Self: {self_bound},")
        for tp in type_params:
            if tp.bound:
                w.line(f"{tp.name}: {tp.bound},")


class _Attributed:
    def __init__(self):
        self.attributes = []
        self.doc_comment = None

    def doc(self, comment) -> '_Attributed':
        self.doc_comment = comment
        return self

    def attr(self, attribute) -> '_Attributed':
        self.attributes.append(attribute)
        return self

    def _write_attributes(self, s: Scope):
        s.comment(self.doc_comment)
        for a in self.attributes:
            if isinstance(a, str):
                s.line(a)
            else:
                a.write_to(s)


class Fn(_Attributed):
    def __init__(self, name: str):
        super().__init__()
        self.name = name
        self.public = False
        self.is_async = False
        self.self_arg: Optional[str] = None
        self.params: List[str] = []
        self.type_params: List[TypeParam] = []
        self.ret: Optional[str] = None
        self.body_items = None
        self.where_self: Optional[str] = None

    def kw_pub(self) -> 'Fn':
        self.public = True
        return self

    def kw_async(self) -> 'Fn':
        self.is_async = True
        return self

    def returns(self, ret: str) -> 'Fn':
        self.ret = ret
        return self

    def self_param(self, self_param: str) -> 'Fn':
        self.self_arg = self_param
        return self

    def param(self, param: str) -> 'Fn':
        self.params.append(param)
        return self

    def type_param(self, name: str, bound: Optional[str] = None) -> 'Fn':
        self.type_params.append(TypeParam(name, bound))
        return self

    def self_bound(self, bound: str) -> 'Fn':
        self.where_self = bound
        return self

    def body(self, *items) -> 'Fn':
        self.body_items = list(items)
        return self

    def write_to(self, s: Scope):
        self._write_attributes(s)
        if self.public:
            s.write("pub ")
        if self.is_async:
            s.write("async ")
        s.write("fn ").write(self.name)
        s.write_list((tp.name for tp in self.type_params), Brackets.ANGLE, omit_empty=True)
        with s.delimited(Brackets.ROUND) as params:
            if self.self_arg is not None:
                params.item(self.self_arg)
            for p in self.params:
                params.item(p)
        if self.ret is not None:
            s.write(" -> ").write(self.ret)
        _write_where(s, self.type_params, self.where_self)
        if self.body_items is None:
            s.write(";").lf()
        else:
            with s.block() as b:
                write_body(b, self.body_items)


class Impl:
    def __init__(self, name: str, trait: Optional[str] = None):
        self.name = name
        self.trait = trait
        self.type_params: List[TypeParam] = []
        self.body_items = []

    def type_param(self, name: str, bound: Optional[str] = None) -> 'Impl':
        self.type_params.append(TypeParam(name, bound))
        return self

    def body(self, *items) -> 'Impl':
        self.body_items = list(items)
        return self

    def write_to(self, s: Scope):
        names = [tp.name for tp in self.type_params]
        s.write("impl")
        s.write_list(names, Brackets.ANGLE, omit_empty=True)
        if self.trait is not None:
            s.write(f" {self.trait} for")
        s.write(f" {self.name}")
        s.write_list(names, Brackets.ANGLE, omit_empty=True)
        _write_where(s, self.type_params)
        with s.block() as b:
            write_body(b, self.body_items)


def impl_trait(trait: str, name: str) -> Impl:
    return Impl(name, trait)


class EnumDef(_Attributed):
    def __init__(self, name: str):
        super().__init__()
        self.name = name
        self.public = False
        self.variants: List[str] = []

    def kw_pub(self) -> 'EnumDef':
        self.public = True
        return self

    def variant(self, variant: str) -> 'EnumDef':
        self.variants.append(variant)
        return self

    def write_to(self, s: Scope):
        self._write_attributes(s)
        if self.public:
            s.write("pub ")
        s.write("enum ").write(self.name)
        if not self.variants:
            s.write(" {}").lf()
            return
        with s.block() as b:
            for variant in self.variants:
                b.write(variant).write(",").lf()


class StructField:
    def __init__(self, name: str, typ: str, comment=None, public: bool = True):
        self.name = name
        self.typ = typ
        self.comment = comment
        self.public = public


class Struct(_Attributed):
    def __init__(self, name: str):
        super().__init__()
        self.name = name
        self.public = False
        self.fields: List[StructField] = []

    def kw_pub(self) -> 'Struct':
        self.public = True
        return self

    def field(self, name: str, typ: str, comment=None, public: bool = True) -> 'Struct':
        self.fields.append(StructField(name, typ, comment, public))
        return self

    def write_to(self, s: Scope):
        self._write_attributes(s)
        if self.public:
            s.write("pub ")
        s.write("struct ").write(self.name)
        if not self.fields:
            s.write(" {}").lf()
            return
        with s.block() as b:
            for f in self.fields:
                b.comment(f.comment)
                if f.public:
                    b.write("pub ")
                b.write(f"{f.name}: {f.typ},").lf()


class _AttributeSet:
    """A deduplicated, sorted attribute list such as #[derive(...)] or #[allow(...)]."""
    keyword = ""

    def __init__(self, items=None):
        self.items = set(items or [])

    def item(self, name: str) -> '_AttributeSet':
        self.items.add(name)
        return self

    def write_to(self, s: Scope):
        if not self.items:
            return
        s.write(f"#[{self.keyword}")
        s.write_list(sorted(self.items), Brackets.ROUND)
        s.write("]").lf()


class Derive(_AttributeSet):
    keyword = "derive"

    def debug(self) -> 'Derive':
        return self.item("Debug")

    def clone(self) -> 'Derive':
        return self.item("Clone")

    def copy(self) -> 'Derive':
        return self.item("Copy")

    def serialize(self) -> 'Derive':
        return self.item("Serialize")

    def deserialize(self) -> 'Derive':
        return self.item("Deserialize")


class Allow(_AttributeSet):
    keyword = "allow"

    def non_camel_case(self) -> 'Allow':
        return self.item("non_camel_case_types")

    def unused(self) -> 'Allow':
        return self.item("unused")


def derive() -> Derive:
    return Derive()


def allow() -> Allow:
    return Allow()
