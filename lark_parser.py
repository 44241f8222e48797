from lark import Lark


# Grammar for RPC schema files
grammar = r"""
    start: toplevel*
    toplevel: docs namespace

    docs: DOC_COMMENT*

    namespace: "namespace" NAME "{" ns_item* "}"
    ns_item: docs (namespace | function | notification | struct)

    function: modifiers fn_keyword NAME params results?
    notification: modifiers "notification" fn_keyword? NAME params
    struct: "struct" NAME "{" field_list? "}"

    fn_keyword: "fn" | "function"
    modifiers: modifier*
    modifier: SERVER | CLIENT
    SERVER: "server"
    CLIENT: "client"

    params: "(" field_list? ")"
    results: "->" "(" field_list? ")"

    field_list: field ("," field)* ","?
    field: docs NAME ":" type_expr

    // Type expressions are not interpreted; the loader copies their source text.
    type_expr: "[" "]" type_expr
        | "&" type_expr
        | "(" (type_expr ("," type_expr)*)? ")"
        | NAME ("::" NAME)* generic_args?
    generic_args: "<" type_expr ("," type_expr)* ">"

    DOC_COMMENT.2: /\/\/\/[^\n]*/
    COMMENT: /\/\/[^\n]*/
    NAME: /[a-zA-Z_][a-zA-Z0-9_]*/

    %import common.WS
    %ignore WS
    %ignore COMMENT
"""

parser = Lark(
    grammar,
    start='start',
    parser='lalr',
    propagate_positions=True
)


def parse_idl(text):
    """Parse schema text into a lark tree. Raises lark.exceptions.UnexpectedInput on bad input."""
    return parser.parse(text)
