import pytest

from idl_ast import Comment, FunctionModifier, NamespaceDecl
from idl_loader import IdlSyntaxError, format_parse_error, load_idl_files, load_idl_text, module_name_for_path
from tests.test_utils import idl_path, load_sample


def test_full_sample_declarations():
    module = load_sample("full.idl")
    assert [ns.name.text for ns in module.namespaces] == ["svc"]
    svc = module.namespaces[0]
    assert svc.comment == Comment(["Service surface shared by both peers."])
    assert [f.name.text for f in svc.functions] == ["ping", "add"]
    assert [n.name.text for n in svc.notifications] == ["log", "progress"]
    assert [s.name.text for s in svc.structs] == ["Point"]
    assert [n.name.text for n in svc.namespaces] == ["util"]
    assert [f.name.text for f in svc.namespaces[0].functions] == ["echo"]


def test_function_details():
    svc = load_sample("full.idl").namespaces[0]
    ping = svc.functions[0]
    assert ping.modifiers == [FunctionModifier.SERVER]
    assert ping.comment == Comment(["doc comment"])
    assert [(p.name.text, p.typ) for p in ping.params] == [("seq", "u32")]
    assert [(r.name.text, r.typ) for r in ping.results] == [("seq", "u32")]

    add = svc.functions[1]
    assert add.modifiers == []
    assert add.comment is None
    assert not add.is_notification()


def test_notification_modifiers():
    svc = load_sample("full.idl").namespaces[0]
    log, progress = svc.notifications
    assert log.modifiers == []
    assert progress.modifiers == [FunctionModifier.CLIENT]
    assert [(p.name.text, p.typ) for p in progress.params] == [("done", "u64")]


def test_struct_fields_and_docs():
    point = load_sample("full.idl").namespaces[0].structs[0]
    assert point.comment == Comment(["A point in the plane."])
    assert [(f.name.text, f.typ) for f in point.fields] == [("x", "f64"), ("y", "f64")]
    assert point.fields[0].comment == Comment(["Horizontal position."])
    assert point.fields[1].comment is None


def test_type_expressions_copied_verbatim():
    fn = load_sample("types.idl").namespaces[0].functions[0]
    assert [p.typ for p in fn.params] == [
        "Vec<String>",
        "Option<HashMap<String, i64>>",
        "[]u8",
        "&str",
        "(u8, u8)",
        "std::time::Duration",
        "()",
    ]
    assert fn.results == []


def test_source_spans():
    module = load_sample("math.idl")
    math = module.namespaces[0]
    assert math.name.span.line == 2
    add = math.functions[0]
    assert add.loc.file == idl_path("math.idl")
    assert add.loc.line == 4
    assert add.name.span.column == 8


def test_plain_comments_ignored():
    math = load_sample("math.idl").namespaces[0]
    get_user = math.functions[1]
    assert get_user.name.text == "getUser"
    assert get_user.comment is None
    assert [r.typ for r in get_user.results] == ["String", "Vec<String>"]


def test_empty_namespace_and_input():
    assert load_idl_text("").namespaces == []
    module = load_idl_text("namespace empty {}")
    ns = module.namespaces[0]
    assert isinstance(ns, NamespaceDecl)
    assert (ns.functions, ns.notifications, ns.structs, ns.namespaces) == ([], [], [], [])


def test_syntax_error_reports_position():
    with pytest.raises(IdlSyntaxError) as excinfo:
        load_sample("broken.idl")
    e = excinfo.value
    assert e.file == idl_path("broken.idl")
    assert e.line == 2
    lines = e.diagnostic.splitlines()
    assert lines[0].startswith(f"{e.file.replace('./', '')}:2:")
    assert "error:" in lines[0]
    assert lines[1] == "    fn broken -> (x: u8)"
    assert lines[2].endswith("^")
    assert len(lines[2]) == e.column


def test_syntax_error_at_end_of_input():
    with pytest.raises(IdlSyntaxError) as excinfo:
        load_idl_text("namespace open {\n    fn f()\n", "open.idl")
    assert excinfo.value.file == "open.idl"
    assert excinfo.value.line >= 1


def test_format_parse_error():
    text = "namespace a {\n  fn ?\n}"
    report = format_parse_error(text, "./a.idl", 2, 6, "unexpected character '?'")
    assert report == "a.idl:2:6: error: unexpected character '?'\n  fn ?\n     ^"


def test_module_name_for_path():
    assert module_name_for_path("tests/idl/math.idl") == "math"
    assert module_name_for_path("api.v2.idl") == "api_v2"
    assert module_name_for_path("my-api.idl") == "my_api"
    assert module_name_for_path("svc_ping.idl") == "svc_ping"


def test_load_idl_files_keeps_order():
    modules = load_idl_files([idl_path("svc_pong.idl"), idl_path("svc_ping.idl")])
    assert [m.namespaces[0].functions[0].name.text for m in modules] == ["pong", "ping"]


def test_load_idl_files_stops_at_first_broken_file():
    with pytest.raises(IdlSyntaxError) as excinfo:
        load_idl_files([idl_path("math.idl"), idl_path("broken.idl"), idl_path("svc_ping.idl")])
    assert excinfo.value.file == idl_path("broken.idl")
