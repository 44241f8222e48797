import pytest

from generators.generator_utils import (
    is_rust_identifier, module_name, qualified_name, rust_string_literal, split_words, to_lower_camel,
    to_snake, to_upper_camel, variant_name, wire_name,
)


@pytest.mark.parametrize("name, words", [
    ("echo", ["echo"]),
    ("getUser", ["get", "User"]),
    ("GetUser", ["Get", "User"]),
    ("get_user", ["get", "user"]),
    ("getHTTPCookies", ["get", "HTTP", "Cookies"]),
    ("HTTP", ["HTTP"]),
    ("v2Api", ["v2", "Api"]),
    ("", []),
])
def test_split_words(name, words):
    assert split_words(name) == words


def test_case_conversion():
    assert to_upper_camel("echo") == "Echo"
    assert to_upper_camel("get_user") == "GetUser"
    assert to_upper_camel("getHTTPCookies") == "GetHttpCookies"
    assert to_lower_camel("svc") == "svc"
    assert to_lower_camel("SvcUtil") == "svcUtil"
    assert to_lower_camel("") == ""
    assert to_snake("getUser") == "get_user"
    assert to_snake("getHTTPCookies") == "get_http_cookies"
    assert to_snake("add") == "add"


def test_names_for_nested_function():
    path = ("svc", "util", "echo")
    assert wire_name(path) == "svc.util.Echo"
    assert variant_name(path) == "svc_util_echo"
    assert qualified_name(path) == "svc::util::echo"
    assert qualified_name(path, ".") == "svc.util.echo"
    assert module_name(path) == "echo"


def test_names_for_math_add():
    path = ("math", "add")
    assert wire_name(path) == "math.Add"
    assert variant_name(path) == "math_add"
    assert qualified_name(path) == "math::add"
    assert module_name(path) == "add"


def test_single_segment_path():
    assert wire_name(["ping"]) == "Ping"
    assert variant_name(["ping"]) == "ping"
    assert qualified_name(["ping"]) == "ping"


def test_camel_case_segments():
    path = ("userAdmin", "getUser")
    assert wire_name(path) == "userAdmin.GetUser"
    assert variant_name(path) == "useradmin_getuser"
    assert module_name(path) == "get_user"


def test_names_are_deterministic():
    path = ("a", "bC", "dEf")
    assert [wire_name(path), variant_name(path)] == [wire_name(list(path)), variant_name(list(path))]


@pytest.mark.parametrize("derive", [wire_name, variant_name, qualified_name, module_name])
def test_empty_path_rejected(derive):
    with pytest.raises(ValueError):
        derive(())


def test_rust_string_literal():
    assert rust_string_literal("math.Add") == '"math.Add"'
    assert rust_string_literal('say "hi"') == '"say \\"hi\\""'
    assert rust_string_literal("a\\b") == '"a\\\\b"'
    assert rust_string_literal("line\n") == '"line\\n"'


@pytest.mark.parametrize("name, valid", [
    ("math", True),
    ("svc_ping", True),
    ("_private", True),
    ("api_v2", True),
    ("api.v2", False),
    ("my-api", False),
    ("2fast", False),
    ("", False),
    ("_", False),
    ("type", False),
    ("mod", False),
    ("Self", False),
])
def test_is_rust_identifier(name, valid):
    assert is_rust_identifier(name) is valid
