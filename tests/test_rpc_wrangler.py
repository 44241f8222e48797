"""
Tests for the rpc_wrangler command line: argument handling, environment overrides and exit codes.
"""
import os

import pytest

import rpc_wrangler
from tests.test_utils import idl_path, write_schema


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("RW_OUTPUT_DIR", "RW_WRAPPER", "RW_RUNTIME_CRATE", "RW_VERBOSE"):
        monkeypatch.delenv(name, raising=False)


def read(path):
    with open(path, encoding="utf-8") as f:
        return f.read()


def test_generates_one_member_per_input(temp_dir, capsys):
    rpc_wrangler.main(["-i", idl_path("math.idl"), idl_path("svc_ping.idl"), "-o", temp_dir])
    assert os.path.isfile(os.path.join(temp_dir, "math", "mod.rs"))
    assert os.path.isfile(os.path.join(temp_dir, "svc_ping", "mod.rs"))
    out = capsys.readouterr().out
    assert "completed successfully" in out
    assert f"Wrote {os.path.join(temp_dir, 'math', 'mod.rs')}" in out


def test_member_option_merges_inputs(temp_dir):
    rpc_wrangler.main(["-i", idl_path("svc_ping.idl"), idl_path("svc_pong.idl"), "-o", temp_dir, "-m", "svc"])
    code = read(os.path.join(temp_dir, "svc", "mod.rs"))
    assert code.count("pub mod svc {") == 1
    assert "pub mod ping {" in code
    assert "pub mod pong {" in code


def test_wrapper_and_runtime_crate_flags(temp_dir):
    rpc_wrangler.main(["-i", idl_path("math.idl"), "-o", temp_dir, "--wrapper", "lib", "--runtime-crate", "my_rpc"])
    assert read(os.path.join(temp_dir, "lib.rs")).endswith("pub mod math;\n")
    assert "use my_rpc as rpc;" in read(os.path.join(temp_dir, "math", "mod.rs"))


def test_environment_overrides(temp_dir, monkeypatch):
    other_dir = os.path.join(temp_dir, "from_env")
    monkeypatch.setenv("RW_OUTPUT_DIR", other_dir)
    monkeypatch.setenv("RW_WRAPPER", "mod")
    monkeypatch.setenv("RW_RUNTIME_CRATE", "env_rpc")
    rpc_wrangler.main(["-i", idl_path("math.idl"), "-o", os.path.join(temp_dir, "from_args")])
    assert os.path.isfile(os.path.join(other_dir, "mod.rs"))
    assert "use env_rpc as rpc;" in read(os.path.join(other_dir, "math", "mod.rs"))
    assert not os.path.exists(os.path.join(temp_dir, "from_args"))


def test_verbose_environment_flag(temp_dir, monkeypatch, capsys):
    monkeypatch.setenv("RW_VERBOSE", "1")
    rpc_wrangler.main(["-i", idl_path("math.idl"), "-o", temp_dir])
    out = capsys.readouterr().out
    assert "DEBUG: member 'math'" in out
    assert "Generated " in out


def test_invalid_wrapper_from_environment(temp_dir, monkeypatch, capsys):
    monkeypatch.setenv("RW_WRAPPER", "crate")
    with pytest.raises(SystemExit) as excinfo:
        rpc_wrangler.main(["-i", idl_path("math.idl"), "-o", temp_dir])
    assert excinfo.value.code == 1
    assert "invalid wrapper 'crate'" in capsys.readouterr().out


def test_syntax_error_exits_with_diagnostic(temp_dir, capsys):
    with pytest.raises(SystemExit) as excinfo:
        rpc_wrangler.main(["-i", idl_path("broken.idl"), "-o", temp_dir])
    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "broken.idl:2:" in out
    assert "fn broken -> (x: u8)" in out
    assert not os.listdir(temp_dir)


def test_missing_input_exits(temp_dir, capsys):
    with pytest.raises(SystemExit) as excinfo:
        rpc_wrangler.main(["-i", os.path.join(temp_dir, "nope.idl"), "-o", temp_dir])
    assert excinfo.value.code == 1
    assert "Error: cannot read" in capsys.readouterr().out


def test_strict_duplicate_exits(temp_dir, capsys):
    a = write_schema(temp_dir, "a.idl", "namespace svc { fn ping() }")
    b = write_schema(temp_dir, "b.idl", "namespace svc { fn ping(x: u8) }")
    out_dir = os.path.join(temp_dir, "out")
    rpc_wrangler.main(["-i", a, b, "-o", out_dir, "-m", "svc"])
    assert "pub x: u8," in read(os.path.join(out_dir, "svc", "mod.rs"))

    with pytest.raises(SystemExit) as excinfo:
        rpc_wrangler.main(["-i", a, b, "-o", out_dir, "-m", "svc", "--strict"])
    assert excinfo.value.code == 1
    assert "declared more than once" in capsys.readouterr().out


def test_naming_collision_exits(temp_dir, capsys):
    path = write_schema(temp_dir, "clash.idl", "namespace svc { fn getUser() fn get_user() }")
    with pytest.raises(SystemExit) as excinfo:
        rpc_wrangler.main(["-i", path, "-o", os.path.join(temp_dir, "out")])
    assert excinfo.value.code == 1
    assert "wire method name 'svc.GetUser'" in capsys.readouterr().out


def test_invalid_member_name_exits(temp_dir, capsys):
    out_dir = os.path.join(temp_dir, "out")
    with pytest.raises(SystemExit) as excinfo:
        rpc_wrangler.main(["-i", idl_path("svc_ping.idl"), "-o", out_dir, "-m", "my-api"])
    assert excinfo.value.code == 1
    assert "member name 'my-api' is not a valid Rust module name" in capsys.readouterr().out
    assert not os.path.exists(out_dir)


def test_file_stems_become_module_names(temp_dir, capsys):
    path = write_schema(temp_dir, "my-api.idl", "namespace svc { fn ping() }")
    out_dir = os.path.join(temp_dir, "out")
    rpc_wrangler.main(["-i", path, "-o", out_dir, "--wrapper", "mod"])
    assert "pub mod my_api;" in read(os.path.join(out_dir, "mod.rs"))
    assert os.path.isfile(os.path.join(out_dir, "my_api", "mod.rs"))


def test_module_name_collision_exits(temp_dir, capsys):
    path = write_schema(temp_dir, "clash.idl", "namespace svc { namespace ping { fn x() } fn ping() }")
    with pytest.raises(SystemExit) as excinfo:
        rpc_wrangler.main(["-i", path, "-o", os.path.join(temp_dir, "out")])
    assert excinfo.value.code == 1
    assert "module name 'svc::ping'" in capsys.readouterr().out


def test_input_is_required(capsys):
    with pytest.raises(SystemExit) as excinfo:
        rpc_wrangler.main(["-o", "out"])
    assert excinfo.value.code == 2
