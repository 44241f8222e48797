"""
workspace.py
What a generator run works on: an output directory, the members to generate (each a named,
ordered group of parsed modules), and the Rust target settings.
"""
from enum import Enum
from typing import Dict, List, Optional

from generators.generator_utils import is_rust_identifier
from idl_ast import Module
from idl_loader import load_idl_file, load_idl_files, module_name_for_path

DEFAULT_RUNTIME_CRATE = "wrangler_rpc"


class InvalidMemberNameError(ValueError):
    """A member name that cannot be used as a Rust module name."""
    def __init__(self, name: str):
        super().__init__(f"member name '{name}' is not a valid Rust module name")
        self.name = name


class RustWrapper(Enum):
    """Umbrella file re-exporting every member: none, a shared mod.rs, or a lib.rs."""
    NONE = "none"
    MOD = "mod"
    LIB = "lib"

    @property
    def file_name(self) -> Optional[str]:
        return {RustWrapper.NONE: None, RustWrapper.MOD: "mod.rs", RustWrapper.LIB: "lib.rs"}[self]


class RustTarget:
    def __init__(self, wrapper: RustWrapper = RustWrapper.NONE, runtime_crate: str = DEFAULT_RUNTIME_CRATE):
        self.wrapper = wrapper
        self.runtime_crate = runtime_crate


class WorkspaceMember:
    def __init__(self, name: str, modules: List[Module], sources: Optional[List[str]] = None):
        self.name = name
        self.modules = modules
        self.sources = sources or []


class Workspace:
    def __init__(self, dir: str):
        self.dir = dir
        self.members: Dict[str, WorkspaceMember] = {}

    def add_member(self, name: str, modules: List[Module], sources: Optional[List[str]] = None) -> WorkspaceMember:
        if not is_rust_identifier(name):
            raise InvalidMemberNameError(name)
        if name in self.members:
            # Same member named twice: its modules fold in after the earlier ones
            member = self.members[name]
            member.modules.extend(modules)
            member.sources.extend(sources or [])
        else:
            member = WorkspaceMember(name, list(modules), list(sources or []))
            self.members[name] = member
        return member


def workspace_from_files(paths: List[str], output_dir: str, member_name: Optional[str] = None) -> Workspace:
    """
    Load schema files into a workspace. With member_name every file goes into that one member,
    in the given order; otherwise each file becomes a member named after its base name.
    """
    workspace = Workspace(output_dir)
    if member_name is not None:
        workspace.add_member(member_name, load_idl_files(paths), list(paths))
        return workspace
    for path in paths:
        workspace.add_member(module_name_for_path(path), [load_idl_file(path)], [path])
    return workspace
