#!/usr/bin/env python3
"""
RpcWrangler

This script reads RPC schema files (namespaces of functions, notifications and structs) and
generates Rust modules from them: typed Params/Results records per function, the tagged unions
and method-name dispatch the runtime needs, and call/register helpers for both sides.

Usage:
    python rpc_wrangler.py --input <schema> [<schema> ...] --output <output_dir> [--member <name>]
                           [--wrapper none|mod|lib] [--runtime-crate <crate>] [--strict] [--verbose]

Arguments:
    --input, -i         : One or more schema files
    --output, -o        : Directory where the generated Rust files are written
    --member, -m        : Merge every input into a single member with this name
                          (default: one member per input, named after the file)
    --wrapper           : Umbrella file declaring every member: none (default), mod (mod.rs) or lib (lib.rs)
    --runtime-crate     : Crate the generated code imports its runtime from (default: wrangler_rpc)
    --strict            : Fail when a function is declared twice instead of keeping the later one
    --verbose, -v       : Print debug information
    --help, -h          : Show this help message

Environment overrides:
    RW_OUTPUT_DIR, RW_WRAPPER, RW_RUNTIME_CRATE, RW_VERBOSE

Example:
    python rpc_wrangler.py --input api.idl --output ./src/generated
    python rpc_wrangler.py -i core.idl extras.idl -o ./src/generated --member api --wrapper lib
"""

import argparse
import os
import sys
import time
from typing import List, Optional

from generators.rust_generator import RustGenerator
from idl_loader import IdlSyntaxError
from namespace_resolver import ResolveError
from workspace import (
    DEFAULT_RUNTIME_CRATE, InvalidMemberNameError, RustTarget, RustWrapper, Workspace, workspace_from_files,
)


class RpcCodeGenerator:
    """
    Loads the schema files into a workspace and runs the Rust generator over it.
    """

    def __init__(self, input_files: List[str], output_dir: str, member: Optional[str] = None,
                 target: Optional[RustTarget] = None, strict: bool = False, verbose: bool = False):
        self.input_files = input_files
        self.output_dir = output_dir
        self.member = member
        self.target = target or RustTarget()
        self.strict = strict
        self.verbose = verbose
        self.workspace: Optional[Workspace] = None

    def load(self) -> bool:
        """
        Parse every input file.

        Returns:
            bool: True if all files parsed, False otherwise (errors are printed)
        """
        try:
            self.workspace = workspace_from_files(self.input_files, self.output_dir, self.member)
        except IdlSyntaxError as e:
            print(e.diagnostic)
            return False
        except InvalidMemberNameError as e:
            print(f"Error: {e}")
            return False
        except OSError as e:
            print(f"Error: cannot read {e.filename}: {e.strerror}")
            return False
        if self.verbose:
            for member in self.workspace.members.values():
                print(f"DEBUG: member '{member.name}' <- {', '.join(member.sources)}")
        return True

    def generate(self) -> bool:
        """
        Write one Rust module per member, plus the wrapper file if requested.

        Returns:
            bool: True if generation was successful, False otherwise
        """
        if not self.workspace:
            print("Error: No schema loaded. Load the input files first.")
            return False

        generator = RustGenerator(self.target, verbose=self.verbose, strict=self.strict)
        try:
            written = generator.emit_workspace(self.workspace)
        except ResolveError as e:
            print(f"Error: {e}")
            return False
        except OSError as e:
            print(f"Error: cannot write {e.filename}: {e.strerror}")
            return False

        for path in written:
            print(f"Wrote {path}")
        return True


def parse_arguments(argv=None):
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments
    """
    parser = argparse.ArgumentParser(
        description="Generate Rust RPC modules from schema files",
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument('--input', '-i', required=True, nargs='+', help='Schema file(s) to generate from')
    parser.add_argument('--output', '-o', required=True, help='Directory where output files will be generated')
    parser.add_argument('--member', '-m', help='Merge all inputs into one member with this name')
    parser.add_argument('--wrapper', choices=[w.value for w in RustWrapper], default=RustWrapper.NONE.value,
                        help='Umbrella file declaring every member (none, mod or lib)')
    parser.add_argument('--runtime-crate', default=DEFAULT_RUNTIME_CRATE,
                        help='Crate the generated code imports its runtime from')
    parser.add_argument('--strict', action='store_true', help='Reject functions declared more than once')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output for debugging')

    return parser.parse_args(argv)


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def main(argv=None):
    """
    Main entry point of the script.
    """
    start = time.perf_counter()
    args = parse_arguments(argv)

    # Override with environment variables if set
    output_dir = os.environ.get('RW_OUTPUT_DIR', args.output)
    wrapper = os.environ.get('RW_WRAPPER', args.wrapper).strip().lower()
    runtime_crate = os.environ.get('RW_RUNTIME_CRATE', args.runtime_crate)
    verbose = _env_flag('RW_VERBOSE', args.verbose)

    try:
        target = RustTarget(RustWrapper(wrapper), runtime_crate)
    except ValueError:
        print(f"Error: invalid wrapper '{wrapper}' (choose from none, mod, lib)")
        sys.exit(1)

    generator = RpcCodeGenerator(args.input, output_dir, args.member, target, args.strict, verbose)

    if not generator.load():
        sys.exit(1)

    if not generator.generate():
        print("RPC code generation completed with errors.")
        sys.exit(1)

    print(f"RPC code generation completed successfully in {time.perf_counter() - start:.3f}s.")


if __name__ == '__main__':
    main()
