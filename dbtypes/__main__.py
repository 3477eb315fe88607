# Copyright 2026 The Pigweed Authors
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not
# use this file except in compliance with the License. You may obtain a copy of
# the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations under
# the License.
"""Generates database wrappers from a FileDescriptorSet.

The descriptor set is produced by protoc, for example:

  protoc --include_imports --descriptor_set_out=protos.pb acme/db/v1/*.proto
  python -m dbtypes --descriptor-set protos.pb --out-dir gen/go
"""

import argparse
import logging
from pathlib import Path
import sys

from google.protobuf import descriptor_pb2

from dbtypes import codegen
from dbtypes.codegen_go import GoCodeGenerator
from dbtypes.codegen_python import PythonCodeGenerator
from dbtypes.errors import CodegenError
from dbtypes.options import PathLayout, PathMode, make_config
from dbtypes.output_file import OutputFile
from dbtypes.plugin import setup_logging
from dbtypes.proto_tree import build_proto_files

_LOG = logging.getLogger('dbtypes')

LANGUAGES: dict[str, type[codegen.CodeGenerator]] = {
    'go': GoCodeGenerator,
    'python': PythonCodeGenerator,
}


def argument_parser(
    parser: argparse.ArgumentParser | None = None,
) -> argparse.ArgumentParser:
    """Registers the script's arguments on an argument parser."""

    if parser is None:
        parser = argparse.ArgumentParser(
            description=__doc__,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

    parser.add_argument(
        '--descriptor-set',
        required=True,
        type=Path,
        help='FileDescriptorSet written by protoc --descriptor_set_out',
    )
    parser.add_argument(
        '--out-dir',
        required=True,
        type=Path,
        help='Output directory for generated code',
    )
    parser.add_argument(
        '--language',
        choices=LANGUAGES,
        default='go',
        help='Output language',
    )
    parser.add_argument(
        '--exclude',
        action='append',
        default=[],
        help='Comma-separated message names to skip; may be repeated',
    )
    parser.add_argument(
        '--package',
        default='',
        help='Only generate wrappers for messages in this proto package',
    )
    parser.add_argument(
        '--paths',
        choices=[mode.value for mode in PathMode],
        default=PathMode.IMPORT.value,
        help='Output path layout (Go only)',
    )
    parser.add_argument(
        '--module',
        default='',
        help='Go import path prefix to strip from output file names',
    )
    parser.add_argument(
        '-v',
        '--verbose',
        action='store_true',
        help='Show debug logs',
    )
    parser.add_argument(
        'protos',
        metavar='PROTO',
        nargs='*',
        help='.proto files in the set to generate for; defaults to all',
    )

    return parser


def directory_writer(out_dir: Path) -> codegen.OutputWriter:
    """Returns an output writer that writes files under out_dir."""

    def write(output: OutputFile) -> None:
        path = out_dir / output.name()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(output.content())
        _LOG.info('Wrote %s', path)

    return write


def main(argv: list[str] | None = None) -> int:
    args = argument_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(
        args.descriptor_set.read_bytes()
    )

    known = {proto.name for proto in descriptor_set.file}
    for proto in args.protos:
        if proto not in known:
            _LOG.warning('%s is not in %s', proto, args.descriptor_set)

    proto_files = build_proto_files(
        descriptor_set.file, args.protos or known
    )

    try:
        generator = LANGUAGES[args.language](
            PathLayout(PathMode(args.paths), args.module.strip())
        )
        codegen.generate(
            proto_files,
            make_config(args.exclude, args.package),
            generator,
            directory_writer(args.out_dir),
        )
    except CodegenError as err:
        _LOG.error('%s', err.formatted_message())
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
