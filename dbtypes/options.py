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
"""Generator options and parsing of protoc plugin parameters."""

import argparse
from dataclasses import dataclass, field
import enum
from shlex import shlex
from typing import Iterable, NoReturn

from dbtypes.errors import CodegenError


@dataclass(frozen=True)
class GeneratorConfig:
    """Decides which messages receive wrappers.

    Attributes:
      excluded_types: Short or fully-qualified message names to skip.
      only_package: If set, only messages in this proto package are wrapped.
    """

    excluded_types: frozenset[str] = frozenset()
    only_package: str | None = None


def make_config(
    exclude: Iterable[str] = (), package: str | None = None
) -> GeneratorConfig:
    """Builds a GeneratorConfig from raw option values.

    Each value in exclude is a comma-separated list of names. Names are
    trimmed of surrounding whitespace and empty entries are dropped. An empty
    package means no package restriction.
    """
    excluded = frozenset(
        name.strip()
        for value in exclude
        for name in value.split(',')
        if name.strip()
    )
    only_package = package.strip() if package else ''
    return GeneratorConfig(excluded, only_package or None)


class PathMode(enum.Enum):
    """Where output files are placed, as in protoc-gen-go's paths option."""

    # Output goes in a directory named after the Go import path.
    IMPORT = 'import'
    # Output goes in the same relative directory as the input .proto file.
    SOURCE_RELATIVE = 'source_relative'


@dataclass(frozen=True)
class PathLayout:
    paths: PathMode = PathMode.IMPORT
    module: str = ''
    # Maps a .proto file name to its Go import path (protoc M options).
    import_paths: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class PluginOptions:
    config: GeneratorConfig
    layout: PathLayout
    verbose: bool = False


class _ArgumentParser(argparse.ArgumentParser):
    """Reports invalid plugin parameters as CodegenErrors."""

    def error(self, message: str) -> NoReturn:
        raise CodegenError(f'invalid plugin parameter: {message}')


def _parameter_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog='dbtypes', add_help=False)
    parser.add_argument(
        '--exclude',
        dest='exclude',
        action='append',
        default=[],
        help='Comma-separated message names to skip; may be repeated',
    )
    parser.add_argument(
        '--package',
        dest='package',
        default='',
        help='Only generate wrappers for messages in this proto package',
    )
    parser.add_argument(
        '--paths',
        dest='paths',
        choices=[mode.value for mode in PathMode],
        default=PathMode.IMPORT.value,
        help='Output path layout',
    )
    parser.add_argument(
        '--module',
        dest='module',
        default='',
        help='Go import path prefix to strip from output file names',
    )
    parser.add_argument(
        '--verbose',
        dest='verbose',
        action='store_true',
        help='Log debug output to stderr',
    )
    return parser


def split_parameter(parameter: str) -> list[str]:
    """Splits a protoc parameter string into its comma-separated entries."""
    # protoc passes the custom arguments in shell quoted form, separated by
    # commas. Use shlex to split them, correctly handling quoted sections, with
    # equivalent options to IFS=","
    lex = shlex(parameter, posix=True)
    lex.whitespace_split = True
    lex.whitespace = ','
    lex.commenters = ''
    return [arg.strip() for arg in lex if arg.strip()]


def parse_parameter_options(parameter: str) -> PluginOptions:
    """Parses parameters passed through from protoc.

    Parameters arrive through --go-dbtypes_opt or --python-dbtypes_opt, e.g.
    `exclude=Foo,exclude=pkg.v1.Bar,package=pkg.v1,paths=source_relative`.
    A quoted value keeps its commas: `exclude="Foo,Bar"`. Entries of the form
    `M<file>=<import path>` override a file's Go import path.

    Raises:
      CodegenError: The parameter contains an unknown or malformed entry.
    """
    args = []
    import_paths = {}

    for entry in split_parameter(parameter):
        if entry.startswith('M') and '=' in entry:
            proto_file, _, import_path = entry[1:].partition('=')
            import_paths[proto_file] = import_path
        elif entry.startswith('-'):
            args.append(entry)
        else:
            args.append(f'--{entry}')

    parsed = _parameter_parser().parse_args(args)

    return PluginOptions(
        config=make_config(parsed.exclude, parsed.package),
        layout=PathLayout(
            paths=PathMode(parsed.paths),
            module=parsed.module.strip(),
            import_paths=import_paths,
        ),
        verbose=parsed.verbose,
    )
