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
"""This module defines the generated code for Go database wrappers.

Each wrapper type implements database/sql's Scanner and driver.Valuer
interfaces by embedding a generic ProtoValue defined once per Go package.
"""

import posixpath

from dbtypes.codegen import CodeGenerator
from dbtypes.errors import CodegenError
from dbtypes.options import PathLayout, PathMode
from dbtypes.output_file import OutputFile
from dbtypes.proto_tree import ProtoFile, ProtoMessage

GO_FILE_SUFFIX = '_dbtypes.pb.go'

_GO_KEYWORDS = frozenset(
    [
        'break',
        'case',
        'chan',
        'const',
        'continue',
        'default',
        'defer',
        'else',
        'fallthrough',
        'for',
        'func',
        'go',
        'goto',
        'if',
        'import',
        'interface',
        'map',
        'package',
        'range',
        'return',
        'select',
        'struct',
        'switch',
        'type',
        'var',
    ]
)


def _is_ascii_lower(char: str) -> bool:
    return 'a' <= char <= 'z'


def _is_ascii_digit(char: str) -> bool:
    return '0' <= char <= '9'


def go_camel_case(name: str) -> str:
    """Converts a proto name to a Go identifier the way protoc-gen-go does.

    "foo_bar" becomes "FooBar", "Foo.Bar" becomes "Foo_Bar" and a leading
    underscore becomes "X".
    """
    result = []
    i = 0
    while i < len(name):
        char = name[i]
        following = name[i + 1] if i + 1 < len(name) else ''

        if char == '.' and _is_ascii_lower(following):
            pass  # Skip over '.' in ".{{lowercase}}".
        elif char == '.':
            result.append('_')
        elif char == '_' and (i == 0 or name[i - 1] == '.'):
            result.append('X')
        elif char == '_' and _is_ascii_lower(following):
            pass  # Skip over '_' in "_{{lowercase}}".
        elif _is_ascii_digit(char):
            result.append(char)
        else:
            result.append(char.upper() if _is_ascii_lower(char) else char)
            while i + 1 < len(name) and _is_ascii_lower(name[i + 1]):
                i += 1
                result.append(name[i])
        i += 1

    return ''.join(result)


def go_sanitized(name: str) -> str:
    """Makes a string usable as a Go package name."""
    name = ''.join(c if c.isalnum() else '_' for c in name)
    if not name or name in _GO_KEYWORDS or not name[0].isalpha():
        return '_' + name
    return name


def go_ident(message: ProtoMessage) -> str:
    """The Go type name protoc-gen-go generates for a message."""
    return go_camel_case('.'.join(message.nested_names()))


def _split_go_package(go_package: str) -> tuple[str, str]:
    import_path, _, package_name = go_package.partition(';')
    return import_path, package_name


class GoCodeGenerator(CodeGenerator):
    """Generates <name>_dbtypes.pb.go files."""

    PLUGIN_NAME = 'protoc-gen-go-dbtypes'

    def __init__(self, layout: PathLayout | None = None, compiler_version=''):
        super().__init__(layout, compiler_version)
        if self.layout.module and self.layout.paths is PathMode.SOURCE_RELATIVE:
            raise CodegenError(
                'cannot use module= with paths=source_relative'
            )

    def _go_package(self, proto_file: ProtoFile) -> tuple[str, str]:
        override = self.layout.import_paths.get(proto_file.name())
        if override:
            return _split_go_package(override)

        if proto_file.options().go_package:
            return _split_go_package(proto_file.options().go_package)

        raise CodegenError(
            'unable to determine Go import path; add a go_package option '
            'or pass M' + proto_file.name() + '=<import path>',
            proto_file.name(),
        )

    def import_path(self, proto_file: ProtoFile) -> str:
        return self._go_package(proto_file)[0]

    def package_name(self, proto_file: ProtoFile) -> str:
        import_path, package_name = self._go_package(proto_file)
        return go_sanitized(package_name or posixpath.basename(import_path))

    def output_package(self, proto_file: ProtoFile) -> str:
        return self.import_path(proto_file)

    def output_filename(self, proto_file: ProtoFile) -> str:
        prefix = proto_file.name()
        if prefix.endswith('.proto'):
            prefix = prefix[: -len('.proto')]

        if self.layout.paths is PathMode.IMPORT:
            prefix = posixpath.join(
                self.import_path(proto_file), posixpath.basename(prefix)
            )

        module = self.layout.module
        if module:
            if not prefix.startswith(module + '/'):
                raise CodegenError(
                    f'output prefix {prefix} does not match module={module}',
                    proto_file.name(),
                )
            prefix = prefix[len(module) + 1 :]

        return prefix + GO_FILE_SUFFIX

    def create_output_file(self, filename: str) -> OutputFile:
        return OutputFile(filename, indent='\t')

    def generate_header(
        self,
        proto_file: ProtoFile,
        messages: list[ProtoMessage],
        shared_owner: str | None,
        output: OutputFile,
    ) -> None:
        output.write_line(
            f'// Code generated by {self.PLUGIN_NAME}. DO NOT EDIT.'
        )
        for line in self.versions_lines():
            output.write_line(f'// {line}')
        output.write_line(f'// source: {proto_file.name()}')
        output.write_line()
        output.write_line(f'package {self.package_name(proto_file)}')
        output.write_line()

        output.write_line('import (')
        with output.indent():
            output.write_line('"database/sql/driver"')
            if shared_owner is None:
                output.write_line('"fmt"')
                output.write_line()
                output.write_line('"google.golang.org/protobuf/proto"')
        output.write_line(')')

    def generate_shared_wrapper(self, output: OutputFile) -> None:
        output.write_line()
        output.write_lines(
            [
                '// ProtoValue stores a protobuf message in a database column '
                'as its binary',
                '// encoding. It implements sql.Scanner and driver.Valuer and '
                'is embedded by',
                '// the generated wrapper types of this package.',
                'type ProtoValue[T any, PT interface {',
            ]
        )
        with output.indent():
            output.write_line('*T')
            output.write_line('proto.Message')
        output.write_line('}] struct {')
        with output.indent():
            output.write_line('Msg PT')
        output.write_line('}')

        output.write_line()
        output.write_line(
            '// Scan implements sql.Scanner. It accepts []byte, string and '
            'nil sources;'
        )
        output.write_line('// scanning nil clears the held message.')
        output.write_line('func (v *ProtoValue[T, PT]) Scan(src any) error {')
        with output.indent():
            output.write_line('var data []byte')
            output.write_line('switch s := src.(type) {')
            output.write_line('case nil:')
            with output.indent():
                output.write_line('v.Msg = nil')
                output.write_line('return nil')
            output.write_line('case []byte:')
            with output.indent():
                output.write_line('data = s')
            output.write_line('case string:')
            with output.indent():
                output.write_line('data = []byte(s)')
            output.write_line('default:')
            with output.indent():
                output.write_line(
                    'return fmt.Errorf("dbtypes: unsupported Scan source '
                    'type %T", src)'
                )
            output.write_line('}')
            output.write_line('msg := PT(new(T))')
            output.write_line(
                'if err := proto.Unmarshal(data, msg); err != nil {'
            )
            with output.indent():
                output.write_line('return err')
            output.write_line('}')
            output.write_line('v.Msg = msg')
            output.write_line('return nil')
        output.write_line('}')

        output.write_line()
        output.write_line(
            '// Value implements driver.Valuer. A nil ProtoValue is stored as '
            'NULL and a'
        )
        output.write_line('// nil message as the encoding of an empty message.')
        output.write_line(
            'func (v *ProtoValue[T, PT]) Value() (driver.Value, error) {'
        )
        with output.indent():
            output.write_line('if v == nil {')
            with output.indent():
                output.write_line('return nil, nil')
            output.write_line('}')
            output.write_line('msg := v.Msg')
            output.write_line('if msg == nil {')
            with output.indent():
                output.write_line('msg = PT(new(T))')
            output.write_line('}')
            output.write_line('data, err := proto.Marshal(msg)')
            output.write_line('if err != nil {')
            with output.indent():
                output.write_line('return nil, err')
            output.write_line('}')
            output.write_line('if data == nil {')
            with output.indent():
                output.write_line('data = []byte{}')
            output.write_line('}')
            output.write_line('return data, nil')
        output.write_line('}')

    def generate_message_wrapper(
        self, message: ProtoMessage, output: OutputFile
    ) -> None:
        msg_type = go_ident(message)
        wrapper = f'{msg_type}Value'
        proto_value = f'ProtoValue[{msg_type}, *{msg_type}]'

        output.write_line()
        output.write_line(
            f'// {wrapper} stores {message.full_name()} messages in a database '
            'column.'
        )
        output.write_line(f'type {wrapper} struct {{')
        with output.indent():
            output.write_line(f'*{proto_value}')
        output.write_line('}')

        output.write_line()
        output.write_line(
            f'// New{wrapper} wraps msg for storage. A nil msg is stored as '
            'NULL.'
        )
        output.write_line(
            f'func New{wrapper}(msg *{msg_type}) *{wrapper} {{'
        )
        with output.indent():
            output.write_line('if msg == nil {')
            with output.indent():
                output.write_line(f'return &{wrapper}{{}}')
            output.write_line('}')
            output.write_line(
                f'return &{wrapper}{{ProtoValue: &{proto_value}{{Msg: msg}}}}'
            )
        output.write_line('}')

        output.write_line()
        output.write_line(
            '// Scan implements sql.Scanner. Scanning nil leaves the wrapper '
            'empty.'
        )
        output.write_line(f'func (x *{wrapper}) Scan(src any) error {{')
        with output.indent():
            output.write_line('if src == nil {')
            with output.indent():
                output.write_line('x.ProtoValue = nil')
                output.write_line('return nil')
            output.write_line('}')
            output.write_line(f'v := &{proto_value}{{}}')
            output.write_line('if err := v.Scan(src); err != nil {')
            with output.indent():
                output.write_line('return err')
            output.write_line('}')
            output.write_line('x.ProtoValue = v')
            output.write_line('return nil')
        output.write_line('}')

        output.write_line()
        output.write_line('// Value implements driver.Valuer.')
        output.write_line(
            f'func (x *{wrapper}) Value() (driver.Value, error) {{'
        )
        with output.indent():
            output.write_line('if x == nil {')
            with output.indent():
                output.write_line('return nil, nil')
            output.write_line('}')
            output.write_line('return x.ProtoValue.Value()')
        output.write_line('}')

        output.write_line()
        output.write_line(
            '// Unwrap returns the wrapped message, or nil if there is none.'
        )
        output.write_line(f'func (x *{wrapper}) Unwrap() *{msg_type} {{')
        with output.indent():
            output.write_line('if x == nil || x.ProtoValue == nil {')
            with output.indent():
                output.write_line('return nil')
            output.write_line('}')
            output.write_line('return x.Msg')
        output.write_line('}')
