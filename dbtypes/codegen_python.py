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
"""This module defines the generated code for Python database wrappers.

Generated modules sit next to the protoc-generated _pb2 modules and import
them the same way other _pb2 modules do. The first generated module of a
Python package defines ProtoValue; the others import it from there.
"""

import posixpath

from dbtypes.codegen import CodeGenerator
from dbtypes.output_file import OutputFile
from dbtypes.proto_tree import ProtoFile, ProtoMessage

PYTHON_FILE_SUFFIX = '_dbtypes.py'


def module_base(proto_file: ProtoFile) -> str:
    """The path protoc's Python generator derives module names from.

    "acme/db-v1/records.proto" becomes "acme/db_v1/records".
    """
    base = proto_file.name()
    if base.endswith('.proto'):
        base = base[: -len('.proto')]
    return base.replace('-', '_')


def pb2_module(proto_file: ProtoFile) -> str:
    """Dotted name of the protoc-generated module for the file."""
    return module_base(proto_file).replace('/', '.') + '_pb2'


def module_name(filename: str) -> str:
    """Dotted module name of a generated .py file."""
    return filename[: -len('.py')].replace('/', '.')


def wrapper_name(message: ProtoMessage) -> str:
    return '_'.join(message.nested_names()) + 'Value'


def message_reference(message: ProtoMessage) -> str:
    """Expression naming the message class from the generated module."""
    pb2_alias = pb2_module(message.proto_file()).rpartition('.')[2]
    return '.'.join([pb2_alias, *message.nested_names()])


class PythonCodeGenerator(CodeGenerator):
    """Generates <name>_dbtypes.py modules.

    Python output always mirrors the .proto file's location, so the paths and
    module options do not apply.
    """

    PLUGIN_NAME = 'protoc-gen-python-dbtypes'

    def output_package(self, proto_file: ProtoFile) -> str:
        return posixpath.dirname(module_base(proto_file)).replace('/', '.')

    def output_filename(self, proto_file: ProtoFile) -> str:
        return module_base(proto_file) + PYTHON_FILE_SUFFIX

    def create_output_file(self, filename: str) -> OutputFile:
        return OutputFile(filename, indent='    ')

    def generate_header(
        self,
        proto_file: ProtoFile,
        messages: list[ProtoMessage],
        shared_owner: str | None,
        output: OutputFile,
    ) -> None:
        output.write_line(
            f'# Code generated by {self.PLUGIN_NAME}. DO NOT EDIT.'
        )
        for line in self.versions_lines():
            output.write_line(f'# {line}')
        output.write_line(f'# source: {proto_file.name()}')
        output.write_line(
            f'"""Database wrappers for the messages in {proto_file.name()}."""'
        )
        output.write_line()
        output.write_line('from __future__ import annotations')
        output.write_line()

        if shared_owner is None:
            output.write_line('from typing import Generic, TypeVar')
            output.write_line()
            output.write_line(
                'from google.protobuf import message as _message'
            )
            output.write_line()

        package, _, pb2_alias = pb2_module(proto_file).rpartition('.')
        if package:
            output.write_line(f'from {package} import {pb2_alias}')
        else:
            output.write_line(f'import {pb2_alias}')

        if shared_owner is not None:
            output.write_line(
                f'from {module_name(shared_owner)} import ('
            )
            with output.indent():
                output.write_line('ProtoValue,')
                output.write_line('UnsupportedSourceTypeError,')
            output.write_line(')')

        output.write_line()
        output.write_line('__all__ = [')
        with output.indent():
            output.write_line("'ProtoValue',")
            output.write_line("'UnsupportedSourceTypeError',")
            for message in messages:
                output.write_line(f"'{wrapper_name(message)}',")
        output.write_line(']')

    def generate_shared_wrapper(self, output: OutputFile) -> None:
        output.write_line()
        output.write_line("_M = TypeVar('_M', bound=_message.Message)")

        output.write_line()
        output.write_line()
        output.write_line('class UnsupportedSourceTypeError(TypeError):')
        with output.indent():
            output.write_line(
                '"""Raised when scan() is given something other than bytes, '
                'str or None."""'
            )

        output.write_line()
        output.write_line()
        output.write_line('class ProtoValue(Generic[_M]):')
        with output.indent():
            output.write_lines(
                [
                    '"""Stores a protobuf message in a database column as its '
                    'binary encoding.',
                    '',
                    'The generated wrapper classes of this package hold one '
                    'ProtoValue each.',
                    '"""',
                    '',
                    'def __init__(',
                    '    self, message_type: type[_M], msg: _M | None = None',
                    ') -> None:',
                ]
            )
            with output.indent():
                output.write_line('self.message_type = message_type')
                output.write_line('self.msg = msg')

            output.write_line()
            output.write_line('def scan(self, src: object) -> None:')
            with output.indent():
                output.write_lines(
                    [
                        '"""Reads the message from a database value.',
                        '',
                        'Accepts bytes-like values and str. A str is turned '
                        'back into the',
                        'exact bytes it was decoded from (UTF-8 with '
                        'surrogateescape). None',
                        'clears the held message. Raises '
                        'google.protobuf.message.DecodeError',
                        'if the data is not a valid encoding of the message, '
                        'or if a str',
                        'holds surrogates that do not map back to bytes.',
                        '"""',
                        'if src is None:',
                        '    self.msg = None',
                        '    return',
                        'if isinstance(src, str):',
                        '    try:',
                        "        data = src.encode('utf-8', 'surrogateescape')",
                        '    except UnicodeEncodeError as err:',
                        '        raise _message.DecodeError(',
                        "            f'text is not an encoded '",
                        "            f'{self.message_type.__name__} message'",
                        '        ) from err',
                        'elif isinstance(src, (bytes, bytearray, memoryview)):',
                        '    data = bytes(src)',
                        'else:',
                        '    raise UnsupportedSourceTypeError(',
                        "        f'cannot scan {type(src).__name__} into '",
                        "        f'{self.message_type.DESCRIPTOR.full_name}'",
                        '    )',
                        'msg = self.message_type()',
                        'msg.ParseFromString(data)',
                        'self.msg = msg',
                    ]
                )

            output.write_line()
            output.write_line('def value(self) -> bytes:')
            with output.indent():
                output.write_lines(
                    [
                        '"""Returns the binary encoding of the held message.',
                        '',
                        'A missing message is encoded as an empty one.',
                        '"""',
                        'msg = self.msg',
                        'if msg is None:',
                        '    msg = self.message_type()',
                        'return msg.SerializeToString()',
                    ]
                )

    def generate_message_wrapper(
        self, message: ProtoMessage, output: OutputFile
    ) -> None:
        wrapper = wrapper_name(message)
        msg_class = message_reference(message)

        output.write_line()
        output.write_line()
        output.write_line(f'class {wrapper}:')
        with output.indent():
            output.write_line(
                f'"""Stores {message.full_name()} messages in a database '
                'column."""'
            )

            output.write_line()
            output.write_line(
                f'def __init__(self, msg: {msg_class} | None = None) -> None:'
            )
            with output.indent():
                output.write_line(
                    f'self._value: ProtoValue[{msg_class}] | None = None'
                )
                output.write_line('if msg is not None:')
                with output.indent():
                    output.write_line(
                        f'self._value = ProtoValue({msg_class}, msg)'
                    )

            output.write_line()
            output.write_line('def scan(self, src: object) -> None:')
            with output.indent():
                output.write_line(
                    '"""Reads the message; None leaves the wrapper empty."""'
                )
                output.write_line('if src is None:')
                with output.indent():
                    output.write_line('self._value = None')
                    output.write_line('return')
                output.write_line(f'value = ProtoValue({msg_class})')
                output.write_line('value.scan(src)')
                output.write_line('self._value = value')

            output.write_line()
            output.write_line('def value(self) -> bytes | None:')
            with output.indent():
                output.write_line(
                    '"""Returns the database value; None for an empty '
                    'wrapper."""'
                )
                output.write_line('if self._value is None:')
                with output.indent():
                    output.write_line('return None')
                output.write_line('return self._value.value()')

            output.write_line()
            output.write_line(f'def unwrap(self) -> {msg_class} | None:')
            with output.indent():
                output.write_line('"""Returns the wrapped message itself."""')
                output.write_line('if self._value is None:')
                with output.indent():
                    output.write_line('return None')
                output.write_line('return self._value.msg')
