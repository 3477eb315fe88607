#!/usr/bin/env python3
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
"""Tests the protoc plugin entry points."""

import io
import logging
import unittest
from unittest import mock

from google.protobuf.compiler import plugin_pb2

from dbtypes import plugin, testing
from dbtypes.codegen_go import GoCodeGenerator
from dbtypes.codegen_python import PythonCodeGenerator

_NO_GO_PACKAGE_PROTO = testing.INVOICE_PROTO.replace(
    'options { go_package: "github.com/acme/gen/go/acme/billing/v1" }', ''
)


def _process(request, generator_class=GoCodeGenerator):
    response = plugin_pb2.CodeGeneratorResponse()
    result = plugin.process_proto_request(request, response, generator_class)
    return result, response


class TestProcessProtoRequest(unittest.TestCase):
    """Tests for plugin.process_proto_request."""

    def test_go_files(self) -> None:
        result, response = _process(
            testing.code_generator_request(
                testing.RECORDS_PROTO,
                testing.AUDIT_PROTO,
                testing.INVOICE_PROTO,
            )
        )
        self.assertTrue(result)
        self.assertFalse(response.HasField('error'))
        self.assertEqual(
            [file.name for file in response.file],
            [
                'github.com/acme/gen/go/acme/db/v1/records_dbtypes.pb.go',
                'github.com/acme/gen/go/acme/db/v1/audit_dbtypes.pb.go',
                'github.com/acme/gen/go/acme/billing/v1/'
                'invoice_dbtypes.pb.go',
            ],
        )
        self.assertIn(
            '//     protoc                v5.27.1\n', response.file[0].content
        )

    def test_python_files(self) -> None:
        result, response = _process(
            testing.code_generator_request(
                testing.RECORDS_PROTO, testing.AUDIT_PROTO
            ),
            PythonCodeGenerator,
        )
        self.assertTrue(result)
        self.assertEqual(
            [file.name for file in response.file],
            ['acme/db/v1/records_dbtypes.py', 'acme/db/v1/audit_dbtypes.py'],
        )

    def test_only_files_to_generate(self) -> None:
        _, response = _process(
            testing.code_generator_request(
                testing.RECORDS_PROTO,
                testing.AUDIT_PROTO,
                files_to_generate=['acme/db/v1/audit.proto'],
            )
        )
        (generated,) = response.file
        self.assertEqual(
            generated.name,
            'github.com/acme/gen/go/acme/db/v1/audit_dbtypes.pb.go',
        )
        self.assertIn('type ProtoValue[', generated.content)

    def test_parameter_options(self) -> None:
        _, response = _process(
            testing.code_generator_request(
                testing.RECORDS_PROTO,
                testing.INVOICE_PROTO,
                parameter=(
                    'exclude="ToolSetSpec,acme.db.v1.Container",'
                    'package=acme.db.v1,paths=source_relative'
                ),
            )
        )
        (generated,) = response.file
        self.assertEqual(generated.name, 'acme/db/v1/records_dbtypes.pb.go')
        self.assertNotIn('ToolSetSpecValue', generated.content)
        self.assertNotIn('type ContainerValue ', generated.content)
        self.assertIn('type Container_ItemValue ', generated.content)
        self.assertIn('type UserPreferencesValue ', generated.content)

    def test_import_path_override(self) -> None:
        _, response = _process(
            testing.code_generator_request(
                _NO_GO_PACKAGE_PROTO,
                parameter='Macme/billing/v1/invoice.proto=example.com/bill',
            )
        )
        (generated,) = response.file
        self.assertEqual(
            generated.name, 'example.com/bill/invoice_dbtypes.pb.go'
        )
        self.assertIn('\npackage bill\n', generated.content)

    def test_no_selected_messages(self) -> None:
        result, response = _process(
            testing.code_generator_request(
                testing.INVOICE_PROTO, parameter='package=acme.db.v1'
            )
        )
        self.assertTrue(result)
        self.assertEqual(len(response.file), 0)
        self.assertFalse(response.HasField('error'))

    def test_error_discards_all_files(self) -> None:
        result, response = _process(
            testing.code_generator_request(
                testing.RECORDS_PROTO, _NO_GO_PACKAGE_PROTO
            )
        )
        self.assertFalse(result)
        self.assertEqual(len(response.file), 0)
        self.assertIn('unable to determine Go import path', response.error)
        self.assertIn('in acme/billing/v1/invoice.proto', response.error)

    def test_invalid_parameter(self) -> None:
        result, response = _process(
            testing.code_generator_request(
                testing.RECORDS_PROTO, parameter='paths=nowhere'
            )
        )
        self.assertFalse(result)
        self.assertEqual(len(response.file), 0)
        self.assertIn('invalid plugin parameter', response.error)

    def test_module_with_source_relative(self) -> None:
        result, response = _process(
            testing.code_generator_request(
                testing.RECORDS_PROTO,
                parameter='paths=source_relative,module=github.com/acme',
            )
        )
        self.assertFalse(result)
        self.assertIn('module=', response.error)


class TestFormatCompilerVersion(unittest.TestCase):
    """Tests for plugin.format_compiler_version."""

    def test_version(self) -> None:
        request = testing.code_generator_request()
        self.assertEqual(plugin.format_compiler_version(request), 'v5.27.1')

    def test_suffix(self) -> None:
        request = testing.code_generator_request()
        request.compiler_version.suffix = 'rc2'
        self.assertEqual(
            plugin.format_compiler_version(request), 'v5.27.1-rc2'
        )

    def test_missing(self) -> None:
        request = plugin_pb2.CodeGeneratorRequest()
        self.assertEqual(plugin.format_compiler_version(request), '')


class TestMain(unittest.TestCase):
    """Runs plugin.main with a request on stdin."""

    def _run(self, request) -> tuple[plugin_pb2.CodeGeneratorResponse, int]:
        stdin = mock.Mock(buffer=io.BytesIO(request.SerializeToString()))
        stdout = mock.Mock(buffer=io.BytesIO())

        with mock.patch.object(plugin, 'setup_logging') as setup_logging:
            with mock.patch('sys.stdin', stdin), mock.patch(
                'sys.stdout', stdout
            ):
                self.assertEqual(plugin.main(GoCodeGenerator), 0)

        response = plugin_pb2.CodeGeneratorResponse.FromString(
            stdout.buffer.getvalue()
        )
        return response, setup_logging.call_args.args[0]

    def test_writes_response(self) -> None:
        response, log_level = self._run(
            testing.code_generator_request(testing.RECORDS_PROTO)
        )
        self.assertEqual(len(response.file), 1)
        self.assertEqual(
            response.supported_features,
            plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL,
        )
        self.assertEqual(log_level, logging.WARNING)

    def test_verbose(self) -> None:
        _, log_level = self._run(
            testing.code_generator_request(
                testing.RECORDS_PROTO, parameter='verbose'
            )
        )
        self.assertEqual(log_level, logging.DEBUG)

    def test_error_response(self) -> None:
        with self.assertLogs('dbtypes.plugin', logging.ERROR):
            response, _ = self._run(
                testing.code_generator_request(_NO_GO_PACKAGE_PROTO)
            )
        self.assertEqual(len(response.file), 0)
        self.assertTrue(response.error)


if __name__ == '__main__':
    unittest.main()
