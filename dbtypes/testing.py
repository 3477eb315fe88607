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
"""Utilities for testing dbtypes and the code it generates."""

import contextlib
import sys
from types import ModuleType
from typing import Iterable, Iterator
from unittest import mock

from google.protobuf import descriptor_pb2, descriptor_pool, text_format
from google.protobuf.compiler import plugin_pb2
from google.protobuf.internal import builder

from dbtypes import codegen_python
from dbtypes.output_file import OutputFile
from dbtypes.proto_tree import ProtoFile, build_proto_file

RECORDS_PROTO = """\
name: "acme/db/v1/records.proto"
package: "acme.db.v1"
syntax: "proto3"
options { go_package: "github.com/acme/gen/go/acme/db/v1;dbv1" }
message_type {
  name: "ToolSetSpec"
  field {
    name: "tool_ids" number: 1 label: LABEL_REPEATED type: TYPE_STRING
  }
  field { name: "name" number: 2 label: LABEL_OPTIONAL type: TYPE_STRING }
  field { name: "enabled" number: 3 label: LABEL_OPTIONAL type: TYPE_BOOL }
}
message_type {
  name: "UserPreferences"
  field { name: "theme" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
  field {
    name: "language" number: 2 label: LABEL_OPTIONAL type: TYPE_STRING
  }
  field {
    name: "settings"
    number: 3
    label: LABEL_REPEATED
    type: TYPE_MESSAGE
    type_name: ".acme.db.v1.UserPreferences.SettingsEntry"
  }
  nested_type {
    name: "SettingsEntry"
    field { name: "key" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
    field { name: "value" number: 2 label: LABEL_OPTIONAL type: TYPE_STRING }
    options { map_entry: true }
  }
}
message_type {
  name: "Container"
  field { name: "id" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
  field {
    name: "spec"
    number: 2
    label: LABEL_OPTIONAL
    type: TYPE_MESSAGE
    type_name: ".acme.db.v1.ToolSetSpec"
  }
  field {
    name: "items"
    number: 3
    label: LABEL_REPEATED
    type: TYPE_MESSAGE
    type_name: ".acme.db.v1.Container.Item"
  }
  nested_type {
    name: "Item"
    field { name: "key" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
    field { name: "value" number: 2 label: LABEL_OPTIONAL type: TYPE_STRING }
  }
}
"""

# A second file in the same package as RECORDS_PROTO.
AUDIT_PROTO = """\
name: "acme/db/v1/audit.proto"
package: "acme.db.v1"
dependency: "acme/db/v1/records.proto"
syntax: "proto3"
options { go_package: "github.com/acme/gen/go/acme/db/v1;dbv1" }
message_type {
  name: "AuditEntry"
  field { name: "id" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
  field {
    name: "spec"
    number: 2
    label: LABEL_OPTIONAL
    type: TYPE_MESSAGE
    type_name: ".acme.db.v1.ToolSetSpec"
  }
}
"""

INVOICE_PROTO = """\
name: "acme/billing/v1/invoice.proto"
package: "acme.billing.v1"
syntax: "proto3"
options { go_package: "github.com/acme/gen/go/acme/billing/v1" }
message_type {
  name: "Invoice"
  field { name: "id" number: 1 label: LABEL_OPTIONAL type: TYPE_STRING }
  field {
    name: "amount_cents" number: 2 label: LABEL_OPTIONAL type: TYPE_INT64
  }
}
"""

# Created once per process; the default descriptor pool holds each file once.
_PB2_MODULES: dict[str, dict] = {}


def file_descriptor(text: str) -> descriptor_pb2.FileDescriptorProto:
    """Parses a FileDescriptorProto from protobuf text format."""
    return text_format.Parse(text, descriptor_pb2.FileDescriptorProto())


def proto_file(text: str, generate: bool = True) -> ProtoFile:
    return build_proto_file(file_descriptor(text), generate)


def code_generator_request(
    *protos: str,
    parameter: str = '',
    files_to_generate: Iterable[str] | None = None,
) -> plugin_pb2.CodeGeneratorRequest:
    """Builds a request as protoc would send it, for the given files.

    All files are generated unless files_to_generate is provided.
    """
    request = plugin_pb2.CodeGeneratorRequest(parameter=parameter)
    request.compiler_version.major = 5
    request.compiler_version.minor = 27
    request.compiler_version.patch = 1

    for text in protos:
        request.proto_file.append(file_descriptor(text))

    if files_to_generate is None:
        files_to_generate = [proto.name for proto in request.proto_file]
    request.file_to_generate.extend(files_to_generate)

    return request


def _pb2_namespace(proto: descriptor_pb2.FileDescriptorProto) -> dict:
    if proto.name not in _PB2_MODULES:
        file_desc = descriptor_pool.Default().AddSerializedFile(
            proto.SerializeToString()
        )
        namespace = {'DESCRIPTOR': file_desc}
        builder.BuildMessageAndEnumDescriptors(file_desc, namespace)
        builder.BuildTopDescriptorsAndMessages(
            file_desc,
            codegen_python.pb2_module(build_proto_file(proto)),
            namespace,
        )
        _PB2_MODULES[proto.name] = namespace

    return _PB2_MODULES[proto.name]


def _add_module(name: str) -> ModuleType:
    """Creates a module and any missing parent packages in sys.modules."""
    parent_name, _, short_name = name.rpartition('.')
    module = ModuleType(name)
    sys.modules[name] = module

    if parent_name:
        parent = sys.modules.get(parent_name)
        if parent is None:
            parent = _add_module(parent_name)
            parent.__path__ = []  # type: ignore[attr-defined]
        setattr(parent, short_name, module)

    return module


@contextlib.contextmanager
def generated_modules(
    protos: Iterable[str], outputs: Iterable[OutputFile]
) -> Iterator[dict[str, ModuleType]]:
    """Imports generated Python wrappers together with their _pb2 modules.

    The _pb2 modules are built from the descriptors instead of being compiled
    by protoc. Modules are importable by name while the context is active.

    Yields:
      The modules, keyed by dotted module name.
    """
    modules = {}

    with mock.patch.dict(sys.modules):
        for text in protos:
            proto = file_descriptor(text)
            name = codegen_python.pb2_module(build_proto_file(proto))
            module = _add_module(name)
            module.__dict__.update(_pb2_namespace(proto))
            modules[name] = module

        for output in outputs:
            name = codegen_python.module_name(output.name())
            module = _add_module(name)
            code = compile(output.content(), output.name(), 'exec')
            exec(code, module.__dict__)  # pylint: disable=exec-used
            modules[name] = module

        yield modules
