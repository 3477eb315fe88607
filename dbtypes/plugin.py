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
"""dbtypes compiler plugin.

This file implements the protobuf compiler plugin protocol shared by the
language-specific dbtypes plugins, which generate database wrapper types for
protobuf messages.
"""

import logging
import sys

import coloredlogs  # type: ignore
from google.protobuf.compiler import plugin_pb2

from dbtypes import codegen, options, proto_tree
from dbtypes.errors import CodegenError
from dbtypes.output_file import OutputFile

_LOG = logging.getLogger(__name__)


def setup_logging(level: int) -> None:
    """Sends logs to stderr; protoc reads the plugin's response from stdout."""
    coloredlogs.install(
        level=level,
        stream=sys.stderr,
        level_styles={'debug': {'color': 244}, 'error': {'color': 'red'}},
        fmt='%(name)s %(levelname)s | %(message)s',
    )


def format_compiler_version(request: plugin_pb2.CodeGeneratorRequest) -> str:
    """Formats the protoc version as protoc-gen-go does, e.g. "v5.27.1"."""
    if not request.HasField('compiler_version'):
        return ''

    version = request.compiler_version
    text = f'v{version.major}.{version.minor}.{version.patch}'
    if version.suffix:
        text += f'-{version.suffix}'
    return text


def process_proto_request(
    req: plugin_pb2.CodeGeneratorRequest,
    res: plugin_pb2.CodeGeneratorResponse,
    generator_class: type[codegen.CodeGenerator],
) -> bool:
    """Handles a protoc CodeGeneratorRequest message.

    Generates code for the files in the request and writes the output to the
    specified CodeGeneratorResponse message. Either every output file is
    added to the response or, on a CodegenError, none are and the response's
    error is set.

    Args:
      req: A CodeGeneratorRequest for a proto compilation.
      res: A CodeGeneratorResponse to populate with the plugin's output.
      generator_class: The language backend to generate code with.

    Returns:
      False if the request could not be handled.
    """

    def write(output: OutputFile) -> None:
        fd = res.file.add()
        fd.name = output.name()
        fd.content = output.content()

    try:
        plugin_options = options.parse_parameter_options(req.parameter)
        generator = generator_class(
            plugin_options.layout, format_compiler_version(req)
        )
        proto_files = proto_tree.build_proto_files(
            req.proto_file, req.file_to_generate
        )
        codegen.generate(proto_files, plugin_options.config, generator, write)
    except CodegenError as err:
        del res.file[:]
        res.error = err.formatted_message()
        return False

    return True


def _verbose_requested(parameter: str) -> bool:
    return any(
        entry.lstrip('-') == 'verbose'
        for entry in options.split_parameter(parameter)
    )


def main(generator_class: type[codegen.CodeGenerator]) -> int:
    """Protobuf compiler plugin entrypoint.

    Reads a CodeGeneratorRequest proto from stdin and writes a
    CodeGeneratorResponse to stdout.
    """
    data = sys.stdin.buffer.read()
    request = plugin_pb2.CodeGeneratorRequest.FromString(data)
    response = plugin_pb2.CodeGeneratorResponse()

    setup_logging(
        logging.DEBUG
        if _verbose_requested(request.parameter)
        else logging.WARNING
    )

    # Declare that this plugin supports optional fields in proto3.
    response.supported_features |= (  # type: ignore[attr-defined]
        response.FEATURE_PROTO3_OPTIONAL
    )  # type: ignore[attr-defined]

    if not process_proto_request(request, response, generator_class):
        _LOG.error('%s', response.error)

    sys.stdout.buffer.write(response.SerializeToString())
    return 0
