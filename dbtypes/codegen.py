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
"""Emission engine shared by the dbtypes language backends.

The engine walks .proto files in request order, selects the messages that get
a database wrapper and asks a language backend to render one output file per
.proto file with at least one selected message.

Every output package needs exactly one definition of the generic ProtoValue
type that the per-message wrappers embed. The first output file of a package
carries it; later files in the same package refer to that definition. A
PackageEmissionState records which file owns the definition and lives only as
long as a single generation run.
"""

import abc
import logging
from typing import Callable, Iterable

from dbtypes.options import GeneratorConfig, PathLayout
from dbtypes.output_file import OutputFile
from dbtypes.proto_tree import ProtoFile, ProtoMessage
from dbtypes.selection import should_generate

_LOG = logging.getLogger(__name__)

PLUGIN_VERSION = '0.1.0'

# Receives each finished output file. Exceptions abort the run.
OutputWriter = Callable[[OutputFile], None]


class PackageEmissionState:
    """Tracks the output packages that already define ProtoValue."""

    def __init__(self) -> None:
        self._owners: dict[str, str] = {}

    def is_emitted(self, package: str) -> bool:
        return package in self._owners

    def mark_emitted(self, package: str, owner: str) -> None:
        """Records that the output file owner defines the package's wrapper.

        Raises:
          ValueError: The package's wrapper is already defined.
        """
        if package in self._owners:
            raise ValueError(
                f'ProtoValue for {package} is already defined in '
                f'{self._owners[package]}'
            )
        self._owners[package] = owner

    def owner(self, package: str) -> str | None:
        """Name of the output file defining the package's ProtoValue."""
        return self._owners.get(package)


class CodeGenerator(abc.ABC):
    """A language backend for the emission engine."""

    # Name of the protoc plugin, used in generated file headers.
    PLUGIN_NAME: str

    def __init__(self, layout: PathLayout | None = None, compiler_version=''):
        self.layout = layout or PathLayout()
        self.compiler_version = compiler_version

    @abc.abstractmethod
    def output_package(self, proto_file: ProtoFile) -> str:
        """Identifies the package the file's generated code belongs to."""

    @abc.abstractmethod
    def output_filename(self, proto_file: ProtoFile) -> str:
        """Path of the generated file, relative to the output directory."""

    @abc.abstractmethod
    def create_output_file(self, filename: str) -> OutputFile:
        """Creates an empty output file indented for the target language."""

    @abc.abstractmethod
    def generate_header(
        self,
        proto_file: ProtoFile,
        messages: list[ProtoMessage],
        shared_owner: str | None,
        output: OutputFile,
    ) -> None:
        """Writes the file preamble.

        shared_owner is None if this file defines ProtoValue, otherwise the
        name of the output file that does.
        """

    @abc.abstractmethod
    def generate_shared_wrapper(self, output: OutputFile) -> None:
        """Writes the generic ProtoValue definition."""

    @abc.abstractmethod
    def generate_message_wrapper(
        self, message: ProtoMessage, output: OutputFile
    ) -> None:
        """Writes the wrapper type and its operations for one message."""

    def versions_lines(self) -> list[str]:
        """The plugin and protoc versions, aligned for a header comment."""
        width = len(self.PLUGIN_NAME)
        return [
            'versions:',
            f'    {self.PLUGIN_NAME} v{PLUGIN_VERSION}',
            f'    {"protoc":<{width}} {self.compiler_version or "(unknown)"}',
        ]


def selected_messages(
    proto_file: ProtoFile, config: GeneratorConfig
) -> list[ProtoMessage]:
    """Returns the file's messages that get wrappers, parents first."""
    selected = []

    for message in proto_file:
        if should_generate(message, config):
            selected.append(message)
        else:
            _LOG.debug('Skipping %s', message.full_name())

    return selected


def generate_file(
    proto_file: ProtoFile,
    config: GeneratorConfig,
    generator: CodeGenerator,
    state: PackageEmissionState,
) -> OutputFile | None:
    """Generates the wrappers for a single .proto file.

    Returns None if none of the file's messages are selected.
    """
    messages = selected_messages(proto_file, config)
    if not messages:
        _LOG.debug('No messages selected in %s', proto_file.name())
        return None

    package = generator.output_package(proto_file)
    filename = generator.output_filename(proto_file)

    shared_owner = None
    if state.is_emitted(package):
        shared_owner = state.owner(package)
    else:
        _LOG.debug('Defining ProtoValue for %s in %s', package, filename)
        state.mark_emitted(package, filename)

    output = generator.create_output_file(filename)
    generator.generate_header(proto_file, messages, shared_owner, output)

    if shared_owner is None:
        generator.generate_shared_wrapper(output)

    for message in messages:
        generator.generate_message_wrapper(message, output)

    _LOG.info(
        'Generated %d wrapper(s) for %s in %s',
        len(messages),
        proto_file.name(),
        filename,
    )
    return output


def generate(
    proto_files: Iterable[ProtoFile],
    config: GeneratorConfig,
    generator: CodeGenerator,
    write: OutputWriter | None = None,
    state: PackageEmissionState | None = None,
) -> list[OutputFile]:
    """Generates wrappers for every file marked for generation.

    Files are processed in the given order, which decides the file that
    defines each package's ProtoValue. Each output file is passed to write as
    soon as it is complete; an exception from write ends the run.

    Args:
      proto_files: Files in protoc request order.
      config: Message selection rules.
      generator: The language backend.
      write: Called with each output file.
      state: Emission state; a new one is created for the run if omitted.

    Returns:
      The generated files, in order.
    """
    if state is None:
        state = PackageEmissionState()

    outputs = []

    for proto_file in proto_files:
        if not proto_file.generate():
            continue

        output = generate_file(proto_file, config, generator, state)
        if output is None:
            continue

        if write is not None:
            write(output)
        outputs.append(output)

    return outputs
