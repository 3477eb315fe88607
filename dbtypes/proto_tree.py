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
"""This module defines data structures for the messages in .proto files."""

from typing import Callable, Iterable, Iterator, TypeVar

from google.protobuf import descriptor_pb2

T = TypeVar('T')  # pylint: disable=invalid-name


class ProtoMessage:
    """A message declared in a .proto file.

    Messages form a tree: each top-level message of a file is a root, and
    nested message types are its children. Map fields add a synthetic nested
    message (the map entry), which appears in the tree like any other nested
    message but is flagged by is_map_entry().
    """

    def __init__(self, name: str, map_entry: bool = False):
        self._name: str = name
        self._map_entry: bool = map_entry
        self._children: dict[str, 'ProtoMessage'] = {}
        self._parent: 'ProtoMessage | None' = None
        self._file: 'ProtoFile | None' = None

    def name(self) -> str:
        """The message's short name, e.g. "Item" for Container.Item."""
        return self._name

    def nested_names(self) -> list[str]:
        """Names from the top-level message down to this one."""
        return list(self._attr_hierarchy(lambda node: node.name()))

    def full_name(self) -> str:
        """Fully-qualified proto name of the message, without leading dot."""
        path = '.'.join(self.nested_names())
        if self.package():
            return f'{self.package()}.{path}'
        return path

    def package(self) -> str:
        """The proto package the message is declared in."""
        return self.proto_file().package()

    def proto_file(self) -> 'ProtoFile':
        node = self
        while node._parent is not None:
            node = node._parent
        assert node._file is not None, f'{self._name} is not in a file'
        return node._file

    def is_map_entry(self) -> bool:
        return self._map_entry

    def parent(self) -> 'ProtoMessage | None':
        return self._parent

    def add_child(self, child: 'ProtoMessage') -> None:
        """Nests a message within this one.

        Raises:
          ValueError: A nested message with the same name already exists.
        """
        if child.name() in self._children:
            raise ValueError(
                f'Duplicate nested message {child.name()} in {self._name}'
            )

        child._parent = self  # pylint: disable=protected-access
        self._children[child.name()] = child

    def find(self, path: str) -> 'ProtoMessage | None':
        """Finds a nested message by dotted path relative to this one."""
        node = self

        # pylint: disable=protected-access
        for section in path.split('.'):
            child = node._children.get(section)
            if child is None:
                return None
            node = child
        # pylint: enable=protected-access

        return node

    def __iter__(self) -> Iterator['ProtoMessage']:
        """Iterates depth-first, parents before their nested messages."""
        yield self
        for child in self._children.values():
            yield from child

    def __repr__(self) -> str:
        return f'ProtoMessage({self.full_name()!r})'

    def _attr_hierarchy(
        self, attr_accessor: Callable[['ProtoMessage'], T]
    ) -> Iterator[T]:
        hierarchy = []
        node: 'ProtoMessage | None' = self
        while node is not None:
            hierarchy.append(attr_accessor(node))
            node = node.parent()
        return reversed(hierarchy)


class ProtoFile:
    """A .proto file and the messages declared in it."""

    def __init__(
        self,
        name: str,
        package: str = '',
        options: descriptor_pb2.FileOptions | None = None,
        generate: bool = True,
    ):
        self._name = name
        self._package = package
        self._options = options or descriptor_pb2.FileOptions()
        self._generate = generate
        self._messages: dict[str, ProtoMessage] = {}

    def name(self) -> str:
        """Path of the file relative to its include root, e.g. "a/b.proto"."""
        return self._name

    def package(self) -> str:
        return self._package

    def options(self) -> descriptor_pb2.FileOptions:
        return self._options

    def generate(self) -> bool:
        """Whether code was requested for this file, not only imported."""
        return self._generate

    def add_message(self, message: ProtoMessage) -> None:
        if message.name() in self._messages:
            raise ValueError(
                f'Duplicate message {message.name()} in {self._name}'
            )
        message._file = self  # pylint: disable=protected-access
        self._messages[message.name()] = message

    def find(self, path: str) -> ProtoMessage | None:
        """Finds a message by its dotted path within the file's package."""
        top, _, rest = path.partition('.')
        message = self._messages.get(top)
        if message is None or not rest:
            return message
        return message.find(rest)

    def __iter__(self) -> Iterator[ProtoMessage]:
        """Iterates all messages in declaration order, depth-first."""
        for message in self._messages.values():
            yield from message

    def __repr__(self) -> str:
        return f'ProtoFile({self._name!r})'


def _build_message(proto_message: descriptor_pb2.DescriptorProto):
    node = ProtoMessage(
        proto_message.name,
        map_entry=proto_message.options.map_entry,
    )
    for nested in proto_message.nested_type:
        node.add_child(_build_message(nested))
    return node


def build_proto_file(
    file_descriptor_proto: descriptor_pb2.FileDescriptorProto,
    generate: bool = True,
) -> ProtoFile:
    """Creates a ProtoFile and its message trees from a file descriptor."""
    options = descriptor_pb2.FileOptions()
    options.CopyFrom(file_descriptor_proto.options)

    proto_file = ProtoFile(
        file_descriptor_proto.name,
        file_descriptor_proto.package,
        options,
        generate,
    )
    for proto_message in file_descriptor_proto.message_type:
        proto_file.add_message(_build_message(proto_message))

    return proto_file


def build_proto_files(
    file_descriptor_protos: Iterable[descriptor_pb2.FileDescriptorProto],
    files_to_generate: Iterable[str],
) -> list[ProtoFile]:
    """Builds every file of a request, keeping the request's file order.

    protoc lists files in dependency order: each file appears after all of
    the files it imports.
    """
    wanted = set(files_to_generate)
    return [
        build_proto_file(proto, generate=proto.name in wanted)
        for proto in file_descriptor_protos
    ]
