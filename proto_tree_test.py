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
"""Tests building message trees from file descriptors."""

import unittest

from dbtypes import testing
from dbtypes.proto_tree import ProtoFile, ProtoMessage, build_proto_files

_DEEP_PROTO = """\
name: "deep.proto"
message_type {
  name: "A"
  nested_type {
    name: "B"
    nested_type { name: "C" }
  }
  nested_type { name: "D" }
}
message_type { name: "E" }
"""


class TestProtoTree(unittest.TestCase):
    """Tests for the ProtoFile and ProtoMessage tree."""

    def test_declaration_order_parents_first(self) -> None:
        proto_file = testing.proto_file(_DEEP_PROTO)
        self.assertEqual(
            [message.full_name() for message in proto_file],
            ['A', 'A.B', 'A.B.C', 'A.D', 'E'],
        )

    def test_names(self) -> None:
        proto_file = testing.proto_file(testing.RECORDS_PROTO)
        item = proto_file.find('Container.Item')
        assert item is not None

        self.assertEqual(item.name(), 'Item')
        self.assertEqual(item.nested_names(), ['Container', 'Item'])
        self.assertEqual(item.full_name(), 'acme.db.v1.Container.Item')
        self.assertEqual(item.package(), 'acme.db.v1')
        self.assertIs(item.proto_file(), proto_file)
        self.assertIs(item.parent(), proto_file.find('Container'))

    def test_map_entry_flag(self) -> None:
        proto_file = testing.proto_file(testing.RECORDS_PROTO)
        entry = proto_file.find('UserPreferences.SettingsEntry')
        assert entry is not None
        self.assertTrue(entry.is_map_entry())

        self.assertEqual(
            [m.name() for m in proto_file if m.is_map_entry()],
            ['SettingsEntry'],
        )

    def test_find_missing(self) -> None:
        proto_file = testing.proto_file(testing.RECORDS_PROTO)
        self.assertIsNone(proto_file.find('Missing'))
        self.assertIsNone(proto_file.find('Container.Missing'))

    def test_file_options_are_kept(self) -> None:
        proto_file = testing.proto_file(testing.RECORDS_PROTO)
        self.assertEqual(
            proto_file.options().go_package,
            'github.com/acme/gen/go/acme/db/v1;dbv1',
        )

    def test_duplicate_nested_message(self) -> None:
        message = ProtoMessage('Outer')
        message.add_child(ProtoMessage('Inner'))
        with self.assertRaises(ValueError):
            message.add_child(ProtoMessage('Inner'))

    def test_duplicate_message(self) -> None:
        proto_file = ProtoFile('a.proto', 'a')
        proto_file.add_message(ProtoMessage('Foo'))
        with self.assertRaises(ValueError):
            proto_file.add_message(ProtoMessage('Foo'))

    def test_build_proto_files_marks_files_to_generate(self) -> None:
        files = build_proto_files(
            [
                testing.file_descriptor(testing.RECORDS_PROTO),
                testing.file_descriptor(testing.AUDIT_PROTO),
            ],
            ['acme/db/v1/audit.proto'],
        )
        self.assertEqual(
            [(f.name(), f.generate()) for f in files],
            [
                ('acme/db/v1/records.proto', False),
                ('acme/db/v1/audit.proto', True),
            ],
        )


if __name__ == '__main__':
    unittest.main()
