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
"""Generates database wrapper types for protobuf messages.

The protoc plugins protoc-gen-go-dbtypes and protoc-gen-python-dbtypes emit,
for each selected message, a wrapper type that stores the message in a
database column as its binary encoding. `python -m dbtypes` runs the same
generator on a FileDescriptorSet.
"""
