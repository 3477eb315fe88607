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
"""Errors reported by the dbtypes generator."""


class CodegenError(Exception):
    """A request the generator cannot turn into output files."""

    def __init__(self, error_message: str, proto_file: str | None = None):
        super().__init__(f'dbtypes codegen error: {error_message}')
        self.error_message = error_message
        self.proto_file = proto_file

    def formatted_message(self) -> str:
        lines = [f'dbtypes codegen error: {self.error_message}']

        if self.proto_file is not None:
            lines.append(f'    in {self.proto_file}')

        return '\n'.join(lines)
