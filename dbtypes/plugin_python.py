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
"""Entry point for protoc-gen-python-dbtypes.

Generates Python database wrapper types for protobuf messages.
"""

import sys

from dbtypes import plugin
from dbtypes.codegen_python import PythonCodeGenerator


def main() -> int:
    return plugin.main(PythonCodeGenerator)


if __name__ == '__main__':
    sys.exit(main())
