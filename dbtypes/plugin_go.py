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
"""Entry point for protoc-gen-go-dbtypes.

Generates Go database wrapper types for protobuf messages.
"""

import sys

from dbtypes import plugin
from dbtypes.codegen_go import GoCodeGenerator


def main() -> int:
    return plugin.main(GoCodeGenerator)


if __name__ == '__main__':
    sys.exit(main())
