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
"""Decides which messages receive database wrappers."""

from dbtypes.options import GeneratorConfig
from dbtypes.proto_tree import ProtoMessage


def should_generate(message: ProtoMessage, config: GeneratorConfig) -> bool:
    """Returns True if a wrapper should be generated for the message.

    Map entries are never wrapped. Nested messages are judged on their own
    names; whether their parent is wrapped has no effect.
    """
    if message.is_map_entry():
        return False

    if config.only_package and message.package() != config.only_package:
        return False

    if message.name() in config.excluded_types:
        return False

    return message.full_name() not in config.excluded_types
