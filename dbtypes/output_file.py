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
"""Defines a class to buffer generated source text for one output file."""


class OutputFile:
    """A buffer to which generated source is written.

    Example:

    ```
    output = OutputFile('hello.go', indent='\t')
    output.write_line('func main() {')
    with output.indent():
        output.write_line('fmt.Println("Hello, world")')
    output.write_line('}')

    print(output.content())
    ```

    Produces:
    ```
    func main() {
    	fmt.Println("Hello, world")
    }
    ```
    """

    def __init__(self, filename: str, indent: str = '    '):
        self._filename: str = filename
        self._indent_unit: str = indent
        self._content: list[str] = []
        self._indentation: int = 0

    def write_line(self, line: str = '') -> None:
        if line:
            self._content.append(self._indent_unit * self._indentation)
            self._content.append(line)
        self._content.append('\n')

    def write_lines(self, lines: list[str]) -> None:
        for line in lines:
            self.write_line(line)

    def indent(self) -> 'OutputFile._IndentationContext':
        """Increases the indentation level of the output."""
        return self._IndentationContext(self)

    def name(self) -> str:
        return self._filename

    def content(self) -> str:
        return ''.join(self._content)

    class _IndentationContext:
        """Context that increases the output's indentation when it is active."""

        def __init__(self, output: 'OutputFile'):
            self._output = output

        def __enter__(self):
            self._output._indentation += 1

        def __exit__(self, typ, value, traceback):
            self._output._indentation -= 1
