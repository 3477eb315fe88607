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
"""dbtypes"""

import setuptools  # type: ignore

setuptools.setup(
    name='dbtypes',
    version='0.1.0',
    author='Pigweed Authors',
    author_email='pigweed-developers@googlegroups.com',
    description='protoc plugins generating database wrappers for messages',
    packages=['dbtypes'],
    package_data={'dbtypes': ['py.typed']},
    zip_safe=False,
    python_requires='>=3.10',
    entry_points={
        'console_scripts': [
            'protoc-gen-go-dbtypes = dbtypes.plugin_go:main',
            'protoc-gen-python-dbtypes = dbtypes.plugin_python:main',
            'dbtypes = dbtypes.__main__:main',
        ]
    },
    install_requires=[
        'coloredlogs',
        'protobuf>=4.21',
    ],
    extras_require={
        'test': ['parameterized'],
    },
    tests_require=['parameterized'],
)
