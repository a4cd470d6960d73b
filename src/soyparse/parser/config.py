"""
    Copyright 2025 Inmanta

    Licensed under the Apache License, Version 2.0 (the "License");
    you may not use this file except in compliance with the License.
    You may obtain a copy of the License at

        http://www.apache.org/licenses/LICENSE-2.0

    Unless required by applicable law or agreed to in writing, software
    distributed under the License is distributed on an "AS IS" BASIS,
    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
    See the License for the specific language governing permissions and
    limitations under the License.

    Contact: code@inmanta.com
"""

from soyparse.config import Option, is_positive_int

max_nesting_depth: Option[int] = Option(
    "parser",
    "max_nesting_depth",
    32,
    "The maximum number of nested blocks and expressions the parser accepts before it gives up on the input.",
    is_positive_int,
)
