#!/usr/bin/env python3
"""
Copyright 2024 shortasm contributors

Exceptions raised by shortasm. Every error is fatal, components raise them and only the
orchestrator in 'assemble.py' turns them into an error message and a non-zero exit status.

This file is part of shortasm. shortasm is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by the Free Software Foundation,
either version 3 of the License, or (at your option) any later version. shortasm is distributed in
the hope that it will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License for more
details. You should have received a copy of the GNU General Public License along with shortasm. If
not, see <http://www.gnu.org/licenses/>.
"""


class ShortasmError(Exception):
    pass


class ValidationError(ShortasmError):
    pass


class MissingDependency(ShortasmError):

    def __init__(self, tool):
        self.tool = tool
        super().__init__(
            f"'{tool}' could not be found, please verify you have it installed and in your PATH"
        )


class FolderExists(ShortasmError):

    def __init__(self, path):
        self.path = path
        super().__init__(
            f"Output directory '{path}' already exists, use '--overwrite' to replace it"
        )


class EmptySample(ShortasmError):

    def __init__(self, fastq_path):
        self.fastq_path = fastq_path
        super().__init__(f"No reads could be sampled from '{fastq_path}'")


class DegenerateKmerRange(ShortasmError):

    def __init__(self, read_length, max_k):
        self.read_length = read_length
        self.max_k = max_k
        super().__init__(
            f"Reads are too short ({read_length} bp) to choose kmer sizes, the largest kmer allowed"
            f" would be {max_k}. Provide a list with '--k_list'"
        )


class EstimationFailed(ShortasmError):
    pass


class InvalidSizeFormat(ShortasmError):

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Invalid genome size '{value}', use a positive number optionally followed by G, M or K"
            " (e.g.: 5.2M)"
        )


class MissingStageInput(ShortasmError):

    def __init__(self, stage, path):
        self.stage = stage
        self.path = path
        super().__init__(f"Stage '{stage}' can not start, input file '{path}' was not found")


class StageFailed(ShortasmError):

    def __init__(self, stage_name, exit_code):
        self.stage_name = stage_name
        self.exit_code = exit_code
        super().__init__(f"Stage '{stage_name}' failed with exit code {exit_code}")


class MissingDraftAssembly(ShortasmError):

    def __init__(self, path):
        self.path = path
        super().__init__(f"The assembler did not produce the expected file '{path}'")
