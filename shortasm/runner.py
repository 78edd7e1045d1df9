#!/usr/bin/env python3
"""
Copyright 2024 shortasm contributors

Sequential execution of external programs. A stage is a single process described by a 'Stage'
record, stages run strictly one after the other and the first failure stops the run.

This file is part of shortasm. shortasm is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by the Free Software Foundation,
either version 3 of the License, or (at your option) any later version. shortasm is distributed in
the hope that it will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License for more
details. You should have received a copy of the GNU General Public License along with shortasm. If
not, see <http://www.gnu.org/licenses/>.
"""

import shlex
import shutil
import subprocess
import sys
import time
from collections import namedtuple
from pathlib import Path

from tqdm import tqdm

from . import log
from .errors import MissingStageInput, StageFailed
from .misc import bold, elapsed_time

# 'command', 'inputs' and 'outputs' are tuples of str.format templates, 'stdout' is an optional
# template of the file receiving the standard output of the process
Stage = namedtuple("Stage", ["name", "description", "command", "inputs", "outputs", "stdout"])

ProcessResult = namedtuple("ProcessResult", ["returncode", "output"])


class ProcessRunner(object):
    """
    Runs one external command and waits for it. Standard output goes to 'stdout_path' when given,
    otherwise it is captured together with standard error.
    """

    def run(self, command, stdout_path=None):
        if stdout_path is None:
            process = subprocess.run(
                command, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True
            )
            return ProcessResult(process.returncode, process.stdout)
        with open(stdout_path, "wt") as stdout_file:
            process = subprocess.run(
                command, stdout=stdout_file, stderr=subprocess.PIPE, text=True
            )
        return ProcessResult(process.returncode, process.stderr)


def render_template(template, values):
    return template.format(**values)


def render_command(command_template, values):
    """
    Substitute 'values' into every token of 'command_template'. Tokens starting with '*' are split
    like a shell would after substitution, so they can expand to several arguments or none.
    """
    command = []
    for token in command_template:
        if token.startswith("*"):
            command += shlex.split(render_template(token[1:], values))
        else:
            command.append(render_template(token, values))
    return command


def run_stages(stages, values, runner, show_progress=True):
    """
    Run 'stages' in order. Before a stage starts all its inputs must exist, a non-zero exit status
    raises 'StageFailed' and no further stage is started.
    """
    tqdm_cols = min(shutil.get_terminal_size().columns, 120)
    with tqdm(total=len(stages), ncols=tqdm_cols, unit="stage", file=sys.stderr,
              disable=not show_progress) as pbar:
        for stage in stages:
            start = time.time()
            for input_template in stage.inputs:
                input_path = Path(render_template(input_template, values))
                if not input_path.exists():
                    raise MissingStageInput(stage.name, input_path)
            command = render_command(stage.command, values)
            stdout_path = None
            if stage.stdout:
                stdout_path = Path(render_template(stage.stdout, values))
            log.log(f"{bold(stage.name)}: {stage.description}", print_to_screen=False)
            result = runner.run(command, stdout_path)
            log.log_tool_output(command, result.output)
            if result.returncode != 0:
                log.log(f"'{stage.name}': FAILED (exit code {result.returncode})",
                        print_to_screen=False)
                raise StageFailed(stage.name, result.returncode)
            message = f"'{stage.name}': {stage.description} [{elapsed_time(time.time() - start)}]"
            log.log(message, print_to_screen=False)
            if show_progress:
                tqdm.write(message, file=sys.stderr)
            pbar.update()
