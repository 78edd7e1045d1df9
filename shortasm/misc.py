#!/usr/bin/env python3
"""
Copyright 2024 shortasm contributors

This file is part of shortasm. shortasm is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by the Free Software Foundation,
either version 3 of the License, or (at your option) any later version. shortasm is distributed in
the hope that it will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License for more
details. You should have received a copy of the GNU General Public License along with shortasm. If
not, see <http://www.gnu.org/licenses/>.
"""


import argparse
import os
import platform
import shutil
import subprocess
import sys
from pathlib import Path

from . import log, settings
from .errors import FolderExists, MissingDependency, ValidationError


def get_ram():
    """
    Use 'sysctl' in Mac or 'os.sysconf' in Linux to return RAM size in bytes
    """
    os_type = platform.system()
    if os_type == "Darwin":  # a.k.a. Mac
        return int(os.popen("sysctl hw.memsize").readlines()[0].split()[-1])
    elif os_type == "Linux":
        return os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")
    else:
        return 0


def set_ram(ram):
    """
    Determines RAM size to be used according to the '--ram' argument, 'auto' or GB as decimal
    """
    memsize = get_ram()
    if ram == "auto":
        ram_B = int(memsize * settings.RAM_FRACTION)
    else:
        try:
            ram_B = int(float(ram) * 1024 ** 3)
        except ValueError:
            raise ValidationError(f"'--ram' must be 'auto' or a number of GB, you provided '{ram}'")
        if ram_B <= 0:
            raise ValidationError(f"'--ram' must be greater than 0, you provided '{ram}'")
        if memsize:
            ram_B = min(ram_B, memsize)
    ram_MB = ram_B // 1024 ** 2
    ram_GB = round((ram_B / 1024 ** 3), 1)
    ram_GB_total = round((memsize / 1024 ** 3), 1)
    return (ram_B, ram_MB, ram_GB, ram_GB_total)


def set_threads(threads):
    """
    Parse the string given by '--threads' to return maximum threads to use
    """
    threads_total = os.cpu_count()
    if threads == "auto":
        return threads_total, threads_total
    try:
        threads = int(threads)
    except ValueError:
        raise ValidationError(
            f"'--threads' must be 'auto' or an integer, you provided '{threads}'"
        )
    if threads < 1:
        raise ValidationError(f"'--threads' must be at least 1, you provided '{threads}'")
    return min(threads, threads_total), threads_total


def elapsed_time(total_seconds):
    """
    Return minutes, hours, or days if task took more than 60 seconds
    """
    if total_seconds <= 60:
        return f"{total_seconds:.3f}s"
    days, seconds = divmod(total_seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    minutes, seconds = divmod(seconds, 60)
    values = [days, hours, minutes, seconds]
    symbols = ["d", "h", "m", "s"]
    time_str = ""
    for value, symbol in zip(values, symbols):
        if value == 0 and time_str == "":
            continue
        else:
            if symbol == "s":
                time_str += f"{value:.1f}{symbol} ({total_seconds:.3f}s)"
            else:
                time_str += f"{value:.0f}{symbol} "
    return time_str


def make_output_dir(out_dir, overwrite=False):
    """
    Creates the output directory, it can be provided as a str or as a Path. An existing directory
    is only replaced when 'overwrite' is set. Returns the created directory as a Path and a status
    message.
    """
    out_dir = Path(out_dir)
    if out_dir.exists():
        if not overwrite:
            raise FolderExists(out_dir)
        if out_dir.is_dir():
            shutil.rmtree(out_dir)
        else:
            out_dir.unlink()
        message = "Output directory already existed and was replaced"
    else:
        message = "Output directory successfully created"
    try:
        out_dir.mkdir(parents=True)
    except OSError:
        raise ValidationError(f"shortasm was unable to make the output directory '{out_dir}'")
    return out_dir.resolve(), message


def make_tmp_dir_within(tmp_dir_in, program_tmp_subdir):
    """
    (Re)creates a temporary directory inside 'tmp_dir_in' with the name in 'program_tmp_subdir',
    both arguments can be str or Path. Returns the created directory as a Path.
    """
    tmp_dir_in = Path(f"{tmp_dir_in}".replace("$HOME", "~")).expanduser()
    tmp_dir_out = Path(tmp_dir_in, program_tmp_subdir)
    try:
        if tmp_dir_out.exists():
            shutil.rmtree(tmp_dir_out, ignore_errors=True)
        tmp_dir_out.mkdir(parents=True)
    except OSError:
        raise ValidationError(
            f"shortasm was unable to make the temporary directory '{tmp_dir_out}'"
        )
    return tmp_dir_out.resolve()


def has_valid_ext(file_path, valid_extensions_list):
    """
    Checks if a filename has an extension within a list of valid extension. The argument 'file_path'
    can be a str or a Path
    """
    for ext in valid_extensions_list:
        if f"{file_path}".lower().endswith(ext.lower()):
            return True
    return False


def quit_with_error(message):
    """
    Displays the given message and ends the program's execution.
    """
    log.log(red(f"\nERROR: {message}\n"), 0)
    sys.exit(1)


def successful_exit(message):
    """
    Exit the program showing a message with a successful status for UNIX
    """
    log.log_section_header(message)
    log.log("")
    sys.exit(os.EX_OK)


####################################################################################################
################################################################ FUNCTIONS TO VERIFY SOFTWARE STATUS
def format_dep_msg(dep_text, dep_path, dep_status):
    if dep_status == "not used":
        return f"{dep_text}{dim(dep_status)}"
    elif dep_status == "OK":
        return f"{dep_text}{bold(dep_path)} {bold_green(dep_status)}"
    else:
        return f"{dep_text}{bold_red(dep_status)}"


def tool_path_status(tool_name):
    found_path = shutil.which(tool_name)
    if found_path is None:
        return tool_name, "not found"
    return found_path, "OK"


def verify_dependencies(tool_names, mar=21):
    """
    Resolve every program in 'tool_names' against the PATH, stop at the first one missing.
    Returns a dictionary with the resolved paths.
    """
    found = {}
    for tool_name in tool_names:
        tool_path, tool_status = tool_path_status(tool_name)
        log.log(format_dep_msg(f"{tool_name:>{mar}}: ", tool_path, tool_status))
        if tool_status != "OK":
            raise MissingDependency(tool_name)
        found[tool_name] = tool_path
    return found


####################################################################################################
## FUNCTIONS TAKEN FROM UNICYCLER FOR HELP AND TEXT FORMATTING (https://github.com/rrwick/Unicycler)

END_FORMATTING = "\033[0m"
BOLD = "\033[1m"
RED = "\033[31m"
GREEN = "\033[32m"
DIM = "\033[2m"


class MyHelpFormatter(argparse.HelpFormatter):
    """
    This is a custom formatter class for argparse. It allows for some custom formatting,
    in particular for the help texts with multiple options (like the assembly variants).
    http://stackoverflow.com/questions/3853722
    """
    def __init__(self, prog):
        terminal_width = shutil.get_terminal_size().columns
        os.environ["COLUMNS"] = str(terminal_width)
        max_help_position = min(max(24, terminal_width // 3), 40)
        try:
            self.colours = int(
                subprocess.check_output(["tput", "colors"], stderr=subprocess.DEVNULL)
                .decode().strip()
            )
        except (ValueError, subprocess.CalledProcessError, FileNotFoundError, AttributeError):
            self.colours = 1
        super().__init__(prog, max_help_position=max_help_position)

    def _get_help_string(self, action):
        """
        Override this function to add default values, but only when 'default' is not already in the
        help text.
        """
        help_text = action.help
        if (action.default != argparse.SUPPRESS and "default" not in help_text.lower()
                and action.default is not None):
            help_text += f" (default: {action.default})"
        return help_text

    def start_section(self, heading):
        """
        Override this method to add bold underlining to section headers.
        """
        if self.colours > 1:
            heading = f"{BOLD}{heading}{END_FORMATTING}"
        super().start_section(heading)

    def _split_lines(self, text, width):
        """
        Override this method to add special behaviour for help texts that start with:
          'B|' - loop text to the column of the equals sign if found, options are indented 2 spaces
        """
        if text.startswith("B|"):
            text_lines = text[2:].splitlines()
            wrapped_text_lines = []
            first_line = True  # use different rules for the first line of help
            for line in text_lines:
                if len(line) <= width:
                    if first_line:
                        wrapped_text_lines.append(line)
                    else:
                        wrapped_text_lines.append(f"  {line}")
                else:
                    line_parts = line.split()
                    wrap_column = 0 if first_line else 2
                    current_line = f'{" " * wrap_column}{line_parts[0]}'
                    if "=" in line:
                        wrap_column += line.find("=") + 2
                    for part in line_parts[1:]:
                        if len(current_line) + 1 + len(part) <= width:
                            current_line += f" {part}"
                        else:
                            wrapped_text_lines.append(current_line)
                            current_line = f'{" " * wrap_column}{part}'
                    wrapped_text_lines.append(current_line)
                first_line = False
            return wrapped_text_lines
        else:
            return argparse.HelpFormatter._split_lines(self, text, width)


def bold_green(text):
    return f"{GREEN}{BOLD}{text}{END_FORMATTING}"


def red(text):
    return f"{RED}{text}{END_FORMATTING}"


def bold_red(text):
    return f"{RED}{BOLD}{text}{END_FORMATTING}"


def bold(text):
    return f"{BOLD}{text}{END_FORMATTING}"


def dim(text):
    return f"{DIM}{text}{END_FORMATTING}"
