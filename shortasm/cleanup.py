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

import shutil
from pathlib import Path

from . import log, settings
from .stages import draft_path


def intermediate_paths(out_dir, k_list, assembly):
    """
    Every file or directory the pipeline leaves behind that is not needed after the final contigs
    have been written
    """
    out_dir = Path(out_dir)
    paths = []
    for pattern in settings.FASTQ_CLEANUP_PATTERNS:
        paths += sorted(out_dir.glob(pattern))
    draft = draft_path(out_dir, assembly)
    paths += [Path(f"{draft}{ext}") for ext in settings.BWA_INDEX_EXTENSIONS]
    paths += [
        Path(out_dir, settings.ALIGNMENT_SAM),
        Path(out_dir, settings.ALIGNMENT_BAM),
        Path(out_dir, settings.ALIGNMENT_BAI),
    ]
    paths += [Path(out_dir, settings.SPADES_DIR, f"K{k}") for k in k_list]
    paths += [draft_path(out_dir, variant) for variant in settings.ASSEMBLY_VARIANTS
              if variant != assembly]
    paths += [Path(out_dir, scratch) for scratch in settings.SCRATCH_FILES]
    return paths


def clean_workspace(out_dir, k_list, assembly, protected_paths):
    """
    Remove intermediate files, paths in 'protected_paths' are never deleted and files that are
    already gone are skipped. Returns the list of removed paths.
    """
    protected = {Path(path).resolve() for path in protected_paths}
    removed = []
    for path in intermediate_paths(out_dir, k_list, assembly):
        if path.resolve() in protected:
            continue
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path, ignore_errors=True)
        elif path.exists() or path.is_symlink():
            try:
                path.unlink()
            except OSError as error:
                log.log(f"Could not remove '{path}': {error}", print_to_screen=False)
                continue
        else:
            continue
        removed.append(path)
    return removed
