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

import datetime
from collections import namedtuple

from . import settings
from .bioformats import dict_to_fasta, fasta_to_dict, pilon_changes_per_contig, spades_coverage
from .version import __version__

PipelineResult = namedtuple(
    "PipelineResult", ["num_contigs", "total_bases", "min_contig_len", "elapsed"]
)


def effective_min_contig_len(min_contig_len, read_length):
    """
    '--min_contig_len' of 0 means 'auto': contigs shorter than a single read are discarded
    """
    return min_contig_len if min_contig_len > 0 else read_length


def rank_contigs(fasta_dict):
    """
    Names sorted by decreasing sequence length, ties are broken by name so the order is reproducible
    """
    return sorted(fasta_dict, key=lambda name: (-len(fasta_dict[name]["sequence"]), name))


def original_name(seq_name):
    if seq_name.endswith(settings.PILON_SUFFIX):
        return seq_name[: -len(settings.PILON_SUFFIX)]
    return seq_name


def filter_and_rename_contigs(assembly_path, out_fasta_path, min_contig_len, changes_path=None,
                              date=None):
    """
    Discard contigs shorter than 'min_contig_len' and rename the rest as 'contig00001',
    'contig00002'... from longest to shortest. The original name, depth of coverage and number of
    corrections made by Pilon are kept in the description. Returns number of contigs and total
    length written.
    """
    if date is None:
        date = datetime.date.today()
    date_str = f"{date:%Y%m%d}"
    assembly = fasta_to_dict(assembly_path)
    changes = pilon_changes_per_contig(changes_path) if changes_path else {}

    renamed = {}
    total_bases = 0
    rank = 0
    for name in rank_contigs(assembly):
        seq = assembly[name]["sequence"]
        if len(seq) < min_contig_len:
            continue
        rank += 1
        orig_name = original_name(name)
        description = " ".join([
            f"len={len(seq)}",
            f"cov={spades_coverage(orig_name):.1f}",
            f"corr={changes.get(orig_name, 0)}",
            f"origname={orig_name}",
            f"sw=shortasm/{__version__}",
            f"date={date_str}",
        ])
        renamed[f"contig{rank:05d}"] = {"description": description, "sequence": seq}
        total_bases += len(seq)

    dict_to_fasta(renamed, out_fasta_path, wrap=0, sort=True)
    return len(renamed), total_bases
