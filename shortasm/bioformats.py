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

import gzip
import re
from collections import Counter
from pathlib import Path

# Regular expression to match Spades headers, captures the depth of coverage
SPADES_HEADER_REGEX = r"^(?:NODE|EDGE)_\d+_length_\d+_cov_(\d+(?:\.\d+)?)"


def get_read_lengths(fastq_path, num_reads):
    """
    Collect the length of the sequence line of at most 'num_reads' records from a FASTQ
    """
    line_count = 0
    read_lengths = []
    if f"{fastq_path}".endswith(".gz"):
        opener = gzip.open
    else:
        opener = open
    with opener(fastq_path, "rt") as fastq:
        for line in fastq:
            line_count += 1
            if line_count % 4 == 2:
                read_lengths.append(len(line.rstrip("\r\n")))
            if line_count == num_reads * 4:
                break
    return read_lengths


def fasta_to_dict(fasta_path):
    """
    Turns a FASTA file given with `fasta_path` into a dictionary. For example, for the sequence:
    ```text
    >NODE_1_length_274_cov_12.5 extra words
    ATATTGATATTTCATAATAATAGTTTTTGAACTAAAAAGAAATTTTTCCTCCAATTATGTGGG
    ```
    Returns the dictionary:
    ```
    {'NODE_1_length_274_cov_12.5' : {
        'description': 'extra words',
        'sequence': 'ATATTGATATTTCATAATAATAGTTTTTGAACTAAAAAGAAATTTTTCCTCCAAT...'
    }}
    ```
    """
    if f"{fasta_path}".endswith(".gz"):
        opener = gzip.open
    else:
        opener = open
    fasta_out = {}
    with opener(fasta_path, "rt") as fasta_in:
        seq = ""
        name = ""
        desc = ""
        for line in fasta_in:
            line = line.strip("\r\n")
            if not line:
                continue
            if line.startswith(">"):
                if name:
                    fasta_out[name] = {
                        "description": desc,
                        "sequence": seq,
                    }
                seq = ""
                if len(line.split()) > 1:
                    name = line[1:].split()[0]
                    desc = " ".join(line.split()[1:])
                else:
                    name = line[1:].strip()
                    desc = ""
            else:
                seq += line.strip()
        if name:
            fasta_out[name] = {
                "description": desc,
                "sequence": seq,
            }
    return fasta_out


def dict_to_fasta(in_fasta_dict, out_fasta_path, wrap=0, sort=False, write_if_empty=True):
    """
    Saves a `in_fasta_dict` from function `fasta_to_dict()` as a FASTA file to `out_fasta_path`
    """
    out_fasta_path = Path(out_fasta_path)
    if not in_fasta_dict and not write_if_empty:
        return out_fasta_path
    if sort:
        in_fasta_dict = dict(sorted(in_fasta_dict.items(), key=lambda x: x[0]))
    with open(out_fasta_path, "wt") as fasta_out:
        for name in in_fasta_dict:
            header = f">{name} {in_fasta_dict[name]['description']}".strip()
            seq = in_fasta_dict[name]["sequence"]
            if wrap > 0:
                seq_out = "\n".join([seq[i : i + wrap] for i in range(0, len(seq), wrap)])
            else:
                seq_out = seq
            fasta_out.write(f"{header}\n{seq_out}\n")
    return out_fasta_path


def spades_coverage(seq_name):
    """
    Extract the depth of coverage from a Spades-like name (e.g. 'NODE_3_length_906_cov_27.4'), 0.0
    when the name doesn't follow that format
    """
    match = re.match(SPADES_HEADER_REGEX, seq_name)
    if match:
        return float(match.group(1))
    return 0.0


def pilon_changes_per_contig(changes_path):
    """
    Count the corrections listed by Pilon's '--changes' file per original sequence name. Each line
    looks like: 'NODE_1_length_906_cov_27.4:120 NODE_1_length_906_cov_27.4_pilon:120 A C'
    """
    changes = Counter()
    changes_path = Path(changes_path)
    if not changes_path.is_file():
        return changes
    with open(changes_path, "rt") as changes_in:
        for line in changes_in:
            fields = line.split()
            if not fields:
                continue
            changes[fields[0].rsplit(":", 1)[0]] += 1
    return changes
