#!/usr/bin/env python3
"""
Copyright 2024 shortasm contributors

Assembly parameters derived from the reads themselves: representative read length, kmer sizes for
SPAdes and genome size.

This file is part of shortasm. shortasm is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by the Free Software Foundation,
either version 3 of the License, or (at your option) any later version. shortasm is distributed in
the hope that it will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License for more
details. You should have received a copy of the GNU General Public License along with shortasm. If
not, see <http://www.gnu.org/licenses/>.
"""

import re
from fractions import Fraction
from pathlib import Path

import pandas as pd

from . import settings
from .bioformats import get_read_lengths
from .errors import (DegenerateKmerRange, EmptySample, EstimationFailed, InvalidSizeFormat,
                     ValidationError)
from .runner import run_stages
from .stages import GENOME_SIZE_STAGES, SAMPLE_STAGES

GENOME_SIZE_REGEX = re.compile(r"^(\d+(?:\.\d+)?|\.\d+)([GMK])?$", re.IGNORECASE)

GENOME_SIZE_MULTIPLIERS = {"G": 1e9, "M": 1e6, "K": 1e3}


def estimate_read_length(values, runner, num_reads=settings.NUM_READS_TO_SAMPLE,
                         show_progress=True):
    """
    Sample at most 'num_reads' from R1 and return the longest read found. Using the maximum keeps
    the largest kmer size from being limited by a majority of shorter reads.
    """
    run_stages(SAMPLE_STAGES, values, runner, show_progress)
    read_lengths = get_read_lengths(values["sample_fastq"], num_reads)
    if not read_lengths:
        raise EmptySample(values["r1"])
    return max(read_lengths)


def max_kmer_size(read_length):
    """
    Largest kmer size allowed (exclusive), 'MAX_K_FRAC' of the read length without exceeding 'MAX_K'
    """
    return min(settings.MAX_K, int(Fraction(f"{settings.MAX_K_FRAC}") * read_length))


def select_kmers(read_length, threads):
    """
    Evenly spaced odd kmer sizes starting at 'MIN_K', more threads give more kmer sizes
    """
    max_k = max_kmer_size(read_length)
    num_kmers = max(settings.MIN_NUM_KMERS, threads)
    kmer_step = max(settings.MIN_KMER_STEP, (read_length - settings.MIN_K) // num_kmers)
    if kmer_step % 2 == 1:
        kmer_step += 1
    kmers = list(range(settings.MIN_K, max_k, kmer_step))
    if not kmers:
        raise DegenerateKmerRange(read_length, max_k)
    return tuple(kmers)


def parse_k_list(k_list):
    """
    Turn a comma-separated string of kmer sizes into a tuple of integers, used as given
    """
    try:
        kmers = tuple(int(k) for k in k_list.replace(" ", "").split(",") if k)
    except ValueError:
        raise ValidationError(
            f"'--k_list' must be a comma-separated list of integers, you provided '{k_list}'"
        )
    if not kmers:
        raise ValidationError("'--k_list' is empty")
    return kmers


def parse_genome_size(genome_size):
    """
    Convert sizes like '5000000', '5M', '0.5m', '2G' or '10k' to base pairs
    """
    match = GENOME_SIZE_REGEX.match(f"{genome_size}".strip())
    if not match:
        raise InvalidSizeFormat(genome_size)
    number, suffix = match.groups()
    size = float(number)
    if suffix:
        size *= GENOME_SIZE_MULTIPLIERS[suffix.upper()]
    size = int(round(size))
    if size <= 0:
        raise InvalidSizeFormat(genome_size)
    return size


def median_of_column(tsv_path, column):
    """
    Median of the numeric 'column' of a TSV table, every row must hold a number
    """
    tsv_path = Path(tsv_path)
    if not tsv_path.is_file():
        raise EstimationFailed(f"Table '{tsv_path}' was not found")
    try:
        df = pd.read_table(tsv_path, comment="#")
    except pd.errors.EmptyDataError:
        raise EstimationFailed(f"Table '{tsv_path}' is empty")
    if column not in df.columns:
        raise EstimationFailed(f"Column '{column}' was not found in '{tsv_path}'")
    values = pd.to_numeric(df[column], errors="coerce")
    if values.empty or values.isna().any():
        raise EstimationFailed(f"Column '{column}' of '{tsv_path}' is empty or not numeric")
    return values.median()


def estimate_genome_size(values, runner, show_progress=True):
    """
    Count kmers in both read files for every size in 'k_list', then take the median of the genome
    size estimated for each kmer size
    """
    run_stages(GENOME_SIZE_STAGES, values, runner, show_progress)
    genome_size = int(round(
        median_of_column(values["kmerstream_est_tsv"], settings.KMERSTREAM_GSIZE_COLUMN)
    ))
    if genome_size <= 0:
        raise EstimationFailed(f"The estimated genome size is not positive ({genome_size})")
    return genome_size
