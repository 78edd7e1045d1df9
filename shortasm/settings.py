#!/usr/bin/env python3
"""
Copyright 2024 shortasm contributors

This module contains hard-coded settings for shortasm

This file is part of shortasm. shortasm is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by the Free Software Foundation,
either version 3 of the License, or (at your option) any later version. shortasm is distributed in
the hope that it will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License for more
details. You should have received a copy of the GNU General Public License along with shortasm. If
not, see <http://www.gnu.org/licenses/>.
"""

# FASTQ valid filename extensions:
FASTQ_VALID_EXTENSIONS = [".fq", ".fastq", ".fq.gz", ".fastq.gz"]

# Fraction of total RAM available to shortasm when using 'auto' in --ram
RAM_FRACTION = 0.90

# Estimate the representative read length from this many reads of R1
NUM_READS_TO_SAMPLE = 10000

# Seed given to 'seqtk sample' so the read sample is reproducible
SEQTK_SEED = 11

# Smallest and largest kmer sizes given to SPAdes, the largest is also capped to this fraction of
# the representative read length
MIN_K = 21
MAX_K = 127
MAX_K_FRAC = 0.8

# Minimum number of kmer sizes to aim for, the actual number grows with the threads used
MIN_NUM_KMERS = 4

# Minimum distance between consecutive kmer sizes (it is rounded up to the next even number)
MIN_KMER_STEP = 5

# Kmer size used by Lighter for read correction
LIGHTER_K = 32

# Column of KmerStreamEstimate.py output holding the genome size estimate per kmer size
KMERSTREAM_GSIZE_COLUMN = "G"

# Valid assembly results from SPAdes, the first one is the default
ASSEMBLY_VARIANTS = ["contigs", "scaffolds", "before_rr"]

# Minimum depth of coverage Pilon uses to call a correction
PILON_MIN_DEPTH = 0.25

# Suffix Pilon appends to every sequence name it polishes
PILON_SUFFIX = "_pilon"

# The sort step of 'samtools' gets the thread budget divided by this value
SAMTOOLS_SORT_THREADS_DIVISOR = 4

# Fraction of the RAM budget shared by all 'samtools sort' threads, and minimum MB per thread
SAMTOOLS_SORT_RAM_FRACTION = 0.5
SAMTOOLS_SORT_MIN_RAM_MB = 256

# External programs, the ones in POLISHING_DEPENDENCIES are not needed with '--no_correction'
DEPENDENCIES = ["seqtk", "KmerStream", "KmerStreamEstimate.py", "lighter", "flash", "spades.py"]
POLISHING_DEPENDENCIES = ["bwa", "samtools", "pilon"]

# Fixed file names inside the output directory
READS_R1 = "R1"
READS_R2 = "R2"
SAMPLE_FASTQ = "sample.fq"
KMERSTREAM_TSV = "kmerstream.tsv"
KMERSTREAM_EST_TSV = "kmerstream.est.tsv"
FLASH_PREFIX = "flash"
FLASH_EXTENDED = "flash.extendedFrags.fastq.gz"
FLASH_NOT_COMBINED_1 = "flash.notCombined_1.fastq.gz"
FLASH_NOT_COMBINED_2 = "flash.notCombined_2.fastq.gz"
SPADES_DIR = "spades"
SPADES_TMP_SUBDIR = "shortasm_spades_tmp"
ALIGNMENT_SAM = "shortasm.sam"
ALIGNMENT_BAM = "shortasm.bam"
ALIGNMENT_BAI = "shortasm.bam.bai"
PILON_PREFIX = "pilon"
PILON_FASTA = "pilon.fasta"
PILON_CHANGES = "pilon.changes"
UNPOLISHED_SUFFIX = ".orig"
FINAL_CONTIGS = "contigs.fa"
LOG_FILE = "shortasm.log"

# Extensions of the index files 'bwa index' writes next to the draft assembly
BWA_INDEX_EXTENSIONS = [".amb", ".ann", ".bwt", ".pac", ".sa"]

# FASTQ-like files removed during cleanup
FASTQ_CLEANUP_PATTERNS = ["*.fq", "*.fq.gz", "*.fastq", "*.fastq.gz"]

# Scratch files and directories left behind by SPAdes, FLASH and Pilon, relative to the output
# directory
SCRATCH_FILES = [
    "flash.hist",
    "flash.histogram",
    "spades/corrected",
    "spades/misc",
    "spades/tmp",
    "spades/split_input",
    "spades/pipeline_state",
    "spades/mismatch_corrector",
    "spades/dataset.info",
    "spades/input_dataset.yaml",
    "spades/params.txt",
    "spades/run_spades.sh",
    "spades/run_spades.yaml",
    "spades/assembly_graph.fastg",
    "spades/assembly_graph.gfa",
    "spades/assembly_graph_with_scaffolds.gfa",
    "spades/assembly_graph_after_simplification.gfa",
    "spades/contigs.paths",
    "spades/scaffolds.paths",
    "spades/first_pe_contigs.fasta",
    "pilon.fasta",
]
