#!/usr/bin/env python3
"""
Copyright 2024 shortasm contributors

The fixed script of external programs run by shortasm. The stage tuples below are never modified
at runtime, the only thing that changes between runs are the values substituted into them.

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

from . import settings
from .errors import MissingDraftAssembly, MissingStageInput
from .runner import Stage

SAMPLE_STAGES = (
    Stage(
        name="seqtk",
        description="Sampled reads from R1",
        command=("seqtk", "sample", "-s", "{seed}", "{r1}", "{sample_size}"),
        inputs=("{r1}",),
        outputs=("{sample_fastq}",),
        stdout="{sample_fastq}",
    ),
)

GENOME_SIZE_STAGES = (
    Stage(
        name="KmerStream",
        description="Counted kmers in R1 and R2",
        command=(
            "KmerStream",
            "-k", "{k_list}",
            "-t", "{threads}",
            "--tsv",
            "-o", "{kmerstream_tsv}",
            "{r1}",
            "{r2}",
        ),
        inputs=("{r1}", "{r2}"),
        outputs=("{kmerstream_tsv}",),
        stdout=None,
    ),
    Stage(
        name="KmerStreamEstimate",
        description="Estimated genome size per kmer size",
        command=("KmerStreamEstimate.py", "{kmerstream_tsv}"),
        inputs=("{kmerstream_tsv}",),
        outputs=("{kmerstream_est_tsv}",),
        stdout="{kmerstream_est_tsv}",
    ),
)

ASSEMBLY_STAGES = (
    Stage(
        name="lighter",
        description="Corrected read errors",
        command=(
            "lighter",
            "-od", "{out_dir}",
            "-r", "{r1}",
            "-r", "{r2}",
            "-K", "{lighter_k}", "{genome_size}",
            "-t", "{threads}",
            "-maxcor", "1",
        ),
        inputs=("{r1}", "{r2}"),
        outputs=("{r1_cor}", "{r2_cor}"),
        stdout=None,
    ),
    Stage(
        name="flash",
        description="Merged overlapping read pairs",
        command=(
            "flash",
            "-d", "{out_dir}",
            "-o", "{flash_prefix}",
            "-z",
            "-M", "{read_length}",
            "-t", "{threads}",
            "{r1_cor}",
            "{r2_cor}",
        ),
        inputs=("{r1_cor}", "{r2_cor}"),
        outputs=("{flash_extended}", "{flash_not_combined_1}", "{flash_not_combined_2}"),
        stdout=None,
    ),
    Stage(
        name="spades",
        description="Assembled reads",
        command=(
            "spades.py",
            "--pe1-1", "{flash_not_combined_1}",
            "--pe1-2", "{flash_not_combined_2}",
            "--s2", "{flash_extended}",
            "--only-assembler",
            "--threads", "{threads}",
            "--memory", "{ram_GB}",
            "-o", "{spades_dir}",
            "--tmp-dir", "{tmp_dir}",
            "-k", "{k_list}",
            "*{spades_opts}",
        ),
        inputs=("{flash_extended}", "{flash_not_combined_1}", "{flash_not_combined_2}"),
        outputs=("{draft}",),
        stdout=None,
    ),
)

POLISHING_STAGES = (
    Stage(
        name="bwa index",
        description="Indexed the draft assembly",
        command=("bwa", "index", "{draft}"),
        inputs=("{draft}",),
        outputs=tuple(f"{{draft}}{ext}" for ext in settings.BWA_INDEX_EXTENSIONS),
        stdout=None,
    ),
    Stage(
        name="bwa mem",
        description="Aligned reads to the draft assembly",
        command=("bwa", "mem", "-v", "3", "-t", "{threads}", "{draft}", "{r1}", "{r2}"),
        inputs=("{draft}", "{r1}", "{r2}"),
        outputs=("{sam}",),
        stdout="{sam}",
    ),
    Stage(
        name="samtools sort",
        description="Sorted the alignment",
        command=(
            "samtools", "sort",
            "--threads", "{sort_threads}",
            "-m", "{sort_ram_MB}M",
            "-T", "{sort_tmp_prefix}",
            "-o", "{bam}",
            "{sam}",
        ),
        inputs=("{sam}",),
        outputs=("{bam}",),
        stdout=None,
    ),
    Stage(
        name="samtools index",
        description="Indexed the alignment",
        command=("samtools", "index", "{bam}"),
        inputs=("{bam}",),
        outputs=("{bai}",),
        stdout=None,
    ),
    Stage(
        name="pilon",
        description="Polished the draft assembly",
        command=(
            "pilon",
            "-Xmx{ram_GB}g",
            "--genome", "{draft}",
            "--frags", "{bam}",
            "--output", "{pilon_prefix}",
            "--outdir", "{out_dir}",
            "--threads", "{threads}",
            "--changes",
            "--mindepth", "{pilon_min_depth}",
        ),
        inputs=("{draft}", "{bam}", "{bai}"),
        outputs=("{pilon_fasta}", "{pilon_changes}"),
        stdout=None,
    ),
)


def read_extension(fastq_path):
    """
    Extension used for the reads linked into the output directory, keeps the compression
    """
    return ".fq.gz" if f"{fastq_path}".lower().endswith(".gz") else ".fq"


def sort_resources(threads, ram_MB):
    """
    'samtools sort' gets fewer threads than the other stages, each of them with a share of half the
    RAM budget
    """
    sort_threads = max(1, threads // settings.SAMTOOLS_SORT_THREADS_DIVISOR)
    sort_ram_MB = max(
        settings.SAMTOOLS_SORT_MIN_RAM_MB,
        int(ram_MB * settings.SAMTOOLS_SORT_RAM_FRACTION) // sort_threads,
    )
    return sort_threads, sort_ram_MB


def draft_path(out_dir, assembly):
    return Path(out_dir, settings.SPADES_DIR, f"{assembly}.fasta")


def stage_values(config, tmp_dir=None, read_length=None, k_list=None, genome_size=None):
    """
    Values substituted into the stage templates, parameters that are not known yet are left out
    """
    out_dir = config.out_dir
    ext = read_extension(config.r1)
    ext_r2 = read_extension(config.r2)
    sort_threads, sort_ram_MB = sort_resources(config.threads, config.ram_MB)
    values = {
        "out_dir": f"{out_dir}",
        "r1": f"{Path(out_dir, settings.READS_R1 + ext)}",
        "r2": f"{Path(out_dir, settings.READS_R2 + ext_r2)}",
        "r1_cor": f"{Path(out_dir, settings.READS_R1 + '.cor' + ext)}",
        "r2_cor": f"{Path(out_dir, settings.READS_R2 + '.cor' + ext_r2)}",
        "threads": config.threads,
        "ram_GB": max(1, int(config.ram_GB)),
        "seed": settings.SEQTK_SEED,
        "sample_size": settings.NUM_READS_TO_SAMPLE,
        "sample_fastq": f"{Path(out_dir, settings.SAMPLE_FASTQ)}",
        "kmerstream_tsv": f"{Path(out_dir, settings.KMERSTREAM_TSV)}",
        "kmerstream_est_tsv": f"{Path(out_dir, settings.KMERSTREAM_EST_TSV)}",
        "lighter_k": settings.LIGHTER_K,
        "flash_prefix": settings.FLASH_PREFIX,
        "flash_extended": f"{Path(out_dir, settings.FLASH_EXTENDED)}",
        "flash_not_combined_1": f"{Path(out_dir, settings.FLASH_NOT_COMBINED_1)}",
        "flash_not_combined_2": f"{Path(out_dir, settings.FLASH_NOT_COMBINED_2)}",
        "spades_dir": f"{Path(out_dir, settings.SPADES_DIR)}",
        "spades_opts": config.spades_opts or "",
        "draft": f"{draft_path(out_dir, config.assembly)}",
        "sam": f"{Path(out_dir, settings.ALIGNMENT_SAM)}",
        "bam": f"{Path(out_dir, settings.ALIGNMENT_BAM)}",
        "bai": f"{Path(out_dir, settings.ALIGNMENT_BAI)}",
        "sort_threads": sort_threads,
        "sort_ram_MB": sort_ram_MB,
        "sort_tmp_prefix": f"{Path(out_dir, 'samtools_sort_tmp')}",
        "pilon_prefix": settings.PILON_PREFIX,
        "pilon_fasta": f"{Path(out_dir, settings.PILON_FASTA)}",
        "pilon_changes": f"{Path(out_dir, settings.PILON_CHANGES)}",
        "pilon_min_depth": settings.PILON_MIN_DEPTH,
    }
    if tmp_dir is not None:
        values["tmp_dir"] = f"{tmp_dir}"
    if read_length is not None:
        values["read_length"] = read_length
    if k_list is not None:
        values["k_list"] = ",".join(f"{k}" for k in k_list)
    if genome_size is not None:
        values["genome_size"] = genome_size
    return values


def verify_draft_assembly(out_dir, assembly):
    """
    The assembly variant requested must have been written by the assembler and contain something
    """
    draft = draft_path(out_dir, assembly)
    if not draft.is_file() or draft.stat().st_size == 0:
        raise MissingDraftAssembly(draft)
    return draft


def replace_draft_with_polished(out_dir, assembly):
    """
    Keep the unpolished draft with a suffix and put Pilon's output in its place
    """
    draft = verify_draft_assembly(out_dir, assembly)
    polished = Path(out_dir, settings.PILON_FASTA)
    if not polished.is_file():
        raise MissingStageInput("replace draft", polished)
    unpolished = Path(f"{draft}{settings.UNPOLISHED_SUFFIX}")
    shutil.move(f"{draft}", f"{unpolished}")
    shutil.move(f"{polished}", f"{draft}")
    return draft, unpolished
