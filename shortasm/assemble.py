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

import os
import platform
import shutil
import time
from collections import namedtuple
from pathlib import Path

from . import log, settings
from .cleanup import clean_workspace
from .errors import ShortasmError, ValidationError
from .misc import (
    bold,
    dim,
    elapsed_time,
    has_valid_ext,
    make_output_dir,
    make_tmp_dir_within,
    quit_with_error,
    set_ram,
    set_threads,
    successful_exit,
    verify_dependencies,
)
from .params import (
    estimate_genome_size,
    estimate_read_length,
    parse_genome_size,
    parse_k_list,
    select_kmers,
)
from .postprocess import PipelineResult, effective_min_contig_len, filter_and_rename_contigs
from .runner import ProcessRunner, run_stages
from .stages import (
    ASSEMBLY_STAGES,
    POLISHING_STAGES,
    replace_draft_with_polished,
    stage_values,
    verify_draft_assembly,
)
from .version import __version__

RunConfiguration = namedtuple(
    "RunConfiguration",
    [
        "r1",
        "r2",
        "out_dir",
        "threads",
        "ram_GB",
        "ram_MB",
        "tmp_dir",
        "assembly",
        "min_contig_len",
        "genome_size",
        "k_list",
        "no_correction",
        "spades_opts",
        "overwrite",
        "keep_all",
    ],
)

# Start time and command line of the run, used for reporting durations
RunContext = namedtuple("RunContext", ["start", "full_command"])

mar = 21  # Margin for aligning parameters and values


def validate_reads(fastq_path, option):
    fastq_path = Path(fastq_path)
    if not fastq_path.is_file():
        raise ValidationError(f"'{option}' file '{fastq_path}' was not found")
    if not os.access(fastq_path, os.R_OK):
        raise ValidationError(f"'{option}' file '{fastq_path}' can not be read")
    if not has_valid_ext(fastq_path, settings.FASTQ_VALID_EXTENSIONS):
        raise ValidationError(
            f"'{option}' file '{fastq_path}' must have one of these extensions:"
            f" {', '.join(settings.FASTQ_VALID_EXTENSIONS)}"
        )
    return fastq_path.resolve()


def build_run_config(args):
    """
    Validate the command line arguments once, nothing downstream reads 'args' again
    """
    r1 = validate_reads(args.r1, "--R1")
    r2 = validate_reads(args.r2, "--R2")
    if r1 == r2:
        raise ValidationError("'--R1' and '--R2' point to the same file")
    threads, _ = set_threads(args.threads)
    _, ram_MB, ram_GB, _ = set_ram(args.ram)
    if args.assembly not in settings.ASSEMBLY_VARIANTS:
        raise ValidationError(
            f"'--assembly' must be one of {', '.join(settings.ASSEMBLY_VARIANTS)},"
            f" you provided '{args.assembly}'"
        )
    if args.min_contig_len < 0:
        raise ValidationError(
            f"'--min_contig_len' must be 0 (auto) or larger, you provided '{args.min_contig_len}'"
        )
    genome_size = parse_genome_size(args.genome_size) if args.genome_size else None
    k_list = parse_k_list(args.k_list) if args.k_list else None
    return RunConfiguration(
        r1=r1,
        r2=r2,
        out_dir=Path(args.out).resolve(),
        threads=threads,
        ram_GB=ram_GB,
        ram_MB=ram_MB,
        tmp_dir=args.tmp_dir,
        assembly=args.assembly,
        min_contig_len=args.min_contig_len,
        genome_size=genome_size,
        k_list=k_list,
        no_correction=args.no_correction,
        spades_opts=args.spades_opts,
        overwrite=args.overwrite,
        keep_all=args.keep_all,
    )


def required_dependencies(config):
    if config.no_correction:
        return list(settings.DEPENDENCIES)
    return settings.DEPENDENCIES + settings.POLISHING_DEPENDENCIES


def link_reads(config, values):
    """
    Make the input reads available inside the output directory under fixed names
    """
    for source, target in [(config.r1, values["r1"]), (config.r2, values["r2"])]:
        try:
            Path(target).symlink_to(source)
        except OSError:
            shutil.copy(source, target)


def run_pipeline(config, context, runner=None, show_progress=True):
    """
    Run every step after the dependency check, from the creation of the output directory to the
    final contigs. Returns a 'PipelineResult'.
    """
    if runner is None:
        runner = ProcessRunner()

    out_dir, out_dir_msg = make_output_dir(config.out_dir, config.overwrite)
    log.logger = log.Log(
        Path(out_dir, settings.LOG_FILE), stdout_verbosity_level=1, log_file_verbosity_level=2
    )
    log.log(f"{'shortasm version':>{mar}}: {bold(f'v{__version__}')}")
    log.log(f"{'Command':>{mar}}: {bold(context.full_command)}")
    log.log(f"{'OS':>{mar}}: {bold(platform.platform())}")
    log.log(f"{'Threads':>{mar}}: {bold(config.threads)}")
    log.log(f"{'RAM':>{mar}}: {bold(f'{config.ram_GB:.1f}GB')}")
    log.log(f"{'Output directory':>{mar}}: {bold(out_dir)}")
    log.log(f"{'':>{mar}}  {dim(out_dir_msg)}")
    log.log("")

    values = stage_values(config)
    link_reads(config, values)

    ################################################################################################
    ######################################################################### PARAMETERS SECTION
    log.log_section_header("Deriving Assembly Parameters from the Reads")
    log.log_explanation(
        "The longest read in a sample of R1 limits the largest kmer size and, unless"
        " '--min_contig_len' is given, the shortest contig kept in the final assembly."
    )
    read_length = estimate_read_length(values, runner, show_progress=show_progress)
    log.log(f"{'Read length':>{mar}}: {bold(read_length)} {dim('(longest read sampled)')}")

    if config.k_list:
        k_list = config.k_list
        k_list_msg = "(provided with '--k_list')"
    else:
        k_list = select_kmers(read_length, config.threads)
        k_list_msg = "(auto)"
    log.log(f"{'Kmer sizes':>{mar}}: {bold(','.join(f'{k}' for k in k_list))} {dim(k_list_msg)}")
    values = stage_values(config, read_length=read_length, k_list=k_list)

    if config.genome_size is not None:
        genome_size = config.genome_size
        genome_size_msg = "(provided with '--genome_size')"
    else:
        genome_size = estimate_genome_size(values, runner, show_progress=show_progress)
        genome_size_msg = "(median estimate from KmerStream)"
    log.log(f"{'Genome size':>{mar}}: {bold(f'{genome_size:,} bp')} {dim(genome_size_msg)}")
    log.log("")

    ################################################################################################
    ########################################################################### ASSEMBLY SECTION
    log.log_section_header("Read Correction, Merging and De Novo Assembly")
    tmp_dir = make_tmp_dir_within(config.tmp_dir, settings.SPADES_TMP_SUBDIR)
    log.log(f"{'Assembly result':>{mar}}: {bold(config.assembly)}")
    log.log(f"{'tmp_dir':>{mar}}: {bold(tmp_dir)}")
    log.log(f"{'Extra SPAdes options':>{mar}}: {bold(config.spades_opts or 'none')}")
    log.log("")
    values = stage_values(
        config, tmp_dir=tmp_dir, read_length=read_length, k_list=k_list, genome_size=genome_size
    )
    run_stages(ASSEMBLY_STAGES, values, runner, show_progress)
    draft = verify_draft_assembly(out_dir, config.assembly)
    shutil.rmtree(tmp_dir, ignore_errors=True)
    log.log(f"SPAdes temporary directory '{tmp_dir}' deleted")

    ################################################################################################
    ########################################################################## POLISHING SECTION
    log.log_section_header("Polishing the Draft Assembly with Pilon")
    changes_path = None
    if config.no_correction:
        log.log(dim("Skipping polishing step... ('--no_correction' was given)"))
    else:
        sort_ram_msg = f"({values['sort_ram_MB']}MB per thread)"
        log.log(f"{'Sort threads':>{mar}}: {bold(values['sort_threads'])} {dim(sort_ram_msg)}")
        run_stages(POLISHING_STAGES, values, runner, show_progress)
        draft, unpolished = replace_draft_with_polished(out_dir, config.assembly)
        changes_path = Path(values["pilon_changes"])
        log.log(f"{'Unpolished draft':>{mar}}: {bold(unpolished)}")
    log.log("")

    ################################################################################################
    ##################################################################### FINAL CONTIGS SECTION
    log.log_section_header("Filtering and Renaming Contigs")
    min_contig_len = effective_min_contig_len(config.min_contig_len, read_length)
    final_contigs = Path(out_dir, settings.FINAL_CONTIGS)
    num_contigs, total_bases = filter_and_rename_contigs(
        draft, final_contigs, min_contig_len, changes_path
    )
    log.log(f"{'Min. contig length':>{mar}}: {bold(min_contig_len)}")
    log.log(f"{'Contigs':>{mar}}: {bold(log.int_to_str(num_contigs))}")
    log.log(f"{'Total length':>{mar}}: {bold(f'{log.int_to_str(total_bases)} bp')}")
    log.log(f"{'Final assembly':>{mar}}: {bold(final_contigs)}")
    log.log("")

    if config.keep_all:
        log.log(dim("Intermediate files kept ('--keep_all' was given)"))
    else:
        removed = clean_workspace(
            out_dir,
            k_list,
            config.assembly,
            protected_paths=[final_contigs, Path(out_dir, settings.LOG_FILE)],
        )
        log.log(f"Removed {len(removed)} intermediate files and directories")
    log.log("")

    return PipelineResult(
        num_contigs=num_contigs,
        total_bases=total_bases,
        min_contig_len=min_contig_len,
        elapsed=time.time() - context.start,
    )


def assemble(full_command, args):
    context = RunContext(start=time.time(), full_command=full_command)

    ################################################################################################
    ############################################################################### STARTING SECTION
    log.log_section_header("Starting shortasm", single_newline=True)
    log.log_explanation(
        "shortasm will correct the reads with Lighter, merge overlapping pairs with FLASH,"
        " assemble them with SPAdes and polish the draft with Pilon. Kmer sizes, genome size and"
        " minimum contig length are derived from the reads unless you provide them.",
        extra_empty_lines_after=0,
    )
    log.log_explanation("For more information run: shortasm --help")
    try:
        config = build_run_config(args)
        log.log(f"{'Dependencies':>{mar}}:")
        verify_dependencies(required_dependencies(config), mar)
        log.log("")
        result = run_pipeline(config, context)
    except ShortasmError as error:
        quit_with_error(f"{error}")

    ################################################################################################
    ################################################################################# ENDING SECTION
    successful_exit(
        f"shortasm -> successfully assembled {result.num_contigs} contigs,"
        f" {result.total_bases:,} bp [{elapsed_time(result.elapsed)}]"
    )
