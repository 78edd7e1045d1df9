#!/usr/bin/env python3
"""
Copyright 2024 shortasm contributors

This is the control program of shortasm.

This file is part of shortasm. shortasm is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by the Free Software Foundation,
either version 3 of the License, or (at your option) any later version. shortasm is distributed in
the hope that it will be useful, but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU General Public License for more
details. You should have received a copy of the GNU General Public License along with shortasm. If
not, see <http://www.gnu.org/licenses/>.
"""

import argparse
import sys

from . import settings
from .assemble import assemble
from .misc import MyHelpFormatter, bold, red
from .version import __version__


class ShortasmArgumentParser(argparse.ArgumentParser):
    """
    Usage errors end the program with exit status 1, like every other fatal error
    """
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, red(f"\nERROR: {message}\n"))


def build_parser():
    description = bold(
        f"shortasm {__version__}: Fast de novo assembly of paired-end short reads\n"
    )
    parser = ShortasmArgumentParser(
        prog="shortasm",
        usage="shortasm --R1 READS_R1 --R2 READS_R2 [options]",
        description=description,
        formatter_class=MyHelpFormatter,
        epilog="Corrected with Lighter, merged with FLASH, assembled with SPAdes, polished with"
               " Pilon",
        add_help=False,
    )

    input_group = parser.add_argument_group("Input")
    input_group.add_argument(
        "-1",
        "--R1",
        action="store",
        type=str,
        required=True,
        dest="r1",
        help="Forward reads. Valid file name extensions are: .fq, .fastq, .fq.gz, and .fastq.gz",
    )
    input_group.add_argument(
        "-2",
        "--R2",
        action="store",
        type=str,
        required=True,
        dest="r2",
        help="Reverse reads, same valid extensions as '--R1'",
    )

    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "-o",
        "--out",
        action="store",
        default="./shortasm_out",
        type=str,
        dest="out",
        help="Output directory name, it must not exist unless '--overwrite' is used",
    )
    output_group.add_argument(
        "--overwrite",
        action="store_true",
        dest="overwrite",
        help="Delete the output directory if it already exists",
    )
    output_group.add_argument(
        "--keep_all",
        action="store_true",
        dest="keep_all",
        help="Do not delete any intermediate files",
    )

    assembly_group = parser.add_argument_group("Assembly")
    assembly_group.add_argument(
        "--genome_size",
        action="store",
        type=str,
        dest="genome_size",
        help="Estimated genome size, a number optionally followed by G, M or K (e.g.: 5.2M). If"
        " not provided it will be estimated with KmerStream",
    )
    assembly_group.add_argument(
        "--k_list",
        action="store",
        type=str,
        dest="k_list",
        help="Comma-separated list of kmer sizes for SPAdes, used as given. If not provided, odd"
        " sizes from 21 up to 80%% of the longest read (at most 127) are chosen automatically",
    )
    assembly_group.add_argument(
        "--spades_opts",
        action="store",
        type=str,
        dest="spades_opts",
        help="Extra options for SPAdes, quoted and attached with '=' (e.g.:"
        " --spades_opts='--cov-cutoff auto')",
    )
    assembly_group.add_argument(
        "--assembly",
        action="store",
        choices=settings.ASSEMBLY_VARIANTS,
        default=settings.ASSEMBLY_VARIANTS[0],
        type=str,
        dest="assembly",
        help="B|SPAdes result to polish and filter\n"
        "contigs = contigs.fasta\n"
        "scaffolds = scaffolds.fasta\n"
        "before_rr = before_rr.fasta, contigs before repeat resolution",
    )
    assembly_group.add_argument(
        "--no_correction",
        action="store_true",
        dest="no_correction",
        help="Do not polish the draft assembly with Pilon",
    )
    assembly_group.add_argument(
        "--min_contig_len",
        action="store",
        default=0,
        type=int,
        dest="min_contig_len",
        help="Minimum contig length in the final assembly, 0 means the length of the longest read"
        " sampled. Attach the value with '=' (e.g.: --min_contig_len=500)",
    )
    assembly_group.add_argument(
        "--tmp_dir",
        action="store",
        default="$HOME",
        type=str,
        dest="tmp_dir",
        help="Location to create the temporary directory"
        f" '{settings.SPADES_TMP_SUBDIR}' for SPAdes",
    )

    other_group = parser.add_argument_group("Other")
    other_group.add_argument(
        "--ram",
        action="store",
        default="auto",
        type=str,
        dest="ram",
        help="Maximum RAM in GB (e.g.: 16) dedicated to shortasm, 'auto' uses"
        f" {settings.RAM_FRACTION:.0%}% of available RAM",
    )
    other_group.add_argument(
        "--threads",
        action="store",
        default="auto",
        type=str,
        dest="threads",
        help="Maximum number of CPUs dedicated to shortasm, 'auto' uses all available CPUs",
    )

    help_group = parser.add_argument_group("Help")
    help_group.add_argument("-h", "--help", action="help", help="Show this help message and exit")
    help_group.add_argument(
        "--version",
        action="version",
        version=f"shortasm v{__version__}",
        help="Show shortasm's version number",
    )
    return parser


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()
    if not argv:
        parser.print_help(sys.stderr)
        sys.exit(red("\nERROR: Missing required arguments --R1 and --R2\n"))

    full_command = " ".join(["shortasm"] + argv)
    args = parser.parse_args(argv)
    assemble(full_command, args)


if __name__ == "__main__":
    main()
