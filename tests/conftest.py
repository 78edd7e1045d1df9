#!/usr/bin/env python3
"""
Pytest configuration and shared fixtures.
"""

import shutil
from pathlib import Path

import pytest

from shortasm import log
from shortasm.runner import ProcessResult
from shortasm.shortasm import build_parser


def write_fastq(path, lengths, prefix="read"):
    """Write one FASTQ record per length in 'lengths'."""
    with open(path, "wt") as fastq:
        for i, length in enumerate(lengths, 1):
            fastq.write(f"@{prefix}{i}\n{'A' * length}\n+\n{'I' * length}\n")
    return Path(path)


def write_fasta(path, records):
    """Write a FASTA from a dict of name -> sequence, wrapping lines at 60."""
    with open(path, "wt") as fasta:
        for name, seq in records.items():
            fasta.write(f">{name}\n")
            for i in range(0, len(seq), 60):
                fasta.write(f"{seq[i : i + 60]}\n")
    return Path(path)


def option_value(command, option):
    return command[command.index(option) + 1]


class FakeRunner(object):
    """
    Stands in for ProcessRunner: records every command, fails on request and otherwise produces
    the files each external program would write.
    """

    def __init__(self, fail_on=None, exit_code=1, actions=None):
        self.commands = []
        self.fail_on = fail_on
        self.exit_code = exit_code
        self.actions = actions or {}

    @property
    def tools(self):
        return [" ".join(command[:2]) if command[0] in ("bwa", "samtools") else command[0]
                for command in self.commands]

    def run(self, command, stdout_path=None):
        self.commands.append(list(command))
        tool = self.tools[-1]
        if tool == self.fail_on:
            return ProcessResult(self.exit_code, f"{tool} crashed")
        action = self.actions.get(tool)
        if action is not None:
            action(command, stdout_path)
        elif stdout_path is not None:
            Path(stdout_path).write_text("")
        return ProcessResult(0, f"{tool} finished")


DRAFT_CONTIGS = {
    "NODE_1_length_500_cov_12.5": "ACGT" * 125,
    "NODE_2_length_300_cov_8.0": "GGCCA" * 60,
    "NODE_3_length_50_cov_2.0": "T" * 50,
}


def pipeline_actions():
    """Actions producing the outputs of every external program of a complete run."""

    def seqtk(command, stdout_path):
        shutil.copy(command[4], stdout_path)

    def kmerstream(command, stdout_path):
        Path(option_value(command, "-o")).write_text("Q\tk\tF0\tf1\tF1\n0\t21\t1\t1\t1\n")

    def kmerstream_estimate(command, stdout_path):
        Path(stdout_path).write_text(
            "Q\tk\tF0\tf1\tF1\tG\n0\t21\t1\t1\t1\t100000\n0\t41\t1\t1\t1\t200000\n"
            "0\t61\t1\t1\t1\t300000\n"
        )

    def lighter(command, stdout_path):
        out_dir = option_value(command, "-od")
        for i, token in enumerate(command):
            if token == "-r":
                name = Path(command[i + 1]).name.replace(".fq", ".cor.fq")
                Path(out_dir, name).write_text("@r\nACGT\n+\nIIII\n")

    def flash(command, stdout_path):
        out_dir = option_value(command, "-d")
        for name in ["flash.extendedFrags.fastq.gz", "flash.notCombined_1.fastq.gz",
                     "flash.notCombined_2.fastq.gz", "flash.hist"]:
            Path(out_dir, name).write_text("")

    def spades(command, stdout_path):
        spades_dir = Path(option_value(command, "-o"))
        spades_dir.mkdir(parents=True, exist_ok=True)
        for k in option_value(command, "-k").split(","):
            Path(spades_dir, f"K{k}").mkdir()
            Path(spades_dir, f"K{k}", "final_contigs.fasta").write_text("")
        Path(spades_dir, "misc").mkdir()
        write_fasta(Path(spades_dir, "contigs.fasta"), DRAFT_CONTIGS)
        write_fasta(Path(spades_dir, "scaffolds.fasta"), DRAFT_CONTIGS)

    def bwa_index(command, stdout_path):
        for ext in [".amb", ".ann", ".bwt", ".pac", ".sa"]:
            Path(f"{command[2]}{ext}").write_text("")

    def bwa_mem(command, stdout_path):
        Path(stdout_path).write_text("@HD\tVN:1.6\n")

    def samtools_sort(command, stdout_path):
        Path(option_value(command, "-o")).write_text("BAM")

    def samtools_index(command, stdout_path):
        Path(f"{command[2]}.bai").write_text("BAI")

    def pilon(command, stdout_path):
        out_dir = option_value(command, "--outdir")
        draft = Path(option_value(command, "--genome"))
        polished = {}
        name = None
        for line in draft.read_text().splitlines():
            if line.startswith(">"):
                name = f"{line[1:]}_pilon"
                polished[name] = ""
            else:
                polished[name] += line
        write_fasta(Path(out_dir, "pilon.fasta"), polished)
        Path(out_dir, "pilon.changes").write_text(
            "NODE_1_length_500_cov_12.5:10 NODE_1_length_500_cov_12.5_pilon:10 A C\n"
            "NODE_1_length_500_cov_12.5:20 NODE_1_length_500_cov_12.5_pilon:20 G T\n"
        )

    return {
        "seqtk": seqtk,
        "KmerStream": kmerstream,
        "KmerStreamEstimate.py": kmerstream_estimate,
        "lighter": lighter,
        "flash": flash,
        "spades.py": spades,
        "bwa index": bwa_index,
        "bwa mem": bwa_mem,
        "samtools sort": samtools_sort,
        "samtools index": samtools_index,
        "pilon": pilon,
    }


@pytest.fixture(autouse=True)
def reset_logger():
    """Every test starts and ends with the default logger, without log file."""
    log.logger = log.Log()
    yield
    log.logger.close()
    log.logger = log.Log()


@pytest.fixture
def reads(tmp_path):
    """Paired FASTQ files with reads of 100 bp, a few shorter ones in R1."""
    reads_dir = tmp_path / "reads"
    reads_dir.mkdir()
    r1 = write_fastq(reads_dir / "sample_R1.fq", [100] * 20 + [75] * 5)
    r2 = write_fastq(reads_dir / "sample_R2.fq", [100] * 25)
    return r1, r2


@pytest.fixture
def make_args(tmp_path, reads):
    """Parsed command line arguments with the test reads, extra options are appended."""
    def _make_args(*extra):
        r1, r2 = reads
        argv = [
            "--R1", f"{r1}",
            "--R2", f"{r2}",
            "--out", f"{tmp_path / 'asm'}",
            "--threads", "1",
            "--ram", "1",
            "--tmp_dir", f"{tmp_path / 'tmp'}",
        ]
        return build_parser().parse_args(argv + list(extra))
    return _make_args


@pytest.fixture
def fake_runner():
    return FakeRunner(actions=pipeline_actions())
