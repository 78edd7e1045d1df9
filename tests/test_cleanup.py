#!/usr/bin/env python3
"""
Tests for the removal of intermediate files.
"""

from pathlib import Path

from shortasm import settings
from shortasm.cleanup import clean_workspace, intermediate_paths


def populate(out_dir):
    """Leave behind what a complete run writes in its output directory."""
    spades = Path(out_dir, "spades")
    for k in [21, 41]:
        Path(spades, f"K{k}").mkdir(parents=True)
        Path(spades, f"K{k}", "final_contigs.fasta").write_text(">x\nA\n")
    Path(spades, "misc").mkdir()
    Path(spades, "params.txt").write_text("")
    Path(spades, "contigs.fasta").write_text(">contig\nACGT\n")
    Path(spades, "contigs.fasta.orig").write_text(">contig\nACGA\n")
    for ext in settings.BWA_INDEX_EXTENSIONS:
        Path(spades, f"contigs.fasta{ext}").write_text("")
    for name in ["R1.fq.gz", "R2.fq.gz", "R1.cor.fq.gz", "R2.cor.fq.gz", "sample.fq",
                 "flash.extendedFrags.fastq.gz", "flash.notCombined_1.fastq.gz",
                 "flash.notCombined_2.fastq.gz", "flash.hist", "shortasm.sam", "shortasm.bam",
                 "shortasm.bam.bai", "contigs.fa", "shortasm.log", "pilon.changes"]:
        Path(out_dir, name).write_text("")


def test_intermediates_listed(tmp_path):
    populate(tmp_path)

    paths = intermediate_paths(tmp_path, (21, 41), "contigs")

    assert Path(tmp_path, "R1.fq.gz") in paths
    assert Path(tmp_path, "flash.notCombined_2.fastq.gz") in paths
    assert Path(tmp_path, "spades", "contigs.fasta.bwt") in paths
    assert Path(tmp_path, "spades", "K41") in paths
    assert Path(tmp_path, "shortasm.bam.bai") in paths
    assert Path(tmp_path, "contigs.fa") not in paths


def test_clean_keeps_results(tmp_path):
    populate(tmp_path)
    protected = [tmp_path / "contigs.fa", tmp_path / "shortasm.log"]

    removed = clean_workspace(tmp_path, (21, 41), "contigs", protected)

    remaining = sorted(f"{path.relative_to(tmp_path)}" for path in tmp_path.rglob("*"))
    assert remaining == [
        "contigs.fa",
        "pilon.changes",
        "shortasm.log",
        "spades",
        "spades/contigs.fasta",
        "spades/contigs.fasta.orig",
    ]
    assert len(removed) == len(set(removed))


def test_unchosen_assembly_variants_removed(tmp_path):
    populate(tmp_path)
    spades = tmp_path / "spades"
    for name in ["scaffolds.fasta", "before_rr.fasta", "contigs.paths", "scaffolds.paths",
                 "assembly_graph.gfa", "assembly_graph_with_scaffolds.gfa"]:
        Path(spades, name).write_text("")
    Path(tmp_path, "pilon.fasta").write_text("")

    clean_workspace(tmp_path, (21, 41), "contigs", [])

    assert sorted(path.name for path in spades.iterdir()) == [
        "contigs.fasta", "contigs.fasta.orig"
    ]
    assert not Path(tmp_path, "pilon.fasta").exists()


def test_chosen_variant_kept(tmp_path):
    populate(tmp_path)
    Path(tmp_path, "spades", "scaffolds.fasta").write_text(">s\nACGT\n")

    clean_workspace(tmp_path, (21, 41), "scaffolds", [])

    assert Path(tmp_path, "spades", "scaffolds.fasta").is_file()
    assert not Path(tmp_path, "spades", "contigs.fasta").exists()


def test_protected_paths_survive_matching_patterns(tmp_path):
    populate(tmp_path)
    final = tmp_path / "final.fq.gz"
    final.write_text("keep me")

    clean_workspace(tmp_path, (21, 41), "contigs", [final])

    assert final.read_text() == "keep me"
    assert not (tmp_path / "R1.fq.gz").exists()


def test_input_reads_behind_links_are_untouched(tmp_path):
    reads = tmp_path / "reads"
    reads.mkdir()
    source = reads / "sample_R1.fq"
    source.write_text("@r\nA\n+\nI\n")
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    Path(out_dir, "R1.fq").symlink_to(source)

    removed = clean_workspace(out_dir, (21,), "contigs", [])

    assert removed == [Path(out_dir, "R1.fq")]
    assert not Path(out_dir, "R1.fq").is_symlink()
    assert source.read_text() == "@r\nA\n+\nI\n"


def test_nothing_to_clean(tmp_path):
    assert clean_workspace(tmp_path, (21, 41), "scaffolds", []) == []
