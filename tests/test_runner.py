#!/usr/bin/env python3
"""
Tests for the sequential execution of external programs.
"""

import sys

import pytest

from conftest import FakeRunner
from shortasm import log
from shortasm.errors import MissingStageInput, StageFailed
from shortasm.runner import ProcessRunner, Stage, render_command, run_stages


def make_stage(name, command, inputs=(), stdout=None):
    return Stage(name=name, description=f"Ran {name}", command=command, inputs=inputs,
                 outputs=(), stdout=stdout)


class TestRenderCommand:
    """Test the substitution of values into command templates."""

    def test_values_substituted_per_token(self):
        command = render_command(("tool", "-t", "{threads}", "{path}"),
                                 {"threads": 4, "path": "/data/my reads.fq"})

        assert command == ["tool", "-t", "4", "/data/my reads.fq"]

    def test_star_token_splits_into_arguments(self):
        command = render_command(("spades.py", "-k", "21", "*{opts}"),
                                 {"opts": "--cov-cutoff auto --careful"})

        assert command == ["spades.py", "-k", "21", "--cov-cutoff", "auto", "--careful"]

    def test_star_token_respects_quotes(self):
        command = render_command(("tool", "*{opts}"), {"opts": "--label 'two words'"})

        assert command == ["tool", "--label", "two words"]

    def test_empty_star_token_disappears(self):
        assert render_command(("tool", "*{opts}", "end"), {"opts": ""}) == ["tool", "end"]


class TestRunStages:
    """Test the ordering and fail-fast behaviour of a list of stages."""

    def test_stages_run_in_order(self, tmp_path):
        stages = [make_stage("first", ("first", "{x}")), make_stage("second", ("second", "{x}"))]
        runner = FakeRunner()

        run_stages(stages, {"x": "value"}, runner, show_progress=False)

        assert runner.commands == [["first", "value"], ["second", "value"]]

    def test_failure_stops_later_stages(self):
        stages = [make_stage(name, (name,)) for name in ["first", "second", "third"]]
        runner = FakeRunner(fail_on="second", exit_code=7)

        with pytest.raises(StageFailed) as error:
            run_stages(stages, {}, runner, show_progress=False)

        assert error.value.stage_name == "second"
        assert error.value.exit_code == 7
        assert runner.tools == ["first", "second"]

    def test_missing_input_prevents_the_stage(self, tmp_path):
        present = tmp_path / "present.txt"
        present.write_text("x")
        stages = [
            make_stage("first", ("first",), inputs=(f"{present}",)),
            make_stage("second", ("second",), inputs=("{missing}",)),
        ]
        runner = FakeRunner()

        with pytest.raises(MissingStageInput) as error:
            run_stages(stages, {"missing": f"{tmp_path / 'missing.txt'}"}, runner,
                       show_progress=False)

        assert error.value.stage == "second"
        assert runner.tools == ["first"]

    def test_stdout_redirected_to_file(self, tmp_path):
        stages = [make_stage("first", ("first",), stdout="{out}")]
        runner = FakeRunner()

        run_stages(stages, {"out": f"{tmp_path / 'out.txt'}"}, runner, show_progress=False)

        assert (tmp_path / "out.txt").is_file()

    def test_tool_output_goes_only_to_log_file(self, tmp_path, capsys):
        log.logger = log.Log(tmp_path / "run.log", stdout_verbosity_level=1,
                             log_file_verbosity_level=2)
        stages = [make_stage("first", ("first", "--flag"))]

        run_stages(stages, {}, FakeRunner(), show_progress=False)
        log.logger.close()

        log_text = (tmp_path / "run.log").read_text()
        assert "Command: first --flag" in log_text
        assert "first finished" in log_text
        assert "first finished" not in capsys.readouterr().err


class TestProcessRunner:
    """Test real subprocesses."""

    script = "import sys; print('to stdout'); print('to stderr', file=sys.stderr); sys.exit(3)"

    def test_output_captured(self):
        result = ProcessRunner().run([sys.executable, "-c", self.script])

        assert result.returncode == 3
        assert "to stdout" in result.output
        assert "to stderr" in result.output

    def test_stdout_to_file(self, tmp_path):
        stdout_path = tmp_path / "stdout.txt"

        result = ProcessRunner().run([sys.executable, "-c", self.script], stdout_path)

        assert result.returncode == 3
        assert stdout_path.read_text() == "to stdout\n"
        assert "to stderr" in result.output
        assert "to stdout" not in result.output

    def test_success(self):
        assert ProcessRunner().run([sys.executable, "-c", "pass"]).returncode == 0
