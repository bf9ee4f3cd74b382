"""Tests for the command-line front end."""

import io

import pytest
from rich.console import Console as RichConsole

from dither3d.cli import build_parser, config_from_args, run
from dither3d.console import Console, ProgressReporter, percent_label


@pytest.fixture
def out():
    return Console(RichConsole(file=io.StringIO(), width=120, force_terminal=False))


def _text(out):
    return out.rich.file.getvalue()


def _args(*argv):
    return config_from_args(build_parser().parse_args(list(argv)))


class TestArguments:
    def test_defaults(self):
        config = _args()
        assert config.size == 32
        assert config.seed == 0
        assert config.initial_count is None
        assert config.spectrum_report

    def test_random_seed(self):
        assert _args("--random-seed").seed is None

    def test_seed_options_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--seed", "3", "--random-seed"])

    def test_output_options(self, tmp_path):
        config = _args("--output", str(tmp_path), "--prefix", "z", "--ext", ".bmp", "--no-spectrum")
        assert config.resolved_output_dir() == tmp_path
        assert config.file_prefix == "z"
        assert config.file_ext == ".bmp"
        assert not config.spectrum_report


class TestRun:
    def test_small_run_writes_layers(self, tmp_path, out):
        config = _args(
            "--size", "4", "--kernel-size", "3", "--sigma", "1.0", "--initial-count", "2",
            "--output", str(tmp_path), "--report-interval", "5",
        )
        assert run(config, out) == 0
        assert sorted(p.name for p in tmp_path.iterdir()) == [f"layer_{z}.png" for z in range(4)]
        text = _text(out)
        assert "Files saved in" in text
        assert "Low-frequency power" in text

    def test_invalid_config_exit_code(self, tmp_path, out):
        assert run(_args("--kernel-size", "4", "--output", str(tmp_path)), out) == 2
        assert "Invalid configuration" in _text(out)
        assert not any(tmp_path.iterdir())

    def test_export_failure_is_reported_not_fatal(self, tmp_path, out):
        blocker = tmp_path / "file"
        blocker.write_text("x")
        config = _args(
            "--size", "4", "--kernel-size", "3", "--sigma", "1.0", "--initial-count", "2",
            "--output", str(blocker / "out"), "--report-interval", "0", "--no-spectrum",
        )
        assert run(config, out) == 0
        assert "Exception while saving layers" in _text(out)


class TestProgressReporter:
    def test_disabled_reporter_is_silent(self, out):
        with ProgressReporter(0, out) as reporter:
            reporter("DENSE_RANKING", 1, 10)
        assert not reporter.enabled
        assert _text(out) == ""

    def test_enabled_reporter_accepts_open_ended_phases(self, out):
        with ProgressReporter(1, out) as reporter:
            reporter("INITIAL_BALANCING", 3, None)
            reporter("DENSE_RANKING", 10, 10)
        assert reporter.enabled

    def test_open_ended_phase_has_no_percentage(self, out):
        with ProgressReporter(1, out) as reporter:
            reporter("INITIAL_BALANCING", 3, None)
            reporter("DENSE_RANKING", 5, 10)
            assert reporter.task_fields("INITIAL_BALANCING")["percent"] == ""
            assert reporter.task_fields("DENSE_RANKING")["percent"].strip() == "50%"
        assert reporter.task_fields("DENSE_RANKING") == {}

    def test_percent_label(self):
        assert percent_label(3, None) == ""
        assert percent_label(10, 10) == "100%"
        assert percent_label(0, 0) == "  0%"
