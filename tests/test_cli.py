"""Tests for the command line entry point."""

from pathlib import Path

from click.testing import CliRunner

from apigen.__main__ import main

FIXTURES = Path(__file__).parent / "fixtures"


class TestCli:
    def test_generate(self, tmp_path):
        out = tmp_path / "handlers.py"
        result = CliRunner().invoke(main, [str(FIXTURES / "sample_api.py"), str(out)])

        assert result.exit_code == 0
        assert f"Generated {out} (4 handlers)" in result.output
        assert out.exists()

    def test_no_arguments(self):
        result = CliRunner().invoke(main, [])
        assert result.exit_code == 2

    def test_one_argument(self):
        result = CliRunner().invoke(main, [str(FIXTURES / "sample_api.py")])
        assert result.exit_code == 2

    def test_missing_input(self, tmp_path):
        result = CliRunner().invoke(main, [str(tmp_path / "nope.py"), str(tmp_path / "out.py")])
        assert result.exit_code == 2
        assert not (tmp_path / "out.py").exists()

    def test_parse_error(self, tmp_path):
        source = tmp_path / "api.py"
        source.write_text("class Api(:\n")
        result = CliRunner().invoke(main, [str(source), str(tmp_path / "out.py")])
        assert result.exit_code == 1
        assert "Can not parse" in result.output

    def test_bad_marker_json(self, tmp_path):
        source = tmp_path / "api.py"
        source.write_text(
            "class Api:\n"
            "    # apigen:api {url: '/p'}\n"
            "    def profile(self, ctx, params):\n"
            "        pass\n"
        )
        out = tmp_path / "out.py"
        result = CliRunner().invoke(main, [str(source), str(out)])
        assert result.exit_code == 1
        assert "Wrong json" in result.output
        assert not out.exists()
