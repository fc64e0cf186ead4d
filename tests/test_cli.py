"""Tests for the glsldeps command line."""

import io
import json
import os

from cli import main, parse_args


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        parsed = parse_args(["shader.frag"])

        assert parsed.entry == "shader.frag"
        assert parsed.format == "json"
        assert parsed.transform == []
        assert parsed.global_transform == []
        assert parsed.async_mode is False
        assert parsed.cwd is None

    def test_repeated_transforms(self):
        parsed = parse_args(["-", "-t", "a", "-t", "b", "-g", "c", "--async"])

        assert parsed.transform == ["a", "b"]
        assert parsed.global_transform == ["c"]
        assert parsed.async_mode is True


class TestMain:
    """Tests for running the command line end to end."""

    def test_json_output(self, capsys, entry_file, another_file, vendored_file, transform_dir):
        code = main([entry_file, "--cwd", transform_dir])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert [item["file"] for item in data][0] == entry_file
        assert {item["file"] for item in data} == {entry_file, another_file, vendored_file}
        assert data[0]["entry"] is True

    def test_async_matches_sync(self, capsys, entry_file, transform_dir):
        main([entry_file, "--cwd", transform_dir, "--no-source"])
        sync_out = json.loads(capsys.readouterr().out)

        main([entry_file, "--cwd", transform_dir, "--no-source", "--async"])
        async_out = json.loads(capsys.readouterr().out)

        assert sorted(item["file"] for item in sync_out) == sorted(item["file"] for item in async_out)

    def test_ascii_output(self, capsys, fixtures_dir):
        entry = os.path.join(fixtures_dir, "cycle", "a.glsl")

        code = main([entry, "--cwd", fixtures_dir, "-f", "ascii", "--ascii-style", "ascii"])

        assert code == 0
        assert capsys.readouterr().out.splitlines() == [
            "cycle/a.glsl",
            "\\-- ./b.glsl (cycle/b.glsl)",
            "    \\-- ./a.glsl (cycle/a.glsl) [*]",
        ]

    def test_stdin(self, capsys, monkeypatch, fixtures_dir):
        """Test that '-' builds the source read from stdin inside --cwd."""
        source = "#pragma glslify: main = require(./transform/index.glsl)\n"
        monkeypatch.setattr("sys.stdin", io.StringIO(source))

        code = main(["-", "--cwd", fixtures_dir])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert len(data) == 4
        assert data[0]["source"] == source
        assert os.path.dirname(data[0]["file"]) == fixtures_dir

    def test_local_transform(self, capsys, fixtures_dir):
        """Test that -t transforms run before imports are extracted."""
        entry = os.path.join(fixtures_dir, "cycle", "a.glsl")
        cwd = os.path.join(fixtures_dir, "transform-opts")

        code = main([entry, "--cwd", cwd, "-t", "./opts_transform.py"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data == [{"id": 0, "deps": {}, "file": entry, "source": "//{}", "entry": True}]

    def test_output_file(self, capsys, tmp_path, entry_file, transform_dir):
        target = tmp_path / "deps.json"

        code = main([entry_file, "--cwd", transform_dir, "-o", str(target)])

        assert code == 0
        assert "Output written to" in capsys.readouterr().err
        assert len(json.loads(target.read_text())) == 3

    def test_missing_entry(self, capsys, tmp_path):
        code = main([str(tmp_path / "missing.glsl")])

        assert code == 1
        assert "is not a file" in capsys.readouterr().err

    def test_build_error(self, capsys, fixtures_dir):
        """Test that graph errors are reported with exit code 1."""
        entry = os.path.join(fixtures_dir, "invalid-package", "index.glsl")

        code = main([entry, "--cwd", fixtures_dir])

        assert code == 1
        assert "package.json" in capsys.readouterr().err
