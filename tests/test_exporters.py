"""Tests for exporters."""

import json

from depgraph.model import ModuleNode
from exporters.ascii_exporter import to_ascii
from exporters.json_exporter import to_json


def make_node(id, file, deps=None, source="", entry=False):
    node = ModuleNode(id, file, entry=entry)
    node.deps.update(deps or {})
    node.source = source
    return node


def sample_nodes():
    """main.glsl imports b.glsl and glsl-noise; b.glsl imports glsl-noise too."""
    noise = "/shaders/node_modules/glsl-noise/index.glsl"
    return [
        make_node(0, "/shaders/main.glsl", {"./b.glsl": 1, "glsl-noise": 2}, "void main() {}", entry=True),
        make_node(1, "/shaders/b.glsl", {"glsl-noise": 2}, "float b;"),
        make_node(2, noise, {}, "float noise;"),
    ]


class TestASCIIExporter:
    """Tests for ASCII exporter."""

    def test_empty_list(self):
        assert to_ascii([]) == ""

    def test_tree(self):
        """Test the full tree, with shared modules shown in each branch."""
        output = to_ascii(sample_nodes(), base="/shaders")

        assert output == "\n".join([
            "main.glsl",
            "├── ./b.glsl (b.glsl)",
            "│   └── glsl-noise (node_modules/glsl-noise/index.glsl)",
            "└── glsl-noise (node_modules/glsl-noise/index.glsl)",
        ])

    def test_ascii_style(self):
        """Test that ASCII style uses no Unicode box characters."""
        output = to_ascii(sample_nodes(), base="/shaders", style="ascii")

        assert "├" not in output
        assert "└" not in output
        assert "│" not in output
        assert "|-- ./b.glsl (b.glsl)" in output
        assert "\\-- glsl-noise" in output

    def test_absolute_paths_without_base(self):
        output = to_ascii(sample_nodes())

        assert output.splitlines()[0] == "/shaders/main.glsl"

    def test_cycle_detection(self):
        """Test that a module importing its ancestor is marked, not expanded."""
        nodes = [
            make_node(0, "/shaders/a.glsl", {"./b.glsl": 1}, entry=True),
            make_node(1, "/shaders/b.glsl", {"./a.glsl": 0}),
        ]

        output = to_ascii(nodes, base="/shaders")

        assert output.splitlines() == [
            "a.glsl",
            "└── ./b.glsl (b.glsl)",
            "    └── ./a.glsl (a.glsl) [*]",
        ]

    def test_missing_dependency(self):
        nodes = [make_node(0, "/shaders/a.glsl", {"./gone.glsl": 7}, entry=True)]

        output = to_ascii(nodes, base="/shaders")

        assert "./gone.glsl [MISSING]" in output

    def test_several_roots(self):
        """Test that modules nobody imports are rendered as extra roots."""
        nodes = sample_nodes()
        nodes.append(make_node(3, "/shaders/extra.glsl"))

        output = to_ascii(nodes, base="/shaders")

        assert output.split("\n\n")[1] == "extra.glsl"


class TestJSONExporter:
    """Tests for JSON exporter."""

    def test_empty_list(self):
        assert json.loads(to_json([])) == []

    def test_module_list(self):
        """Test that every node becomes one object with all its fields."""
        data = json.loads(to_json(sample_nodes()))

        assert len(data) == 3
        assert data[0] == {
            "id": 0,
            "deps": {"./b.glsl": 1, "glsl-noise": 2},
            "file": "/shaders/main.glsl",
            "source": "void main() {}",
            "entry": True,
        }
        assert data[1]["entry"] is False
        assert data[2]["deps"] == {}

    def test_without_source(self):
        data = json.loads(to_json(sample_nodes(), include_source=False))

        assert all("source" not in item for item in data)
        assert data[1]["deps"] == {"glsl-noise": 2}

    def test_indent(self):
        output = to_json(sample_nodes(), indent=None)

        assert "\n" not in output
