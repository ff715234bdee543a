import pytest


@pytest.fixture
def make_tree(tmp_path):
    """Create files under a fresh root from {relative_path: content} (None = directory)."""

    def _make(entries):
        root = tmp_path / "root"
        root.mkdir()
        for rel, content in entries.items():
            path = root / rel
            if content is None:
                path.mkdir(parents=True, exist_ok=True)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
        return root

    return _make
