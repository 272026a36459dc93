"""
Packaging checks
"""
from pathlib import Path

import pytest

tomllib = pytest.importorskip("tomllib")

PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


class TestDependencies:
    def test_streamlit_floor_supports_stretch_width(self):
        """st.dataframe(width="stretch") needs a recent streamlit"""
        deps = tomllib.loads(PYPROJECT.read_text(encoding="utf-8"))["project"]["dependencies"]
        floor = next(d for d in deps if d.startswith("streamlit>="))

        major, minor = (int(p) for p in floor.split(">=")[1].split(".")[:2])
        assert (major, minor) >= (1, 48)
