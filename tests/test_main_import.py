from __future__ import annotations

import importlib
import sys
from pathlib import Path


def test_main_inserts_src_on_path() -> None:
    src_path = str(Path(__file__).resolve().parents[1] / "src")
    original_path = list(sys.path)
    sys.path = [item for item in sys.path if item != src_path]

    try:
        import main
        importlib.reload(main)
        assert src_path in sys.path
        assert callable(main.main)
    finally:
        sys.path = original_path


def test_cli_wrapper_exposes_entrypoint() -> None:
    import cli

    importlib.reload(cli)
    assert callable(cli._cli_main)
