import gzip
import os
import sys
from pathlib import Path

import pytest

from field_relations.io_utils import _run
from field_relations.models import CandidateField
from field_relations.providers import InMemoryDataSource, InMemoryProvider
from field_relations.value_index import ValueIndex

SRC_DIR = Path(__file__).resolve().parents[1] / "src"


class BrokenSource:
    """A data source whose fields cannot be read."""

    def __init__(self, name: str, error: Exception = None):
        self._name = name
        self._error = error or OSError("disk read failed")

    def name(self) -> str:
        return self._name

    def fields(self):
        raise self._error


@pytest.fixture
def make_field():
    def _f(source: str, name: str, values) -> CandidateField:
        return CandidateField(source, name, ValueIndex.build(values))

    return _f


@pytest.fixture
def scenario_a_provider():
    # item.name holds 3 distinct names, drop.item_name references 2 of them
    return InMemoryProvider(
        {
            "item": {"name": ["Sword", "Shield", "Bow"], "id": ["1", "2", "3"]},
            "drop": {"item_name": ["sword", "shield", "sword"], "rate": ["0.5", "0.1", "0.2"]},
        }
    )


@pytest.fixture
def broken_source():
    return BrokenSource


@pytest.fixture
def in_memory():
    def _p(*sources):
        return InMemoryProvider([InMemoryDataSource(name, fields) for name, fields in sources])

    return _p


@pytest.fixture
def write_file(tmp_path):
    def _w(name: str, text: str, gz: bool = False) -> str:
        p = tmp_path / name
        p.parent.mkdir(parents=True, exist_ok=True)
        if gz:
            with gzip.open(p, "wt", encoding="utf-8") as f:
                f.write(text)
        else:
            p.write_text(text, encoding="utf-8")
        return str(p)

    return _w


@pytest.fixture
def run_cli():
    def _run_cli(args: list[str], cwd=None):
        exe = [sys.executable, "-m", "field_relations.cli"]
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            p for p in (str(SRC_DIR), env.get("PYTHONPATH")) if p
        )
        env["NO_COLOR"] = "1"
        return _run(exe + args, cwd=cwd, env=env, check=False)

    return _run_cli
