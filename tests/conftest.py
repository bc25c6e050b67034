import sys
import textwrap
from pathlib import Path

import pytest

from tree_aggregator.loaders import MODULE_PREFIX
from tree_aggregator.paths import Caller


@pytest.fixture(autouse=True)
def isolate_unit_modules():
    # 테스트마다 로더가 import 한 유닛 모듈을 sys.modules 에서 제거
    yield
    for name in [n for n in sys.modules if n.startswith(MODULE_PREFIX)]:
        del sys.modules[name]


@pytest.fixture
def root(tmp_path: Path) -> Path:
    return tmp_path.resolve()


@pytest.fixture
def make_tree(root: Path):
    """{상대 경로: 내용} dict 로 파일 트리를 만듭니다. 내용이 None 이면 디렉토리."""

    def _make(files: dict) -> Path:
        for rel_path, content in files.items():
            path = root / rel_path
            if content is None:
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content), encoding="utf-8")
        return root

    return _make


@pytest.fixture
def caller(root: Path) -> Caller:
    # 스캔 대상 밖에 있는 가상의 호출자 파일
    return Caller(path=root / "caller.py")
