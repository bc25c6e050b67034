# src/tree_aggregator/checks.py
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any


def _as_path(value: Any) -> Path:
    if isinstance(value, (str, os.PathLike)):
        return Path(value)
    raise TypeError(f"Not a path: {value!r}")


def is_module_handle(value: Any) -> bool:
    """
    값이 호출자 식별 핸들(모듈 객체)처럼 보이는지 확인합니다.
    isinstance 가 아니라 속성(__file__, __name__)으로 판별합니다.
    """
    if value is None or isinstance(value, (str, bytes, os.PathLike)):
        return False
    return isinstance(getattr(value, "__file__", None), str) and isinstance(
        getattr(value, "__name__", None), str
    )


def classify(value: Any, kind: str) -> bool:
    """
    런타임 타입 검사기.

    kind 는 대소문자를 구분하지 않습니다.
    'dir' / 'directory' / 'folder', 'file' 은 파일시스템을 확인하고,
    'absent' / 'none' / 'undefined' 는 None 여부,
    'module' 은 모듈 핸들 여부를 확인합니다.
    그 외에는 값의 타입 이름과 비교합니다.
    """
    kind = kind.lower()

    if kind in ("dir", "directory", "folder", "file"):
        try:
            path = _as_path(value)
            if kind == "file":
                return path.is_file()
            return path.is_dir()
        except (TypeError, ValueError, OSError):
            # 경로가 아니거나 잘못된 경로(널 문자 등)는 일치하지 않는 것으로 처리
            return False

    if kind in ("absent", "none", "undefined"):
        return value is None

    if kind == "module":
        return is_module_handle(value)

    if kind in ("callable", "function"):
        return callable(value)

    if kind in ("mapping", "object"):
        return isinstance(value, Mapping)

    # bool 은 int 의 하위 클래스이므로 정확한 타입 이름으로 비교
    return type(value).__name__.lower() == kind
