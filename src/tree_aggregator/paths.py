# src/tree_aggregator/paths.py
import inspect
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from .checks import classify, is_module_handle
from .errors import TargetNotFoundError

logger = logging.getLogger(__name__)

# 이 패키지 자체의 디렉토리 (호출자 탐색 시 건너뜀)
_PACKAGE_DIR = Path(__file__).resolve().parent


@dataclass(frozen=True)
class Caller:
    """
    aggregate 를 호출한 파일과, 그 파일이 실행되기까지 거친 상위 파일들.
    parents 는 안쪽(가까운 호출자)부터 바깥쪽 순서입니다.
    """
    path: Path
    parents: Tuple[Path, ...] = field(default_factory=tuple)

    @property
    def directory(self) -> Path:
        return self.path.parent


def _frame_file(frame: Any) -> Optional[Path]:
    filename = frame.f_code.co_filename
    # <frozen importlib._bootstrap>, <string>, <stdin> 같은 가짜 파일은 제외
    if not filename or filename.startswith("<"):
        return None
    return Path(filename).resolve()


def _is_own_frame(path: Path) -> bool:
    return path == _PACKAGE_DIR or _PACKAGE_DIR in path.parents


def discover_caller() -> Caller:
    """
    인터프리터 스택을 바깥쪽으로 거슬러 올라가며 호출자 파일을 찾습니다.
    이 패키지 내부 프레임과 import 기계 장치의 프레임은 건너뜁니다.
    """
    frame = inspect.currentframe()
    caller_path: Optional[Path] = None
    parents: list = []
    try:
        while frame is not None:
            path = _frame_file(frame)
            frame = frame.f_back
            if path is None or _is_own_frame(path):
                continue
            if caller_path is None:
                caller_path = path
            elif path != caller_path and path not in parents:
                parents.append(path)
    finally:
        # 프레임 참조 순환 방지
        del frame

    if caller_path is None:
        # 대화형 세션 등 실제 파일이 없는 경우: 현재 디렉토리에 가상의 호출자를 둠
        caller_path = Path.cwd() / "<interactive>"
        logger.debug("No caller file found on the stack; using %s", caller_path)

    return Caller(path=caller_path, parents=tuple(parents))


def coerce_caller(caller: Union[Caller, str, os.PathLike, Any, None]) -> Caller:
    """명시적으로 전달된 호출자(Caller, 경로, 모듈)를 Caller 로 변환합니다. None 이면 스택에서 탐색."""
    if caller is None:
        return discover_caller()
    if isinstance(caller, Caller):
        return caller
    if is_module_handle(caller):
        return Caller(path=Path(caller.__file__).resolve())
    if isinstance(caller, (str, os.PathLike)):
        return Caller(path=Path(caller).resolve())
    raise TypeError(f"caller must be a Caller, a path or a module, not {type(caller).__name__}")


def entry_point_file() -> Optional[Path]:
    """실행 중인 __main__ 스크립트의 절대 경로. 대화형 세션이면 None."""
    main_module = sys.modules.get("__main__")
    main_file = getattr(main_module, "__file__", None)
    if not isinstance(main_file, str):
        return None
    return Path(main_file).resolve()


def resolve_target_path(target: Any, caller: Caller) -> Path:
    """
    target 을 절대 경로로 바꿉니다.

    - None: 호출자 파일이 있는 디렉토리
    - 모듈 핸들: 그 모듈 파일이 있는 디렉토리
    - 비어있지 않은 문자열/PathLike: 호출자 디렉토리 기준으로 해석, 반드시 존재해야 함
    """
    # --- target 이 없으면 호출자 디렉토리 ---
    if classify(target, "absent"):
        return caller.directory

    # --- target 이 모듈이면 모듈 파일의 디렉토리 ---
    if classify(target, "module"):
        return Path(target.__file__).resolve().parent

    # --- target 이 경로 문자열이면 호출자 기준으로 해석 ---
    if isinstance(target, os.PathLike) or (isinstance(target, str) and len(target) > 0):
        resolved = (caller.directory / Path(target)).resolve()
        if classify(resolved, "dir") or classify(resolved, "file"):
            return resolved
        raise TargetNotFoundError(target, resolved)

    raise TargetNotFoundError(target)
