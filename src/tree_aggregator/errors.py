# src/tree_aggregator/errors.py
from pathlib import Path
from typing import Optional


class AggregatorError(Exception):
    """tree_aggregator 에서 발생하는 모든 예외의 기본 클래스."""


class TargetNotFoundError(AggregatorError, FileNotFoundError):
    """문자열로 지정된 target 이 존재하는 파일/디렉토리로 해석되지 않을 때 발생합니다."""

    def __init__(self, target: object, resolved: Optional[Path] = None):
        self.target = target
        self.resolved = resolved
        message = "Target must be path to existing file or directory once it's defined as string."
        if resolved is not None:
            message = f"{message} Got: {target!r} (resolved to {resolved})"
        else:
            message = f"{message} Got: {target!r}"
        super().__init__(message)


class UnitLoadError(AggregatorError):
    """유닛 파일을 로드하지 못했을 때 발생합니다. 원래 예외는 __cause__ 에 남습니다."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        super().__init__(f"Failed to load unit {path}: {reason}")
