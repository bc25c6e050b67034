# src/tree_aggregator/models.py
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _keep_bool(value: Any, default: bool) -> bool:
    return value if isinstance(value, bool) else default


class ExcludeConfig(BaseModel):
    """파일 제외 규칙"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    files: Optional[List[str]] = None   # 이름(gitwildmatch 패턴)으로 제외할 파일/디렉토리
    self_: bool = Field(True, alias="self")  # 실행 중인 엔트리 포인트 스크립트 제외
    parents: bool = True                # 호출자와 그 상위 파일들 제외
    siblings: bool = True               # index 파일의 형제 파일 제외
    children: bool = True               # index 파일이 있는 디렉토리의 하위 디렉토리 제외

    @field_validator("files", mode="before")
    @classmethod
    def _normalize_files(cls, value: Any) -> Optional[List[str]]:
        if isinstance(value, str):
            return [value]
        if isinstance(value, Iterable) and not isinstance(value, (bytes, Mapping)):
            patterns = list(value)
            if all(isinstance(p, str) for p in patterns):
                return patterns
        return None

    @field_validator("self_", mode="before")
    @classmethod
    def _normalize_self(cls, value: Any) -> bool:
        return _keep_bool(value, True)

    @field_validator("parents", "siblings", "children", mode="before")
    @classmethod
    def _normalize_flags(cls, value: Any) -> bool:
        return _keep_bool(value, True)


class AggregatorConfig(BaseModel):
    """
    aggregate 동작 설정.
    normalize_config 를 거친 뒤에는 모든 필드가 항상 채워져 있습니다.
    잘못된 타입의 값은 오류 없이 기본값으로 대체됩니다.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    async_: bool = Field(True, alias="async")  # 예약됨 (동작에 영향 없음)
    recurse: bool = True
    index_prop: bool = Field(False, alias="indexProp")
    index_name: str = Field("index", alias="indexName")
    export: Union[bool, Callable[..., Any]] = False
    resolve: Optional[Callable[..., Any]] = None
    safe: bool = False
    exclude: ExcludeConfig = Field(default_factory=ExcludeConfig)

    @field_validator("async_", "recurse", mode="before")
    @classmethod
    def _default_true(cls, value: Any) -> bool:
        return _keep_bool(value, True)

    @field_validator("index_prop", "safe", mode="before")
    @classmethod
    def _default_false(cls, value: Any) -> bool:
        return _keep_bool(value, False)

    @field_validator("index_name", mode="before")
    @classmethod
    def _strip_index_name(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else "index"

    @field_validator("export", mode="before")
    @classmethod
    def _normalize_export(cls, value: Any) -> Union[bool, Callable[..., Any]]:
        if isinstance(value, bool) or callable(value):
            return value
        return False

    @field_validator("resolve", mode="before")
    @classmethod
    def _normalize_resolve(cls, value: Any) -> Optional[Callable[..., Any]]:
        return value if callable(value) else None

    @field_validator("exclude", mode="before")
    @classmethod
    def _normalize_exclude(cls, value: Any) -> Any:
        if isinstance(value, ExcludeConfig):
            return value.model_copy()
        if isinstance(value, Mapping):
            return value
        return {}


def normalize_config(options: Union[AggregatorConfig, Mapping, None] = None) -> AggregatorConfig:
    """호출자 옵션을 얕게 복사한 뒤 기본값과 합쳐 완전한 설정을 만듭니다."""
    if isinstance(options, AggregatorConfig):
        return options.model_copy(update={"exclude": options.exclude.model_copy()})
    data = dict(options) if isinstance(options, Mapping) else {}
    return AggregatorConfig.model_validate(data)


class UnitRecord(BaseModel):
    """로드된 파일 하나의 정보. resolve 콜백에서 자유롭게 수정할 수 있습니다."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    props: List[str]    # 파일까지의 디렉토리 이름들 (파일 이름 제외)
    exports: Any        # 로드된 값
    filename: str       # 확장자 포함 이름
    extname: str
    basename: str       # 확장자 제외 이름
    path: Path          # 절대 경로


class ExportRequest(BaseModel):
    """사용자 정의 export 콜백에 전달되는 값"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    module_name: str
    module_exports: Any
    modules_hash: Any
    target: Any
