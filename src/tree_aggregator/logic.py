# src/tree_aggregator/logic.py
import logging
import os
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence, Set, Union

import pathspec

from .checks import classify
from .exporter import export_root
from .loaders import UnitLoader
from .models import AggregatorConfig, UnitRecord, normalize_config
from .paths import Caller, coerce_caller, entry_point_file, resolve_target_path
from .tree import PropsTree, can_hold_fields, has_field, iter_fields, set_field

logger = logging.getLogger(__name__)


# --- 제외 규칙: 호출 한 번 동안만 유지되는 값들 ---
class ExclusionRules:
    """
    탐색 중 만나는 항목마다 제외 여부를 새로 판단합니다. 결과는 캐시하지 않습니다.
    """

    def __init__(self, config: AggregatorConfig, target: Any, caller: Caller):
        files = config.exclude.files
        self.name_spec: Optional[pathspec.PathSpec] = (
            pathspec.PathSpec.from_lines("gitwildmatch", files) if files else None
        )
        self.self_file: Optional[Path] = entry_point_file() if config.exclude.self_ else None
        self.target_file: Optional[Path] = (
            Path(target.__file__).resolve() if classify(target, "module") else None
        )
        self.parent_files: Set[Path] = (
            {caller.path, *caller.parents} if config.exclude.parents else set()
        )

    def skip(self, item_path: Path, is_dir: bool) -> bool:
        name = item_path.name
        if self.name_spec is not None:
            # 디렉토리는 'name/' 형태의 패턴에도 걸리도록 함
            if self.name_spec.match_file(name) or (is_dir and self.name_spec.match_file(f"{name}/")):
                logger.debug("Excluded by name pattern: %s", item_path)
                return True

        if is_dir:
            return False

        # 엔트리 포인트 스크립트 자신
        if self.self_file is not None and item_path == self.self_file:
            logger.debug("Excluded entry point file: %s", item_path)
            return True

        # target 으로 전달된 모듈 파일 (항상 적용)
        if self.target_file is not None and item_path == self.target_file:
            logger.debug("Excluded target module file: %s", item_path)
            return True

        # 호출자 및 상위 파일들
        if item_path in self.parent_files:
            logger.debug("Excluded parent file: %s", item_path)
            return True

        return False


# --- 디렉토리 탐색 ---
def traverse(
    dir_path: Union[str, os.PathLike],
    config: AggregatorConfig,
    target: Any = None,
    props: Sequence[str] = (),
    *,
    caller: Optional[Caller] = None,
    loader: Optional[UnitLoader] = None,
) -> List[UnitRecord]:
    """
    dir_path 아래의 파일들을 로드하여 UnitRecord 리스트로 반환합니다.
    dir_path 가 파일이면 그 파일 하나만 처리합니다.
    """
    rules = ExclusionRules(config, target, caller or coerce_caller(None))
    return _collect(Path(dir_path).resolve(), config, rules, loader or UnitLoader(), list(props))


def _collect(
    dir_path: Path,
    config: AggregatorConfig,
    rules: ExclusionRules,
    loader: UnitLoader,
    props: List[str],
) -> List[UnitRecord]:
    # 디렉토리면 항목 목록을, 아니면 파일 자신을 사용 (정렬하지 않음)
    if classify(dir_path, "dir"):
        try:
            items = list(dir_path.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            logger.debug("Directory disappeared while scanning: %s", dir_path)
            return []
    else:
        items = [dir_path]

    records: List[UnitRecord] = []

    for item in items:
        item_path = item

        # 파일도 디렉토리도 아니면 건너뛰기 (스캔 도중 삭제, 깨진 심볼릭 링크 등)
        is_dir = classify(item_path, "dir")
        if not is_dir and not classify(item_path, "file"):
            logger.debug("Skipping entry that is neither file nor directory: %s", item_path)
            continue

        if rules.skip(item_path, is_dir):
            continue

        if is_dir:
            # 재귀 탐색 (하위 결과는 자신의 전체 경로 props 를 유지)
            if config.recurse:
                records.extend(_collect(item_path, config, rules, loader, props + [item_path.name]))
            continue

        if not loader.match(item_path):
            logger.debug("No unit handler for %s, skipping", item_path)
            continue

        exports = loader.load(item_path)

        # 아무것도 내보내지 않는 유닛은 집계에서 제외
        if classify(exports, "absent"):
            logger.debug("Unit exports nothing, skipping: %s", item_path)
            continue

        record = UnitRecord(
            props=list(props),
            exports=exports,
            filename=item_path.name,
            extname=item_path.suffix,
            basename=item_path.stem,
            path=item_path,
        )

        if config.resolve is not None:
            resolved = config.resolve(record)
            if isinstance(resolved, UnitRecord):
                record = resolved

        records.append(record)

    return records


# --- 레코드를 하나의 중첩 구조로 합치기 ---
def _index_path(record: UnitRecord, directory: Path, config: AggregatorConfig) -> Path:
    return directory / f"{config.index_name}{record.extname}"


def _has_index_ancestor(record: UnitRecord, known_paths: Set[Path], config: AggregatorConfig) -> bool:
    # 탐색 루트까지의 상위 디렉토리만 확인 (props 길이만큼)
    ancestors = list(record.path.parent.parents)[: len(record.props)]
    return any(_index_path(record, ancestor, config) in known_paths for ancestor in ancestors)


def _merge_into_index(index_exports: Any, stored: Any) -> Any:
    """index 의 값을 기반으로, 이미 저장된 필드 중 index 에 없는 것만 덧붙입니다."""
    if not can_hold_fields(index_exports):
        logger.warning(
            "Index exports of type %s cannot hold fields; dropping stored fields %s",
            type(index_exports).__name__, [key for key, _ in iter_fields(stored)] or type(stored).__name__,
        )
        return index_exports
    for key, value in iter_fields(stored):
        if not has_field(index_exports, key):
            set_field(index_exports, key, value)
    return index_exports


def fold_records(records: Sequence[UnitRecord], config: AggregatorConfig) -> Any:
    """
    레코드들을 순서대로 접어 디렉토리 구조와 같은 모양의 중첩 매핑을 만듭니다.
    루트 레벨 index 파일만 있으면 결과는 그 값 자체가 될 수 있습니다.
    """
    tree = PropsTree()
    known_paths: Set[Path] = {record.path for record in records}

    for record in records:
        is_index = record.basename == config.index_name

        # index 파일의 값은 자신이 있는 디렉토리 노드에 바로 놓임
        if is_index and not config.index_prop:
            props_path = list(record.props)
        else:
            props_path = list(record.props) + [record.basename]

        if not config.index_prop:
            # index 파일이 있는 디렉토리의 형제 파일 제외
            if (
                not is_index
                and config.exclude.siblings
                and _index_path(record, record.path.parent, config) in known_paths
            ):
                logger.debug("Skipping index sibling: %s", record.path)
                continue

            # 상위 디렉토리에 index 파일이 있으면 하위 디렉토리 항목 제외
            if config.exclude.children and _has_index_ancestor(record, known_paths, config):
                logger.debug("Skipping index child: %s", record.path)
                continue

        # 이미 값이 있으면 병합
        if tree.has(props_path) and not config.index_prop:
            stored = tree.get(props_path)
            if is_index:
                merged = _merge_into_index(tree.writable(record.exports), stored)
            elif can_hold_fields(stored):
                stored = tree.writable(stored)
                set_field(stored, record.basename, tree.writable(record.exports))
                merged = stored
            else:
                logger.warning(
                    "Cannot attach %r onto stored value of type %s at %s; keeping stored value",
                    record.basename, type(stored).__name__, ".".join(props_path) or "<root>",
                )
                merged = stored
            tree.set(props_path, merged)
            continue

        # 매핑 값은 사본으로 저장 (로더 캐시를 건드리지 않도록)
        tree.set(props_path, tree.writable(record.exports))

    return tree.root


# --- 진입점 ---
def aggregate(
    target: Any = None,
    options: Union[AggregatorConfig, Mapping, None] = None,
    *,
    caller: Any = None,
    loader: Optional[UnitLoader] = None,
) -> Any:
    """
    target 디렉토리 아래의 유닛들을 모두 로드하여 하나의 중첩 구조로 반환합니다.

    target: None(호출자 디렉토리), 모듈 객체(그 모듈의 디렉토리), 또는 호출자 기준 경로.
    options: AggregatorConfig 또는 같은 키를 가진 dict.
    caller: 호출자를 직접 지정 (Caller, 경로, 모듈). 없으면 스택에서 찾습니다.
    loader: 유닛 로더. 없으면 .py / .json / .yaml 을 로드하는 기본 로더.
    """
    # --- 1. 입력 정리 ---
    caller_info = coerce_caller(caller)
    target_path = resolve_target_path(target, caller_info)
    config = normalize_config(options)
    logger.debug("Aggregating %s (caller: %s)", target_path, caller_info.path)

    # --- 2. 파일 로드 ---
    records = traverse(target_path, config, target, caller=caller_info, loader=loader)

    # --- 3. 하나의 구조로 합치기 ---
    modules_hash = fold_records(records, config)
    logger.info("Aggregated %d unit(s) from %s", len(records), target_path)

    # --- 4. 호출 모듈로 내보내기 ---
    export_root(modules_hash, target, config)

    return modules_hash
