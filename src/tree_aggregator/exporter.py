# src/tree_aggregator/exporter.py
import keyword
import logging
import re
from collections.abc import Mapping
from typing import Any, List

from .checks import classify
from .models import AggregatorConfig, ExportRequest

logger = logging.getLogger(__name__)


def safe_var_name(var_name: str) -> str:
    """
    변수 이름으로 쓸 수 있는 안전한 이름을 반환합니다.
    파이썬 예약어(soft keyword 포함)는 첫 글자를 대문자로 바꾸고,
    식별자가 될 수 없는 문자는 '_' 로 바꿉니다.
    """
    if keyword.iskeyword(var_name) or keyword.issoftkeyword(var_name):
        return var_name[:1].upper() + var_name[1:]
    if var_name.isidentifier():
        return var_name
    cleaned = re.sub(r"\W", "_", var_name)
    if cleaned[:1].isdigit():
        cleaned = f"_{cleaned}"
    return cleaned


def unique_prop_name(prop_name: str, surface: Any) -> str:
    """
    surface(내보낼 대상 모듈)에 없는 이름이 될 때까지 숫자 접미사를 붙입니다.
    카운터는 이 호출 안에서만 사용됩니다.
    """
    if not classify(prop_name, "str") or not prop_name:
        return prop_name
    candidate = prop_name
    index = 0
    while hasattr(surface, candidate):
        index += 1
        candidate = f"{prop_name}{index}"
    return candidate


def exporter_by_default(request: ExportRequest) -> None:
    """값을 그대로 대상 모듈의 속성으로 설정합니다."""
    setattr(request.target, request.module_name, request.module_exports)


def is_exportable_data(modules_hash: Any, target: Any, config: AggregatorConfig) -> bool:
    return (
        # 대상이 모듈 핸들
        classify(target, "module")
        # 비어있지 않은 매핑
        and isinstance(modules_hash, Mapping) and len(modules_hash) > 0
        # 값 중 하나 이상이 None 이 아님
        and any(value is not None for value in modules_hash.values())
        # export 허용
        and (config.export is True or callable(config.export))
    )


def export_root(modules_hash: Any, target: Any, config: AggregatorConfig) -> List[str]:
    """
    집계 결과의 루트 항목들을 target 모듈의 속성으로 내보냅니다.
    실제로 내보낸 이름 목록을 반환합니다.
    """
    if not is_exportable_data(modules_hash, target, config):
        return []

    exporter = config.export if callable(config.export) else exporter_by_default
    exported: List[str] = []

    for original_name, module_exports in list(modules_hash.items()):
        module_name = original_name

        if config.safe and classify(module_name, "str"):
            module_name = safe_var_name(module_name)

        module_name = unique_prop_name(module_name, target)

        if classify(module_name, "str") and module_name and module_exports is not None:
            exporter(ExportRequest(
                module_name=module_name,
                module_exports=module_exports,
                modules_hash=modules_hash,
                target=target,
            ))
            exported.append(module_name)
            if module_name != original_name:
                logger.debug("Exported %r as %r", original_name, module_name)

    logger.debug("Exported %d name(s) onto %s", len(exported), getattr(target, "__name__", target))
    return exported
