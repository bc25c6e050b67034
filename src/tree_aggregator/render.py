# src/tree_aggregator/render.py
import json
import types
from collections.abc import Mapping
from typing import Any, List, Optional, Set

import yaml

_SCALARS = (str, int, float, bool, type(None))


def _describe(value: Any) -> str:
    if isinstance(value, types.ModuleType):
        return f"<module {value.__name__}>"
    if callable(value):
        name = getattr(value, "__qualname__", None) or getattr(value, "__name__", None) or type(value).__name__
        kind = "class" if isinstance(value, type) else "callable"
        return f"<{kind} {name}>"
    return repr(value)


def _public_data(module: types.ModuleType) -> dict:
    # 모듈은 공개 데이터 속성만 (import 된 모듈, 함수, 클래스는 설명 문자열로)
    return {
        name: attr
        for name, attr in vars(module).items()
        if not name.startswith("_") and not isinstance(attr, types.ModuleType)
    }


def to_plain(value: Any, _seen: Optional[Set[int]] = None) -> Any:
    """
    집계 결과를 JSON/YAML 로 직렬화할 수 있는 값으로 바꿉니다.
    모듈은 공개 속성의 dict 로, 그 밖의 객체는 repr 문자열로 표현합니다.
    """
    if isinstance(value, _SCALARS):
        return value

    seen = _seen if _seen is not None else set()
    if id(value) in seen:
        return "<cycle>"
    seen = seen | {id(value)}

    if isinstance(value, Mapping):
        return {str(k): to_plain(v, seen) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_plain(v, seen) for v in value]
    if isinstance(value, types.ModuleType):
        return {k: to_plain(v, seen) for k, v in _public_data(value).items()}
    return _describe(value)


def render_json(result: Any) -> str:
    return json.dumps(to_plain(result), indent=2, ensure_ascii=False)


def render_yaml(result: Any) -> str:
    return yaml.safe_dump(to_plain(result), allow_unicode=True, sort_keys=False)


def render_tree(result: Any, root_name: str = ".") -> str:
    """집계 결과의 키 구조를 트리 문자열로 만듭니다."""
    plain = to_plain(result)
    tree_lines: List[str] = [f"{root_name}/"]

    def _build_tree_recursive(node: Any, prefix: str):
        """트리 구조를 재귀적으로 생성하는 내부 함수"""
        items = list(node.items())
        pointers = ["├── "] * (len(items) - 1) + ["└── "]
        for pointer, (key, value) in zip(pointers, items):
            if isinstance(value, dict):
                tree_lines.append(f"{prefix}{pointer}{key}/")
                extension = "│   " if pointer == "├── " else "    "
                _build_tree_recursive(value, prefix + extension)
            else:
                tree_lines.append(f"{prefix}{pointer}{key}: {json.dumps(value, ensure_ascii=False)}")

    if isinstance(plain, dict):
        _build_tree_recursive(plain, "")
    else:
        # 루트 레벨 값 하나만 있는 경우
        tree_lines.append(f"└── {json.dumps(plain, ensure_ascii=False)}")
    return "\n".join(tree_lines)
