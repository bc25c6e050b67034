# src/tree_aggregator/tree.py
import logging
from collections.abc import Mapping, MutableMapping
from typing import Any, Dict, Iterable, Sequence

logger = logging.getLogger(__name__)

_MISSING = object()


def has_field(node: Any, key: str) -> bool:
    """매핑이면 키, 그 외 객체(모듈 등)면 자신의 속성 사전으로 확인합니다."""
    if isinstance(node, Mapping):
        return key in node
    try:
        return key in vars(node)
    except TypeError:
        return False


def get_field(node: Any, key: str, default: Any = None) -> Any:
    if isinstance(node, Mapping):
        return node.get(key, default)
    try:
        return vars(node).get(key, default)
    except TypeError:
        return default


def set_field(node: Any, key: str, value: Any) -> None:
    if isinstance(node, MutableMapping):
        node[key] = value
    else:
        setattr(node, key, value)


def iter_fields(node: Any) -> Iterable[tuple]:
    """노드의 (이름, 값) 쌍. 매핑이 아닌 객체는 공개 속성만."""
    if isinstance(node, Mapping):
        return list(node.items())
    try:
        attrs = vars(node)
    except TypeError:
        return []
    return [(k, v) for k, v in attrs.items() if not k.startswith("_")]


def can_hold_fields(node: Any) -> bool:
    """필드를 덧붙일 수 있는 값인지 (가변 매핑 또는 속성 사전을 가진 객체)."""
    if isinstance(node, MutableMapping):
        return True
    if node is None or isinstance(node, (str, bytes, int, float, tuple, list)):
        return False
    return hasattr(node, "__dict__")


class PropsTree:
    """
    키 경로로 접근하는 중첩 구조.
    set 은 없는 중간 노드를 dict 로 만들고, 빈 경로에 set 하면 루트 자체를 바꿉니다.

    매핑 노드는 처음 수정할 때 이 트리 소유의 사본으로 바뀝니다.
    로더가 캐시한 값(모듈의 __export__ 등)은 그대로 남습니다.
    """

    def __init__(self, root: Any = None):
        self._owned: Dict[int, Any] = {}
        self.root: Any = self._adopt({}) if root is None else root
        self._root_set = root is not None

    def _adopt(self, node: Any) -> Any:
        self._owned[id(node)] = node
        return node

    def writable(self, value: Any) -> Any:
        """매핑이면 이 트리가 소유한 사본을, 그 외 값은 그대로 반환합니다."""
        if isinstance(value, Mapping) and self._owned.get(id(value)) is not value:
            return self._adopt(dict(value))
        return value

    def _walk(self, path: Sequence[str]) -> Any:
        node = self.root
        for key in path:
            if not has_field(node, key):
                return _MISSING
            node = get_field(node, key)
        return node

    def has(self, path: Sequence[str]) -> bool:
        if len(path) == 0:
            return self._root_set or (isinstance(self.root, Mapping) and len(self.root) > 0)
        return self._walk(path) is not _MISSING

    def get(self, path: Sequence[str], default: Any = None) -> Any:
        node = self._walk(path)
        return default if node is _MISSING else node

    def set(self, path: Sequence[str], value: Any) -> bool:
        """
        경로에 값을 놓습니다. 경로 위의 기존 값이 필드를 담을 수 없으면
        (리스트, 문자열, 숫자 등) 그 값을 유지하고 경고를 남긴 뒤 False 를 반환합니다.
        """
        if len(path) == 0:
            self.root = value
            self._root_set = True
            return True

        node = self.root = self.writable(self.root)
        for depth, key in enumerate(path[:-1]):
            if not can_hold_fields(node):
                return self._refuse(path, depth, node)
            child = get_field(node, key, _MISSING)
            child = self._adopt({}) if child is _MISSING else self.writable(child)
            set_field(node, key, child)
            node = child

        if not can_hold_fields(node):
            return self._refuse(path, len(path) - 1, node)
        set_field(node, path[-1], value)
        return True

    def _refuse(self, path: Sequence[str], depth: int, node: Any) -> bool:
        logger.warning(
            "Cannot store %s: value at %s is a %s that cannot hold fields; keeping stored value",
            ".".join(path), ".".join(path[:depth]) or "<root>", type(node).__name__,
        )
        return False
