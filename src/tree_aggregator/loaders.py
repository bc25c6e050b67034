# src/tree_aggregator/loaders.py
import hashlib
import importlib.util
import json
import logging
import re
import sys
from pathlib import Path
from typing import Any, List, Optional, Protocol

import yaml

from .errors import UnitLoadError

logger = logging.getLogger(__name__)

# 모듈이 이 속성을 정의하면 모듈 객체 대신 이 값이 유닛 값이 됨 (None 이면 집계에서 제외)
EXPORT_ATTR = "__export__"
# 파일에서 로드한 모듈의 sys.modules 이름 접두사
MODULE_PREFIX = "_tree_aggregator_units"


class UnitHandler(Protocol):
    """특정 형식의 파일을 유닛 값으로 로드하는 핸들러"""

    def match(self, path: Path) -> bool:
        ...

    def load(self, path: Path) -> Any:
        ...


def module_name_for(path: Path) -> str:
    """경로마다 고정된 모듈 이름. 같은 경로는 프로세스 안에서 한 번만 import 됨."""
    digest = hashlib.sha1(str(path).encode("utf-8")).hexdigest()[:12]
    stem = re.sub(r"\W", "_", path.stem)
    return f"{MODULE_PREFIX}_{stem}_{digest}"


class PythonModuleHandler:
    def match(self, path: Path) -> bool:
        return path.suffix == ".py"

    def load(self, path: Path) -> Any:
        name = module_name_for(path)
        module = sys.modules.get(name)
        if module is None:
            spec = importlib.util.spec_from_file_location(name, path)
            if spec is None or spec.loader is None:
                raise ImportError(f"Cannot create import spec for {path}")
            module = importlib.util.module_from_spec(spec)
            # 순환 import 를 위해 실행 전에 등록
            sys.modules[name] = module
            try:
                spec.loader.exec_module(module)
            except BaseException:
                sys.modules.pop(name, None)
                raise
            logger.debug("Imported %s as %s", path, name)
        return getattr(module, EXPORT_ATTR, module)


class JsonHandler:
    def match(self, path: Path) -> bool:
        return path.suffix.lower() == ".json"

    def load(self, path: Path) -> Any:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)


class YamlHandler:
    def match(self, path: Path) -> bool:
        return path.suffix.lower() in {".yaml", ".yml"}

    def load(self, path: Path) -> Any:
        with path.open("r", encoding="utf-8") as f:
            # 빈 문서는 None -> 집계에서 제외
            return yaml.safe_load(f)


def default_handlers() -> List[UnitHandler]:
    return [PythonModuleHandler(), JsonHandler(), YamlHandler()]


class UnitLoader:
    """
    파일 하나를 유닛 값으로 로드합니다.
    첫 번째로 match 되는 핸들러가 로드를 담당합니다.
    """

    def __init__(self, handlers: Optional[List[UnitHandler]] = None):
        self.handlers = handlers if handlers is not None else default_handlers()

    def _handler_for(self, path: Path) -> Optional[UnitHandler]:
        for handler in self.handlers:
            if handler.match(path):
                return handler
        return None

    def match(self, path: Path) -> bool:
        return self._handler_for(path) is not None

    def load(self, path: Path) -> Any:
        handler = self._handler_for(path)
        if handler is None:
            raise UnitLoadError(path, "no handler for this file type")
        try:
            return handler.load(path)
        except UnitLoadError:
            raise
        except Exception as e:
            raise UnitLoadError(path, f"{type(e).__name__}: {e}") from e
