# src/tree_aggregator/logging_config.py
import logging
import logging.config
import sys
from pathlib import Path
from typing import Optional, Union

import coloredlogs  # YAML 의 ColoredFormatter 를 dictConfig 가 불러올 수 있도록 임포트
import yaml

config_logger = logging.getLogger(__name__)

# 패키지와 함께 배포되는 설정 파일
CONFIG_PATH = Path(__file__).parent / "logging_config.yaml"


def _fallback(message: str, level: int) -> None:
    print(message, file=sys.stderr)
    logging.basicConfig(level=level, format="%(levelname)s:%(name)s:%(message)s")


def setup_logging(level: Optional[Union[int, str]] = None, config_path: Path = CONFIG_PATH) -> None:
    """
    YAML 설정 파일을 로드하여 로깅 시스템을 설정합니다.
    level 을 주면 tree_aggregator 로거의 레벨을 덮어씁니다.
    라이브러리 코드는 이 함수를 호출하지 않습니다 (CLI 전용).
    """
    # dictConfig 전에 coloredlogs 전역 설정을 먼저 초기화
    try:
        coloredlogs.install(level=level or "INFO")
        config_logger.debug("Called coloredlogs.install() for initial setup.")
    except Exception as install_e:
        print(f"Warning: coloredlogs.install() failed during initial setup: {install_e}", file=sys.stderr)

    fallback_level = logging.INFO
    try:
        if config_path.is_file():
            with open(config_path, "rt", encoding="utf-8") as f:
                config = yaml.safe_load(f.read())

            if config:
                logging.config.dictConfig(config)
                logging.getLogger("tree_aggregator").debug("Logging setup complete from YAML using dictConfig.")
            else:
                # 파일은 있지만 내용이 비어있는 경우
                _fallback(f"Warning: Logging configuration file {config_path} is empty. Using basicConfig.", fallback_level)
        else:
            _fallback(f"Warning: Logging configuration file not found at {config_path}. Using basicConfig.", fallback_level)

    except yaml.YAMLError as yaml_e:
        _fallback(f"Error parsing logging configuration file {config_path}: {yaml_e}", fallback_level)
        logging.getLogger("tree_aggregator").error(f"Failed to parse logging config YAML: {yaml_e}")
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        # dictConfig 가 설정 내용을 적용하지 못한 경우
        _fallback(f"Error loading logging configuration from {config_path}: {e}", fallback_level)
        logging.getLogger("tree_aggregator").error(f"Failed to load logging config: {e}", exc_info=True)

    # --- 명시적 레벨 덮어쓰기 ---
    if level is not None:
        if isinstance(level, str):
            level = level.upper()
        logging.getLogger("tree_aggregator").setLevel(level)
