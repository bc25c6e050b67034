# src/tree_aggregator/ignore_file.py
import logging
from pathlib import Path
from typing import List

import pathspec

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".tagrignore"


def load_ignore_patterns(root_dir: Path, ignore_filename: str = IGNORE_FILENAME) -> List[str]:
    """
    지정된 ignore 파일을 읽어 exclude.files 에 넣을 패턴 목록을 반환합니다.
    파일이 없거나 파싱할 수 없으면 빈 리스트를 반환합니다.
    """
    ignore_path = root_dir / ignore_filename
    if not ignore_path.is_file():
        return []

    try:
        with open(ignore_path, "r", encoding="utf-8") as f:
            lines = [line.rstrip("\n") for line in f]
        # 패턴이 올바른지 pathspec 으로 먼저 검증
        pathspec.PathSpec.from_lines("gitwildmatch", lines)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.warning("Could not read or parse %s: %s", ignore_path, e)
        return []

    patterns = [line for line in lines if line.strip() and not line.lstrip().startswith("#")]
    logger.info("Loaded %d rule(s) from %s", len(patterns), ignore_filename)
    return patterns
