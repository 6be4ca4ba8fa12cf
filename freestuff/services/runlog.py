# freestuff/services/runlog.py
import json
import logging
from pathlib import Path
from typing import List, Union

from freestuff.config import settings
from freestuff.schemas import RunLogEntry

logger = logging.getLogger(__name__)

class RunLog:
    """Append-only JSON-lines record of scrape runs."""

    def __init__(self, directory: Union[str, Path] = settings.RUN_LOG_DIR, filename: str = settings.RUN_LOG_FILE):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path = self.directory / filename

    def append(self, entry: RunLogEntry):
        with self.path.open("a", encoding="utf-8") as f:
            f.write(entry.to_json() + "\n")

    def tail(self, n: int = settings.RUN_LOG_TAIL) -> List[dict]:
        if not self.path.exists():
            return []
        runs: list[dict] = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            try:
                runs.append(json.loads(line))
            except json.JSONDecodeError:
                logger.warning("skipping corrupt run log line: %.80r", line)
        return runs[-n:] if n > 0 else []
