from __future__ import annotations

from pathlib import Path

# Относительно рабочего каталога процесса, а не пакета:
# при обычной (не editable) установке пакет лежит в site-packages.
DATA_DIR = Path("data")
SELECTION_GROUPS_FILE = DATA_DIR / "selection-groups.json"

# Кадров в секунду у плеера — для перевода start интервала в номер кадра.
DEFAULT_FPS = 30
