"""Локальное состояние устройства (аналог localStorage браузера)"""

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

LAST_RESET_DATE_KEY = "last_reset_date"


class LocalStateStore:
    """Ключ-значение в одном JSON файле. Потеря файла безопасна"""

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> dict:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as e:
            logger.warning(f"⚠️ Локальное состояние повреждено, начинаем заново: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._load().get(key, default)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def get_last_reset_date(self) -> str:
        return self.get(LAST_RESET_DATE_KEY) or ""

    def set_last_reset_date(self, date: str) -> None:
        self.set(LAST_RESET_DATE_KEY, date)
