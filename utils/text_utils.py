def truncate(text: str, max_len: int = 64) -> str:
    return text if len(text) <= max_len else text[:max_len - 1] + "…"

def greeting(hour: int) -> str:
    """Приветствие по времени суток"""
    if hour < 12:
        return "Доброе утро"
    if hour < 17:
        return "Добрый день"
    return "Добрый вечер"
