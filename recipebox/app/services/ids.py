# recipebox/app/services/ids.py
from typing import Any, Optional
from uuid import UUID


def normalize_id(value: Any) -> Optional[str]:
    """
    Retorna a forma canônica (string) de um id de receita.

    Ids podem chegar como int, float, UUID ou string com espaços;
    `1`, `1.0`, `"1"` e `" 1 "` resultam todos em `"1"`.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    text = str(value).strip()
    return text or None
