"""
Статическая таблица названий месяцев.

Используется классификатором для распознавания месяца в имени файла
(испанские и английские названия) и раскладчиком для имен каталогов
(испанские названия). Не зависит от системной локали.
"""

from typing import Dict, Optional, Tuple


# (номер, название, сокращение) для имен каталогов
SPANISH_MONTHS: Tuple[Tuple[int, str, str], ...] = (
    (1, "Enero", "Ene"),
    (2, "Febrero", "Feb"),
    (3, "Marzo", "Mar"),
    (4, "Abril", "Abr"),
    (5, "Mayo", "May"),
    (6, "Junio", "Jun"),
    (7, "Julio", "Jul"),
    (8, "Agosto", "Ago"),
    (9, "Septiembre", "Sep"),
    (10, "Octubre", "Oct"),
    (11, "Noviembre", "Nov"),
    (12, "Diciembre", "Dic"),
)

ENGLISH_MONTHS: Tuple[Tuple[int, str, str], ...] = (
    (1, "January", "Jan"),
    (2, "February", "Feb"),
    (3, "March", "Mar"),
    (4, "April", "Apr"),
    (5, "May", "May"),
    (6, "June", "Jun"),
    (7, "July", "Jul"),
    (8, "August", "Aug"),
    (9, "September", "Sep"),
    (10, "October", "Oct"),
    (11, "November", "Nov"),
    (12, "December", "Dec"),
)

# Дополнительные написания, которых нет в таблицах выше
EXTRA_ALIASES: Dict[str, int] = {
    "set": 9,
}


def _build_lookup() -> Dict[str, int]:
    lookup: Dict[str, int] = {}
    for table in (SPANISH_MONTHS, ENGLISH_MONTHS):
        for number, name, abbreviation in table:
            lookup[name.lower()] = number
            lookup[abbreviation.lower()] = number
    lookup.update(EXTRA_ALIASES)
    return lookup


_MONTH_LOOKUP = _build_lookup()


def month_from_name(name: str) -> Optional[int]:
    """
    Возвращает номер месяца по названию или сокращению.

    Регистр не учитывается. Для неизвестных названий возвращает None.

    Args:
        name: Название месяца ('julio', 'JUL', 'August', 'set', ...)

    Returns:
        int или None: Номер месяца 1-12
    """
    return _MONTH_LOOKUP.get(name.lower())


def _spanish_entry(month: int) -> Tuple[int, str, str]:
    if not 1 <= month <= 12:
        raise ValueError(f"Некорректный номер месяца: {month}")
    return SPANISH_MONTHS[month - 1]


def month_name(month: int) -> str:
    """Испанское название месяца с заглавной буквы: 7 -> 'Julio'."""
    return _spanish_entry(month)[1]


def month_abbreviation(month: int) -> str:
    """Трехбуквенное испанское сокращение без точки: 7 -> 'Jul'."""
    return _spanish_entry(month)[2]
