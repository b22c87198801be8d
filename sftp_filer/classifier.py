"""
Модуль определения даты по имени файла.

Имя файла проверяется упорядоченным списком шаблонов. Первый шаблон,
давший корректную календарную дату, определяет результат; остальные
шаблоны не проверяются. Если ни один шаблон не подошел, дата не определена.
"""

import calendar
import re
import datetime
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional

from .config_loader import DEFAULT_FIXED_PREFIX
from .months import month_from_name


class DateCandidate(NamedTuple):
    """Дата-кандидат до проверки по календарю."""
    year: int
    month: int
    day: int


@dataclass(frozen=True)
class ClassificationResult:
    """Результат классификации имени файла."""
    date: Optional[datetime.date]
    is_weekly: bool = False

    def __post_init__(self):
        if self.date is None and self.is_weekly:
            raise ValueError("Недельный признак невозможен без даты")

    @property
    def has_date(self) -> bool:
        return self.date is not None


NO_DATE = ClassificationResult(date=None, is_weekly=False)


def is_valid_date(year: int, month: int, day: int) -> bool:
    """
    Проверяет, что (year, month, day) является существующей датой.

    Args:
        year: Год
        month: Месяц
        day: День

    Returns:
        bool: True если дата существует (с учетом високосных лет)
    """
    if year < datetime.MINYEAR:
        return False
    if month < 1 or month > 12:
        return False
    if day < 1:
        return False
    return day <= calendar.monthrange(year, month)[1]


class DateMatcher:
    """Базовый класс шаблона: строка -> DateCandidate или None."""

    name = "base"
    weekly = False

    def match(self, filename: str) -> Optional[DateCandidate]:
        raise NotImplementedError


class WeeklyRangeMatcher(DateMatcher):
    """Недельный диапазон: 'del 26 al 31 de julio 2025' -> последний день диапазона."""

    name = "weekly_range"
    weekly = True

    PATTERN = re.compile(
        r"del\s+([0-9]{1,2})\s+al\s+([0-9]{1,2})\s+de\s+([A-Za-zÁÉÍÓÚáéíóúÑñ]+)\s+([0-9]{4})",
        re.IGNORECASE
    )

    def match(self, filename: str) -> Optional[DateCandidate]:
        m = self.PATTERN.search(filename)
        if not m:
            return None

        month = month_from_name(m.group(3))
        if month is None:
            return None

        return DateCandidate(year=int(m.group(4)), month=month, day=int(m.group(2)))


class FixedPrefixMatcher(DateMatcher):
    """Известный префикс ленты, за которым сразу идет дата MMddyyyy."""

    name = "fixed_prefix"

    def __init__(self, prefix: str = DEFAULT_FIXED_PREFIX):
        self.prefix = prefix
        self.pattern = re.compile(re.escape(prefix) + r"([0-9]{2})([0-9]{2})([0-9]{4})") if prefix else None

    def match(self, filename: str) -> Optional[DateCandidate]:
        if self.pattern is None or self.prefix not in filename:
            return None

        m = self.pattern.search(filename)
        if not m:
            return None

        return DateCandidate(year=int(m.group(3)), month=int(m.group(1)), day=int(m.group(2)))


class DayMonthNameYearMatcher(DateMatcher):
    """День, название месяца и год без разделителей: '31Jul2025', '4agosto2025'."""

    name = "day_month_name_year"

    PATTERN = re.compile(r"([0-9]{1,2})([A-Za-z]{3,})([0-9]{4})", re.IGNORECASE)

    def match(self, filename: str) -> Optional[DateCandidate]:
        m = self.PATTERN.search(filename)
        if not m:
            return None

        month = month_from_name(m.group(2))
        if month is None:
            return None

        return DateCandidate(year=int(m.group(3)), month=month, day=int(m.group(1)))


class CompactDateMatcher(DateMatcher):
    """
    Восемь цифр подряд: две группы по 2 цифры и год.

    Если вторая группа больше 12, она считается днем (MMddyyyy),
    иначе первая группа - день, вторая - месяц (ddMMyyyy).
    """

    name = "compact_date"

    PATTERN = re.compile(r"([0-9]{2})([0-9]{2})([0-9]{4})")

    def match(self, filename: str) -> Optional[DateCandidate]:
        m = self.PATTERN.search(filename)
        if not m:
            return None

        p1, p2, year = int(m.group(1)), int(m.group(2)), int(m.group(3))
        if p2 > 12:
            return DateCandidate(year=year, month=p1, day=p2)
        return DateCandidate(year=year, month=p2, day=p1)


def default_matchers(fixed_prefix: str = DEFAULT_FIXED_PREFIX) -> List[DateMatcher]:
    """Возвращает шаблоны в порядке приоритета."""
    return [
        WeeklyRangeMatcher(),
        FixedPrefixMatcher(fixed_prefix),
        DayMonthNameYearMatcher(),
        CompactDateMatcher(),
    ]


class FilenameClassifier:
    """Классификатор имен файлов по упорядоченному списку шаблонов."""

    def __init__(self, fixed_prefix: str = DEFAULT_FIXED_PREFIX,
                 matchers: Optional[Iterable[DateMatcher]] = None):
        """
        Инициализация классификатора.

        Args:
            fixed_prefix: Префикс ленты для шаблона MMddyyyy (пустая строка отключает шаблон)
            matchers: Собственный список шаблонов (заменяет список по умолчанию)
        """
        if matchers is None:
            matchers = default_matchers(fixed_prefix)
        self.matchers: List[DateMatcher] = list(matchers)

    def classify(self, filename: str) -> ClassificationResult:
        """
        Определяет дату и недельный признак по имени файла.

        Args:
            filename: Имя файла

        Returns:
            ClassificationResult: Результат (date=None если дата не найдена)
        """
        for matcher in self.matchers:
            candidate = matcher.match(filename)
            if candidate is None or not is_valid_date(*candidate):
                continue
            return ClassificationResult(date=datetime.date(*candidate), is_weekly=matcher.weekly)

        return NO_DATE


_default_classifier = FilenameClassifier()


def classify(filename: str) -> ClassificationResult:
    """
    Удобная функция классификации с настройками по умолчанию.

    Args:
        filename: Имя файла

    Returns:
        ClassificationResult: Результат классификации
    """
    return _default_classifier.classify(filename)


if __name__ == "__main__":
    # Тестирование модуля
    samples = [
        "informe del 26 al 31 de julio 2025.xlsx",
        "Malla_CHB_08052025.pdf",
        "31Jul2025_reporte.csv",
        "reporte_31072025.csv",
        "randomfile.txt",
    ]
    for sample in samples:
        result = classify(sample)
        print(f"📄 {sample}: {result.date} (недельный: {result.is_weekly})")
