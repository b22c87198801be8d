"""
Модуль для операций с файловой системой.

Обеспечивает выбор локального каталога загрузки и раскладку файлов
по структуре каталогов по датам:
    <base>/<yyyy>/<MM Mes>/<ddMesyyyy>/<имя файла>
или в каталог <base>/sin_fecha для файлов без даты.
"""

import os
import shutil
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .classifier import ClassificationResult, FilenameClassifier
from .logger import SftpFilerLogger
from .months import month_abbreviation, month_name


NO_DATE_DIR = "sin_fecha"
PARTIAL_SUFFIX = ".part"


class FileOperationError(Exception):
    """Исключение для ошибок операций с файлами."""
    pass


class DirectoryUnavailableError(FileOperationError):
    """Исключение для случая, когда ни основной, ни резервный каталог недоступны."""
    pass


class OrganizeError(FileOperationError):
    """Исключение для ошибок раскладки отдельного файла."""
    pass


class OrganizeOutcome(Enum):
    """Итог раскладки одного файла."""
    MOVED = "moved"
    SKIPPED_EXISTS = "skipped_exists"
    FAILED = "failed"


def build_destination_dir(base_dir: Path, result: ClassificationResult) -> Path:
    """
    Получает каталог назначения для результата классификации.

    Args:
        base_dir: Базовый локальный каталог
        result: Результат классификации имени файла

    Returns:
        Path: Например base/2025/07 Julio/31Jul2025 или base/sin_fecha
    """
    if result.date is None:
        return Path(base_dir) / NO_DATE_DIR

    day = result.date
    month_dir = f"{day.month:02d} {month_name(day.month)}"
    day_dir = f"{day.day:02d}{month_abbreviation(day.month)}{day.year:04d}"
    return Path(base_dir) / f"{day.year:04d}" / month_dir / day_dir


def _try_ensure_directory(path: Path, logger: SftpFilerLogger) -> bool:
    """Создает каталог и проверяет право записи в него."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.log_warning(f"Не удалось создать каталог '{path}': {e}")
        return False

    if not os.access(path, os.W_OK):
        logger.log_warning(f"Нет прав на запись в каталог '{path}'")
        return False

    return True


def resolve_base_directory(preferred: Path, fallback_name: str, logger: SftpFilerLogger) -> Path:
    """
    Выбирает локальный каталог загрузки.

    Если основной каталог нельзя создать или в него нельзя писать,
    используется резервный каталог в домашнем каталоге пользователя.

    Args:
        preferred: Основной каталог из конфигурации
        fallback_name: Имя резервного каталога в домашнем каталоге
        logger: Логгер

    Returns:
        Path: Доступный для записи каталог

    Raises:
        DirectoryUnavailableError: Если недоступен и резервный каталог
    """
    preferred = Path(preferred)
    if _try_ensure_directory(preferred, logger):
        return preferred

    fallback = Path.home() / fallback_name
    logger.log_warning(f"Не удалось использовать '{preferred}', используется резервный каталог '{fallback}'")

    if _try_ensure_directory(fallback, logger):
        return fallback

    raise DirectoryUnavailableError(f"Резервный каталог тоже недоступен: {fallback}")


class FileOrganizer:
    """Класс для раскладки файлов по каталогам по датам."""

    def __init__(self, base_dir: Path, logger: SftpFilerLogger,
                 classifier: Optional[FilenameClassifier] = None):
        """
        Инициализация раскладчика.

        Args:
            base_dir: Базовый локальный каталог
            logger: Логгер для записи операций
            classifier: Классификатор имен (по умолчанию с настройками по умолчанию)
        """
        self.base_dir = Path(base_dir)
        self.logger = logger
        self.classifier = classifier or FilenameClassifier()

    def destination_dir(self, filename: str) -> Path:
        """Каталог назначения для имени файла."""
        return build_destination_dir(self.base_dir, self.classifier.classify(filename))

    def destination_path(self, filename: str) -> Path:
        """Полный путь назначения для имени файла."""
        return self.destination_dir(filename) / filename

    def organize(self, filename: str, current_path: Path) -> OrganizeOutcome:
        """
        Перемещает файл в каталог по дате из его имени.

        Существующий файл в каталоге назначения никогда не перезаписывается.
        Перемещаются только обычные файлы. Файл сначала переносится под
        временным именем '<имя>.part' в каталог назначения и переименовывается
        после успешного переноса, поэтому прерванное копирование между
        дисками не оставляет усеченный файл под итоговым именем.
        Ошибки логируются и не пробрасываются: файл остается на месте.

        Args:
            filename: Имя файла
            current_path: Текущий полный путь к файлу

        Returns:
            OrganizeOutcome: MOVED, SKIPPED_EXISTS или FAILED
        """
        target_dir = self.destination_dir(filename)
        target_path = target_dir / filename
        partial_path = target_dir / (filename + PARTIAL_SUFFIX)

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.log_file_error(filename, OrganizeError(f"Ошибка создания каталога {target_dir}: {e}"))
            return OrganizeOutcome.FAILED

        try:
            if target_path.exists():
                self.logger.log_file_skipped(filename, target_path)
                return OrganizeOutcome.SKIPPED_EXISTS

            if not Path(current_path).is_file():
                self.logger.log_file_error(filename, OrganizeError(f"Не является обычным файлом: {current_path}"))
                return OrganizeOutcome.FAILED

            shutil.move(str(current_path), str(partial_path))
            os.replace(partial_path, target_path)
        except (OSError, shutil.Error) as e:
            self._discard_partial(partial_path, Path(current_path))
            self.logger.log_file_error(filename, OrganizeError(f"Ошибка перемещения в {target_path}: {e}"))
            return OrganizeOutcome.FAILED

        self.logger.log_file_organized(filename, target_path)
        return OrganizeOutcome.MOVED

    def _discard_partial(self, partial_path: Path, source_path: Path) -> None:
        """Удаляет временный файл, если исходный файл остался на месте."""
        try:
            if source_path.is_file() and partial_path.exists():
                partial_path.unlink()
        except OSError as e:
            self.logger.log_warning(f"Не удалось удалить временный файл '{partial_path}': {e}")

    def list_unfiled(self, excluded_prefixes: tuple = ()) -> List[Path]:
        """
        Получает список файлов, лежащих прямо в базовом каталоге.

        Скрытые файлы, каталоги, незавершенные загрузки (*.part) и файлы
        с указанными префиксами (например, логи) не включаются.

        Args:
            excluded_prefixes: Префиксы имен, которые нужно пропустить

        Returns:
            List[Path]: Отсортированный список путей
        """
        if not self.base_dir.exists():
            return []

        files = [
            f for f in self.base_dir.iterdir()
            if f.is_file()
            and not f.name.startswith('.')
            and not f.name.endswith(PARTIAL_SUFFIX)
            and not f.name.startswith(tuple(excluded_prefixes))
        ]
        self.logger.log_system_info(f"Файлов в базовом каталоге для раскладки: {len(files)}")
        return sorted(files)
