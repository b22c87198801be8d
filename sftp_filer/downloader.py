"""
Модуль бизнес-логики загрузки и раскладки файлов.

Объединяет работу с SFTP-сервером и файловой системой: каждый файл
удаленного каталога загружается (если его еще нет локально) и
раскладывается по каталогам по дате из имени.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from .classifier import FilenameClassifier
from .config_loader import Config
from .file_ops import FileOrganizer, OrganizeOutcome
from .logger import SftpFilerLogger
from .remote import (
    DownloadError,
    RemoteConnectionError,
    RemoteEntry,
    SftpRemoteSource,
    TransferError,
    is_candidate,
)


class RunStats:
    """Класс для хранения статистики обработки."""

    def __init__(self):
        self.total_files = 0
        self.processed_files = 0
        self.downloaded_files = 0
        self.moved_files = 0
        self.skipped_files = 0
        self.failed_files = 0
        self.start_time = None
        self.end_time = None
        self.errors = []

    def add_error(self, filename: str, error: Exception):
        """Добавляет ошибку в список."""
        self.errors.append({
            'file': filename,
            'error': str(error),
            'timestamp': datetime.now()
        })

    def record(self, outcome: OrganizeOutcome):
        """Учитывает итог обработки одного файла."""
        self.processed_files += 1
        if outcome is OrganizeOutcome.MOVED:
            self.moved_files += 1
        elif outcome is OrganizeOutcome.SKIPPED_EXISTS:
            self.skipped_files += 1
        else:
            self.failed_files += 1

    def get_duration(self) -> Optional[float]:
        """Возвращает продолжительность в секундах."""
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    def to_dict(self) -> Dict:
        """Преобразует статистику в словарь."""
        return {
            'total_files': self.total_files,
            'processed_files': self.processed_files,
            'downloaded_files': self.downloaded_files,
            'moved_files': self.moved_files,
            'skipped_files': self.skipped_files,
            'failed_files': self.failed_files,
            'start_time': self.start_time.isoformat() if self.start_time else None,
            'end_time': self.end_time.isoformat() if self.end_time else None,
            'duration_seconds': self.get_duration(),
            'error_count': len(self.errors)
        }


class Downloader:
    """Основной класс загрузки и раскладки файлов."""

    def __init__(self, config: Config, logger: SftpFilerLogger, base_dir: Path,
                 remote: Optional[SftpRemoteSource] = None,
                 organizer: Optional[FileOrganizer] = None):
        """
        Инициализация загрузчика.

        Args:
            config: Конфигурация приложения
            logger: Логгер для записи операций
            base_dir: Локальный каталог загрузки (уже проверенный)
            remote: Источник файлов (по умолчанию SFTP из конфигурации)
            organizer: Раскладчик файлов (по умолчанию для base_dir)
        """
        self.config = config
        self.logger = logger
        self.base_dir = Path(base_dir)
        self.remote = remote or SftpRemoteSource(config.sftp, logger)
        self.organizer = organizer or FileOrganizer(
            self.base_dir, logger, FilenameClassifier(config.classifier.fixed_prefix)
        )
        self.stats = RunStats()

    def run(self) -> RunStats:
        """
        Загружает и раскладывает все файлы удаленного каталога.

        Returns:
            RunStats: Статистика обработки

        Raises:
            DownloadError: При ошибке подключения или неверном удаленном пути
        """
        self.stats = RunStats()
        self.stats.start_time = datetime.now()
        remote_base = self.config.sftp.remote_base_path

        try:
            try:
                self.remote.connect()
            except RemoteConnectionError as e:
                self.logger.log_critical_error("Не удалось подключиться к SFTP", e)
                raise

            if not self.remote.exists(remote_base):
                self.logger.log_critical_error(f"Неверный удаленный путь: {remote_base}")
                raise DownloadError(f"Удаленный путь не существует: {remote_base}")

            entries = [e for e in self.remote.list_entries(remote_base) if is_candidate(e)]
            self.stats.total_files = len(entries)
            self.logger.log_run_start(len(entries), remote_base)

            if not entries:
                self.logger.log_system_info("Файлы для загрузки не найдены")

            for entry in entries:
                self.stats.record(self.process_entry(entry))

        finally:
            self.remote.close()
            self.stats.end_time = datetime.now()

        self._log_end()
        return self.stats

    def process_entry(self, entry: RemoteEntry) -> OrganizeOutcome:
        """
        Обрабатывает один удаленный файл.

        Args:
            entry: Элемент удаленного каталога

        Returns:
            OrganizeOutcome: Итог обработки
        """
        local_path = self.base_dir / entry.name
        target_path = self.organizer.destination_path(entry.name)

        try:
            # Каталоги с тем же именем (например, '2025' или 'sin_fecha') не считаются загруженным файлом
            already_local = local_path.is_file()
            already_filed = not already_local and target_path.exists()
        except OSError as e:
            self.stats.add_error(entry.name, e)
            self.logger.log_file_error(entry.name, e)
            return OrganizeOutcome.FAILED

        if already_local:
            self.logger.log_system_info(f"Уже есть в базовом каталоге, пробуем разложить: {entry.name}")
            return self.organizer.organize(entry.name, local_path)

        if already_filed:
            self.logger.log_file_skipped(entry.name, target_path)
            return OrganizeOutcome.SKIPPED_EXISTS

        try:
            self.remote.download(entry.path, local_path)
        except TransferError as e:
            self.stats.add_error(entry.name, e)
            self.logger.log_transfer_error(entry.name, e)
            return OrganizeOutcome.FAILED

        self.stats.downloaded_files += 1
        self.logger.log_file_downloaded(entry.name, local_path)
        return self.organizer.organize(entry.name, local_path)

    def organize_local(self) -> RunStats:
        """
        Раскладывает файлы, уже лежащие в базовом каталоге, без подключения к SFTP.

        Returns:
            RunStats: Статистика обработки
        """
        self.stats = RunStats()
        self.stats.start_time = datetime.now()

        files = self.organizer.list_unfiled(excluded_prefixes=(self.config.logging.log_file_prefix,))
        self.stats.total_files = len(files)

        for file_path in files:
            self.stats.record(self.organizer.organize(file_path.name, file_path))

        self.stats.end_time = datetime.now()
        self._log_end()
        return self.stats

    def _log_end(self) -> None:
        self.logger.log_run_end(
            processed=self.stats.processed_files,
            moved=self.stats.moved_files,
            skipped=self.stats.skipped_files,
            failed=self.stats.failed_files
        )


def create_downloader(config: Config, logger: SftpFilerLogger, base_dir: Path,
                      organizer: Optional[FileOrganizer] = None) -> Downloader:
    """
    Удобная функция для создания объекта загрузчика.

    Args:
        config: Конфигурация приложения
        logger: Логгер
        base_dir: Локальный каталог загрузки
        organizer: Раскладчик файлов (опционально)

    Returns:
        Downloader: Объект загрузчика
    """
    return Downloader(config, logger, base_dir, organizer=organizer)
