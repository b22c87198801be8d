"""
Модуль для настройки и управления логированием приложения.

Обеспечивает вывод в консоль с цветом и запись в ежедневный файл лога
в локальном каталоге загрузки.
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime

from .config_loader import LoggingConfig


LOGGER_NAME = 'sftp_filer'
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветным выводом для консоли."""

    # Цветовые коды ANSI
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'        # Reset
    }

    def format(self, record):
        """Форматирует запись лога с цветом."""
        # Копия записи, чтобы цвет не попал в файловый обработчик
        record = logging.makeLogRecord(record.__dict__)
        if record.levelname in self.COLORS:
            record.levelname = f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"

        return super().format(record)


def daily_log_filename(prefix: str, day: Optional[datetime] = None) -> str:
    """
    Возвращает имя ежедневного файла лога.

    Args:
        prefix: Префикс имени файла
        day: Дата (по умолчанию текущая)

    Returns:
        str: Имя файла вида '<prefix>YYYYMMDD.txt'
    """
    if day is None:
        day = datetime.now()
    return f"{prefix}{day.strftime('%Y%m%d')}.txt"


class SftpFilerLogger:
    """Класс для управления логированием приложения SFTP Filer."""

    def __init__(self, config: LoggingConfig):
        """
        Инициализация логгера.

        Файловый обработчик подключается позже через attach_log_directory,
        когда известен локальный каталог загрузки.

        Args:
            config: Конфигурация логирования
        """
        self.config = config
        self.logger: Optional[logging.Logger] = None
        self.log_file: Optional[Path] = None
        self._setup_logger()

    def _setup_logger(self) -> None:
        """Настраивает логгер с консольным выводом."""
        self.logger = logging.getLogger(LOGGER_NAME)
        self.logger.setLevel(getattr(logging, self.config.level.upper()))

        # Очищаем существующие обработчики
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        console_handler.setLevel(getattr(logging, self.config.level.upper()))
        self.logger.addHandler(console_handler)

        # Предотвращаем дублирование сообщений
        self.logger.propagate = False

    def attach_log_directory(self, directory: Path, day: Optional[datetime] = None) -> Optional[Path]:
        """
        Подключает запись в ежедневный файл лога в указанном каталоге.

        Ошибка открытия файла не прерывает работу: выводится предупреждение,
        и логирование продолжается только в консоль.

        Args:
            directory: Каталог для файла лога
            day: Дата для имени файла (по умолчанию текущая)

        Returns:
            Path или None: Путь к файлу лога или None, если файл не открыт
        """
        log_file_path = Path(directory) / daily_log_filename(self.config.log_file_prefix, day)

        try:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_file_path,
                mode='a',
                maxBytes=self.config.max_log_size * 1024 * 1024,  # Конвертируем MB в байты
                backupCount=self.config.backup_count,
                encoding='utf-8'
            )
        except OSError as e:
            self.logger.warning(f"⚠️ Не удалось открыть файл лога {log_file_path}: {e}")
            return None

        file_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        file_handler.setLevel(getattr(logging, self.config.level.upper()))
        self.logger.addHandler(file_handler)

        self.log_file = log_file_path
        return log_file_path

    def get_logger(self) -> logging.Logger:
        """
        Возвращает настроенный логгер.

        Returns:
            logging.Logger: Настроенный логгер
        """
        if self.logger is None:
            raise RuntimeError("Логгер не инициализирован")
        return self.logger

    def close(self) -> None:
        """Закрывает и отключает все обработчики."""
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)
        self.log_file = None

    def log_run_start(self, total_files: int, remote_path: str) -> None:
        """
        Логирует начало загрузки.

        Args:
            total_files: Количество файлов-кандидатов
            remote_path: Удаленный каталог
        """
        self.logger.info("🚀 Начало загрузки файлов")
        self.logger.info(f"📂 Удаленный каталог: {remote_path}")
        self.logger.info(f"📊 Файлов для обработки: {total_files}")

    def log_run_end(self, processed: int, moved: int, skipped: int, failed: int) -> None:
        """
        Логирует завершение обработки.

        Args:
            processed: Обработано файлов
            moved: Разложено по каталогам
            skipped: Пропущено (уже есть в каталоге назначения)
            failed: Ошибок
        """
        self.logger.info("✅ Обработка завершена")
        self.logger.info("📊 Статистика:")
        self.logger.info(f"   • Обработано: {processed}")
        self.logger.info(f"   • Разложено: {moved}")
        self.logger.info(f"   • Пропущено: {skipped}")
        self.logger.info(f"   • Ошибок: {failed}")

    def log_connection_established(self, host: str, port: int) -> None:
        """Логирует успешное подключение к SFTP."""
        self.logger.info(f"🔌 Подключение к SFTP установлено: {host}:{port}")

    def log_connection_closed(self) -> None:
        """Логирует отключение от SFTP."""
        self.logger.info("🔌 Подключение к SFTP закрыто")

    def log_file_downloaded(self, filename: str, local_path: Path) -> None:
        """
        Логирует успешную загрузку файла.

        Args:
            filename: Имя файла
            local_path: Локальный путь
        """
        self.logger.info(f"⬇️ Загружен: {filename} → {local_path}")

    def log_file_organized(self, filename: str, target_path: Path) -> None:
        """
        Логирует перемещение файла в каталог назначения.

        Args:
            filename: Имя файла
            target_path: Путь назначения
        """
        self.logger.info(f"📁 Файл {filename} разложен в: {target_path}")

    def log_file_skipped(self, filename: str, target_path: Path) -> None:
        """
        Логирует пропуск файла, уже лежащего в каталоге назначения.

        Args:
            filename: Имя файла
            target_path: Путь назначения
        """
        self.logger.info(f"⏭️ Файл {filename} уже есть в каталоге назначения, не перезаписывается: {target_path}")

    def log_file_error(self, filename: str, error: Exception) -> None:
        """
        Логирует ошибку при обработке файла.

        Args:
            filename: Имя файла
            error: Исключение
        """
        self.logger.error(f"❌ Ошибка при обработке файла {filename}: {error}")

    def log_transfer_error(self, filename: str, error: Exception) -> None:
        """
        Логирует ошибку загрузки файла.

        Args:
            filename: Имя файла
            error: Исключение
        """
        self.logger.error(f"❌ Ошибка загрузки файла {filename}: {error}")

    def log_system_info(self, info: str) -> None:
        """
        Логирует системную информацию.

        Args:
            info: Информационное сообщение
        """
        self.logger.info(f"ℹ️ {info}")

    def log_warning(self, message: str) -> None:
        """
        Логирует предупреждение.

        Args:
            message: Сообщение предупреждения
        """
        self.logger.warning(f"⚠️ {message}")

    def log_critical_error(self, message: str, error: Exception = None) -> None:
        """
        Логирует критическую ошибку.

        Args:
            message: Сообщение об ошибке
            error: Исключение (опционально)
        """
        if error:
            self.logger.critical(f"💥 {message}: {error}")
        else:
            self.logger.critical(f"💥 {message}")


def setup_logger(config: LoggingConfig, directory: Optional[Path] = None) -> logging.Logger:
    """
    Удобная функция для быстрой настройки логгера.

    Args:
        config: Конфигурация логирования
        directory: Каталог для ежедневного файла лога (опционально)

    Returns:
        logging.Logger: Настроенный логгер
    """
    filer_logger = SftpFilerLogger(config)
    if directory is not None:
        filer_logger.attach_log_directory(directory)
    return filer_logger.get_logger()
