"""
Модуль для загрузки и валидации конфигурации приложения.

Обеспечивает централизованную загрузку параметров из config/settings.ini
с валидацией и удобным доступом к настройкам.
"""

import configparser
from pathlib import Path
from typing import Optional
from dataclasses import dataclass


DEFAULT_LOCAL_DOWNLOAD_PATH = r"C:\DatosFTP\Descargas"
DEFAULT_FALLBACK_DIR_NAME = "DescargasFTP"
DEFAULT_FIXED_PREFIX = "Malla_CHB_"
DEFAULT_LOG_FILE_PREFIX = "descarga_log_"


class ConfigurationError(ValueError):
    """Исключение для отсутствующих или некорректных настроек."""
    pass


@dataclass
class SftpConfig:
    """Конфигурация подключения к SFTP-серверу."""
    host: str
    port: int
    username: str
    password: str
    remote_base_path: str = "/"
    timeout: float = 30.0
    strict_host_key_checking: bool = False


@dataclass
class PathsConfig:
    """Конфигурация локальных путей."""
    local_download_path: Path
    fallback_dir_name: str = DEFAULT_FALLBACK_DIR_NAME


@dataclass
class ClassifierConfig:
    """Конфигурация классификатора имен файлов."""
    fixed_prefix: str = DEFAULT_FIXED_PREFIX


@dataclass
class LoggingConfig:
    """Конфигурация логирования."""
    level: str
    log_file_prefix: str = DEFAULT_LOG_FILE_PREFIX
    max_log_size: int = 10
    backup_count: int = 5


@dataclass
class Config:
    """Основная конфигурация приложения."""
    sftp: SftpConfig
    paths: PathsConfig
    classifier: ClassifierConfig
    logging: LoggingConfig


class ConfigLoader:
    """Класс для загрузки и валидации конфигурации."""

    def __init__(self, config_path: str = "config/settings.ini"):
        """
        Инициализация загрузчика конфигурации.

        Args:
            config_path: Путь к файлу конфигурации
        """
        self.config_path = Path(config_path)
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """
        Загружает конфигурацию из файла.

        Returns:
            Config: Объект конфигурации

        Raises:
            FileNotFoundError: Если файл конфигурации не найден
            ConfigurationError: Если конфигурация некорректна
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Файл конфигурации не найден: {self.config_path}")

        config_parser = configparser.ConfigParser(interpolation=None)

        try:
            config_parser.read(self.config_path, encoding='utf-8')

            self._config = Config(
                sftp=self._load_sftp_config(config_parser),
                paths=self._load_paths_config(config_parser),
                classifier=self._load_classifier_config(config_parser),
                logging=self._load_logging_config(config_parser)
            )

            self._validate_config()

            return self._config

        except Exception as e:
            self._config = None
            raise ConfigurationError(f"Ошибка загрузки конфигурации: {e}")

    def _load_sftp_config(self, parser: configparser.ConfigParser) -> SftpConfig:
        """Загружает конфигурацию SFTP-подключения."""
        section = 'sftp'

        if not parser.has_section(section):
            raise ConfigurationError(f"Секция '{section}' не найдена в конфигурации")

        username = parser.get(section, 'username', fallback='').strip()
        if not username:
            raise ConfigurationError("Не указан username в секции 'sftp'")

        password = parser.get(section, 'password', fallback='')
        if not password:
            raise ConfigurationError("Не указан password в секции 'sftp'")

        return SftpConfig(
            host=parser.get(section, 'host', fallback='localhost'),
            port=parser.getint(section, 'port', fallback=22),
            username=username,
            password=password,
            remote_base_path=parser.get(section, 'remote_base_path', fallback='/'),
            timeout=parser.getfloat(section, 'timeout', fallback=30.0),
            strict_host_key_checking=parser.getboolean(section, 'strict_host_key_checking', fallback=False)
        )

    def _load_paths_config(self, parser: configparser.ConfigParser) -> PathsConfig:
        """Загружает конфигурацию путей."""
        section = 'paths'

        return PathsConfig(
            local_download_path=Path(parser.get(section, 'local_download_path', fallback=DEFAULT_LOCAL_DOWNLOAD_PATH)),
            fallback_dir_name=parser.get(section, 'fallback_dir_name', fallback=DEFAULT_FALLBACK_DIR_NAME)
        )

    def _load_classifier_config(self, parser: configparser.ConfigParser) -> ClassifierConfig:
        """Загружает конфигурацию классификатора."""
        return ClassifierConfig(
            fixed_prefix=parser.get('classifier', 'fixed_prefix', fallback=DEFAULT_FIXED_PREFIX).strip()
        )

    def _load_logging_config(self, parser: configparser.ConfigParser) -> LoggingConfig:
        """Загружает конфигурацию логирования."""
        section = 'logging'

        return LoggingConfig(
            level=parser.get(section, 'level', fallback='INFO'),
            log_file_prefix=parser.get(section, 'log_file_prefix', fallback=DEFAULT_LOG_FILE_PREFIX),
            max_log_size=parser.getint(section, 'max_log_size', fallback=10),
            backup_count=parser.getint(section, 'backup_count', fallback=5)
        )

    def _validate_config(self) -> None:
        """Валидирует загруженную конфигурацию."""
        if not self._config:
            raise ConfigurationError("Конфигурация не загружена")

        if not 1 <= self._config.sftp.port <= 65535:
            raise ConfigurationError(f"Некорректный порт SFTP: {self._config.sftp.port}")

        if self._config.sftp.timeout <= 0:
            raise ConfigurationError("Таймаут подключения должен быть больше 0")

        if not self._config.paths.fallback_dir_name:
            raise ConfigurationError("Имя резервного каталога не может быть пустым")

        if not self._config.logging.log_file_prefix:
            raise ConfigurationError("Префикс файла лога не может быть пустым")

        if self._config.logging.max_log_size <= 0:
            raise ConfigurationError("Размер файла лога должен быть больше 0")

        # Проверка уровня логирования
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self._config.logging.level.upper() not in valid_levels:
            raise ConfigurationError(f"Некорректный уровень логирования: {self._config.logging.level}")

    def get_config(self) -> Config:
        """
        Возвращает загруженную конфигурацию.

        Returns:
            Config: Объект конфигурации

        Raises:
            ConfigurationError: Если конфигурация не загружена
        """
        if self._config is None:
            raise ConfigurationError("Конфигурация не загружена. Вызовите load_config() сначала.")
        return self._config

    def reload_config(self) -> Config:
        """
        Перезагружает конфигурацию из файла.

        Returns:
            Config: Обновленный объект конфигурации
        """
        self._config = None
        return self.load_config()


def load_config(config_path: str = "config/settings.ini") -> Config:
    """
    Удобная функция для быстрой загрузки конфигурации.

    Args:
        config_path: Путь к файлу конфигурации

    Returns:
        Config: Объект конфигурации
    """
    loader = ConfigLoader(config_path)
    return loader.load_config()
