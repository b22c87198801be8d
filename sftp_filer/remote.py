"""
Модуль для работы с удаленным SFTP-каталогом.

Обеспечивает подключение, проверку пути, получение списка файлов
и загрузку файла с записью через временный файл *.part.
"""

import os
import posixpath
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import paramiko

from .config_loader import SftpConfig
from .file_ops import PARTIAL_SUFFIX
from .logger import SftpFilerLogger


class DownloadError(Exception):
    """Исключение для ошибок загрузки."""
    pass


class RemoteConnectionError(DownloadError):
    """Исключение для ошибок подключения к SFTP."""
    pass


class TransferError(DownloadError):
    """Исключение для ошибок загрузки отдельного файла."""
    pass


@dataclass(frozen=True)
class RemoteEntry:
    """Элемент удаленного каталога."""
    name: str
    path: str
    is_directory: bool
    size: Optional[int] = None


def is_candidate(entry: RemoteEntry) -> bool:
    """Кандидат на загрузку: не скрытый и не каталог."""
    return not entry.name.startswith('.') and not entry.is_directory


class SftpRemoteSource:
    """Класс для работы с SFTP-сервером."""

    def __init__(self, config: SftpConfig, logger: SftpFilerLogger):
        """
        Инициализация источника.

        Args:
            config: Конфигурация SFTP
            logger: Логгер
        """
        self.config = config
        self.logger = logger
        self._client: Optional[paramiko.SSHClient] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    @property
    def connected(self) -> bool:
        return self._sftp is not None

    def connect(self) -> None:
        """
        Устанавливает подключение к SFTP-серверу.

        Raises:
            RemoteConnectionError: Если подключиться не удалось
        """
        self.logger.log_system_info(f"Подключение к {self.config.host}:{self.config.port}...")

        client = paramiko.SSHClient()
        client.load_system_host_keys()
        if self.config.strict_host_key_checking:
            client.set_missing_host_key_policy(paramiko.RejectPolicy())
        else:
            client.set_missing_host_key_policy(paramiko.AutoAddPolicy())

        try:
            client.connect(
                hostname=self.config.host,
                port=self.config.port,
                username=self.config.username,
                password=self.config.password,
                timeout=self.config.timeout,
                look_for_keys=False,
                allow_agent=False
            )
            self._sftp = client.open_sftp()
        except (paramiko.SSHException, OSError) as e:
            client.close()
            raise RemoteConnectionError(f"Ошибка подключения к {self.config.host}:{self.config.port}: {e}")

        self._client = client
        self.logger.log_connection_established(self.config.host, self.config.port)

    def _require_sftp(self) -> paramiko.SFTPClient:
        if self._sftp is None:
            raise RemoteConnectionError("Нет подключения к SFTP. Вызовите connect() сначала.")
        return self._sftp

    def exists(self, path: str) -> bool:
        """
        Проверяет существование удаленного пути.

        Args:
            path: Удаленный путь

        Returns:
            bool: True если путь существует
        """
        sftp = self._require_sftp()
        try:
            sftp.stat(path)
            return True
        except FileNotFoundError:
            return False

    def list_entries(self, path: str) -> List[RemoteEntry]:
        """
        Получает список элементов удаленного каталога.

        Args:
            path: Удаленный каталог

        Returns:
            List[RemoteEntry]: Элементы каталога
        """
        sftp = self._require_sftp()
        entries = []
        for attrs in sftp.listdir_attr(path):
            entries.append(RemoteEntry(
                name=attrs.filename,
                path=posixpath.join(path, attrs.filename),
                is_directory=attrs.st_mode is not None and stat.S_ISDIR(attrs.st_mode),
                size=attrs.st_size
            ))
        return entries

    def download(self, remote_path: str, local_path: Path) -> Path:
        """
        Загружает файл в локальный путь.

        Данные пишутся во временный файл '<имя>.part', который
        переименовывается только после успешной загрузки.

        Args:
            remote_path: Удаленный путь
            local_path: Локальный путь

        Returns:
            Path: Локальный путь к загруженному файлу

        Raises:
            TransferError: Если загрузка не удалась
        """
        sftp = self._require_sftp()
        local_path = Path(local_path)
        partial_path = local_path.with_name(local_path.name + PARTIAL_SUFFIX)

        try:
            sftp.get(remote_path, str(partial_path))
            os.replace(partial_path, local_path)
        except (paramiko.SSHException, OSError) as e:
            try:
                partial_path.unlink()
            except FileNotFoundError:
                pass
            raise TransferError(f"Ошибка загрузки {remote_path}: {e}")

        return local_path

    def close(self) -> None:
        """Закрывает подключение."""
        if self._sftp is not None:
            self._sftp.close()
            self._sftp = None
        if self._client is not None:
            self._client.close()
            self._client = None
            self.logger.log_connection_closed()

    def __enter__(self):
        """Поддержка контекстного менеджера."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Поддержка контекстного менеджера."""
        self.close()
