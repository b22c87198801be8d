"""
Тесты для модуля downloader.py
"""

import os
import pytest
from pathlib import Path
from unittest.mock import Mock
from datetime import datetime

from sftp_filer.config_loader import (
    ClassifierConfig,
    Config,
    LoggingConfig,
    PathsConfig,
    SftpConfig,
)
from sftp_filer.downloader import Downloader, RunStats, create_downloader
from sftp_filer.file_ops import FileOrganizer, OrganizeOutcome
from sftp_filer.logger import SftpFilerLogger
from sftp_filer.remote import (
    DownloadError,
    RemoteConnectionError,
    RemoteEntry,
    SftpRemoteSource,
    TransferError,
)


JULY_DIR = Path("2025") / "07 Julio" / "31Jul2025"


class TestRunStats:
    """Тесты для класса RunStats."""

    def test_initialization(self):
        stats = RunStats()

        assert stats.total_files == 0
        assert stats.processed_files == 0
        assert stats.downloaded_files == 0
        assert stats.moved_files == 0
        assert stats.skipped_files == 0
        assert stats.failed_files == 0
        assert stats.errors == []

    def test_record(self):
        """Тест учета итогов обработки."""
        stats = RunStats()

        stats.record(OrganizeOutcome.MOVED)
        stats.record(OrganizeOutcome.MOVED)
        stats.record(OrganizeOutcome.SKIPPED_EXISTS)
        stats.record(OrganizeOutcome.FAILED)

        assert stats.processed_files == 4
        assert stats.moved_files == 2
        assert stats.skipped_files == 1
        assert stats.failed_files == 1

    def test_add_error(self):
        stats = RunStats()
        stats.add_error("a.csv", TransferError("Connection reset"))

        assert stats.errors[0]['file'] == "a.csv"
        assert stats.errors[0]['error'] == "Connection reset"
        assert 'timestamp' in stats.errors[0]

    def test_to_dict(self):
        """Тест преобразования в словарь."""
        stats = RunStats()
        stats.total_files = 3
        stats.start_time = datetime(2025, 7, 31, 10, 0, 0)
        stats.end_time = datetime(2025, 7, 31, 10, 1, 30)

        result = stats.to_dict()

        assert result['total_files'] == 3
        assert result['start_time'] == '2025-07-31T10:00:00'
        assert result['duration_seconds'] == 90.0
        assert result['error_count'] == 0


class TestDownloader:
    """Тесты для класса Downloader."""

    @pytest.fixture
    def config(self, tmp_path):
        return Config(
            sftp=SftpConfig(
                host="sftp.example.com",
                port=22,
                username="feed_user",
                password="secret",
                remote_base_path="/outbox"
            ),
            paths=PathsConfig(
                local_download_path=tmp_path,
                fallback_dir_name="DescargasFTP"
            ),
            classifier=ClassifierConfig(fixed_prefix="Malla_CHB_"),
            logging=LoggingConfig(level="INFO", log_file_prefix="descarga_log_")
        )

    @pytest.fixture
    def mock_logger(self):
        return Mock(spec=SftpFilerLogger)

    @pytest.fixture
    def remote_files(self):
        """Содержимое удаленного каталога: имя -> данные."""
        return {
            "31Jul2025_reporte.csv": b"report",
            "informe del 26 al 31 de julio 2025.xlsx": b"weekly",
            "Malla_CHB_08052025.pdf": b"malla",
            "randomfile.txt": b"random",
        }

    @pytest.fixture
    def mock_remote(self, remote_files):
        """Создает мок SFTP-источника, который пишет файлы на диск."""
        remote = Mock(spec=SftpRemoteSource)
        remote.exists.return_value = True
        remote.list_entries.return_value = [
            RemoteEntry(name, f"/outbox/{name}", False, len(data))
            for name, data in remote_files.items()
        ] + [
            RemoteEntry("archive", "/outbox/archive", True),
            RemoteEntry(".hidden", "/outbox/.hidden", False, 1),
        ]

        def fake_download(remote_path, local_path):
            # Как SftpRemoteSource.download: запись в .part и переименование
            name = remote_path.rsplit("/", 1)[-1]
            partial_path = Path(str(local_path) + ".part")
            try:
                partial_path.write_bytes(remote_files[name])
                os.replace(partial_path, local_path)
            except OSError as e:
                if partial_path.name in os.listdir(partial_path.parent):
                    partial_path.unlink()
                raise TransferError(f"Ошибка загрузки {remote_path}: {e}")
            return Path(local_path)

        remote.download.side_effect = fake_download
        return remote

    @pytest.fixture
    def downloader(self, config, mock_logger, mock_remote, tmp_path):
        return Downloader(config, mock_logger, tmp_path, remote=mock_remote)

    def test_run_downloads_and_organizes(self, downloader, mock_remote, mock_logger, tmp_path):
        """Тест полного цикла загрузки и раскладки."""
        stats = downloader.run()

        assert stats.total_files == 4
        assert stats.processed_files == 4
        assert stats.downloaded_files == 4
        assert stats.moved_files == 4
        assert stats.failed_files == 0

        assert (tmp_path / JULY_DIR / "31Jul2025_reporte.csv").read_bytes() == b"report"
        assert (tmp_path / JULY_DIR / "informe del 26 al 31 de julio 2025.xlsx").exists()
        assert (tmp_path / "2025" / "08 Agosto" / "05Ago2025" / "Malla_CHB_08052025.pdf").exists()
        assert (tmp_path / "sin_fecha" / "randomfile.txt").exists()

        # Скрытые файлы и каталоги не загружаются
        downloaded = [c[0][0] for c in mock_remote.download.call_args_list]
        assert "/outbox/archive" not in downloaded
        assert "/outbox/.hidden" not in downloaded

        mock_remote.connect.assert_called_once()
        mock_remote.close.assert_called_once()
        mock_logger.log_run_start.assert_called_once_with(4, "/outbox")
        mock_logger.log_run_end.assert_called_once_with(processed=4, moved=4, skipped=0, failed=0)
        assert stats.get_duration() is not None

    def test_second_run_is_idempotent(self, downloader, mock_remote, tmp_path):
        """Тест: повторный запуск ничего не загружает и не перезаписывает."""
        downloader.run()
        mock_remote.download.reset_mock()

        stats = downloader.run()

        mock_remote.download.assert_not_called()
        assert stats.skipped_files == 4
        assert stats.moved_files == 0
        assert stats.failed_files == 0
        assert (tmp_path / JULY_DIR / "31Jul2025_reporte.csv").read_bytes() == b"report"

    def test_file_already_in_base_dir(self, downloader, mock_remote, tmp_path):
        """Тест: файл уже лежит в базовом каталоге и только раскладывается."""
        (tmp_path / "31Jul2025_reporte.csv").write_bytes(b"local copy")

        downloader.run()

        downloaded = [c[0][0] for c in mock_remote.download.call_args_list]
        assert "/outbox/31Jul2025_reporte.csv" not in downloaded
        assert (tmp_path / JULY_DIR / "31Jul2025_reporte.csv").read_bytes() == b"local copy"

    def test_existing_destination_is_not_overwritten(self, downloader, mock_remote, tmp_path):
        target_dir = tmp_path / JULY_DIR
        target_dir.mkdir(parents=True)
        (target_dir / "31Jul2025_reporte.csv").write_bytes(b"existing")

        stats = downloader.run()

        assert stats.skipped_files == 1
        assert (target_dir / "31Jul2025_reporte.csv").read_bytes() == b"existing"
        assert not (tmp_path / "31Jul2025_reporte.csv").exists()

    def test_transfer_error_does_not_abort(self, downloader, mock_remote, mock_logger, remote_files, tmp_path):
        """Тест: ошибка загрузки одного файла не прерывает обработку."""
        original = mock_remote.download.side_effect

        def flaky_download(remote_path, local_path):
            if remote_path.endswith("randomfile.txt"):
                raise TransferError("Connection reset")
            return original(remote_path, local_path)

        mock_remote.download.side_effect = flaky_download

        stats = downloader.run()

        assert stats.failed_files == 1
        assert stats.moved_files == 3
        assert stats.errors[0]['file'] == "randomfile.txt"
        mock_logger.log_transfer_error.assert_called_once()
        assert not (tmp_path / "sin_fecha" / "randomfile.txt").exists()

    def test_remote_file_named_like_year_directory(self, downloader, mock_remote, remote_files, tmp_path):
        """Тест: файл с именем каталога года не трогает уже разложенные файлы."""
        filed = tmp_path / JULY_DIR / "31Jul2025_reporte.csv"
        filed.parent.mkdir(parents=True)
        filed.write_bytes(b"filed")
        remote_files["2025"] = b"not a directory"
        mock_remote.list_entries.return_value = [RemoteEntry("2025", "/outbox/2025", False, 15)]

        stats = downloader.run()

        assert stats.moved_files == 0
        assert stats.failed_files == 1
        assert filed.read_bytes() == b"filed"
        assert (tmp_path / "2025").is_dir()
        assert not (tmp_path / "sin_fecha" / "2025").exists()

    def test_bad_file_name_does_not_abort(self, downloader, mock_remote, mock_logger, remote_files, tmp_path):
        """Тест: слишком длинное имя файла не прерывает обработку следующих."""
        long_name = "ñ" * 200 + ".csv"
        remote_files[long_name] = b"long"
        mock_remote.list_entries.return_value = [
            RemoteEntry(long_name, f"/outbox/{long_name}", False, 4),
            RemoteEntry("31Jul2025_reporte.csv", "/outbox/31Jul2025_reporte.csv", False, 6),
        ]

        stats = downloader.run()

        assert stats.processed_files == 2
        assert stats.failed_files == 1
        assert stats.moved_files == 1
        assert stats.errors[0]['file'] == long_name
        assert (tmp_path / JULY_DIR / "31Jul2025_reporte.csv").read_bytes() == b"report"
        mock_logger.log_run_end.assert_called_once_with(processed=2, moved=1, skipped=0, failed=1)

    def test_connection_failure(self, downloader, mock_remote, mock_logger):
        """Тест ошибки подключения."""
        mock_remote.connect.side_effect = RemoteConnectionError("Authentication failed")

        with pytest.raises(RemoteConnectionError):
            downloader.run()

        mock_remote.list_entries.assert_not_called()
        mock_logger.log_critical_error.assert_called_once()
        mock_logger.log_run_end.assert_not_called()

    def test_missing_remote_path(self, downloader, mock_remote, mock_logger):
        """Тест неверного удаленного пути."""
        mock_remote.exists.return_value = False

        with pytest.raises(DownloadError, match="/outbox"):
            downloader.run()

        mock_remote.list_entries.assert_not_called()
        mock_remote.close.assert_called_once()
        mock_logger.log_critical_error.assert_called_once()

    def test_empty_remote_directory(self, downloader, mock_remote, mock_logger):
        mock_remote.list_entries.return_value = []

        stats = downloader.run()

        assert stats.total_files == 0
        assert stats.processed_files == 0
        mock_logger.log_system_info.assert_any_call("Файлы для загрузки не найдены")

    def test_organize_local(self, downloader, mock_remote, tmp_path):
        """Тест раскладки локальных файлов без подключения к SFTP."""
        (tmp_path / "31Jul2025_reporte.csv").write_text("a")
        (tmp_path / "notas.txt").write_text("b")
        (tmp_path / "descarga_log_20250731.txt").write_text("log")
        (tmp_path / "31Jul2025_otro.csv.part").write_text("partial")

        stats = downloader.organize_local()

        assert stats.total_files == 2
        assert stats.moved_files == 2
        assert (tmp_path / JULY_DIR / "31Jul2025_reporte.csv").exists()
        assert (tmp_path / "sin_fecha" / "notas.txt").exists()
        assert (tmp_path / "descarga_log_20250731.txt").exists()
        assert (tmp_path / "31Jul2025_otro.csv.part").exists()
        mock_remote.connect.assert_not_called()

    def test_create_downloader(self, config, mock_logger, tmp_path):
        organizer = FileOrganizer(tmp_path, mock_logger)

        downloader = create_downloader(config, mock_logger, tmp_path, organizer=organizer)

        assert isinstance(downloader, Downloader)
        assert isinstance(downloader.remote, SftpRemoteSource)
        assert downloader.organizer is organizer
        assert downloader.base_dir == tmp_path

    def test_default_organizer_uses_configured_prefix(self, config, mock_logger, tmp_path):
        config.classifier.fixed_prefix = "Turnos_"

        downloader = Downloader(config, mock_logger, tmp_path)

        assert downloader.organizer.destination_dir("Turnos_08052025.pdf") == \
            tmp_path / "2025" / "08 Agosto" / "05Ago2025"
