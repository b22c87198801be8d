"""
Главный модуль CLI интерфейса для утилиты SFTP Filer.

Предоставляет командный интерфейс для загрузки файлов с SFTP-сервера,
раскладки локальных файлов и проверки классификации имен.
"""

import argparse
import sys

from .classifier import FilenameClassifier
from .config_loader import load_config
from .downloader import Downloader, create_downloader
from .file_ops import FileOrganizer, DirectoryUnavailableError, resolve_base_directory
from .logger import SftpFilerLogger
from .remote import DownloadError, SftpRemoteSource, is_candidate


class SftpFilerCLI:
    """Класс для обработки команд CLI."""

    def __init__(self):
        self.config = None
        self.logger = None
        self.base_dir = None
        self.organizer = None

    def setup(self, config_path: str = "config/settings.ini") -> bool:
        """
        Инициализирует CLI с конфигурацией.

        Args:
            config_path: Путь к файлу конфигурации

        Returns:
            bool: True если инициализация успешна
        """
        try:
            self.config = load_config(config_path)
        except (FileNotFoundError, ValueError) as e:
            print(f"❌ Ошибка инициализации: {e}")
            return False

        self.logger = SftpFilerLogger(self.config.logging)

        try:
            self.base_dir = resolve_base_directory(
                self.config.paths.local_download_path,
                self.config.paths.fallback_dir_name,
                self.logger
            )
        except DirectoryUnavailableError as e:
            self.logger.log_critical_error("Локальный каталог недоступен", e)
            return False

        self.logger.attach_log_directory(self.base_dir)
        self.organizer = FileOrganizer(
            self.base_dir,
            self.logger,
            FilenameClassifier(self.config.classifier.fixed_prefix)
        )

        self.logger.log_system_info(f"Конфигурация загружена из: {config_path}")
        self.logger.log_system_info(f"Локальный каталог: {self.base_dir}")
        return True

    def _create_downloader(self) -> Downloader:
        return create_downloader(self.config, self.logger, self.base_dir, organizer=self.organizer)

    def _print_stats(self, stats) -> None:
        print("📊 Статистика:")
        print(f"   • Обработано: {stats.processed_files}")
        print(f"   • Загружено: {stats.downloaded_files}")
        print(f"   • Разложено: {stats.moved_files}")
        print(f"   • Пропущено: {stats.skipped_files}")
        print(f"   • Ошибок: {stats.failed_files}")
        duration = stats.get_duration()
        if duration is not None:
            print(f"   • Продолжительность: {duration:.2f} сек")

    def cmd_run(self, args) -> int:
        """
        Команда загрузки и раскладки файлов.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        try:
            stats = self._create_downloader().run()
        except DownloadError as e:
            print(f"❌ Ошибка загрузки: {e}")
            return 1

        print("\n✅ Загрузка завершена!")
        self._print_stats(stats)

        if stats.errors:
            print(f"\n⚠️ Обнаружено {len(stats.errors)} ошибок загрузки:")
            for error in stats.errors[:10]:  # Показываем первые 10 ошибок
                print(f"   • {error['file']}: {error['error']}")
            if len(stats.errors) > 10:
                print(f"   ... и еще {len(stats.errors) - 10} ошибок")

        return 0 if stats.failed_files == 0 else 1

    def cmd_organize(self, args) -> int:
        """
        Команда раскладки файлов, уже лежащих в локальном каталоге.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        stats = self._create_downloader().organize_local()

        print("\n✅ Раскладка завершена!")
        self._print_stats(stats)

        return 0 if stats.failed_files == 0 else 1

    def cmd_classify(self, args) -> int:
        """
        Команда проверки классификации имен файлов.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (всегда 0)
        """
        for name in args.names:
            result = self.organizer.classifier.classify(name)
            date_str = result.date.isoformat() if result.date else "без даты"
            weekly = " (недельный)" if result.is_weekly else ""
            print(f"📄 {name}: {date_str}{weekly}")
            print(f"   → {self.organizer.destination_path(name)}")
        return 0

    def cmd_test_connection(self, args) -> int:
        """
        Команда тестирования подключения к SFTP.

        Args:
            args: Аргументы командной строки

        Returns:
            int: Код возврата (0 - успех, 1 - ошибка)
        """
        remote = SftpRemoteSource(self.config.sftp, self.logger)
        remote_base = self.config.sftp.remote_base_path

        print("🔌 Тестирование подключения к SFTP...")

        try:
            remote.connect()

            if not remote.exists(remote_base):
                print(f"❌ Удаленный путь не существует: {remote_base}")
                return 1

            candidates = [e for e in remote.list_entries(remote_base) if is_candidate(e)]
            print("✅ Подключение к SFTP успешно!")
            print(f"   • Удаленный каталог: {remote_base}")
            print(f"   • Файлов для загрузки: {len(candidates)}")
            return 0

        except DownloadError as e:
            print(f"❌ Ошибка подключения к SFTP: {e}")
            return 1
        finally:
            remote.close()


def create_parser() -> argparse.ArgumentParser:
    """
    Создает парсер аргументов командной строки.

    Returns:
        argparse.ArgumentParser: Настроенный парсер
    """
    parser = argparse.ArgumentParser(
        description="Загрузка файлов с SFTP и раскладка по каталогам по датам",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Примеры использования:

  # Загрузка и раскладка всех файлов
  sftp-filer run

  # Раскладка файлов, уже лежащих в локальном каталоге
  sftp-filer organize

  # Проверка, куда попадет файл
  sftp-filer classify "Malla_CHB_08052025.pdf" "informe del 26 al 31 de julio 2025.xlsx"

  # Тестирование подключения к SFTP
  sftp-filer test-connection
        """
    )

    # Общие аргументы
    parser.add_argument(
        '--config',
        default='config/settings.ini',
        help='Путь к файлу конфигурации (по умолчанию: config/settings.ini)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Подробный вывод'
    )

    # Подкоманды
    subparsers = parser.add_subparsers(dest='command', help='Доступные команды')

    subparsers.add_parser('run', help='Загрузка и раскладка файлов')
    subparsers.add_parser('organize', help='Раскладка файлов из локального каталога')

    classify_parser = subparsers.add_parser('classify', help='Проверка классификации имен файлов')
    classify_parser.add_argument('names', nargs='+', help='Имена файлов')

    subparsers.add_parser('test-connection', help='Тестирование подключения к SFTP')

    return parser


def main(argv=None):
    """Главная функция CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Проверяем, что команда указана
    if not args.command:
        parser.print_help()
        return 1

    cli = SftpFilerCLI()

    if not cli.setup(args.config):
        return 1

    commands = {
        'run': cli.cmd_run,
        'organize': cli.cmd_organize,
        'classify': cli.cmd_classify,
        'test-connection': cli.cmd_test_connection,
    }

    try:
        return commands[args.command](args)
    except KeyboardInterrupt:
        print("\n⚠️ Операция прервана пользователем")
        return 1
    except Exception as e:
        cli.logger.log_critical_error("Неожиданная ошибка", e)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1
    finally:
        cli.logger.close()


if __name__ == "__main__":
    sys.exit(main())
