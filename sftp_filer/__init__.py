"""
SFTP Filer Utility

Утилита для загрузки файлов с SFTP-сервера и раскладки их по каталогам
в соответствии с датой, извлеченной из имени файла.
"""

__version__ = "1.0.0"
__author__ = "SFTP Filer Team"
__description__ = "Utility for downloading files over SFTP and filing them into date-based folders"
