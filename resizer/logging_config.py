import logging
from pathlib import Path
from typing import Union


def logger_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%d-%m-%Y %I:%M:%S %p",
    )


def handler_stream(formatter: logging.Formatter, level: int) -> logging.StreamHandler:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    return console_handler


def handler_file(path: Union[str, Path], formatter: logging.Formatter) -> logging.FileHandler:
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    return file_handler


def setup_logging(path: Union[str, Path], level: str = "INFO") -> None:
    """Консоль на уровне `level`, в файл всё начиная с DEBUG."""
    formatter = logger_formatter()
    console_level = logging.getLevelName(level)
    if not isinstance(console_level, int):
        console_level = logging.INFO

    logging.basicConfig(
        level=logging.DEBUG,
        handlers=[handler_stream(formatter, console_level), handler_file(path, formatter)],
    )

    # PIL пишет отладку по каждому плагину при открытии файла
    for lib_name in ("PIL", "PIL.PngImagePlugin", "PIL.TiffImagePlugin"):
        logging.getLogger(lib_name).setLevel(logging.WARNING)
