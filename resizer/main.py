"""Точка входа в приложение."""
import logging

from resizer.app import ImageResizerApp
from resizer.config import get_config
from resizer.logging_config import setup_logging


def main() -> None:
    """Настраивает логирование, создаёт и запускает главное окно приложения."""
    config = get_config()
    setup_logging(config.log_file, config.log_level)
    logging.getLogger(__name__).info(
        "Запуск: %d итераций подбора, WebP в подборе: %s",
        config.search_iterations,
        config.webp_target_search,
    )
    app = ImageResizerApp(config)
    app.mainloop()


if __name__ == "__main__":
    main()
