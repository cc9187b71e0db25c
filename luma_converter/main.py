"""Точка входа в приложение."""
import logging

from luma_converter.app import LumaConverterApp
from luma_converter.config import Settings


def main() -> None:
    """Читает настройки, настраивает логирование и запускает главное окно."""
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = LumaConverterApp(settings)
    app.mainloop()


if __name__ == "__main__":
    main()
