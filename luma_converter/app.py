import customtkinter as ctk

from luma_converter.config import Settings
from luma_converter.controllers.app_controller import AppController
from luma_converter.services.bridge_service import ExecutionBridge
from luma_converter.services.conversion_service import ConversionService
from luma_converter.services.engine import create_engine
from luma_converter.ui.image_viewer import ImageViewer
from luma_converter.ui.sidebar import Sidebar


class LumaConverterApp(ctk.CTk):
    def __init__(self, settings: Settings) -> None:
        super().__init__()
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")

        self.title("Luma Converter")
        self.minsize(900, 600)

        # root layout: left viewer, right sidebar
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        self._viewer = ImageViewer(self)
        self._viewer.grid(row=0, column=0, sticky="nsew", padx=(12, 6), pady=12)

        self._sidebar = Sidebar(self)
        self._sidebar.grid(row=0, column=1, sticky="ns", padx=(6, 12), pady=12)

        bridge = ExecutionBridge(create_engine(settings.engine), owns_engine=True)
        self._conversion = ConversionService(bridge, output_name=settings.output_name)

        self._controller = AppController(
            viewer=self._viewer,
            sidebar=self._sidebar,
            window=self,
            conversion_service=self._conversion,
            min_busy_ms=settings.min_busy_ms,
        )
        self._controller.bind_events()

        self.protocol("WM_DELETE_WINDOW", self._on_close)

    def _on_close(self) -> None:
        self._conversion.close()
        self.destroy()
