from concurrent.futures import Future

import pytest

pytest.importorskip("tkinter")
pytest.importorskip("customtkinter")

from luma_converter.controllers import app_controller  # noqa: E402
from luma_converter.controllers.app_controller import AppController  # noqa: E402
from luma_converter.models.errors import ShapeMismatchError  # noqa: E402
from luma_converter.models.image_model import PixelBuffer  # noqa: E402
from luma_converter.services.conversion_service import ConversionResult  # noqa: E402
from luma_converter.services.image_service import ImageService  # noqa: E402


class FakeWindow:
    def __init__(self) -> None:
        self.scheduled = []

    def after(self, ms, callback):
        self.scheduled.append((ms, callback))


class FakeViewer:
    def __init__(self) -> None:
        self.image = None
        self.processed = None

    def set_image(self, image) -> None:
        self.image = image
        self.processed = None

    def set_processed_image(self, image) -> None:
        self.processed = image


class FakeSidebar:
    def __init__(self) -> None:
        self.busy_calls = []
        self.convert_enabled = False
        self.save_enabled = False
        self.status = ""
        self.info = None

    def set_image_info(self, image) -> None:
        self.info = image

    def set_convert_enabled(self, enabled: bool) -> None:
        self.convert_enabled = enabled

    def set_save_enabled(self, enabled: bool) -> None:
        self.save_enabled = enabled

    def set_status(self, text: str) -> None:
        self.status = text

    def set_busy(self, busy: bool) -> None:
        self.busy_calls.append(busy)
        if busy:
            self.convert_enabled = False
            self.save_enabled = False


class StubConversion:
    def __init__(self) -> None:
        self.future = Future()
        self.submitted = []

    def submit(self, source) -> Future:
        self.submitted.append(source)
        return self.future


@pytest.fixture
def errors(monkeypatch):
    shown = []
    monkeypatch.setattr(app_controller.messagebox, "showerror", lambda *args, **kwargs: shown.append(args))
    return shown


@pytest.fixture
def image_path(tmp_path, sample_png):
    path = tmp_path / "photo.png"
    path.write_bytes(sample_png)
    return path


@pytest.fixture
def make_controller(monkeypatch, image_path):
    monkeypatch.setattr(app_controller.filedialog, "askopenfilename", lambda **kwargs: str(image_path))

    def factory(min_busy_ms: int = 0) -> AppController:
        controller = AppController(
            viewer=FakeViewer(),
            sidebar=FakeSidebar(),
            window=FakeWindow(),
            conversion_service=StubConversion(),
            min_busy_ms=min_busy_ms,
        )
        controller.bind_events()
        controller._handle_open_file()
        return controller

    return factory


def _gray_result(filename: str = "grayscale.png") -> ConversionResult:
    buffer = PixelBuffer(width=1, height=1, data=bytes([76, 76, 76, 255]))
    return ConversionResult(buffer=buffer, png_bytes=ImageService().encode(buffer), filename=filename)


def test_busy_state_held_for_minimum_duration(make_controller):
    controller = make_controller(min_busy_ms=60_000)
    controller.conversion_service.future.set_result(_gray_result())

    controller._handle_convert()
    controller._poll_conversion()

    assert len(controller.window.scheduled) == 2
    assert controller.sidebar.busy_calls == [True]
    assert controller._pending is not None
    assert controller._result is None


def test_second_convert_while_pending_is_ignored(make_controller):
    controller = make_controller()

    controller._handle_convert()
    controller._handle_convert()

    assert len(controller.conversion_service.submitted) == 1
    assert not controller.sidebar.convert_enabled


def test_conversion_error_leaves_ui_retryable(make_controller, errors):
    controller = make_controller()
    controller.conversion_service.future.set_exception(ShapeMismatchError(expected=8, actual=7))

    controller._handle_convert()
    controller._poll_conversion()

    assert controller.sidebar.busy_calls == [True, False]
    assert controller.sidebar.convert_enabled
    assert not controller.sidebar.save_enabled
    assert controller.viewer.processed is None
    assert controller._result is None
    assert controller._pending is None
    assert len(errors) == 1


def test_unexpected_error_resets_status(make_controller, errors):
    controller = make_controller()
    controller.conversion_service.future.set_exception(MemoryError("out of memory"))

    controller._handle_convert()
    controller._poll_conversion()

    assert controller.sidebar.status == "Ошибка конвертации"
    assert controller.sidebar.convert_enabled
    assert not controller.sidebar.save_enabled
    assert len(errors) == 1


def test_opening_new_image_clears_previous_result(make_controller):
    controller = make_controller()
    controller.conversion_service.future.set_result(_gray_result())
    controller._handle_convert()
    controller._poll_conversion()
    assert controller._result is not None
    assert controller.sidebar.save_enabled
    assert controller.viewer.processed is not None

    controller._handle_open_file()

    assert controller._result is None
    assert not controller.sidebar.save_enabled
    assert controller.viewer.processed is None
    assert controller.sidebar.convert_enabled


def test_save_into_directory_uses_result_filename(make_controller, monkeypatch, tmp_path):
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    monkeypatch.setattr(app_controller.filedialog, "asksaveasfilename", lambda **kwargs: str(out_dir))
    controller = make_controller()
    controller.conversion_service.future.set_result(_gray_result(filename="gray.png"))
    controller._handle_convert()
    controller._poll_conversion()

    controller._handle_save()

    assert (out_dir / "gray.png").read_bytes().startswith(b"\x89PNG")
    assert controller.sidebar.status == "Сохранено: gray.png"
