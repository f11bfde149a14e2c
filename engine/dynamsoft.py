"""
Dynamsoft Capture Vision engine: frames go into an ImageSourceAdapter queue, the
CaptureVisionRouter decodes them on its own threads and calls back with barcode results.
"""

from __future__ import annotations

import logging
from typing import Any

from dynamsoft_barcode_reader_bundle import (
    CaptureVisionRouter,
    CapturedResultReceiver,
    EnumBufferOverflowProtectionMode,
    EnumCapturedResultItemType,
    EnumColourChannelUsageType,
    EnumErrorCode,
    EnumImagePixelFormat,
    EnumPresetTemplate,
    FileImageTag,
    ImageData,
    ImageSourceAdapter,
    LicenseManager,
    MultiFrameResultCrossFilter,
)

from core.exceptions import CaptureStartError, EngineConfigurationError, LicenseInitError
from core.models import DecodedItem, DecodeResult, Frame, PixelFormat
from engine.base import CaptureEngineBase

logger = logging.getLogger(__name__)

_PIXEL_FORMATS = {
    PixelFormat.GRAYSCALED: EnumImagePixelFormat.IPF_GRAYSCALED,
    PixelFormat.RGB_888: EnumImagePixelFormat.IPF_RGB_888,
    PixelFormat.ARGB_8888: EnumImagePixelFormat.IPF_ARGB_8888,
}

_LICENSE_OK = (EnumErrorCode.EC_OK, EnumErrorCode.EC_LICENSE_WARNING)


def _check(ret: Any, what: str) -> None:
    """SDK calls return None, an error code, or (code, message)."""
    if ret is None:
        return
    if isinstance(ret, tuple):
        code, message = ret[0], ret[1] if len(ret) > 1 else ""
    else:
        code, message = ret, ""
    if code != EnumErrorCode.EC_OK:
        raise EngineConfigurationError(code, f"{what} failed: {message or code}")


def decode_result_from_sdk(result: Any) -> DecodeResult:
    """Convert a DecodedBarcodesResult into a DecodeResult."""
    error_code = result.get_error_code()
    tag = result.get_original_image_tag()
    items = result.get_items() or []
    return DecodeResult(
        sequence_id=tag.get_image_id() if tag is not None else None,
        items=[DecodedItem(format=item.get_format_string(), text=item.get_text()) for item in items],
        error_code=error_code,
        error_message=result.get_error_string() or "",
        is_warning=error_code == EnumErrorCode.EC_UNSUPPORTED_JSON_KEY_WARNING,
    )


class _FrameFetcher(ImageSourceAdapter):
    """Input queue fed by the acquisition loop; never runs dry on its own."""

    def has_next_image_to_fetch(self) -> bool:
        return True


class _BarcodeReceiver(CapturedResultReceiver):
    def __init__(self, engine: DynamsoftEngine) -> None:
        super().__init__()
        self._engine = engine

    def on_decoded_barcodes_received(self, result: Any) -> None:
        self._engine._dispatch(decode_result_from_sdk(result))


class DynamsoftEngine(CaptureEngineBase):
    engine_id = "dynamsoft"
    display_name = "Dynamsoft Capture Vision"

    def __init__(self) -> None:
        super().__init__()
        self._router: CaptureVisionRouter | None = None
        self._fetcher: _FrameFetcher | None = None
        self._filter: MultiFrameResultCrossFilter | None = None
        self._receiver: _BarcodeReceiver | None = None
        self._template = EnumPresetTemplate.PT_READ_BARCODES
        self._capturing = False

    @staticmethod
    def default_settings() -> dict[str, Any]:
        return {
            "template": "",
            "duplicate_forget_time_ms": 5000,
            "max_image_count": 100,
        }

    def init_license(self, license_key: str) -> None:
        error_code, error_message = LicenseManager.init_license(license_key)
        if error_code not in _LICENSE_OK:
            raise LicenseInitError(error_code, error_message)
        if error_code != EnumErrorCode.EC_OK:
            logger.warning("License warning %s: %s", error_code, error_message)

    def init(self, settings: dict[str, Any]) -> None:
        merged = {**self.default_settings(), **settings}
        self._template = merged["template"] or EnumPresetTemplate.PT_READ_BARCODES
        router = CaptureVisionRouter()

        fetcher = _FrameFetcher()
        fetcher.set_max_image_count(int(merged["max_image_count"]))
        fetcher.set_buffer_overflow_protection_mode(EnumBufferOverflowProtectionMode.BOPM_UPDATE)
        fetcher.set_colour_channel_usage_type(EnumColourChannelUsageType.CCUT_AUTO)
        _check(router.set_input(fetcher), "Setting the input adapter")

        cross_filter = MultiFrameResultCrossFilter()
        barcode = EnumCapturedResultItemType.CRIT_BARCODE
        cross_filter.enable_result_cross_verification(barcode, True)
        cross_filter.enable_result_deduplication(barcode, True)
        cross_filter.set_duplicate_forget_time(barcode, int(merged["duplicate_forget_time_ms"]))
        _check(router.add_result_filter(cross_filter), "Adding the result filter")

        receiver = _BarcodeReceiver(self)
        _check(router.add_result_receiver(receiver), "Adding the result receiver")

        self._router = router
        self._fetcher = fetcher
        self._filter = cross_filter
        self._receiver = receiver
        logger.info(
            "Engine configured (queue %d, forget time %d ms)",
            merged["max_image_count"],
            merged["duplicate_forget_time_ms"],
        )

    def start(self) -> None:
        if self._router is None:
            raise CaptureStartError(-1, "Engine is not initialized.")
        error_code, error_message = self._router.start_capturing(self._template, False)
        if error_code != EnumErrorCode.EC_OK:
            raise CaptureStartError(error_code, error_message)
        self._capturing = True
        logger.info("Capturing started with template %r", self._template)

    def submit(self, frame: Frame) -> None:
        if self._fetcher is None:
            raise RuntimeError("Engine is not initialized.")
        tag = FileImageTag("", 0, 0)
        tag.set_image_id(frame.sequence_id)
        image = ImageData(
            frame.data,
            frame.width,
            frame.height,
            frame.stride,
            _PIXEL_FORMATS[frame.pixel_format],
            0,
            tag,
        )
        self._fetcher.add_image_to_buffer(image)

    def stop(self) -> None:
        if not self._capturing or self._router is None:
            return
        self._capturing = False
        self._router.stop_capturing()
        logger.info("Capturing stopped")


Engine = DynamsoftEngine
