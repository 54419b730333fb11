import ctypes
import logging
import uuid
from typing import Any, Dict, List

from display_service import Display, DisplayService
from errors import ApplyError

logger = logging.getLogger(__name__)

CLSID_DESKTOP_WALLPAPER = uuid.UUID("{C2CF3110-460E-4FC1-B9D0-8A1C0C9CC4BD}")
IID_IDESKTOP_WALLPAPER = uuid.UUID("{B92B56A9-8B55-4E14-9A89-0199BBB6F93B}")
CLSCTX_ALL = 23
COINIT_APARTMENTTHREADED = 0x2

# DESKTOP_WALLPAPER_POSITION
DWPOS_CENTER = 0
DWPOS_TILE = 1
DWPOS_STRETCH = 2
DWPOS_FIT = 3
DWPOS_FILL = 4
DWPOS_SPAN = 5


def desktop_position(scaling_code: int, allow_clipping: bool) -> int:
    if scaling_code == 1:
        return DWPOS_STRETCH
    if scaling_code == 2:
        return DWPOS_CENTER
    if scaling_code == 3:
        # Fill crops to cover the screen, fit letterboxes.
        return DWPOS_FILL if allow_clipping else DWPOS_FIT
    raise ValueError(f"Unknown scaling code {scaling_code}")


def to_colorref(color) -> int:
    r, g, b = (int(round(channel * 255)) for channel in tuple(color)[:3])
    return (b << 16) | (g << 8) | r


class GUID(ctypes.Structure):
    _fields_ = [
        ("Data1", ctypes.c_ulong),
        ("Data2", ctypes.c_ushort),
        ("Data3", ctypes.c_ushort),
        ("Data4", ctypes.c_ubyte * 8),
    ]

    @classmethod
    def from_uuid(cls, value: uuid.UUID) -> "GUID":
        return cls.from_buffer_copy(value.bytes_le)


class RECT(ctypes.Structure):
    _fields_ = [
        ("left", ctypes.c_long),
        ("top", ctypes.c_long),
        ("right", ctypes.c_long),
        ("bottom", ctypes.c_long),
    ]


HRESULT = ctypes.c_long
LPVOID = ctypes.c_void_p
LPWSTR = ctypes.c_wchar_p
UINT = ctypes.c_uint

# Slot order of the IDesktopWallpaper vtable. Only the typed entries are called.
_VTABLE_SLOTS = [
    ("QueryInterface", LPVOID),
    ("AddRef", LPVOID),
    ("Release", ctypes.WINFUNCTYPE(ctypes.c_ulong, LPVOID)),
    ("SetWallpaper", ctypes.WINFUNCTYPE(HRESULT, LPVOID, LPWSTR, LPWSTR)),
    ("GetWallpaper", LPVOID),
    ("GetMonitorDevicePathAt", ctypes.WINFUNCTYPE(HRESULT, LPVOID, UINT, ctypes.POINTER(LPWSTR))),
    ("GetMonitorDevicePathCount", ctypes.WINFUNCTYPE(HRESULT, LPVOID, ctypes.POINTER(UINT))),
    ("GetMonitorRECT", ctypes.WINFUNCTYPE(HRESULT, LPVOID, LPWSTR, ctypes.POINTER(RECT))),
    ("SetBackgroundColor", ctypes.WINFUNCTYPE(HRESULT, LPVOID, ctypes.c_ulong)),
    ("GetBackgroundColor", LPVOID),
    ("SetPosition", ctypes.WINFUNCTYPE(HRESULT, LPVOID, ctypes.c_int)),
] + [(name, LPVOID) for name in (
    "GetPosition", "SetSlideshow", "GetSlideshow", "SetSlideshowOptions",
    "GetSlideshowOptions", "AdvanceSlideshow", "GetStatus", "Enable",
)]


class IDesktopWallpaperVtbl(ctypes.Structure):
    _fields_ = _VTABLE_SLOTS


class IDesktopWallpaper(ctypes.Structure):
    _fields_ = [("lpVtbl", ctypes.POINTER(IDesktopWallpaperVtbl))]


class WindowsDisplayService(DisplayService):
    """
    IDesktopWallpaper adapter.

    Display ids are 1-based positions of the monitors ordered left to right,
    then top to bottom. Handles are monitor device paths. Position and
    background colour are desktop-wide settings on Windows.
    """

    def __init__(self) -> None:
        # OleDLL raises OSError for failing HRESULTs; S_FALSE (already initialized) passes.
        self._ole32 = ctypes.OleDLL("ole32")
        self._ole32.CoInitializeEx(None, COINIT_APARTMENTTHREADED)
        self._ole32.CoTaskMemFree.argtypes = [LPVOID]
        self._ole32.CoTaskMemFree.restype = None

        iface_ptr = LPVOID()
        try:
            self._ole32.CoCreateInstance(
                ctypes.byref(GUID.from_uuid(CLSID_DESKTOP_WALLPAPER)),
                None,
                CLSCTX_ALL,
                ctypes.byref(GUID.from_uuid(IID_IDESKTOP_WALLPAPER)),
                ctypes.byref(iface_ptr),
            )
        except OSError:
            self._ole32.CoUninitialize()
            raise

        self._iface = ctypes.cast(iface_ptr.value, ctypes.POINTER(IDesktopWallpaper))
        self._vtable = self._iface.contents.lpVtbl.contents

    def _check(self, hr: int) -> None:
        if hr != 0:
            raise ctypes.WinError(hr)

    def enumerate_displays(self) -> List[Display]:
        count = UINT()
        self._check(self._vtable.GetMonitorDevicePathCount(self._iface, ctypes.byref(count)))

        monitors = []
        for index in range(count.value):
            path_ptr = LPWSTR()
            self._check(self._vtable.GetMonitorDevicePathAt(self._iface, index, ctypes.byref(path_ptr)))
            monitor_path = path_ptr.value

            rect = RECT()
            hr = self._vtable.GetMonitorRECT(self._iface, path_ptr, ctypes.byref(rect))
            self._ole32.CoTaskMemFree(ctypes.cast(path_ptr, LPVOID))
            # Detached monitors keep a device path but report no rectangle.
            if hr != 0 or not monitor_path:
                continue
            monitors.append((rect.left, rect.top, monitor_path))

        monitors.sort(key=lambda item: (item[0], item[1]))
        return [Display(index + 1, path) for index, (_, _, path) in enumerate(monitors)]

    def set_desktop_image(self, handle: Any, image_path: str, options: Dict[str, Any]) -> None:
        position = desktop_position(options["scaling_code"], options["allow_clipping"])
        try:
            self._check(self._vtable.SetBackgroundColor(self._iface, to_colorref(options["fill_color"])))
            self._check(self._vtable.SetPosition(self._iface, position))
            self._check(self._vtable.SetWallpaper(self._iface, handle, image_path))
        except OSError as error:
            raise ApplyError(f"IDesktopWallpaper rejected {image_path}", reason=error) from error

    def close(self) -> None:
        if self._iface:
            self._vtable.Release(self._iface)
            self._iface = None
            self._ole32.CoUninitialize()
