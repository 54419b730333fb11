"""
macOS display adapter
Talks to AppKit through the Objective-C runtime with ctypes.
"""

import ctypes
import ctypes.util
import logging
from typing import Any, Dict, List

from display_service import Display, DisplayService
from errors import ApplyError, DisplayError

logger = logging.getLogger(__name__)

c_id = ctypes.c_void_p


def _load(name: str) -> ctypes.CDLL:
    path = ctypes.util.find_library(name)
    if not path:
        raise DisplayError(f"Unable to locate the {name} framework")
    return ctypes.cdll.LoadLibrary(path)


class _ObjC:
    def __init__(self) -> None:
        self.runtime = _load("objc")
        # Registers NSScreen, NSWorkspace and NSColor with the runtime.
        _load("AppKit")
        self.runtime.objc_getClass.restype = c_id
        self.runtime.objc_getClass.argtypes = [ctypes.c_char_p]
        self.runtime.sel_registerName.restype = c_id
        self.runtime.sel_registerName.argtypes = [ctypes.c_char_p]
        self._msg_send = ctypes.cast(self.runtime.objc_msgSend, ctypes.c_void_p).value

    def cls(self, name: str) -> int:
        return self.runtime.objc_getClass(name.encode("ascii"))

    def send(self, receiver, selector: str, *args, restype=c_id, argtypes=()):
        prototype = ctypes.CFUNCTYPE(restype, c_id, c_id, *argtypes)
        function = prototype(self._msg_send)
        return function(receiver, self.runtime.sel_registerName(selector.encode("ascii")), *args)

    def string(self, value: str) -> int:
        return self.send(
            self.cls("NSString"), "stringWithUTF8String:", value.encode("utf-8"),
            argtypes=[ctypes.c_char_p],
        )

    def to_text(self, nsstring) -> str:
        if not nsstring:
            return ""
        raw = self.send(nsstring, "UTF8String", restype=ctypes.c_char_p)
        return raw.decode("utf-8") if raw else ""


class MacDisplayService(DisplayService):
    """NSWorkspace adapter; display ids are NSScreenNumber values, handles are NSScreen pointers."""

    def __init__(self) -> None:
        self._objc = _ObjC()

    def enumerate_displays(self) -> List[Display]:
        objc = self._objc
        screens = objc.send(objc.cls("NSScreen"), "screens")
        if not screens:
            return []
        count = objc.send(screens, "count", restype=ctypes.c_ulong)
        key = objc.string("NSScreenNumber")

        displays = []
        for index in range(count):
            screen = objc.send(screens, "objectAtIndex:", index, argtypes=[ctypes.c_ulong])
            description = objc.send(screen, "deviceDescription")
            number = objc.send(description, "objectForKey:", key, argtypes=[c_id])
            if not number:
                continue
            screen_id = objc.send(number, "unsignedIntValue", restype=ctypes.c_uint)
            displays.append(Display(int(screen_id), screen))
        return displays

    def set_desktop_image(self, handle: Any, image_path: str, options: Dict[str, Any]) -> None:
        objc = self._objc
        pool = objc.send(objc.send(objc.cls("NSAutoreleasePool"), "alloc"), "init")
        try:
            url = objc.send(objc.cls("NSURL"), "fileURLWithPath:", objc.string(image_path), argtypes=[c_id])
            r, g, b, a = options["fill_color"]
            color = objc.send(
                objc.cls("NSColor"), "colorWithSRGBRed:green:blue:alpha:", r, g, b, a,
                argtypes=[ctypes.c_double] * 4,
            )
            scaling = objc.send(
                objc.cls("NSNumber"), "numberWithInteger:", options["scaling_code"],
                argtypes=[ctypes.c_long],
            )
            clipping = objc.send(
                objc.cls("NSNumber"), "numberWithBool:", bool(options["allow_clipping"]),
                argtypes=[ctypes.c_bool],
            )

            keys = (c_id * 3)(
                objc.string("NSWorkspaceDesktopImageScalingKey"),
                objc.string("NSWorkspaceDesktopImageAllowClippingKey"),
                objc.string("NSWorkspaceDesktopImageFillColorKey"),
            )
            values = (c_id * 3)(scaling, clipping, color)
            bundle = objc.send(
                objc.cls("NSDictionary"), "dictionaryWithObjects:forKeys:count:", values, keys, 3,
                argtypes=[ctypes.POINTER(c_id), ctypes.POINTER(c_id), ctypes.c_ulong],
            )

            error = c_id()
            workspace = objc.send(objc.cls("NSWorkspace"), "sharedWorkspace")
            accepted = objc.send(
                workspace, "setDesktopImageURL:forScreen:options:error:", url, handle, bundle,
                ctypes.byref(error),
                restype=ctypes.c_bool,
                argtypes=[c_id, c_id, c_id, ctypes.POINTER(c_id)],
            )
            if not accepted:
                reason = "unknown error"
                if error.value:
                    reason = objc.to_text(objc.send(error.value, "localizedDescription")) or reason
                raise ApplyError(f"NSWorkspace rejected {image_path}: {reason}")
        finally:
            objc.send(pool, "drain", restype=None)
