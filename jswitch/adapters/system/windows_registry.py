"""
Windows registry store — the machine-wide environment on Windows.

System environment variables live under
HKLM\\SYSTEM\\CurrentControlSet\\Control\\Session Manager\\Environment.
Writing there needs an elevated process. After a write, Explorer and
other top-level windows are told with WM_SETTINGCHANGE("Environment");
only processes started afterwards see the new values.
"""

from __future__ import annotations

import logging
import platform

from jswitch.adapters.base import EnvironmentStore

logger = logging.getLogger(__name__)

ENVIRONMENT_SUBKEY = r"SYSTEM\CurrentControlSet\Control\Session Manager\Environment"

HWND_BROADCAST = 0xFFFF
WM_SETTINGCHANGE = 0x001A
SMTO_ABORTIFHUNG = 0x0002
BROADCAST_TIMEOUT_MS = 5000


def _require_windows() -> None:
    if platform.system() != "Windows":
        raise OSError("The Windows registry store is only available on Windows")


class WindowsRegistryStore(EnvironmentStore):
    """HKLM environment key, read and written through ``winreg``."""

    search_path_key = "Path"
    separator = ";"

    @property
    def name(self) -> str:
        return "registry"

    def is_available(self) -> bool:
        return platform.system() == "Windows"

    def _open(self, access: int):
        import winreg

        return winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, ENVIRONMENT_SUBKEY, 0, access)

    def get(self, key: str) -> str | None:
        _require_windows()
        import winreg

        with self._open(winreg.KEY_READ) as handle:
            try:
                value, _value_type = winreg.QueryValueEx(handle, key)
            except FileNotFoundError:
                return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        _require_windows()
        import winreg

        # REG_EXPAND_SZ keeps %VAR% references in Path working
        with self._open(winreg.KEY_SET_VALUE) as handle:
            winreg.SetValueEx(handle, key, 0, winreg.REG_EXPAND_SZ, value)
        logger.debug("HKLM environment: %s updated", key)

    def broadcast(self) -> None:
        _require_windows()
        import ctypes
        from ctypes import wintypes

        send = ctypes.windll.user32.SendMessageTimeoutW
        send.argtypes = [
            wintypes.HWND,
            wintypes.UINT,
            wintypes.WPARAM,
            wintypes.LPCWSTR,
            wintypes.UINT,
            wintypes.UINT,
            ctypes.POINTER(wintypes.DWORD),
        ]
        result = wintypes.DWORD()
        ok = send(
            HWND_BROADCAST,
            WM_SETTINGCHANGE,
            0,
            "Environment",
            SMTO_ABORTIFHUNG,
            BROADCAST_TIMEOUT_MS,
            ctypes.byref(result),
        )
        if not ok:
            raise OSError(f"WM_SETTINGCHANGE broadcast failed (error {ctypes.GetLastError()})")
        logger.debug("Broadcast WM_SETTINGCHANGE(Environment)")
