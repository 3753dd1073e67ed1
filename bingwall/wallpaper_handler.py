"""
Desktop Wallpaper Handler

This module hands the downloaded image to the operating system as the desktop background.
There is one OS call per platform and no attempt to abstract over desktop environments:

- Linux (GNOME): the gsettings CLI, schema org.gnome.desktop.background
- macOS: osascript asking System Events to update every desktop
- Windows: SystemParametersInfoW from user32

Settings for GNOME desktop backgrounds are defined under the schema org.gnome.desktop.background.
More information on this schema can be found at:
https://github.com/GNOME/gsettings-desktop-schemas/blob/master/schemas/org.gnome.desktop.background.gschema.xml.in

Setting the image is fatal on failure. Setting the display mode (crop to fill the screen) is
cosmetic: update_wallpaper reports a failure there as a warning and carries on.
"""

import subprocess
import sys
from collections import OrderedDict
from pathlib import Path
from typing import Optional

from bingwall.cli_utils.console import warn
from bingwall.image_handler import InvalidImageError, validate_image

SPI_SETDESKWALLPAPER = 20
SPIF_UPDATEINIFILE_SENDCHANGE = 3

# display mode name -> (GNOME picture-options, Windows WallpaperStyle)
DISPLAY_MODES = {
    "crop": ("zoom", "10"),
    "fit": ("scaled", "6"),
    "stretch": ("stretched", "2"),
    "center": ("centered", "0"),
}


class WallpaperSetFailed(Exception):
    """
    Raised when an attempt to update the desktop background fails.
    """

    pass


class PathEncodingFailed(Exception):
    """
    Raised when an image path cannot be handed to the OS as text.
    """

    pass


class WallpaperModeError(Exception):
    """
    Raised when the wallpaper display mode cannot be set. Not fatal to a run.
    """

    pass


def _platform_family(platform: Optional[str] = None) -> str:
    platform = platform or sys.platform

    if platform.startswith("win"):
        return "windows"
    if platform == "darwin":
        return "macos"
    return "gnome"


def _run(command: OrderedDict, error_type: type, action: str) -> None:
    """
    Run an OS command assembled from an ordered dict of its arguments.

    subprocess.CalledProcessError is raised by the run method call if a non-zero exit status is returned,
    and FileNotFoundError if the command itself is not installed. Both become error_type.
    """

    try:
        subprocess.run(
            list(command.values()),
            check=True,
            stdin=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            stdout=subprocess.PIPE,
        )

    except (subprocess.CalledProcessError, OSError) as error:
        raise error_type(f"Could not {action}: {error}")


def _set_gnome(wallpaper_location: Path) -> None:
    uri = wallpaper_location.as_uri()

    # picture-uri-dark is used instead of picture-uri when GNOME is in dark style
    for key in ("picture-uri", "picture-uri-dark"):
        set_desktop_background = OrderedDict(
            [
                ("cmd", "gsettings"),
                ("subcmd", "set"),
                ("schema", "org.gnome.desktop.background"),
                ("key", key),
                ("value", uri),
            ]
        )
        try:
            _run(set_desktop_background, WallpaperSetFailed, "set desktop background")
        except WallpaperSetFailed:
            # older GNOME releases do not have the dark variant
            if key == "picture-uri":
                raise


def _set_macos(wallpaper_location: Path) -> None:
    # backslashes and double quotes would end the AppleScript string literal early
    quoted = str(wallpaper_location).replace("\\", "\\\\").replace('"', '\\"')
    script = (
        'tell application "System Events" to tell every desktop '
        f'to set picture to "{quoted}"'
    )
    set_desktop_background = OrderedDict([("cmd", "osascript"), ("flag", "-e"), ("script", script)])
    _run(set_desktop_background, WallpaperSetFailed, "set desktop background")


def _set_windows(wallpaper_location: Path) -> None:
    import ctypes

    ok = ctypes.windll.user32.SystemParametersInfoW(
        SPI_SETDESKWALLPAPER, 0, str(wallpaper_location), SPIF_UPDATEINIFILE_SENDCHANGE
    )
    if not ok:
        raise WallpaperSetFailed(
            f"Could not set desktop background: SystemParametersInfoW returned {ok}"
        )


def set_display_mode(img_path: Path, mode: str = "crop", platform: Optional[str] = None) -> None:
    """
    Set how the wallpaper is fitted to the screen. "crop" scales the image to fill the screen,
    cropping whatever overflows. Raise WallpaperModeError on failure or if the mode is not
    supported on this platform.
    """

    if mode not in DISPLAY_MODES:
        raise WallpaperModeError(f"Unknown display mode '{mode}'.")

    gnome_option, windows_style = DISPLAY_MODES[mode]
    family = _platform_family(platform)

    if family == "gnome":
        set_picture_options = OrderedDict(
            [
                ("cmd", "gsettings"),
                ("subcmd", "set"),
                ("schema", "org.gnome.desktop.background"),
                ("key", "picture-options"),
                ("value", gnome_option),
            ]
        )
        _run(set_picture_options, WallpaperModeError, "set wallpaper display mode")

    elif family == "windows":
        import winreg

        try:
            with winreg.OpenKey(
                winreg.HKEY_CURRENT_USER, r"Control Panel\Desktop", 0, winreg.KEY_SET_VALUE
            ) as key:
                winreg.SetValueEx(key, "WallpaperStyle", 0, winreg.REG_SZ, windows_style)
                winreg.SetValueEx(key, "TileWallpaper", 0, winreg.REG_SZ, "0")
        except OSError as error:
            raise WallpaperModeError(f"Could not set wallpaper display mode: {error}")

        # the registry style is only picked up when the wallpaper is applied again
        try:
            _set_windows(Path(img_path))
        except WallpaperSetFailed as error:
            raise WallpaperModeError(str(error))

    else:
        raise WallpaperModeError(f"Setting the display mode is not supported on {family}.")


def update_wallpaper(img_path: Path, mode: str = "crop", platform: Optional[str] = None) -> Path:
    """
    Update the background image to the one at img_path and fit it to the screen using mode.
    Raise WallpaperSetFailed if the image is missing or invalid or the OS refuses it, and
    PathEncodingFailed if the path cannot be passed to the OS as text.

    Returns the absolute path that was applied.
    """

    # make sure to use the absolute path so resource is locatable when accessed by the desktop
    wallpaper_location = Path(img_path).expanduser().resolve()

    # subsequent operations will fail if path does not exist or is not a file, so catch this.
    if not wallpaper_location.is_file():
        raise WallpaperSetFailed(
            f"Invalid path provided for image location: {img_path} does not exist."
        )

    try:
        validate_image(wallpaper_location)
    except InvalidImageError:
        raise WallpaperSetFailed(
            f"Invalid image type provided. {wallpaper_location.name} is not a valid image."
        )

    # undecodable bytes in a path survive in str() as lone surrogates, which no OS api accepts
    try:
        str(wallpaper_location).encode("utf-8")
    except UnicodeEncodeError:
        raise PathEncodingFailed(
            f"Image path {wallpaper_location!r} cannot be converted to text."
        )

    family = _platform_family(platform)
    if family == "windows":
        _set_windows(wallpaper_location)
    elif family == "macos":
        _set_macos(wallpaper_location)
    else:
        _set_gnome(wallpaper_location)

    try:
        set_display_mode(wallpaper_location, mode=mode, platform=platform)
    except WallpaperModeError as error:
        warn(str(error))

    return wallpaper_location
