"""
bingwall Configuration

This module defines BingwallConfig, the set of values that the daily wallpaper run depends on:
where the cache directory lives, how many images are retained, how dated files are named and
where the image of the day is fetched from.

There is no configuration file and nothing is read from the environment. A BingwallConfig is
created with its defaults by the CLI and passed explicitly into the functions that need it, so
tests can override any value (e.g. PICTURES_DIR=tmp_path) without touching the filesystem
or the user's environment.
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional


class BingwallConfigError(Exception):
    """Raise when an issue occurs with handling bingwall configuration."""

    pass


@dataclass
class BingwallConfig:
    """
    Dataclass to represent configuration variables for bingwall. Provides a namespace and
    identifiers for the cache directory, retention count and the remote image service so
    application code never references brittle literals directly.
    """

    WALLPAPER_DIR_NAME: str = "BingWallpapers"
    PICTURES_DIR: Optional[Path] = None  # None means ask the OS
    KEEP_COUNT: int = 7

    DATE_FORMAT: str = "%Y-%m-%d"
    FILE_PREFIX: str = "bing_"
    FILE_SUFFIX: str = ".jpg"

    BING_HOST: str = "https://www.bing.com"
    MARKET: str = "zh-CN"
    IMAGE_SUFFIX: str = "_UHD.jpg"

    DISPLAY_MODE: str = "crop"

    def __post_init__(self):
        """
        Coerce values that may be supplied as plain strings and reject values that would
        make the retention policy meaningless.
        """

        if self.PICTURES_DIR is not None:
            self.PICTURES_DIR = Path(self.PICTURES_DIR).expanduser()

        if self.KEEP_COUNT < 0:
            raise BingwallConfigError(
                f"KEEP_COUNT must be zero or greater, got {self.KEEP_COUNT}."
            )

    def date_key(self, today: Optional[date] = None) -> str:
        """Return the calendar-day string used to name today's image."""

        if today is None:
            today = date.today()

        return today.strftime(self.DATE_FORMAT)
