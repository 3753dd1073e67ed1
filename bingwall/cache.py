"""
Wallpaper Cache

This module owns the local directory of downloaded wallpapers: where it lives, how the image
for a given day is named, and how older images are pruned so that only the most recent ones
are kept on disk.

The cache directory is "BingWallpapers" inside the user's pictures directory as reported by
the OS (via platformdirs), falling back to the user's home directory. One file is stored per
calendar day, named bing_<YYYY-MM-DD>.jpg, and the presence of that file is what tells the
rest of bingwall that today's image has already been downloaded.
"""

import os
from pathlib import Path
from typing import Optional

import platformdirs

from bingwall.cli_utils.console import warn

# files whose metadata cannot be read sort after every real timestamp
EARLIEST_MTIME = float("-inf")


class DirectoryUnavailable(Exception):
    """
    Raised when neither a pictures directory nor a home directory can be determined.
    """

    pass


class DirectoryCreateFailed(Exception):
    """
    Raised when the cache directory cannot be created (permissions, disk full, or a
    file already sitting at that path).
    """

    pass


def pictures_dir() -> Path:
    """
    Return the user's pictures directory, or the home directory if the OS does not
    report one or the one it reports does not exist. Raise DirectoryUnavailable if neither
    can be determined.
    """

    try:
        location = platformdirs.user_pictures_dir()
    except (KeyError, OSError, RuntimeError):
        location = None

    # an unexpanded "~" means the home directory itself could not be found, and a
    # pictures directory that does not exist yet is not created on the user's behalf
    if location and not location.startswith("~") and Path(location).is_dir():
        return Path(location)

    try:
        return Path.home()
    except (KeyError, RuntimeError) as error:
        raise DirectoryUnavailable(
            f"Could not determine a pictures or home directory for this user: {error}"
        )


def resolve_cache_dir(
    dir_name: str = "BingWallpapers", base_dir: Optional[Path] = None
) -> Path:
    """
    Return the cache directory, creating it (and any missing parents) if it does not already
    exist. base_dir overrides the pictures directory lookup.

    Raise DirectoryCreateFailed if the directory cannot be created.
    """

    if base_dir is None:
        base_dir = pictures_dir()

    cache_dir = Path(base_dir).expanduser() / dir_name

    try:
        cache_dir.mkdir(parents=True, exist_ok=True)

    # FileExistsError is raised when a regular file is in the way, even with exist_ok
    except OSError as error:
        raise DirectoryCreateFailed(
            f"Error trying to create wallpaper directory {cache_dir}: {error}"
        )

    return cache_dir


def dated_image_path(
    cache_dir: Path, date_key: str, prefix: str = "bing_", suffix: str = ".jpg"
) -> Path:
    """Return the path of the image stored for date_key, e.g. bing_2023-10-27.jpg"""

    return Path(cache_dir) / f"{prefix}{date_key}{suffix}"


def _modified_time(file: Path) -> float:
    try:
        return os.path.getmtime(file)
    except OSError:
        return EARLIEST_MTIME


def prune(cache_dir: Path, keep_count: int) -> list[Path]:
    """
    Delete all but the keep_count most recently modified files directly inside cache_dir and
    return the paths that were removed.

    This is housekeeping and must never fail the run: a file that cannot be deleted is reported
    with a warning and skipped, and a directory that cannot be listed prunes nothing.
    Subdirectories are ignored.
    """

    if keep_count < 0:
        raise ValueError(f"keep_count must be zero or greater, got {keep_count}")

    try:
        files = [entry for entry in Path(cache_dir).iterdir() if entry.is_file()]
    except OSError as error:
        warn(f"could not read {cache_dir} for cleanup: {error}")
        return []

    # sorted() is stable, so ties keep directory listing order
    files = sorted(files, key=_modified_time, reverse=True)

    removed = []
    for file in files[keep_count:]:
        try:
            file.unlink()
        except OSError as error:
            warn(f"could not remove old wallpaper '{file.name}': {error}")
        else:
            removed.append(file)

    return removed
