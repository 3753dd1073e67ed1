"""
bingwall - set the desktop background to the Bing image of the day

bingwall downloads today's featured Bing image into a local folder (once per day), sets it as
the desktop wallpaper and removes older images so that only the most recent few are kept.

This module runs the daily flow from start to finish. Each step is a straight call into the
module that owns it:

1) resolve (and create) the cache directory
2) look up today's image url
3) download today's image unless it is already cached
4) set it as the desktop background
5) prune old images beyond the retention count
"""

from datetime import date
from pathlib import Path
from typing import Callable, Optional

from bingwall import bing_handler
from bingwall import cache
from bingwall import image_handler
from bingwall import wallpaper_handler
from bingwall.config import BingwallConfig
from bingwall.cli_utils.console import confirm_success, describe


def run(
    config: Optional[BingwallConfig] = None,
    fetch: image_handler.Fetcher = image_handler.fetch_bytes,
    today: Optional[date] = None,
    apply: Callable[..., Path] = wallpaper_handler.update_wallpaper,
) -> Path:
    """
    Fetch, cache and apply today's image, then prune the cache. Returns the path of the image
    that was applied. Every error except those raised while pruning is fatal and propagates.
    """

    if config is None:
        config = BingwallConfig()

    cache_dir = cache.resolve_cache_dir(config.WALLPAPER_DIR_NAME, config.PICTURES_DIR)

    describe(f":earth_asia-emoji: 'bingwall' looking up the image of the day ...")
    remote_url = bing_handler.latest_image_url(
        fetch=fetch,
        host=config.BING_HOST,
        market=config.MARKET,
        suffix=config.IMAGE_SUFFIX,
    )

    wallpaper, downloaded = image_handler.fetch_today_image(
        cache_dir,
        config.date_key(today),
        remote_url,
        fetch=fetch,
        prefix=config.FILE_PREFIX,
        suffix=config.FILE_SUFFIX,
    )
    if downloaded:
        confirm_success(
            f":floppy_disk-emoji: saved '{wallpaper.name}' from {remote_url} to {cache_dir}"
        )
    else:
        describe(f"'{wallpaper.name}' is already in {cache_dir}, skipping download")

    apply(wallpaper, mode=config.DISPLAY_MODE)
    confirm_success(f":white_check_mark-emoji: desktop wallpaper updated to {wallpaper}")

    removed = cache.prune(cache_dir, config.KEEP_COUNT)
    if removed:
        describe(f"removed {len(removed)} old wallpaper(s) from {cache_dir}")

    return wallpaper
