"""
bingwall CLI

This module contains the bingwall command line entry point. There is deliberately nothing to
configure: running the command performs the whole daily update once. Schedule it with the OS
task scheduler (cron, a systemd timer, Task Scheduler) to refresh the wallpaper every day.
"""

import click

from bingwall import bingwall
from bingwall.cli_utils.console import set_quiet
from bingwall.cli_utils.decorators import catch_errors
from bingwall.config import BingwallConfig


@click.command(name="bingwall")
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    default=False,
    help="Only print errors and warnings.",
)
@click.version_option(package_name="bingwall")
@catch_errors
def cli(quiet: bool):
    """
    Set today's Bing image of the day as your desktop background.

    The image is downloaded at most once per day into a 'BingWallpapers' folder in your
    pictures directory, and only the 7 most recent images are kept.
    """

    set_quiet(quiet)
    bingwall.run(BingwallConfig())
