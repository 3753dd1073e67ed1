"""
__main__.py

This file adds support for running bingwall as a python module instead of invoking the "bingwall" command line entrypoint.
"""

from bingwall.cli import cli


def main():

    cli()


if __name__ == "__main__":
    main()
