"""Installed distribution version of viewspec."""

from importlib.metadata import PackageNotFoundError, version


def get_version() -> str:
    try:
        return version("viewspec")
    except PackageNotFoundError:
        return "0.0.0"
