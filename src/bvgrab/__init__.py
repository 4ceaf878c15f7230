"""bvgrab — bilibili video downloader.

Resolves a video id into its best DASH video/audio pair, downloads both
streams concurrently and merges them with ffmpeg.
"""

from bvgrab.version import __version__

__all__: list[str] = ["__version__"]
