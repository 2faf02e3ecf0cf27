"""clipremux — Steam game-recording clips to mp4.

Find background-recording clip folders (fg_<appid>_<date>_<time>) under a
directory tree, look up each game's name in the Steam library manifests,
and remux the DASH segments into a single mp4 without re-encoding.
"""
