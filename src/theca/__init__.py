"""A command line note taking tool that keeps notes in named, optionally encrypted, profile files.

If you installed via ``pip``, run ``theca -h`` to get help.
Or, run ``python3 -m theca -h``.

To use the Python API, look at :class:`theca.api.Theca`
"""
