#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""Writing of finished hour reports into zip containers."""

import os
import zipfile

from regulation_extract.logging_config import logger


class ZipArchiver:
    """Store a payload as the single member of a compressed zip file.

    The container is written next to its final location and moved into
    place once complete, so an existing container is always a finished one.
    """

    def __init__(self, compresslevel=9):
        self.compresslevel = compresslevel

    def exists(self, archive_path):
        return os.path.exists(archive_path)

    def archive(self, archive_path, member_name, payload):
        """Write ``payload`` bytes as ``member_name`` into ``archive_path``"""
        directory = os.path.dirname(archive_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        partial = archive_path + ".part"
        try:
            with zipfile.ZipFile(partial, "w", compression=zipfile.ZIP_DEFLATED,
                                 compresslevel=self.compresslevel) as zf:
                zf.writestr(member_name, payload)
            os.replace(partial, archive_path)
        except BaseException:
            if os.path.exists(partial):
                os.remove(partial)
            raise
        logger.debug(f"Wrote {archive_path}")
        return archive_path
