# -*- coding: utf-8 -*-

"""
Filename: assets_path.py
Author: storro
Date: 2026-02-11
Description: Utility function to construct asset file paths
"""

import os

from pathlib import Path
from panda3d.core import Filename

# Assets ship inside the package so installed copies find their shaders
BASE_DIR = os.path.join(Path(__file__).resolve().parents[1], "assets")

def assets_path(*parts: str) -> str:
    return str(
        Filename.from_os_specific(os.path.join(str(BASE_DIR), *parts))
    )


def shader_path(kernel_name: str) -> str:
    return assets_path("shaders", f"{kernel_name}.comp.glsl")
