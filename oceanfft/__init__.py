"""GPU spectral ocean synthesis (Tessendorf) on Panda3D compute shaders."""

__version__ = "0.1.0"
