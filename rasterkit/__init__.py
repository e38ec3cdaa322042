"""rasterkit: box blur, Gaussian blur and error diffusion dithering demos."""

__version__ = "0.1.0"
