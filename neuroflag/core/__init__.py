"""Core animation primitives for neuroflag.

Modules:
- network: node graph layout, particles and per-frame draw state
- overlays: white alpha primitives (lines, discs, rings, glows)
- flag: static flag raster + the waving renderer
- waves: per-column flag wave displacement
- dither: Floyd-Steinberg 1-bit reduction
- parallax: pointer-following CSS tilt
- page: mounting the animations onto a host page
"""
