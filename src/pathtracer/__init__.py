"""Taichi path tracer for static triangle scenes.

Renders diffuse, emissive triangle meshes with one-bounce path tracing:
every pixel adds the emission of the first surface it sees to a Monte Carlo
estimate of the light reflected from whatever emitter a random hemisphere
direction reaches.

Subpackages:
    core: Rays, configuration, per-pixel RNG, direction sampling, the
        integrator and the progressive frame driver
    geometry: Triangle primitive and ray-triangle intersection
    scene: Triangle storage, nearest-hit traversal, scene loading and the
        Cornell box
    camera: Pinhole camera
    preview: Tone mapping and PNG export
"""

__version__ = "0.1.0"
