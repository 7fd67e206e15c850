"""Multi-threaded Monte Carlo path tracer.

This package renders still images of small scenes built from spheres and
triangle meshes, lit by one point light, using CPU worker threads. Features:
- Recursive diffuse path tracing with a fixed bounce budget
- Uniform and Lambertian diffuse reflectors
- Spheres, inward-facing domes and triangle meshes
- Deterministic rendering from a seed, independent of thread count
- PPM, QOI and PNG output

Subpackages:
    core: Vectors, rays, colors, random numbers, the integrator and the scheduler
    geometry: Shape primitives and intersection algorithms
    materials: Reflectors and surface materials
    scene: Scene description and preset scenes
    camera: Pinhole camera and display resolution
    preview: Post-processing, image export and preview utilities
"""

__version__ = "0.1.0"
