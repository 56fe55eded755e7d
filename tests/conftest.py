"""Pytest configuration for path tracer tests.

Provides shared fixtures for all test modules, including Taichi
initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene and integrator state before and after each test."""
    # Import here so Taichi is initialized before fields are declared
    from src.pathtracer.core.integrator import reset_integrator
    from src.pathtracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        reset_integrator()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def single_emitter():
    """Return a function building a one-triangle scene facing a camera.

    The triangle lies in the z=0 plane, faces +z and is seen by a camera at
    z=2 whose image centre points straight at the triangle's centroid.
    """

    def _build(emission=(1.0, 1.0, 1.0), albedo=(0.5, 0.5, 0.5), sample_count=1):
        from src.pathtracer.core.config import CameraConfig, RenderConfig
        from src.pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_triangle(
            (-1.0, -1.0, 0.0),
            (1.0, -1.0, 0.0),
            (0.0, 1.0, 0.0),
            albedo=albedo,
            emission=emission,
        )
        camera = CameraConfig(
            eye=(0.0, -1.0 / 3.0, 2.0),
            middle=(0.0, -1.0 / 3.0, 1.0),
            up=(0.0, 0.2, 0.0),
            right=(0.2, 0.0, 0.0),
            aspect_ratio=1.0,
        )
        config = RenderConfig(width=8, height=8, sample_count=sample_count, camera=camera)
        return scene, config

    return _build
