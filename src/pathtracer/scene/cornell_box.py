"""Cornell box scene built from triangles.

The geometry is the classic Cornell box measurement data (five walls, a
ceiling light, a short and a tall block), converted from millimetres to
metres and rotated into the frame the default camera looks at:

- x: across the image, the red wall at x = 0.556 appears on the left
- y: depth, the back wall at y = 0 and the open front at y = 0.5592
- z: up, the floor at z = 0 and the ceiling at z = 0.5488

The default :class:`CameraConfig` sits at (0.278, 0.8, 0.2744) looking down
-y through the open front.

Example:
    >>> from src.pathtracer.scene.cornell_box import create_cornell_box_scene
    >>> scene, camera = create_cornell_box_scene()
    >>> scene.get_triangle_count()
    32
"""

from dataclasses import dataclass

from src.pathtracer.core.config import CameraConfig
from src.pathtracer.scene.manager import SceneManager, Vector3


@dataclass
class CornellBoxParams:
    """Adjustable appearance of the Cornell box.

    Attributes:
        light_intensity: Scale applied to light_color for the emitted radiance.
        light_color: RGB color of the light.
        left_wall_color: Albedo of the wall on the left of the image.
        right_wall_color: Albedo of the wall on the right of the image.
        white_color: Albedo of the floor, ceiling, back wall and blocks.
    """

    light_intensity: float = 15.0
    light_color: Vector3 = (1.0, 1.0, 1.0)
    left_wall_color: Vector3 = (0.65, 0.05, 0.05)
    right_wall_color: Vector3 = (0.12, 0.45, 0.15)
    white_color: Vector3 = (0.73, 0.73, 0.73)

    @property
    def light_emission(self) -> Vector3:
        c = self.light_color
        s = self.light_intensity
        return (c[0] * s, c[1] * s, c[2] * s)


# Classic dimensions in millimetres (width x height x depth)
BOX_WIDTH_MM = 556.0
BOX_HEIGHT_MM = 548.8
BOX_DEPTH_MM = 559.2

# Light rectangle, 0.1 mm below the ceiling
LIGHT_MIN_X_MM = 213.0
LIGHT_MAX_X_MM = 343.0
LIGHT_MIN_Z_MM = 227.0
LIGHT_MAX_Z_MM = 332.0
LIGHT_Y_MM = 548.7

# Block faces as quads in classic (X, Y-up, Z-depth) millimetres
SHORT_BLOCK_MM = (
    ((130.0, 165.0, 65.0), (82.0, 165.0, 225.0), (240.0, 165.0, 272.0), (290.0, 165.0, 114.0)),
    ((290.0, 0.0, 114.0), (290.0, 165.0, 114.0), (240.0, 165.0, 272.0), (240.0, 0.0, 272.0)),
    ((130.0, 0.0, 65.0), (130.0, 165.0, 65.0), (290.0, 165.0, 114.0), (290.0, 0.0, 114.0)),
    ((82.0, 0.0, 225.0), (82.0, 165.0, 225.0), (130.0, 165.0, 65.0), (130.0, 0.0, 65.0)),
    ((240.0, 0.0, 272.0), (240.0, 165.0, 272.0), (82.0, 165.0, 225.0), (82.0, 0.0, 225.0)),
)

TALL_BLOCK_MM = (
    ((423.0, 330.0, 247.0), (265.0, 330.0, 296.0), (314.0, 330.0, 456.0), (472.0, 330.0, 406.0)),
    ((423.0, 0.0, 247.0), (423.0, 330.0, 247.0), (472.0, 330.0, 406.0), (472.0, 0.0, 406.0)),
    ((472.0, 0.0, 406.0), (472.0, 330.0, 406.0), (314.0, 330.0, 456.0), (314.0, 0.0, 456.0)),
    ((314.0, 0.0, 456.0), (314.0, 330.0, 456.0), (265.0, 330.0, 296.0), (265.0, 0.0, 296.0)),
    ((265.0, 0.0, 296.0), (265.0, 330.0, 296.0), (423.0, 330.0, 247.0), (423.0, 0.0, 247.0)),
)


def to_scene_frame(point_mm: Vector3) -> Vector3:
    """Convert a classic Cornell box point (mm, Y up, Z depth) to scene metres.

    The mapping (X, Y, Z) -> (X, 559.2 - Z, Y) / 1000 is a proper rotation
    plus offset, so triangle winding is preserved.
    """
    x, y, z = point_mm
    return (x / 1000.0, (BOX_DEPTH_MM - z) / 1000.0, y / 1000.0)


def _add_face(scene: SceneManager, corners_mm, albedo: Vector3, emission: Vector3) -> None:
    a, b, c, d = (to_scene_frame(p) for p in corners_mm)
    scene.add_triangle(a, b, c, albedo, emission)
    scene.add_triangle(a, c, d, albedo, emission)


def create_cornell_box_scene(
    params: CornellBoxParams | None = None,
) -> tuple[SceneManager, CameraConfig]:
    """Create the Cornell box scene.

    Args:
        params: Optional appearance overrides. Defaults to CornellBoxParams().

    Returns:
        A tuple of (SceneManager, CameraConfig). The scene holds 32
        triangles; the camera is the default view through the open front.
    """
    if params is None:
        params = CornellBoxParams()

    scene = SceneManager()
    black = (0.0, 0.0, 0.0)
    white = params.white_color
    w, h, d = BOX_WIDTH_MM, BOX_HEIGHT_MM, BOX_DEPTH_MM

    # Floor
    _add_face(scene, ((0.0, 0.0, 0.0), (0.0, 0.0, d), (w, 0.0, d), (w, 0.0, 0.0)), white, black)
    # Ceiling
    _add_face(scene, ((0.0, h, 0.0), (w, h, 0.0), (w, h, d), (0.0, h, d)), white, black)
    # Back wall
    _add_face(scene, ((0.0, 0.0, d), (0.0, h, d), (w, h, d), (w, 0.0, d)), white, black)
    # Left wall (as seen from the camera)
    _add_face(
        scene,
        ((w, 0.0, 0.0), (w, 0.0, d), (w, h, d), (w, h, 0.0)),
        params.left_wall_color,
        black,
    )
    # Right wall
    _add_face(
        scene,
        ((0.0, 0.0, 0.0), (0.0, h, 0.0), (0.0, h, d), (0.0, 0.0, d)),
        params.right_wall_color,
        black,
    )

    # Light
    _add_face(
        scene,
        (
            (LIGHT_MIN_X_MM, LIGHT_Y_MM, LIGHT_MIN_Z_MM),
            (LIGHT_MAX_X_MM, LIGHT_Y_MM, LIGHT_MIN_Z_MM),
            (LIGHT_MAX_X_MM, LIGHT_Y_MM, LIGHT_MAX_Z_MM),
            (LIGHT_MIN_X_MM, LIGHT_Y_MM, LIGHT_MAX_Z_MM),
        ),
        white,
        params.light_emission,
    )

    for face in SHORT_BLOCK_MM + TALL_BLOCK_MM:
        _add_face(scene, face, white, black)

    return scene, CameraConfig()


def get_cornell_box_bounds() -> dict[str, Vector3]:
    """Get the bounding box of the Cornell box in scene coordinates.

    Returns:
        A dictionary with 'min', 'max', 'center' and 'size'.
    """
    lo = (0.0, 0.0, 0.0)
    hi = (BOX_WIDTH_MM / 1000.0, BOX_DEPTH_MM / 1000.0, BOX_HEIGHT_MM / 1000.0)
    return {
        "min": lo,
        "max": hi,
        "center": (hi[0] / 2.0, hi[1] / 2.0, hi[2] / 2.0),
        "size": hi,
    }
