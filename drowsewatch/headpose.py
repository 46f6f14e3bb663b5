"""Head pose estimation from facial landmarks with a pinhole camera model."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np
from scipy.optimize import least_squares
from scipy.spatial.transform import Rotation

# 3D reference points of a generic head model, in world coordinates.
OBJECT_POINTS = np.array(
    [
        (6.825897, 6.760612, 4.402142),
        (1.330353, 7.122144, 6.903745),
        (-1.330353, 7.122144, 6.903745),
        (-6.825897, 6.760612, 4.402142),
        (5.311432, 5.485328, 3.987654),
        (1.789930, 5.393625, 4.413414),
        (-1.789930, 5.393625, 4.413414),
        (-5.311432, 5.485328, 3.987654),
        (2.005628, 1.409845, 6.165652),
        (-2.005628, 1.409845, 6.165652),
        (2.774015, -2.080775, 5.048531),
        (-2.774015, -2.080775, 5.048531),
        (0.000000, -3.116408, 6.097667),
        (0.000000, -7.415691, 4.070434),
    ],
    dtype=np.float64,
)

# Landmark indices matching OBJECT_POINTS row for row: brows, eye corners,
# nose wings, mouth corners, lower lip centre and chin.
POSE_LANDMARKS = (17, 21, 22, 26, 36, 39, 42, 45, 31, 35, 48, 54, 57, 8)

CAMERA_MATRIX = np.array(
    [
        [6.5308391993466671e002, 0.0, 3.1950000000000000e002],
        [0.0, 6.5308391993466671e002, 2.3950000000000000e002],
        [0.0, 0.0, 1.0],
    ],
    dtype=np.float64,
)

DIST_COEFFS = np.array(
    [7.0834633684407095e-002, 6.9140193737175351e-002, 0.0, 0.0, -1.3073460323689292e000],
    dtype=np.float64,
)

# Corners of a cube around the head, drawn to visualise the pose.
CUBE_POINTS = np.array(
    [
        (10.0, 10.0, 10.0),
        (10.0, 10.0, -10.0),
        (10.0, -10.0, -10.0),
        (10.0, -10.0, 10.0),
        (-10.0, 10.0, 10.0),
        (-10.0, 10.0, -10.0),
        (-10.0, -10.0, -10.0),
        (-10.0, -10.0, 10.0),
    ],
    dtype=np.float64,
)

CUBE_EDGES = (
    (0, 1), (1, 2), (2, 3), (3, 0),
    (4, 5), (5, 6), (6, 7), (7, 4),
    (0, 4), (1, 5), (2, 6), (3, 7),
)

_EPSILON = float(np.finfo(np.float64).eps)
_UNDISTORT_ITERATIONS = 20
_MIN_POINTS = 6


@dataclass(frozen=True, eq=False)
class HeadPose:
    """Euler angles in degrees, the pose vectors and the projected cube corners."""

    pitch: float
    yaw: float
    roll: float
    rvec: np.ndarray
    tvec: np.ndarray
    cube: np.ndarray


def _distortion(dist_coeffs) -> Tuple[float, float, float, float, float]:
    if dist_coeffs is None:
        return (0.0, 0.0, 0.0, 0.0, 0.0)
    coeffs = np.asarray(dist_coeffs, dtype=np.float64).ravel()
    if coeffs.size == 0:
        return (0.0, 0.0, 0.0, 0.0, 0.0)
    if coeffs.size == 4:
        coeffs = np.append(coeffs, 0.0)
    if coeffs.size != 5:
        raise ValueError("distortion coefficients must have 4 or 5 elements")
    k1, k2, p1, p2, k3 = (float(c) for c in coeffs)
    return k1, k2, p1, p2, k3


def _camera(camera_matrix) -> np.ndarray:
    matrix = np.asarray(camera_matrix, dtype=np.float64)
    if matrix.shape != (3, 3):
        raise ValueError("camera matrix must be 3x3")
    return matrix


def rodrigues(rvec) -> np.ndarray:
    """Rotation matrix of a rotation vector (axis times angle in radians)."""
    r = np.asarray(rvec, dtype=np.float64).reshape(3)
    theta = float(np.linalg.norm(r))
    if theta < _EPSILON:
        return np.eye(3)
    k = r / theta
    skew = np.array(
        [
            [0.0, -k[2], k[1]],
            [k[2], 0.0, -k[0]],
            [-k[1], k[0], 0.0],
        ]
    )
    c, s = math.cos(theta), math.sin(theta)
    return c * np.eye(3) + (1.0 - c) * np.outer(k, k) + s * skew


def project_points(points, rvec, tvec, camera_matrix, dist_coeffs) -> np.ndarray:
    """Project 3D points into the image; returns an (N, 2) array of pixels."""
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    camera = _camera(camera_matrix)
    k1, k2, p1, p2, k3 = _distortion(dist_coeffs)
    cam = pts @ rodrigues(rvec).T + np.asarray(tvec, dtype=np.float64).reshape(3)
    depth = np.where(cam[:, 2] == 0, 1.0, cam[:, 2])
    x = cam[:, 0] / depth
    y = cam[:, 1] / depth
    r2 = x * x + y * y
    radial = 1.0 + k1 * r2 + k2 * r2 * r2 + k3 * r2 * r2 * r2
    xd = x * radial + 2.0 * p1 * x * y + p2 * (r2 + 2.0 * x * x)
    yd = y * radial + p1 * (r2 + 2.0 * y * y) + 2.0 * p2 * x * y
    u = camera[0, 0] * xd + camera[0, 2]
    v = camera[1, 1] * yd + camera[1, 2]
    return np.column_stack([u, v])


def _undistort(image_points: np.ndarray, camera: np.ndarray, dist_coeffs) -> np.ndarray:
    """Normalised, distortion-free coordinates of pixel positions."""
    k1, k2, p1, p2, k3 = _distortion(dist_coeffs)
    x0 = (image_points[:, 0] - camera[0, 2]) / camera[0, 0]
    y0 = (image_points[:, 1] - camera[1, 2]) / camera[1, 1]
    x, y = x0.copy(), y0.copy()
    for _ in range(_UNDISTORT_ITERATIONS):
        r2 = x * x + y * y
        icdist = 1.0 / (1.0 + ((k3 * r2 + k2) * r2 + k1) * r2)
        dx = 2.0 * p1 * x * y + p2 * (r2 + 2.0 * x * x)
        dy = p1 * (r2 + 2.0 * y * y) + 2.0 * p2 * x * y
        x = (x0 - dx) * icdist
        y = (y0 - dy) * icdist
    return np.column_stack([x, y])


def _dlt_pose(object_points: np.ndarray, normalised: np.ndarray):
    """Initial pose from a direct linear transform on normalised coordinates."""
    count = len(object_points)
    homog = np.hstack([object_points, np.ones((count, 1))])
    system = np.zeros((2 * count, 12))
    system[0::2, 0:4] = homog
    system[0::2, 8:12] = -normalised[:, [0]] * homog
    system[1::2, 4:8] = homog
    system[1::2, 8:12] = -normalised[:, [1]] * homog
    _, _, vt = np.linalg.svd(system)
    projection = vt[-1].reshape(3, 4)
    if np.mean(homog @ projection[2]) < 0:
        projection = -projection
    u, singular, wt = np.linalg.svd(projection[:, :3])
    if np.linalg.det(u @ wt) < 0:
        u[:, -1] = -u[:, -1]
    rotation = u @ wt
    scale = float(np.mean(singular))
    if scale <= 0:
        raise ValueError("cannot estimate pose from degenerate points")
    translation = projection[:, 3] / scale
    rvec = Rotation.from_matrix(rotation).as_rotvec()
    return rvec, translation


def solve_pnp(object_points, image_points, camera_matrix, dist_coeffs):
    """Pose (rvec, tvec) that maps the object points onto the image points."""
    obj = np.asarray(object_points, dtype=np.float64).reshape(-1, 3)
    img = np.asarray(image_points, dtype=np.float64).reshape(-1, 2)
    if len(obj) != len(img):
        raise ValueError("object and image points differ in number")
    if len(obj) < _MIN_POINTS:
        raise ValueError(f"at least {_MIN_POINTS} point correspondences are needed")
    spread = np.linalg.svd(obj - obj.mean(axis=0), compute_uv=False)
    if spread[-1] <= 1e-9 * max(spread[0], _EPSILON):
        raise ValueError("object points must not be coplanar")
    camera = _camera(camera_matrix)
    rvec0, tvec0 = _dlt_pose(obj, _undistort(img, camera, dist_coeffs))

    def residuals(params: np.ndarray) -> np.ndarray:
        projected = project_points(obj, params[:3], params[3:], camera, dist_coeffs)
        return (projected - img).ravel()

    result = least_squares(residuals, np.concatenate([rvec0, tvec0]), method="lm")
    return result.x[:3].copy(), result.x[3:].copy()


def _givens(c: float, s: float) -> Tuple[float, float]:
    norm = 1.0 / math.sqrt(c * c + s * s + _EPSILON)
    return c * norm, s * norm


def _signed_angle(cosine: float, sine: float) -> float:
    angle = math.degrees(math.acos(max(-1.0, min(1.0, cosine))))
    return angle if sine >= 0 else -angle


def euler_angles(rotation) -> Tuple[float, float, float]:
    """Pitch, yaw and roll in degrees of a 3x3 matrix, by RQ decomposition."""
    m = np.asarray(rotation, dtype=np.float64).reshape(3, 3)

    c, s = _givens(m[2, 2], m[2, 1])
    qx = np.array([[1.0, 0.0, 0.0], [0.0, c, s], [0.0, -s, c]])
    step = m @ qx
    step[2, 1] = 0.0

    c, s = _givens(step[2, 2], -step[2, 0])
    qy = np.array([[c, 0.0, -s], [0.0, 1.0, 0.0], [s, 0.0, c]])
    step = step @ qy
    step[2, 0] = 0.0

    c, s = _givens(step[1, 1], step[1, 0])
    qz = np.array([[c, s, 0.0], [-s, c, 0.0], [0.0, 0.0, 1.0]])
    upper = step @ qz

    # Keep the first two diagonal entries of the triangular factor positive.
    if upper[0, 0] < 0:
        if upper[1, 1] < 0:
            qz[0:2, 0:2] *= -1
        else:
            qz = qz.T.copy()
            qy[0, 0] *= -1
            qy[0, 2] *= -1
            qy[2, 0] *= -1
            qy[2, 2] *= -1
    elif upper[1, 1] < 0:
        qz = qz.T.copy()
        qy = qy.T.copy()
        qx[1:3, 1:3] *= -1

    pitch = _signed_angle(qx[1, 1], qx[1, 2])
    yaw = _signed_angle(qy[0, 0], qy[2, 0])
    roll = _signed_angle(qz[0, 0], qz[0, 1])
    return pitch, yaw, roll


def estimate_head_pose(
    landmarks: Sequence[Sequence[float]],
    camera_matrix=CAMERA_MATRIX,
    dist_coeffs=DIST_COEFFS,
    object_points=OBJECT_POINTS,
) -> HeadPose:
    """Head pose of a 68-point face shape given in image coordinates."""
    needed = max(POSE_LANDMARKS) + 1
    if len(landmarks) < needed:
        raise ValueError(f"head pose needs at least {needed} landmarks")
    image_points = np.array(
        [tuple(landmarks[index]) for index in POSE_LANDMARKS], dtype=np.float64
    )
    rvec, tvec = solve_pnp(object_points, image_points, camera_matrix, dist_coeffs)
    cube = project_points(CUBE_POINTS, rvec, tvec, camera_matrix, dist_coeffs)
    pitch, yaw, roll = euler_angles(rodrigues(rvec))
    return HeadPose(pitch, yaw, roll, rvec, tvec, cube)