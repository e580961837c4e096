"""Color conversions: hex, RGB, HSV and CIE Lab.

Scalar helpers take and return plain Python numbers; the ``*_array``
variants work on numpy arrays of shape (..., 3) and are used for the bulk
pixel work in the generator and normalizer.
"""

import numpy as np

# sRGB to XYZ (D65) matrix
_SRGB_TO_XYZ = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
], dtype=np.float64)

# D65 reference white
_D65_WHITE = np.array([0.95047, 1.00000, 1.08883], dtype=np.float64)

# CIE cube-root / linear threshold
_LAB_EPSILON = 0.008856
_LAB_KAPPA = 7.787


def hex_to_rgb(h: str) -> tuple[int, int, int]:
    """Convert '#RRGGBB' (or 'RRGGBB') to (R, G, B)."""
    h = h.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def _clamp_channel(c: float) -> int:
    # round half up, the way the pattern files have always been written
    return max(0, min(255, int(np.floor(c + 0.5))))


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Format an RGB triple as lowercase '#rrggbb', clamping to 0-255."""
    return "#{:02x}{:02x}{:02x}".format(
        _clamp_channel(r), _clamp_channel(g), _clamp_channel(b))


def rgb_to_hsv(r: float, g: float, b: float) -> tuple[float, float, float]:
    """Convert 0-255 RGB to (h, s, v) with h in [0, 360), s and v in [0, 1].

    Hue is 0 for achromatic colors.
    """
    r, g, b = r / 255.0, g / 255.0, b / 255.0
    mx = max(r, g, b)
    mn = min(r, g, b)
    d = mx - mn
    s = 0.0 if mx == 0 else d / mx
    h = 0.0
    if d != 0:
        if mx == r:
            h = (g - b) / d + (6 if g < b else 0)
        elif mx == g:
            h = (b - r) / d + 2
        else:
            h = (r - g) / d + 4
        h *= 60.0
    return h, s, mx


def rgb_to_hsv_array(rgb: np.ndarray) -> np.ndarray:
    """Vectorized rgb_to_hsv. Input (..., 3) in 0-255, output (..., 3)."""
    c = rgb.astype(np.float64) / 255.0
    r, g, b = c[..., 0], c[..., 1], c[..., 2]
    mx = c.max(axis=-1)
    mn = c.min(axis=-1)
    d = mx - mn
    safe_d = np.where(d == 0, 1.0, d)
    s = np.where(mx == 0, 0.0, d / np.where(mx == 0, 1.0, mx))

    h_r = (g - b) / safe_d + np.where(g < b, 6.0, 0.0)
    h_g = (b - r) / safe_d + 2.0
    h_b = (r - g) / safe_d + 4.0
    # Same precedence as the scalar version: red, then green, then blue
    h = np.select([mx == r, mx == g], [h_r, h_g], default=h_b) * 60.0
    h = np.where(d == 0, 0.0, h)
    return np.stack([h, s, mx], axis=-1)


def rgb_to_lab_array(rgb: np.ndarray) -> np.ndarray:
    """Convert sRGB (0-255) to CIE Lab. Input shape: (..., 3)."""
    c = np.asarray(rgb, dtype=np.float64) / 255.0
    # Gamma decode
    linear = np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)
    # Linear RGB -> XYZ, normalized by D65 white
    xyz = (linear @ _SRGB_TO_XYZ.T) / _D65_WHITE
    f = np.where(xyz > _LAB_EPSILON,
                 np.cbrt(xyz),
                 _LAB_KAPPA * xyz + 16.0 / 116.0)
    L = 116.0 * f[..., 1] - 16.0
    a = 500.0 * (f[..., 0] - f[..., 1])
    b = 200.0 * (f[..., 1] - f[..., 2])
    return np.stack([L, a, b], axis=-1)


def rgb_to_lab(rgb: tuple[int, int, int]) -> tuple[float, float, float]:
    """Convert a single (R, G, B) triple to (L, a, b)."""
    L, a, b = rgb_to_lab_array(np.array(rgb, dtype=np.float64))
    return float(L), float(a), float(b)


def lab_euclidean(lab1: np.ndarray, lab2: np.ndarray) -> np.ndarray:
    """CIE76 color difference (Euclidean in Lab)."""
    return np.sqrt(((lab1 - lab2) ** 2).sum(axis=-1))


def color_distance(hex_a: str, hex_b: str) -> float:
    """Delta E (CIE76) between two hex colors."""
    lab1 = rgb_to_lab_array(np.array(hex_to_rgb(hex_a), dtype=np.float64))
    lab2 = rgb_to_lab_array(np.array(hex_to_rgb(hex_b), dtype=np.float64))
    return float(lab_euclidean(lab1, lab2))


def hex_to_lab_array(colors: list[str]) -> np.ndarray:
    """Lab coordinates for a list of hex colors, shape (N, 3)."""
    if not colors:
        return np.zeros((0, 3), dtype=np.float64)
    rgb = np.array([hex_to_rgb(c) for c in colors], dtype=np.float64)
    return rgb_to_lab_array(rgb)
