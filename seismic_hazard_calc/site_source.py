"""Module for computing site-source distances"""

import numba as nb
import numpy as np

# Polygon order of the segment corners,
# points 0 and 2 define the top edge (trace)
# and points 1 and 3 the corresponding down-dip points
POLYGON_IND = np.array([0, 1, 3, 2, 0])

# Edges considered for the minimum distance
EDGE_A_IND = np.array([0, 0, 3, 3])
EDGE_B_IND = np.array([1, 2, 1, 2])


def get_planar_distances(segment_coords: np.ndarray, site_coords: np.ndarray):
    """
    Computes the distances from a (multi-segment) planar
    rupture surface to the site

    Parameters
    ----------
    segment_coords: array of floats
        Coordinates (x, y, depth) in km of the segment corner points
        where points 0 and 2 define the top edge
        shape: [n_segments, 4, 3]
    site_coords: array of floats
        Coordinates of the site (x, y, 0) in km
        shape: [3]

    Returns
    -------
    rjb: float
    rrup: float
    rx: float
        Signed distance perpendicular to the strike of the
        segment closest to the site, positive on the hanging wall
    """
    segment_coords = np.ascontiguousarray(segment_coords, dtype=np.float64)
    site_coords = np.ascontiguousarray(site_coords, dtype=np.float64)

    rjb_values, rrup_values = compute_segment_rjb_rrup(segment_coords, site_coords)

    closest_ix = np.argmin(rjb_values)
    rx = compute_segment_rx(segment_coords[closest_ix], site_coords)

    return float(rjb_values.min()), float(rrup_values.min()), rx


def get_point_distances(point_coords: np.ndarray, site_coords: np.ndarray):
    """
    Computes the distances from a point source
    (x, y, depth) to the site.

    Rx is set to Rjb, which gives the same result as using
    zero for the typical point source GMMs, and makes more sense.

    Returns
    -------
    rjb, rrup, rx: float
    """
    rjb = np.sqrt(
        (site_coords[0] - point_coords[0]) ** 2
        + (site_coords[1] - point_coords[1]) ** 2
    )
    rrup = np.sqrt(rjb**2 + point_coords[2] ** 2)
    return float(rjb), float(rrup), float(rjb)


def compute_segment_rx(segment_coords: np.ndarray, site_coords: np.ndarray):
    """
    Computes Rx for a single segment

    Parameters
    ----------
    segment_coords: array of floats
        shape: [4, 3]
    site_coords: array of floats
        shape: [3]

    Returns
    -------
    float
    """
    strike_vec = segment_coords[2, :2] - segment_coords[0, :2]
    strike_vec = strike_vec / np.linalg.norm(strike_vec)

    # Horizontal unit vector in the dip direction (strike + 90)
    dip_dir_vec = np.asarray([strike_vec[1], -strike_vec[0]])
    return float(np.dot(site_coords[:2] - segment_coords[0, :2], dip_dir_vec))


@nb.njit(cache=True, nogil=True)
def triangle_area(a: np.ndarray, b: np.ndarray, c: np.ndarray):
    """Area of the triangle defined by the three points"""
    return 0.5 * np.sqrt(np.sum(np.cross(b - a, c - a) ** 2))


@nb.njit(cache=True, nogil=True)
def check_point_in_segment(segment_coords: np.ndarray, point_coords: np.ndarray):
    """
    Checks if a point is in a segment
    defined by 4 coordinates

    Computes the area of the 4 triangles formed
    by the corner points and the point
    and if the sum of the areas is equal to
    the area of the segment then
    the point is in the segment

    Parameters
    ----------
    segment_coords: array of floats
        Corner points of the segment
        shape: [4, 3]
    point_coords: array of floats
        shape: [3]

    Returns
    -------
    bool:
        True if point is in segment, always False for degenerate segments
    """
    p_total_area = 0.0
    for i in range(4):
        p_total_area += triangle_area(
            point_coords,
            segment_coords[POLYGON_IND[i]],
            segment_coords[POLYGON_IND[i + 1]],
        )

    segment_area = triangle_area(
        segment_coords[0], segment_coords[1], segment_coords[3]
    ) + triangle_area(segment_coords[0], segment_coords[3], segment_coords[2])

    # Degenerate segment, e.g. the surface projection of a vertical
    # segment, the edge distances are used instead
    if segment_area < 1e-9:
        return False

    return np.abs(p_total_area - segment_area) < 1e-6 * max(1.0, segment_area)


@nb.njit(cache=True, nogil=True)
def compute_min_edge_distance(segment_coords: np.ndarray, site_coords: np.ndarray):
    """
    Computes minimum distance to each edge of the segment
    and then returns the minimum of those distances

    Based on https://math.stackexchange.com/a/2193733/1180135

    Parameters
    ----------
    segment_coords: array of floats
        The coordinates of the segment corners
        shape: [4, 3]
    site_coords: array of floats
        The coordinates of the site
        shape: [3]

    Returns
    -------
    float
    """
    min_dist = np.inf
    for i in range(4):
        A = segment_coords[EDGE_A_IND[i]]
        B = segment_coords[EDGE_B_IND[i]]

        v = B - A
        u = A - site_coords
        vv = np.sum(v * v)

        # Degenerate edge, e.g. the surface projection
        # of a vertical segment
        if vv == 0.0:
            t = 0.0
        else:
            t = min(max(-np.sum(u * v) / vv, 0.0), 1.0)

        C = (1 - t) * A + t * B
        min_dist = min(min_dist, np.sqrt(np.sum((C - site_coords) ** 2)))

    return min_dist


@nb.njit(cache=True, nogil=True)
def compute_segment_rjb_rrup(segment_coords: np.ndarray, site_coords: np.ndarray):
    """
    Computes the Rjb and Rrup values for each segment

    Parameters
    ----------
    segment_coords: array of floats
        Coordinates of the segment corner points
        where points 0 and 2 define the fault trace
        shape: [n_segments, 4, 3]
    site_coords: array of floats
        Coordinates of the site
        Shape: [3] (x, y, 0)

    Returns
    -------
    rjb_values: array of floats
        The Rjb values for each segment
    rrup_values: array of floats
        The Rrup values for each segment
    """
    n_segments = segment_coords.shape[0]
    rrup_values = np.zeros(n_segments)
    rjb_values = np.zeros(n_segments)

    # Create a surface projection of segments and site
    surface_segment_coords = segment_coords.copy()
    surface_segment_coords[:, :, 2] = 0.0
    surface_site_coords = site_coords.copy()
    surface_site_coords[2] = 0.0

    for i in range(n_segments):
        cur_segment_coords = segment_coords[i]

        ### Rjb
        if check_point_in_segment(surface_segment_coords[i], surface_site_coords):
            rjb_values[i] = 0.0
        else:
            rjb_values[i] = compute_min_edge_distance(
                surface_segment_coords[i], surface_site_coords
            )

        ### Rrup
        # Project the site onto the plane of the segment, if the
        # projected point is inside the segment the closest distance
        # is the distance to the plane, otherwise it's on one of the edges
        v1 = cur_segment_coords[1] - cur_segment_coords[0]
        v2 = cur_segment_coords[2] - cur_segment_coords[0]
        n = np.cross(v2, v1)
        n = n / np.sqrt(np.sum(n**2))

        plane_dist = np.sum(n * (site_coords - cur_segment_coords[0]))
        foot_point = site_coords - plane_dist * n
        if check_point_in_segment(cur_segment_coords, foot_point):
            rrup_values[i] = np.abs(plane_dist)
        else:
            rrup_values[i] = compute_min_edge_distance(cur_segment_coords, site_coords)

    return rjb_values, rrup_values
