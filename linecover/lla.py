"""Conversion between latitude/longitude/altitude and a local flat frame."""

from __future__ import annotations

import math
import os
from typing import Union

WGS84_EQUATORIAL_RADIUS = 6378137.000000
WGS84_POLAR_SEMI_MINOR_AXIS = 6356752.314245
WGS84_FLATTENING = 0.003352810664

# Altitude assigned to nodes read from a plain node file.
_DEFAULT_ALTITUDE = 229.0

PathLike = Union[str, "os.PathLike[str]"]


def deg_to_rad(deg: float) -> float:
    """Convert degrees to radians."""
    return math.pi * deg / 180.0


def rad_to_deg(rad: float) -> float:
    """Convert radians to degrees."""
    return 180.0 * rad / math.pi


class LLAtoXY:
    """Maps geodetic coordinates to metres east/north of a reference point."""

    def __init__(self) -> None:
        self.ref_lat = 0.0
        self.ref_lon = 0.0
        self.ref_alt = 0.0
        self._update_radii()

    def _update_radii(self) -> None:
        f = WGS84_FLATTENING
        sin_sq = math.sin(self.ref_lat) ** 2
        e_sq = 2.0 * f - f * f
        r_m_deno = 1.0 - e_sq * sin_sq
        self.r_n = WGS84_EQUATORIAL_RADIUS / math.sqrt(r_m_deno)
        self.r_m = self.r_n * (1.0 - e_sq) / r_m_deno

    def set_reference(self, lat: float, lon: float, alt: float) -> None:
        """Set the origin; latitude and longitude in degrees."""
        self.ref_lat = deg_to_rad(lat)
        self.ref_lon = deg_to_rad(lon)
        self.ref_alt = alt
        self._update_radii()

    def reference(self) -> tuple[float, float, float]:
        """Return the origin as (latitude rad, longitude rad, altitude)."""
        return self.ref_lat, self.ref_lon, self.ref_alt

    def lla_to_flat(self, lat: float, lon: float, alt: float) -> tuple[float, float, float]:
        """Return the (x, y, z) offsets of a point given in degrees."""
        self._update_radii()
        d_mu = deg_to_rad(lat) - self.ref_lat
        d_l = deg_to_rad(lon) - self.ref_lon
        y = d_mu / math.atan(1.0 / self.r_m)
        x = d_l / math.atan(1.0 / (self.r_n * math.cos(self.ref_lat)))
        z = alt - self.ref_alt
        return x, y, z

    def flat_to_lla(self, x: float, y: float, z: float) -> tuple[float, float, float]:
        """Return (latitude deg, longitude deg, altitude) for flat offsets."""
        d_mu = y * math.atan(1.0 / self.r_m)
        d_l = x * math.atan(1.0 / (self.r_n * math.cos(self.ref_lat)))
        return rad_to_deg(d_mu + self.ref_lat), rad_to_deg(d_l + self.ref_lon), z - self.ref_alt

    def convert_file(self, node_path: PathLike, out_path: PathLike) -> int:
        """Convert a file of ``id lat lon`` lines to ``id x y lat lon z`` lines.

        The first node becomes the reference point. Returns the number of
        nodes written.
        """
        with open(node_path, encoding="utf-8") as src:
            tokens = src.read().split()
        if len(tokens) % 3:
            raise ValueError(f"{node_path}: expected 'id lat lon' triples")
        count = 0
        with open(out_path, "w", encoding="utf-8") as out:
            for node_id, lat_text, lon_text in zip(tokens[0::3], tokens[1::3], tokens[2::3]):
                try:
                    vid = int(node_id)
                    lat = float(lat_text)
                    lon = float(lon_text)
                except ValueError as exc:
                    raise ValueError(f"{node_path}: malformed node entry") from exc
                if count == 0:
                    self.set_reference(lat, lon, _DEFAULT_ALTITUDE)
                x, y, z = self.lla_to_flat(lat, lon, _DEFAULT_ALTITUDE + 50.0)
                out.write(f"{vid} {x:.16g} {y:.16g} {lat:.16g} {lon:.16g} {z:.16g}\n")
                count += 1
        return count