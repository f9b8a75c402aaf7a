"""
Coordinate Reference System records.

A :class:`CrsRecord` is the self-describing form of a CRS that travels
with a :class:`~mapframe.services.map_settings.MapSettings`: its
authority id is the cache key for transforms, the PROJ string and
description make the persisted form readable without a CRS database.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from pyproj import CRS
from pyproj.exceptions import CRSError

logger = logging.getLogger(__name__)

WGS84_AUTHID = "EPSG:4326"


@dataclass(frozen=True, slots=True)
class CrsRecord:
    authid: str
    description: str = ""
    proj4: str = ""
    is_geographic: bool = False

    @classmethod
    def from_pyproj(cls, crs: CRS) -> CrsRecord:
        authority = crs.to_authority()
        authid = ":".join(authority) if authority else crs.srs
        try:
            proj4 = crs.to_proj4()
        except CRSError:  # pragma: no cover – CRSs without a PROJ.4 form
            proj4 = ""
        return cls(
            authid=authid,
            description=crs.name or "",
            proj4=proj4 or "",
            is_geographic=bool(crs.is_geographic),
        )

    @classmethod
    def from_user_input(cls, value: str) -> CrsRecord:
        """
        Resolve an authority id (``"EPSG:3857"``) or PROJ string.

        Raises
        ------
        pyproj.exceptions.CRSError
            If pyproj cannot interpret ``value``.
        """
        return cls.from_pyproj(CRS.from_user_input(value))

    @classmethod
    def from_authid(cls, authid: str) -> CrsRecord:
        return cls.from_user_input(authid)

    def to_pyproj(self) -> CRS:
        return CRS.from_user_input(self.authid or self.proj4)

    def __str__(self) -> str:
        return self.authid


def wgs84() -> CrsRecord:
    return CrsRecord.from_authid(WGS84_AUTHID)
