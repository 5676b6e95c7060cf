"""Static catalog of the bodies served by starrelay."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from .errors import UnknownBodyError


class BodyCategory(Enum):
    STAR = "star"
    PLANET = "planet"
    MOON = "moon"
    PROBE = "probe"


@dataclass(frozen=True)
class BodyDescriptor:
    """A body we know how to ask Horizons about."""

    id: str
    horizons_id: str
    display_name: str
    category: BodyCategory

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "horizonsId": self.horizons_id,
            "displayName": self.display_name,
            "category": self.category.value,
        }


def _planet(body_id: str, horizons_id: str, name: str) -> BodyDescriptor:
    return BodyDescriptor(body_id, horizons_id, name, BodyCategory.PLANET)


def _moon(body_id: str, horizons_id: str, name: str) -> BodyDescriptor:
    return BodyDescriptor(body_id, horizons_id, name, BodyCategory.MOON)


# The tracked set of the multi-body snapshot, in display order.
# Horizons ids 199..999 are the planet bodies themselves, not barycenters.
PLANETS: Tuple[BodyDescriptor, ...] = (
    _planet("mercury", "199", "Mercury"),
    _planet("venus", "299", "Venus"),
    _planet("earth", "399", "Earth"),
    _planet("mars", "499", "Mars"),
    _planet("jupiter", "599", "Jupiter"),
    _planet("saturn", "699", "Saturn"),
    _planet("uranus", "799", "Uranus"),
    _planet("neptune", "899", "Neptune"),
    _planet("pluto", "999", "Pluto"),
)

# Bodies served one at a time through the single-body cache.
BODIES: Tuple[BodyDescriptor, ...] = (
    BodyDescriptor("sun", "10", "Sun", BodyCategory.STAR),
    # Earth
    _moon("moon", "301", "Moon"),
    # Mars
    _moon("phobos", "401", "Phobos"),
    _moon("deimos", "402", "Deimos"),
    # Jupiter (Galilean)
    _moon("io", "501", "Io"),
    _moon("europa", "502", "Europa"),
    _moon("ganymede", "503", "Ganymede"),
    _moon("callisto", "504", "Callisto"),
    # Saturn
    _moon("enceladus", "602", "Enceladus"),
    _moon("rhea", "605", "Rhea"),
    _moon("titan", "606", "Titan"),
    _moon("iapetus", "608", "Iapetus"),
    # Uranus
    _moon("ariel", "701", "Ariel"),
    _moon("umbriel", "702", "Umbriel"),
    _moon("titania", "703", "Titania"),
    _moon("oberon", "704", "Oberon"),
    _moon("miranda", "705", "Miranda"),
    # Neptune
    _moon("triton", "801", "Triton"),
    _moon("nereid", "802", "Nereid"),
    # Pluto
    _moon("charon", "901", "Charon"),
    _moon("nix", "902", "Nix"),
    _moon("hydra", "903", "Hydra"),
    _moon("kerberos", "904", "Kerberos"),
    _moon("styx", "905", "Styx"),
)

BODY_BY_ID: Dict[str, BodyDescriptor] = {body.id: body for body in BODIES}


def get_body(body_id: str) -> BodyDescriptor:
    """Look up a single-body catalog entry.

    Raises:
        UnknownBodyError: If the id is not in the catalog
    """
    try:
        return BODY_BY_ID[body_id]
    except KeyError:
        raise UnknownBodyError(body_id) from None
