"""
Location-bias centroids for Sentinel.

Centroids only steer provider relevance (Apple Maps userLocation); they
are never returned as a geocoding answer.
"""

from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional


class Centroid(NamedTuple):
    name: str
    lat: float
    lon: float

    def as_param(self) -> str:
        return f"{self.lat},{self.lon}"


COUNTY_CENTROID = Centroid("county", 33.73, -115.98)

# keyed by the feed's cd_Station value
REGION_CENTROIDS: Mapping[str, Centroid] = MappingProxyType({
    "southwest": Centroid("southwest", 33.616, -117.217),
    "moreno": Centroid("moreno", 33.9425, -117.2297),
    "central": Centroid("central", 33.7825, -117.2286),
    "jurupa": Centroid("jurupa", 33.9986, -117.4854),
    "desert": Centroid("desert", 33.7206, -116.2156),
    "perris": Centroid("perris", 33.7825, -117.2286),
    "hemet": Centroid("hemet", 33.7476, -116.9720),
    "palm desert": Centroid("palm desert", 33.7222, -116.3745),
    "thermal": Centroid("thermal", 33.6403, -116.1390),
    "colorado river": Centroid("colorado river", 33.6103, -114.5964),
})

# keyed by upper-cased cd_Area (city / community)
AREA_CENTROIDS: Mapping[str, Centroid] = MappingProxyType({
    "LAKE ELSINORE": Centroid("LAKE ELSINORE", 33.6681, -117.3273),
    "TEMECULA": Centroid("TEMECULA", 33.4936, -117.1484),
    "MURRIETA": Centroid("MURRIETA", 33.5539, -117.2139),
    "WILDOMAR": Centroid("WILDOMAR", 33.5989, -117.2800),
    "MENIFEE": Centroid("MENIFEE", 33.6971, -117.1853),
    "CANYON LAKE": Centroid("CANYON LAKE", 33.6850, -117.2731),
    "PERRIS": Centroid("PERRIS", 33.7825, -117.2286),
    "MORENO VALLEY": Centroid("MORENO VALLEY", 33.9425, -117.2297),
    "JURUPA VALLEY": Centroid("JURUPA VALLEY", 33.9986, -117.4854),
    "EASTVALE": Centroid("EASTVALE", 33.9639, -117.5639),
    "NORCO": Centroid("NORCO", 33.9311, -117.5487),
    "CITY OF NORCO": Centroid("CITY OF NORCO", 33.9311, -117.5487),
    "CORONA": Centroid("CORONA", 33.8753, -117.5664),
    "RIVERSIDE": Centroid("RIVERSIDE", 33.9806, -117.3755),
    "HEMET": Centroid("HEMET", 33.7476, -116.9720),
    "SAN JACINTO": Centroid("SAN JACINTO", 33.7839, -116.9586),
    "BANNING": Centroid("BANNING", 33.9256, -116.8764),
    "BEAUMONT": Centroid("BEAUMONT", 33.9295, -116.9773),
    "CALIMESA": Centroid("CALIMESA", 34.0036, -117.0620),
    "PALM DESERT": Centroid("PALM DESERT", 33.7222, -116.3745),
    "PALM SPRINGS": Centroid("PALM SPRINGS", 33.8303, -116.5453),
    "CATHEDRAL CITY": Centroid("CATHEDRAL CITY", 33.7797, -116.4653),
    "RANCHO MIRAGE": Centroid("RANCHO MIRAGE", 33.7397, -116.4128),
    "INDIAN WELLS": Centroid("INDIAN WELLS", 33.7175, -116.3406),
    "LA QUINTA": Centroid("LA QUINTA", 33.6634, -116.3100),
    "INDIO": Centroid("INDIO", 33.7206, -116.2156),
    "COACHELLA": Centroid("COACHELLA", 33.6803, -116.1739),
    "DESERT HOT SPRINGS": Centroid("DESERT HOT SPRINGS", 33.9611, -116.5017),
    "THERMAL": Centroid("THERMAL", 33.6403, -116.1390),
    "MECCA": Centroid("MECCA", 33.5717, -116.0772),
    "BLYTHE": Centroid("BLYTHE", 33.6103, -114.5964),
    "ANZA": Centroid("ANZA", 33.5553, -116.6736),
    "IDYLLWILD": Centroid("IDYLLWILD", 33.7400, -116.7189),
    "HOMELAND": Centroid("HOMELAND", 33.7431, -117.1117),
    "WINCHESTER": Centroid("WINCHESTER", 33.7069, -117.0845),
    "FRENCH VALLEY": Centroid("FRENCH VALLEY", 33.5964, -117.1069),
    "MEAD VALLEY": Centroid("MEAD VALLEY", 33.8333, -117.2960),
    "NUEVO": Centroid("NUEVO", 33.8014, -117.1459),
    "LAKELAND VILLAGE": Centroid("LAKELAND VILLAGE", 33.6381, -117.3442),
    "TEMESCAL VALLEY": Centroid("TEMESCAL VALLEY", 33.7631, -117.4823),
})


def resolve_centroid(station: Optional[str], area: Optional[str]) -> Centroid:
    """
    Pick the location-bias centroid for one lookup.

    Precedence is county default, then station region, then area. When
    both station and area match, the area centroid is used.

    Args:
        station: Feed station code (e.g. "southwest")
        area: Feed area / city name

    Returns:
        Centroid to send as the provider location hint
    """
    centroid = COUNTY_CENTROID
    if station:
        centroid = REGION_CENTROIDS.get(station.strip().lower(), centroid)
    if area:
        centroid = AREA_CENTROIDS.get(area.strip().upper(), centroid)
    return centroid
