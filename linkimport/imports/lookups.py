from __future__ import annotations

# Header text (lowercase, words separated by single spaces) -> ISO 3166 alpha-2.
# ISO codes themselves are added by ``build_country_lookup``.
COUNTRY_NAMES: dict[str, str] = {
    "united states": "US",
    "united states of america": "US",
    "usa": "US",
    "america": "US",
    "united kingdom": "GB",
    "great britain": "GB",
    "britain": "GB",
    "uk": "GB",
    "england": "GB",
    "canada": "CA",
    "australia": "AU",
    "new zealand": "NZ",
    "ireland": "IE",
    "germany": "DE",
    "deutschland": "DE",
    "france": "FR",
    "italy": "IT",
    "spain": "ES",
    "portugal": "PT",
    "netherlands": "NL",
    "holland": "NL",
    "belgium": "BE",
    "luxembourg": "LU",
    "switzerland": "CH",
    "austria": "AT",
    "denmark": "DK",
    "sweden": "SE",
    "norway": "NO",
    "finland": "FI",
    "iceland": "IS",
    "poland": "PL",
    "czech republic": "CZ",
    "czechia": "CZ",
    "slovakia": "SK",
    "hungary": "HU",
    "romania": "RO",
    "bulgaria": "BG",
    "greece": "GR",
    "croatia": "HR",
    "serbia": "RS",
    "slovenia": "SI",
    "ukraine": "UA",
    "russia": "RU",
    "turkey": "TR",
    "turkiye": "TR",
    "israel": "IL",
    "saudi arabia": "SA",
    "ksa": "SA",
    "united arab emirates": "AE",
    "uae": "AE",
    "qatar": "QA",
    "egypt": "EG",
    "morocco": "MA",
    "nigeria": "NG",
    "kenya": "KE",
    "south africa": "ZA",
    "india": "IN",
    "pakistan": "PK",
    "bangladesh": "BD",
    "china": "CN",
    "hong kong": "HK",
    "taiwan": "TW",
    "japan": "JP",
    "south korea": "KR",
    "korea": "KR",
    "singapore": "SG",
    "malaysia": "MY",
    "indonesia": "ID",
    "thailand": "TH",
    "vietnam": "VN",
    "viet nam": "VN",
    "philippines": "PH",
    "mexico": "MX",
    "brazil": "BR",
    "argentina": "AR",
    "chile": "CL",
    "colombia": "CO",
    "peru": "PE",
}

DEVICE_TYPES: frozenset[str] = frozenset({"desktop", "mobile", "tablet"})

DEVICE_ALIASES: dict[str, str] = {
    "desktop": "desktop",
    "pc": "desktop",
    "computer": "desktop",
    "mobile": "mobile",
    "phone": "mobile",
    "smartphone": "mobile",
    "tablet": "tablet",
    "ipad": "tablet",
}

# Trailing words removed from headers before lookup, longest first so that
# "_url" wins over "url".
HEADER_SUFFIXES: tuple[str, ...] = (
    " url",
    " link",
    " page",
    "_url",
    "_link",
    "_page",
    "-url",
    "-link",
    "-page",
    "url",
    "link",
    "page",
)

HEADER_NOISE_WORDS: tuple[str, ...] = (
    "redirects",
    "redirect",
    "destination",
    "target",
)

HEADER_SEPARATORS = " _-:/."

CORE_FIELD_ALIASES: dict[str, str] = {
    "destination_url": "destination_url",
    "destination url": "destination_url",
    "destination": "destination_url",
    "url": "destination_url",
    "link": "destination_url",
    "target": "destination_url",
    "target url": "destination_url",
    "long url": "destination_url",
    "slug": "slug",
    "alias": "slug",
    "short_url": "slug",
    "short url": "slug",
    "keyword": "slug",
    "short code": "slug",
    "title": "title",
    "name": "title",
    "description": "description",
    "desc": "description",
    "tags": "tags",
    "tag": "tags",
    "route": "route",
    "path_prefix": "route",
    "category": "category_id",
    "category_id": "category_id",
    "redirect_code": "redirect_code",
    "redirect code": "redirect_code",
    "status code": "redirect_code",
}


def header_variants(value: str) -> list[str]:
    variants = [value, value.replace(" ", "_"), value.replace(" ", "-"), value.replace(" ", "")]
    seen: set[str] = set()
    unique: list[str] = []
    for variant in variants:
        if variant not in seen:
            seen.add(variant)
            unique.append(variant)
    return unique


def build_country_lookup(
    names: dict[str, str] = COUNTRY_NAMES,
) -> dict[str, str]:
    lookup: dict[str, str] = {}
    for code in set(names.values()):
        lookup[code.lower()] = code
    for name, code in names.items():
        for variant in header_variants(name):
            lookup.setdefault(variant, code)
    return lookup
