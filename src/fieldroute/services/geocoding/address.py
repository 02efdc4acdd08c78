"""Address normalization and geocoding query construction."""

from __future__ import annotations

from typing import Optional

from ...config import settings
from ...models.domain import Order

# Keys are lower-case tokens as they appear in spreadsheet addresses.
STREET_TYPE_ABBREVIATIONS = {
    "r.": "Rua",
    "r": "Rua",
    "av.": "Avenida",
    "av": "Avenida",
    "al.": "Alameda",
    "trav.": "Travessa",
    "tv.": "Travessa",
    "rod.": "Rodovia",
    "est.": "Estrada",
    "pça.": "Praça",
    "pç.": "Praça",
    "pr.": "Praça",
    "lgo.": "Largo",
    "bc.": "Beco",
    "serv.": "Servidão",
}

TITLE_ABBREVIATIONS = {
    "dr.": "Doutor",
    "dra.": "Doutora",
    "prof.": "Professor",
    "profa.": "Professora",
    "eng.": "Engenheiro",
    "cel.": "Coronel",
    "gov.": "Governador",
    "pres.": "Presidente",
    "sen.": "Senador",
    "dep.": "Deputado",
    "ver.": "Vereador",
    "cap.": "Capitão",
    "gen.": "General",
    "ten.": "Tenente",
    "sta.": "Santa",
    "sto.": "Santo",
    "s.": "São",
    "n.sra.": "Nossa Senhora",
}

MULTI_TOKEN_ABBREVIATIONS = {
    ("n.", "sra."): "Nossa Senhora",
    ("nsa.", "sra."): "Nossa Senhora",
}

ABBREVIATIONS = {**STREET_TYPE_ABBREVIATIONS, **TITLE_ABBREVIATIONS}

NO_NUMBER_MARKERS = {"s/n", "s/nº", "s/no", "sn", "0"}

_TRAILING_PUNCTUATION = ",;"


def _expand_token(token: str) -> str:
    core = token.rstrip(_TRAILING_PUNCTUATION)
    suffix = token[len(core):]
    expanded = ABBREVIATIONS.get(core.lower())
    if expanded is None:
        return token
    return f"{expanded}{suffix}"


def normalize_address(raw: Optional[str]) -> str:
    """Expand known abbreviations and collapse whitespace.

    "  Av.   Dr. Pedro  Ferreira " becomes "Avenida Doutor Pedro Ferreira".
    Tokens that are not known abbreviations are kept as written.
    """

    if not raw:
        return ""

    tokens = str(raw).split()
    expanded: list[str] = []
    index = 0
    while index < len(tokens):
        if index + 1 < len(tokens):
            second = tokens[index + 1]
            second_core = second.rstrip(_TRAILING_PUNCTUATION)
            pair = (tokens[index].lower(), second_core.lower())
            if pair in MULTI_TOKEN_ABBREVIATIONS:
                expanded.append(MULTI_TOKEN_ABBREVIATIONS[pair] + second[len(second_core):])
                index += 2
                continue
        expanded.append(_expand_token(tokens[index]))
        index += 1
    return " ".join(expanded)


def _clean(value: Optional[str]) -> str:
    return " ".join(str(value).split()) if value is not None else ""


def _clean_number(value: Optional[str]) -> str:
    number = _clean(value)
    return "" if number.lower() in NO_NUMBER_MARKERS else number


def _join(*parts: str) -> str:
    return ", ".join(part for part in parts if part)


def build_address_query(order: Order, *, country: str | None = None) -> str:
    """Full address query: street, number, neighbourhood, municipality, country."""

    return _join(
        normalize_address(order.street),
        _clean_number(order.number),
        normalize_address(order.neighborhood),
        normalize_address(order.municipality),
        country if country is not None else settings.geocoder_country,
    )


def build_alternative_queries(
    order: Order,
    *,
    country: str | None = None,
    region: str | None = None,
) -> list[str]:
    """Progressively coarser queries to try when the full address has no match.

    1. the address without its street number;
    2. neighbourhood, municipality and region only.

    Variants that repeat an earlier query or carry no locality are dropped.
    """

    country = country if country is not None else settings.geocoder_country
    region = region if region is not None else settings.geocoder_region

    street = normalize_address(order.street)
    neighborhood = normalize_address(order.neighborhood)
    municipality = normalize_address(order.municipality)

    candidates: list[str] = []
    if street:
        candidates.append(_join(street, neighborhood, municipality, country))
    if neighborhood or municipality:
        candidates.append(_join(neighborhood, municipality, _clean(region), country))

    seen = {build_address_query(order, country=country)}
    alternatives: list[str] = []
    for query in candidates:
        if query in seen:
            continue
        seen.add(query)
        alternatives.append(query)
    return alternatives


def has_address(order: Order) -> bool:
    """True when the order carries at least one locality field worth geocoding."""
    return any(_clean(value) for value in (order.street, order.neighborhood, order.municipality))
